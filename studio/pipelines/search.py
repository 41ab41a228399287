"""Cross-collection search over projects and posts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from studio.config import SearchSettings
from studio.errors import ValidationError
from studio.models import Post, Project
from studio.store import EntityStore

logger = logging.getLogger(__name__)

PROJECT_FIELDS = ("title",)
POST_FIELDS = ("title", "content")


@dataclass
class SearchResult:
    projects: list[Project] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)


class SearchAggregator:
    """Case-insensitive substring search, no ranking."""

    def __init__(
        self,
        projects: EntityStore[Project],
        posts: EntityStore[Post],
        config: SearchSettings,
    ):
        self.projects = projects
        self.posts = posts
        self.config = config

    async def search(self, query: str | None) -> SearchResult:
        """Match ``query`` against project titles and post titles/content.

        An empty query returns everything unless ``allow_empty_query`` is off.
        """
        text = query or ""
        if not text.strip():
            if not self.config.allow_empty_query:
                raise ValidationError("Search query must not be empty")
            text = ""

        result = SearchResult(
            projects=await self.projects.find_containing(PROJECT_FIELDS, text),
            posts=await self.posts.find_containing(POST_FIELDS, text),
        )
        logger.debug(f"Search {text!r}: {len(result.projects)} projects, {len(result.posts)} posts")
        return result
