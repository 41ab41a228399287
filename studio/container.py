"""Explicitly constructed application services.

``StudioContainer.open()`` runs at startup and ``close()`` at shutdown;
nothing here touches the database or the disk at import time.
"""
from __future__ import annotations

import logging

from .config import Settings
from .db import build_engine, build_session_maker, create_tables
from .media import MediaStore
from .models import Contact, NewsletterSubscriber, Post, Project, TeamMember
from .notifier import Notifier, build_notifier
from .pipelines.leads import LeadIntakePipeline
from .pipelines.media_bound import MediaBoundEntityManager
from .pipelines.search import SearchAggregator
from .pipelines.stats import StatsAggregator
from .store import EntityStore

logger = logging.getLogger(__name__)


class StudioContainer:
    """Owns the engine, stores, media store, notifier and pipelines."""

    def __init__(self, settings: Settings, notifier: Notifier | None = None):
        self.settings = settings
        self.engine = build_engine(settings.db)
        session_maker = build_session_maker(self.engine)

        self.contacts = EntityStore(Contact, session_maker, default_sort="submitted_at")
        self.subscribers = EntityStore(NewsletterSubscriber, session_maker, default_sort="subscribed_at")
        self.projects = EntityStore(Project, session_maker, default_sort="date")
        self.posts = EntityStore(Post, session_maker, default_sort="published_at")
        self.team = EntityStore(TeamMember, session_maker)

        self.media = MediaStore(settings.media)
        self.notifier = notifier or build_notifier(settings.notifier)

        self.project_manager = MediaBoundEntityManager(self.projects, self.media)
        self.post_manager = MediaBoundEntityManager(self.posts, self.media)
        self.team_manager = MediaBoundEntityManager(self.team, self.media)
        self.leads = LeadIntakePipeline(self.contacts, self.subscribers, self.notifier, settings.leads)
        self.search = SearchAggregator(self.projects, self.posts, settings.search)
        self.stats = StatsAggregator(
            projects=self.projects,
            posts=self.posts,
            contacts=self.contacts,
            subscribers=self.subscribers,
            team=self.team,
        )

    async def open(self) -> None:
        self.media.open()
        if self.settings.db.create_tables:
            await create_tables(self.engine)
        logger.info("Studio services ready")

    async def close(self) -> None:
        try:
            await self.notifier.aclose()
        finally:
            await self.engine.dispose()
        logger.info("Studio services closed")
