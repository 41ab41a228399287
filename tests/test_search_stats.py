from __future__ import annotations

import pytest

from studio.config import SearchSettings
from studio.errors import ValidationError
from studio.pipelines.search import SearchAggregator

pytestmark = pytest.mark.asyncio


async def _seed(container):
    await container.projects.create({"title": "New Logo Design", "category": "branding", "description": "..."})
    await container.projects.create({"title": "Packaging", "category": "print", "description": "logo on box"})
    await container.posts.create(
        {"title": "Behind the scenes", "category": "process", "content": "How we sketch a wordmark", "author": "Sam"}
    )
    await container.posts.create(
        {"title": "Logo trends", "category": "opinion", "content": "Flat is back", "author": "Kim"}
    )


class TestSearch:
    async def test_title_match_is_case_insensitive(self, container):
        await _seed(container)

        result = await container.search.search("logo")

        assert [p.title for p in result.projects] == ["New Logo Design"]
        assert [p.title for p in result.posts] == ["Logo trends"]

    async def test_post_content_only_match(self, container):
        await _seed(container)

        result = await container.search.search("WORDMARK")

        assert result.projects == []
        assert [p.title for p in result.posts] == ["Behind the scenes"]

    async def test_project_description_is_not_searched(self, container):
        await _seed(container)
        result = await container.search.search("box")
        assert result.projects == []

    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_empty_query_returns_everything(self, container, query):
        await _seed(container)

        result = await container.search.search(query)

        assert [p.title for p in result.projects] == ["New Logo Design", "Packaging"]
        assert len(result.posts) == 2

    async def test_query_whitespace_is_significant(self, container):
        await container.projects.create({"title": "Designer portfolio", "category": "c", "description": "d"})
        await container.projects.create({"title": "Web design", "category": "c", "description": "d"})

        result = await container.search.search(" design")

        assert [p.title for p in result.projects] == ["Web design"]

    async def test_empty_query_can_be_rejected(self, container):
        strict = SearchAggregator(container.projects, container.posts, SearchSettings(allow_empty_query=False))
        with pytest.raises(ValidationError):
            await strict.search("")


class TestStats:
    async def test_counts_every_collection(self, container):
        for i in range(3):
            await container.projects.create({"title": f"P{i}", "category": "c", "description": "d"})
        for i in range(2):
            await container.posts.create({"title": f"B{i}", "category": "c", "content": "x", "author": "a"})
        await container.contacts.create({"name": "N", "email": "n@studio.io", "message": "hi"})
        await container.subscribers.create({"email": "s@studio.io"})

        stats = await container.stats.stats()

        assert stats.as_dict() == {"projects": 3, "posts": 2, "contacts": 1, "subscribers": 1, "team": 0}

    async def test_empty_store(self, container):
        stats = await container.stats.stats()
        assert stats.as_dict() == {"projects": 0, "posts": 0, "contacts": 0, "subscribers": 0, "team": 0}
