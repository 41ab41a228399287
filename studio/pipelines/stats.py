"""Record counts for the admin dashboard."""
from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass

from studio.store import EntityStore


@dataclass
class Stats:
    projects: int
    posts: int
    contacts: int
    subscribers: int
    team: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class StatsAggregator:
    """Five independent counts; they are not read in one snapshot."""

    def __init__(
        self,
        *,
        projects: EntityStore,
        posts: EntityStore,
        contacts: EntityStore,
        subscribers: EntityStore,
        team: EntityStore,
    ):
        self._stores = {
            "projects": projects,
            "posts": posts,
            "contacts": contacts,
            "subscribers": subscribers,
            "team": team,
        }

    async def stats(self) -> Stats:
        counts = await asyncio.gather(*(store.count() for store in self._stores.values()))
        return Stats(**dict(zip(self._stores, counts)))
