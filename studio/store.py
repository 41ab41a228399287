"""Typed persistence for a single entity kind.

One ``EntityStore`` is constructed per model class and shared by the
pipelines that need it. Each call runs in its own session, so every
operation is atomic at single-record granularity and nothing more.
"""
from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Mapping, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import DuplicateKeyError, NotFoundError, ValidationError
from .models import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class EntityStore(Generic[ModelT]):
    """Create / get / list / delete / count for one model class."""

    def __init__(
        self,
        model: type[ModelT],
        session_maker: async_sessionmaker[AsyncSession],
        *,
        default_sort: str = "created_at",
    ):
        self.model = model
        self.kind = model.__name__
        self._session_maker = session_maker
        self.default_sort = default_sort
        self._columns = {c.key for c in model.__table__.columns}
        self._required = sorted(
            c.key
            for c in model.__table__.columns
            if not (c.primary_key or c.nullable) and c.default is None and c.server_default is None
        )

    def _column(self, name: str):
        if name not in self._columns:
            raise ValidationError(f"{self.kind} has no field '{name}'")
        return getattr(self.model, name)

    async def create(self, fields: Mapping[str, Any]) -> ModelT:
        """Insert a record; id and defaulted fields are assigned here.

        Raises:
            ValidationError: unknown field names or a required field missing
            DuplicateKeyError: unique constraint violated
        """
        unknown = set(fields) - self._columns
        if unknown:
            raise ValidationError(f"Unknown {self.kind} field(s): {', '.join(sorted(unknown))}")
        missing = [k for k in self._required if fields.get(k) is None]
        if missing:
            raise ValidationError(f"Missing required {self.kind} field(s): {', '.join(missing)}")

        # None means "use the column default" for server-assigned fields
        record = self.model(**{k: v for k, v in fields.items() if v is not None})

        async with self._session_maker() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.info(f"Rejected duplicate {self.kind}: {e.orig}")
                raise DuplicateKeyError(f"{self.kind} already exists") from e
            await session.refresh(record)

        logger.debug(f"Created {self.kind} {record.id}")
        return record

    async def _fetch(self, session: AsyncSession, entity_id: str) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    async def get(self, entity_id: str) -> ModelT:
        async with self._session_maker() as session:
            record = await self._fetch(session, entity_id)
        if record is None:
            raise NotFoundError(self.kind, entity_id)
        return record

    async def list(self, sort_field: str | None = None, descending: bool = True) -> list[ModelT]:
        """All records ordered by ``sort_field``; ties follow insertion order in the same direction."""
        column = self._column(sort_field or self.default_sort)
        tiebreak = self.model.seq
        if descending:
            order = (column.desc(), tiebreak.desc())
        else:
            order = (column.asc(), tiebreak.asc())

        async with self._session_maker() as session:
            result = await session.execute(select(self.model).order_by(*order))
            return list(result.scalars().all())

    async def delete(self, entity_id: str) -> None:
        async with self._session_maker() as session:
            record = await self._fetch(session, entity_id)
            if record is None:
                raise NotFoundError(self.kind, entity_id)
            await session.delete(record)
            await session.commit()
        logger.debug(f"Deleted {self.kind} {entity_id}")

    async def count(self) -> int:
        async with self._session_maker() as session:
            result = await session.execute(select(func.count()).select_from(self.model))
            return int(result.scalar_one())

    async def find_containing(self, fields: Iterable[str], text: str) -> list[ModelT]:
        """Records where any of ``fields`` contains ``text``, case-insensitively.

        ``text`` is matched literally; LIKE wildcards in it are escaped.
        An empty ``text`` matches every record. Results keep insertion order.
        """
        query = select(self.model).order_by(self.model.seq.asc())
        if text:
            query = query.where(
                or_(*(self._column(f).icontains(text, autoescape=True) for f in fields))
            )

        async with self._session_maker() as session:
            result = await session.execute(query)
            return list(result.scalars().all())
