"""
Base Repository Pattern

Purpose
-------
Type-safe, generic data access over SQLAlchemy 2.0 async sessions. This is
the store contract the admission and voting logic is written against:

- point lookup by primary key, optionally under ``SELECT ... FOR UPDATE``
- lookup by an arbitrary set of conditions (composite keys)
- count by condition
- insert plus flush so generated ids and defaults are available

What this class does NOT do:
- Manage transactions (DatabaseService.get_transaction() does that)
- Contain business rules

Usage
-----
    class VoteRepository(BaseRepository[SuggestionVote]):
        async def find_vote(self, session, suggestion_id, user_id):
            return await self.find_one_where(
                session,
                SuggestionVote.suggestion_id == suggestion_id,
                SuggestionVote.user_id == user_id,
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    @property
    def model_name(self) -> str:
        return self.model_class.__name__

    async def get(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """Get a single record by primary key (no lock)."""
        stmt = select(self.model_class).where(
            self.model_class.id == id_value  # type: ignore[attr-defined]
        )
        instance = (await session.execute(stmt)).scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_name}",
            extra={"model": self.model_name, "id": id_value, "found": instance is not None},
        )
        return instance

    async def get_for_update(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """
        Get a single record by primary key with ``SELECT ... FOR UPDATE``.

        The lock is held until the surrounding transaction ends. Rows already
        loaded in the session are refreshed from the locked read.
        """
        stmt = (
            select(self.model_class)
            .where(self.model_class.id == id_value)  # type: ignore[attr-defined]
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        instance = (await session.execute(stmt)).scalar_one_or_none()

        self.log.debug(
            f"Repository.get_for_update: {self.model_name}",
            extra={
                "model": self.model_name,
                "id": id_value,
                "found": instance is not None,
                "locked": True,
            },
        )
        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        for_update: bool = False,
    ) -> Optional[T]:
        """Find a single record matching conditions (None if absent)."""
        stmt = select(self.model_class).where(*conditions)
        if for_update:
            stmt = stmt.with_for_update()

        instance = (await session.execute(stmt)).scalar_one_or_none()

        self.log.debug(
            f"Repository.find_one_where: {self.model_name}",
            extra={"model": self.model_name, "found": instance is not None, "locked": for_update},
        )
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[T]:
        """Find all records matching conditions, optionally ordered and paged."""
        stmt = select(self.model_class).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        instances = list((await session.execute(stmt)).scalars().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_name}",
            extra={"model": self.model_name, "found_count": len(instances), "limit": limit},
        )
        return instances

    async def exists(self, session: AsyncSession, *conditions: ColumnElement[bool]) -> bool:
        return await self.count(session, *conditions) > 0

    async def count(self, session: AsyncSession, *conditions: ColumnElement[bool]) -> int:
        """Count records matching conditions."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        count = (await session.execute(stmt)).scalar_one()

        self.log.debug(
            f"Repository.count: {self.model_name}",
            extra={"model": self.model_name, "count": count},
        )
        return count

    def add(self, session: AsyncSession, instance: T) -> T:
        session.add(instance)
        self.log.debug(f"Repository.add: {self.model_name}", extra={"model": self.model_name})
        return instance

    async def flush(self, session: AsyncSession) -> None:
        """Flush pending changes so ids and column defaults are populated."""
        await session.flush()
        self.log.debug(f"Repository.flush: {self.model_name}", extra={"model": self.model_name})
