"""
Base Repository Pattern

Purpose
-------
Type-safe, generic repository for SQLAlchemy 2.0 async data access. SQL
repositories (challenges, wallets) subclass it and add their domain
queries; sessions are always supplied by the caller so a service or a
repository method can compose several calls inside one transaction.

Design Notes
------------
- No transaction management (DatabaseService.get_transaction does that)
- No business logic
- Primary key resolved from the mapper, so tables keyed by something
  other than `id` (e.g. `wallets.user_id`) work unchanged

Usage
-----
    class WalletRowRepository(BaseRepository[WalletRow]):
        async def richest(self, session, limit):
            return await self.find_many_where(session, WalletRow.coins > 0, limit=limit)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import inspect, select

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
        self._pk = inspect(model_class).primary_key[0]

    async def get(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """Get a single record by primary key (no lock)."""
        result = await session.execute(select(self.model_class).where(self._pk == id_value))
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
            },
        )
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[List[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        Find records matching conditions.

        Args:
            session: Database session
            *conditions: SQLAlchemy filter conditions
            order_by: Optional ordering clauses
            limit: Optional maximum number of results
        """
        stmt = select(self.model_class).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await session.execute(stmt)
        instances = list(result.scalars().unique().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found_count": len(instances),
                "limit": limit,
            },
        )
        return instances

    def add(self, session: AsyncSession, instance: T) -> T:
        """Add a new instance to the session (flushed on commit)."""
        session.add(instance)
        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
        return instance
