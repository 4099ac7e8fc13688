"""Slip repository: insert, lookup, vote increments, id-ordered pages.

All mutating methods flush but do NOT commit. The caller controls
transaction boundaries via ``session.begin()`` / ``session.commit()``.
Missing rows come back as ``None``; raising is left to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, case, func, literal, select, update

from omikuji.storage.models import Slip, _utcnow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import ColumnElement


class SlipRepository:
    """Async repository for :class:`Slip` subclasses."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        model: type[Slip],
        values: dict[str, Any],
        *,
        now: datetime | None = None,
    ) -> Slip:
        """Insert a new row and return it with its generated id.

        Both timestamps get the same instant.
        """
        stamp = now or _utcnow()
        record = model(vote_count=0, created_at=stamp, updated_at=stamp, **values)
        self._session.add(record)
        await self._session.flush()
        return record

    async def get(self, model: type[Slip], record_id: int) -> Slip | None:
        """Load one row, bypassing any stale copy in the identity map."""
        stmt = (
            select(model)
            .where(model.id == record_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_vote(
        self,
        model: type[Slip],
        record_id: int,
        delta: int,
        *,
        now: datetime | None = None,
    ) -> bool:
        """Add *delta* to ``vote_count`` in a single UPDATE.

        ``updated_at`` is written even when *delta* is zero, and never below
        ``created_at`` if the clock has stepped backwards. Returns the
        backend rowcount as a bool; MySQL counts changed rows only.
        """
        stamp = literal(now or _utcnow(), DateTime)
        stmt = (
            update(model)
            .where(model.id == record_id)
            .values(
                vote_count=model.vote_count + delta,
                updated_at=case(
                    (model.created_at > stamp, model.created_at), else_=stamp
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def page(
        self,
        model: type[Slip],
        *,
        criteria: Sequence[ColumnElement[bool]] = (),
        after_id: int | None = None,
        descending: bool = False,
        limit: int = 100,
    ) -> list[Slip]:
        """Return up to *limit* rows past *after_id* in id order (keyset)."""
        stmt = select(model).where(*criteria)
        if after_id is not None:
            stmt = stmt.where(model.id < after_id if descending else model.id > after_id)
        stmt = stmt.order_by(model.id.desc() if descending else model.id.asc())
        stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count(
        self,
        model: type[Slip],
        *,
        criteria: Sequence[ColumnElement[bool]] = (),
    ) -> int:
        stmt = select(func.count()).select_from(model).where(*criteria)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def nth(
        self,
        model: type[Slip],
        offset: int,
        *,
        criteria: Sequence[ColumnElement[bool]] = (),
    ) -> Slip | None:
        """Return the row at *offset* in ascending id order, if any."""
        stmt = (
            select(model)
            .where(*criteria)
            .order_by(model.id.asc())
            .offset(offset)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
