"""Record store: the data-access API the bot handlers call.

Each public method runs in its own transaction. Validation happens before
the transaction opens; driver failures surface as :class:`StorageError`
and leave the tables untouched.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import ColumnElement

from omikuji.config.schema import StoreConfig
from omikuji.core.errors import NotFoundError, OmikujiError, StorageError
from omikuji.storage.models import RecordKind, Slip, _utcnow, model_for
from omikuji.storage.repository import SlipRepository
from omikuji.storage.validation import (
    validate_delta,
    validate_new_record,
    validate_record_id,
)
from omikuji.voting import is_hidden

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    Predicate = ColumnElement[bool] | Callable[[Slip], bool]

logger = logging.getLogger(__name__)

_UINT32_MAX = 2**32 - 1


class RecordListing:
    """Lazy, restartable view over matching records.

    Nothing is read until iteration starts. Every ``async for`` issues
    fresh queries, fetching ``batch_size`` rows at a time by id.
    """

    def __init__(
        self,
        store: RecordStore,
        model: type[Slip],
        *,
        criteria: list[ColumnElement[bool]],
        checks: list[Callable[[Slip], bool]],
        descending: bool,
        batch_size: int,
    ) -> None:
        self._store = store
        self._model = model
        self._criteria = criteria
        self._checks = checks
        self._descending = descending
        self._batch_size = batch_size

    def __aiter__(self) -> AsyncIterator[Slip]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Slip]:
        after_id: int | None = None
        while True:
            async with self._store._transaction("list") as repo:
                batch = await repo.page(
                    self._model,
                    criteria=self._criteria,
                    after_id=after_id,
                    descending=self._descending,
                    limit=self._batch_size,
                )
            for record in batch:
                if all(check(record) for check in self._checks):
                    yield record
            if len(batch) < self._batch_size:
                return
            after_id = batch[-1].id

    async def all(self) -> list[Slip]:
        """Drain the listing into a list."""
        return [record async for record in self]

    async def first(self) -> Slip | None:
        async for record in self:
            return record
        return None


class RecordStore:
    """Persist :class:`Omikuji` and :class:`Message` records.

    Args:
        session_factory: Sessionmaker bound to the target engine.
        config: Validation limits and read policy.
        clock: Source of timestamps; defaults to naive UTC now.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: StoreConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._factory = session_factory
        self._config = config or StoreConfig()
        self._clock = clock

    @property
    def config(self) -> StoreConfig:
        return self._config

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[SlipRepository]:
        """One session, one transaction. Rolled back on any error."""
        try:
            async with self._factory() as session, session.begin():
                yield SlipRepository(session)
                # Detach so the caller can read attributes after commit.
                session.expunge_all()
        except OmikujiError:
            raise
        except SQLAlchemyError as e:
            logger.exception("Storage failure during %s", operation)
            msg = f"{operation} failed: {e}"
            raise StorageError(msg) from e

    # ── Writes ───────────────────────────────────────────────────

    async def create(
        self,
        kind: RecordKind | str,
        *,
        message: Any,
        tg_id: Any,
        tg_name: Any,
        photo: Any = None,
    ) -> Slip:
        """Insert a new record and return it fully populated.

        Raises:
            ValidationError: Missing or oversized field; nothing is written.
            StorageError: The insert failed.
        """
        model = model_for(kind)
        values = validate_new_record(
            self._config,
            message=message,
            tg_id=tg_id,
            tg_name=tg_name,
            photo=photo,
            photo_allowed=model.kind is RecordKind.OMIKUJI,
        )
        async with self._transaction("create") as repo:
            record = await repo.add(model, values, now=self._clock())
        logger.info("Created %s %d for tg_id=%d", model.kind, record.id, record.tg_id)
        return record

    async def adjust_vote(
        self, kind: RecordKind | str, record_id: int, delta: int
    ) -> Slip:
        """Atomically add *delta* to ``vote_count`` and refresh ``updated_at``.

        No floor or ceiling is applied. A zero delta still refreshes the
        timestamp.

        Raises:
            NotFoundError: No record with *record_id*.
            ValidationError: *delta* or *record_id* is not an integer.
        """
        model = model_for(kind)
        record_id = validate_record_id(record_id)
        delta = validate_delta(delta)
        if not 1 <= record_id <= _UINT32_MAX:
            raise NotFoundError(model.kind, record_id)

        async with self._transaction("adjust_vote") as repo:
            # MySQL reports changed rows, not matched ones, so existence is
            # decided by the re-read rather than the rowcount.
            await repo.increment_vote(model, record_id, delta, now=self._clock())
            record = await repo.get(model, record_id)
            if record is None:
                raise NotFoundError(model.kind, record_id)
        logger.debug(
            "Adjusted %s %d by %+d (now %d)",
            model.kind,
            record_id,
            delta,
            record.vote_count,
        )
        return record

    # ── Reads ────────────────────────────────────────────────────

    async def get(self, kind: RecordKind | str, record_id: int) -> Slip:
        """Return one record.

        Raises:
            NotFoundError: No record with *record_id*.
        """
        model = model_for(kind)
        record_id = validate_record_id(record_id)
        if not 1 <= record_id <= _UINT32_MAX:
            raise NotFoundError(model.kind, record_id)
        async with self._transaction("get") as repo:
            record = await repo.get(model, record_id)
        if record is None:
            raise NotFoundError(model.kind, record_id)
        return record

    def is_hidden(self, record: Slip) -> bool:
        """Apply the configured hide threshold to *record*.

        Agrees with the ``visible=`` filter of :meth:`list`, :meth:`count`
        and :meth:`draw`.
        """
        return is_hidden(record.vote_count, self._config.hide_threshold)

    def _visibility(
        self, model: type[Slip], visible: bool | None
    ) -> list[ColumnElement[bool]]:
        threshold = self._config.hide_threshold
        if visible is None:
            return []
        if visible:
            return [model.vote_count > threshold]
        return [model.vote_count <= threshold]

    def list(
        self,
        kind: RecordKind | str,
        *,
        where: Predicate | None = None,
        tg_id: int | None = None,
        visible: bool | None = None,
        descending: bool = False,
        batch_size: int | None = None,
    ) -> RecordListing:
        """Return a lazy listing of matching records, id ascending by default.

        *where* is either a SQL expression over the model's columns or a
        plain callable evaluated on each loaded record.
        """
        model = model_for(kind)
        criteria = self._visibility(model, visible)
        checks: list[Callable[[Slip], bool]] = []
        if tg_id is not None:
            criteria.append(model.tg_id == tg_id)
        if isinstance(where, ColumnElement):
            criteria.append(where)
        elif where is not None:
            checks.append(where)
        return RecordListing(
            self,
            model,
            criteria=criteria,
            checks=checks,
            descending=descending,
            batch_size=batch_size or self._config.list_batch_size,
        )

    async def count(
        self, kind: RecordKind | str, *, visible: bool | None = None
    ) -> int:
        model = model_for(kind)
        async with self._transaction("count") as repo:
            return await repo.count(model, criteria=self._visibility(model, visible))

    async def draw(
        self,
        kind: RecordKind | str = RecordKind.OMIKUJI,
        *,
        rng: random.Random | None = None,
    ) -> Slip | None:
        """Pick a uniformly random visible record, or None if there is none."""
        model = model_for(kind)
        criteria = self._visibility(model, True)
        chooser = rng or random
        async with self._transaction("draw") as repo:
            total = await repo.count(model, criteria=criteria)
            if total == 0:
                return None
            return await repo.nth(model, chooser.randrange(total), criteria=criteria)
