"""SQLAlchemy models for fortune slips and plain messages.

Both tables share one shape (:class:`Slip`); :class:`Omikuji` adds the
optional ``photo`` reference.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from omikuji.core.errors import ValidationError

# INT(10) UNSIGNED on MySQL, plain INTEGER elsewhere so SQLite keeps ROWID
# aliasing for AUTOINCREMENT.
UnsignedInt = Integer().with_variant(mysql.INTEGER(unsigned=True), "mysql")

NAME_LENGTH = 32
PHOTO_LENGTH = 32


def _utcnow() -> datetime:
    """Current UTC time, stored naive."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base for all omikuji models."""


class RecordKind(StrEnum):
    """Selects which table a store operation targets."""

    OMIKUJI = "omikuji"
    MESSAGE = "message"


class Slip(Base):
    """Columns shared by every stored record."""

    __abstract__ = True

    kind: ClassVar[RecordKind]

    id: Mapped[int] = mapped_column(UnsignedInt, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    vote_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    tg_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tg_name: Mapped[str] = mapped_column(String(NAME_LENGTH), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} id={self.id} vote_count={self.vote_count} "
            f"tg_id={self.tg_id}>"
        )


class Omikuji(Slip):
    """A fortune slip, optionally attached to a photo."""

    __tablename__ = "omikujis"
    __table_args__ = (
        Index("ix_omikujis_tg_id", "tg_id"),
        {"sqlite_autoincrement": True, "mysql_charset": "utf8mb4"},
    )

    kind = RecordKind.OMIKUJI

    photo: Mapped[str | None] = mapped_column(
        String(PHOTO_LENGTH), nullable=True, default=None
    )


class Message(Slip):
    """A plain message record."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_tg_id", "tg_id"),
        {"sqlite_autoincrement": True, "mysql_charset": "utf8mb4"},
    )

    kind = RecordKind.MESSAGE


MODELS: dict[RecordKind, type[Slip]] = {
    RecordKind.OMIKUJI: Omikuji,
    RecordKind.MESSAGE: Message,
}


def model_for(kind: RecordKind | str) -> type[Slip]:
    """Return the mapped class for *kind*.

    Raises:
        ValidationError: For an unknown kind.
    """
    try:
        return MODELS[RecordKind(kind)]
    except ValueError as e:
        msg = f"unknown record kind {kind!r}"
        raise ValidationError("kind", msg) from e
