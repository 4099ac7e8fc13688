"""Vote policy shared by the bot handlers and the store.

A record is hidden once its score reaches ``HIDE_THRESHOLD``. The store
never deletes hidden records; readers filter them.
"""

from __future__ import annotations

from dataclasses import dataclass

from omikuji.core.errors import ValidationError

HIDE_THRESHOLD = -3
NAME_LIMIT = 32

_UINT32_MAX = 2**32 - 1


def is_hidden(vote_count: int, threshold: int = HIDE_THRESHOLD) -> bool:
    """Return True when *vote_count* is at or below *threshold*."""
    return vote_count <= threshold


def is_visible(vote_count: int, threshold: int = HIDE_THRESHOLD) -> bool:
    return not is_hidden(vote_count, threshold)


@dataclass(frozen=True, slots=True)
class VoteAction:
    """A parsed vote callback."""

    record_id: int
    delta: int

    @property
    def is_upvote(self) -> bool:
        return self.delta > 0


def parse_vote_payload(payload: str) -> VoteAction:
    """Parse a ``+<id>`` / ``-<id>`` callback payload.

    Raises:
        ValidationError: If the sign or the id is malformed.
    """
    if len(payload) <= 1 or payload[0] not in "+-":
        msg = f"malformed vote payload {payload!r}"
        raise ValidationError("payload", msg)

    raw_id = payload[1:]
    if not (raw_id.isascii() and raw_id.isdigit()):
        msg = f"malformed record id {raw_id!r}"
        raise ValidationError("payload", msg)

    record_id = int(raw_id)
    if record_id > _UINT32_MAX:
        msg = f"record id out of range: {record_id}"
        raise ValidationError("payload", msg)

    return VoteAction(record_id=record_id, delta=1 if payload[0] == "+" else -1)


def format_vote_payload(record_id: int, *, upvote: bool) -> str:
    """Inverse of :func:`parse_vote_payload`."""
    return f"{'+' if upvote else '-'}{record_id}"


def display_name(first_name: str, last_name: str | None = None) -> str:
    """Build the ``tg_name`` stored with a record, capped at 32 characters."""
    name = first_name
    if last_name:
        name = f"{name} {last_name}"
    return name[:NAME_LIMIT]
