"""Tests for the vote policy helpers."""

from __future__ import annotations

import pytest

from omikuji.core.errors import ValidationError
from omikuji.voting import (
    HIDE_THRESHOLD,
    VoteAction,
    display_name,
    format_vote_payload,
    is_hidden,
    is_visible,
    parse_vote_payload,
)


class TestThreshold:
    def test_default_threshold(self):
        assert HIDE_THRESHOLD == -3

    def test_boundary(self):
        assert is_visible(-2)
        assert is_hidden(-3)
        assert is_hidden(-4)

    def test_custom_threshold(self):
        assert is_hidden(0, threshold=0)
        assert is_visible(1, threshold=0)


class TestParseVotePayload:
    def test_upvote(self):
        action = parse_vote_payload("+12")
        assert action == VoteAction(record_id=12, delta=1)
        assert action.is_upvote

    def test_downvote(self):
        action = parse_vote_payload("-7")
        assert action.delta == -1
        assert not action.is_upvote

    @pytest.mark.parametrize(
        "payload", ["", "+", "-", "12", "*3", "+abc", "+-3", "+1.5", "+²", "+4294967296"]
    )
    def test_malformed(self, payload: str):
        with pytest.raises(ValidationError, match="payload"):
            parse_vote_payload(payload)

    def test_format_round_trip(self):
        assert format_vote_payload(9, upvote=True) == "+9"
        assert parse_vote_payload(format_vote_payload(9, upvote=False)).delta == -1


class TestDisplayName:
    def test_first_only(self):
        assert display_name("Alice") == "Alice"

    def test_first_and_last(self):
        assert display_name("Alice", "Liddell") == "Alice Liddell"

    def test_truncated_to_column_width(self):
        assert len(display_name("A" * 20, "B" * 20)) == 32
