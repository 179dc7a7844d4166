"""Unit tests for shared parsing helpers."""

from __future__ import annotations

import pytest

from duetcast.models.datatypes import SPEED_OPTIONS
from duetcast.parsing import (
    normalize_optional_string,
    parse_boolean,
    parse_speed,
)


def test_normalize_optional_string_strips_and_nulls_blank() -> None:
    """Blank values normalize to `None`; others are stripped strings."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string(" x ") == "x"
    assert normalize_optional_string(12) == "12"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("YES", True), (" on ", True), ("0", False), ("off", False), (False, False)],
)
def test_parse_boolean_accepts_known_tokens(value: object, expected: bool) -> None:
    """Boolean parser should map bools and known textual tokens."""

    assert parse_boolean(value, "flag") is expected


@pytest.mark.parametrize("value", ["maybe", "", None, 2])
def test_parse_boolean_rejects_unknown_token(value: object) -> None:
    """Boolean parser should name the field in its error."""

    with pytest.raises(ValueError, match="`enable_thinking` must be a boolean"):
        parse_boolean(value, "enable_thinking")


@pytest.mark.parametrize(("token", "expected"), [("1.5", 1.5), ("1.5x", 1.5), (" 2X ", 2.0), ("0.75", 0.75)])
def test_parse_speed_accepts_supported_tokens(token: str, expected: float) -> None:
    """Speed parser should accept plain and `x`-suffixed multipliers."""

    assert parse_speed(token, SPEED_OPTIONS) == expected


@pytest.mark.parametrize(("token", "message"), [("fast", "Invalid"), ("3", "Unsupported"), ("", "non-empty")])
def test_parse_speed_rejects_invalid_tokens(token: str, message: str) -> None:
    """Speed parser should reject non-numeric and unsupported multipliers."""

    with pytest.raises(ValueError, match=message):
        parse_speed(token, SPEED_OPTIONS)
