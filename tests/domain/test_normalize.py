from __future__ import annotations

import pytest

from bulkrecon.domain.normalize import normalize_name, placement_key


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Brand | Exact", "brand | exact"),
        ("  Brand   |\tExact \n", "brand | exact"),
        ("BLUE WIDGET", "blue widget"),
        ("", ""),
        ("   ", ""),
        (None, ""),
    ],
)
def test_normalize_name_lowercases_trims_and_collapses_whitespace(
    raw: str | None, expected: str
) -> None:
    assert normalize_name(raw) == expected


def test_normalize_name_is_idempotent() -> None:
    once = normalize_name("  Mixed Case   Name ")

    assert normalize_name(once) == once


def test_normalize_name_keeps_punctuation() -> None:
    assert normalize_name("Widgets - SP|Auto") == "widgets - sp|auto"


def test_placement_key_normalizes_the_code_only() -> None:
    assert placement_key("C1", "  Placement_Top ") == "C1::placement_top"
