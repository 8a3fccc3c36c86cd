"""Unit tests for shared config and payload parsing helpers."""

import pytest

from contentpipe.parsing import normalize_optional_string, parse_language_list


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None


def test_normalize_optional_string_strips_non_blank_values() -> None:
    """Normalization should return stripped content for non-empty values."""

    assert normalize_optional_string("  value  ") == "value"
    assert normalize_optional_string(42) == "42"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("en-US, ja-JP", ("en-US", "ja-JP")),
        (" ja-JP ,, ja-JP ,en-US", ("ja-JP", "en-US")),
        (["en-US", " ", "zh-TW"], ("en-US", "zh-TW")),
        (None, ()),
        ("", ()),
    ],
)
def test_parse_language_list_keeps_order_and_drops_duplicates(
    value: object, expected: tuple[str, ...]
) -> None:
    """Language lists should accept comma strings and sequences."""

    assert parse_language_list(value) == expected


def test_parse_language_list_rejects_other_types() -> None:
    """Language lists given as mappings or numbers should be rejected."""

    with pytest.raises(ValueError, match="comma-separated string or a list"):
        parse_language_list({"en-US": True})
