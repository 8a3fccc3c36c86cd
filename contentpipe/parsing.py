"""Shared parsing helpers for config values and store payloads."""

from __future__ import annotations


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_language_list(value: object) -> tuple[str, ...]:
    """Parse a comma-separated string or sequence into unique language codes.

    Order is preserved and blank entries are dropped.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        raw_items: list[object] = list(value.split(","))
    elif isinstance(value, (list, tuple)):
        raw_items = list(value)
    else:
        raise ValueError("Language list must be a comma-separated string or a list.")

    codes: list[str] = []
    for item in raw_items:
        code = normalize_optional_string(item)
        if code is not None and code not in codes:
            codes.append(code)
    return tuple(codes)
