"""Shared validation helpers for frozen dataclass models.

Private module, not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type constraints on
values that arrive from untrusted relays.
"""

from __future__ import annotations

from typing import Any

from .constants import EVENT_KIND_MAX


_HEX_DIGITS = frozenset("0123456789abcdef")


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_kind(value: Any, name: str) -> None:
    """Raise if *value* is not an event kind in ``0..EVENT_KIND_MAX``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= EVENT_KIND_MAX:
        raise ValueError(f"{name} {value} out of valid range (0-{EVENT_KIND_MAX})")


def validate_hex(value: Any, name: str, length: int = 64) -> None:
    """Raise if *value* is not a lowercase hex string of exactly *length* chars."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if len(value) != length:
        raise ValueError(f"{name} must be {length} hex chars, got {len(value)}")
    if not _HEX_DIGITS.issuperset(value):
        raise ValueError(f"{name} must be lowercase hex")


def validate_tags(value: Any, name: str) -> None:
    """Raise unless *value* is a sequence of non-empty string sequences."""
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")
    for tag in value:
        if not isinstance(tag, (list, tuple)) or not tag:
            raise ValueError(f"{name} entries must be non-empty lists")
        for item in tag:
            if not isinstance(item, str):
                raise TypeError(f"{name} values must be str, got {type(item).__name__}")


def freeze_tags(value: Any) -> tuple[tuple[str, ...], ...]:
    """Convert a tag list into nested tuples so the owning model stays immutable."""
    return tuple(tuple(tag) for tag in value)
