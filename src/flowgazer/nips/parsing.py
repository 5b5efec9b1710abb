"""
Declarative field parsing for NIP payloads.

Kind 0 metadata (and other JSON carried in event content) comes from
arbitrary clients. Each consumer declares a
[FieldSpec][flowgazer.nips.parsing.FieldSpec] listing which keys it expects
as which types; [parse_fields][flowgazer.nips.parsing.parse_fields] keeps
the matching values and silently drops everything else.

Note:
    No exceptions are raised for wrongly-typed values. Callers decide
    whether a payload that parses to nothing is an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable


_SKIP: Any = object()


def _parse_int(value: Any) -> Any:
    return value if isinstance(value, int) and not isinstance(value, bool) else _SKIP


def _parse_str(value: Any) -> Any:
    return value if isinstance(value, str) and value else _SKIP


def _parse_str_list(value: Any) -> Any:
    if isinstance(value, list):
        items = [s for s in value if isinstance(s, str)]
        if items:
            return items
    return _SKIP


_FIELD_PARSERS: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("int_fields", _parse_int),
    ("str_fields", _parse_str),
    ("str_list_fields", _parse_str_list),
)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Expected field types for a JSON object.

    Attributes:
        int_fields: Fields expected as ``int`` (``bool`` excluded).
        str_fields: Fields expected as non-empty ``str``.
        str_list_fields: Fields expected as ``list[str]`` (invalid elements filtered).
        aliases: Alternate key -> canonical key (e.g. ``displayName`` ->
            ``display_name``). The canonical key wins when both are present.
    """

    int_fields: frozenset[str] = field(default_factory=frozenset)
    str_fields: frozenset[str] = field(default_factory=frozenset)
    str_list_fields: frozenset[str] = field(default_factory=frozenset)
    aliases: dict[str, str] = field(default_factory=dict)


def parse_fields(data: dict[str, Any], spec: FieldSpec) -> dict[str, Any]:
    """Parse a dictionary according to a ``FieldSpec``, dropping invalid values.

    Args:
        data: Raw dictionary to parse.
        spec: [FieldSpec][flowgazer.nips.parsing.FieldSpec] type specification.

    Returns:
        A new dictionary containing only valid, type-checked fields, keyed
        by canonical name.
    """
    dispatch: dict[str, Callable[[Any], Any]] = {}
    for attr_name, parser in _FIELD_PARSERS:
        for name in getattr(spec, attr_name):
            dispatch[name] = parser

    result: dict[str, Any] = {}
    for key, value in data.items():
        canonical = spec.aliases.get(key, key)
        handler = dispatch.get(canonical)
        if handler is None:
            continue
        if canonical != key and canonical in data:
            continue
        parsed = handler(value)
        if parsed is not _SKIP:
            result[canonical] = parsed

    return result


__all__ = ["FieldSpec", "parse_fields"]
