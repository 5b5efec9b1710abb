"""Pagination cursor folding.

A tab's cursor bounds the ``created_at`` range it has seen: ``since`` is
the newest included timestamp and ``until`` the oldest boundary-eligible
one. Folding is a min/max over timestamps, so the result does not depend
on arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Cursor:
    """Immutable ``{until, since}`` pair.

    Attributes:
        until: Oldest boundary-eligible timestamp, or a fallback anchor.
        since: Newest included timestamp.
        until_is_fallback: True while ``until`` is the ``now - lookback``
            anchor set because only non-eligible events have arrived.
    """

    until: int
    since: int
    until_is_fallback: bool = False

    def to_dict(self) -> dict[str, int]:
        return {"until": self.until, "since": self.since}


def fold_cursor(
    cursor: Cursor | None,
    created_at: int,
    *,
    eligible: bool,
    fallback_until: int,
) -> Cursor:
    """Return *cursor* extended by one included event.

    Args:
        cursor: Current cursor, ``None`` for an empty tab.
        created_at: Timestamp of the included event.
        eligible: Whether the event may move ``until``.
        fallback_until: Anchor used when the first events are not eligible.
    """
    if cursor is None:
        if eligible:
            return Cursor(until=created_at, since=created_at)
        return Cursor(until=fallback_until, since=created_at, until_is_fallback=True)

    since = max(cursor.since, created_at)
    if not eligible:
        return replace(cursor, since=since)
    if cursor.until_is_fallback:
        return Cursor(until=created_at, since=since)
    return Cursor(until=min(cursor.until, created_at), since=since)
