"""Bounded cache of the local identity's own notes.

Public tabs never classify the local identity's notes, so they would never
show a post the user just published. The router merges the newest entries
of this cache into global/following at read time instead; see
[FeedRouter.merge_self_feed()][flowgazer.feed.router.FeedRouter.merge_self_feed].
"""

from __future__ import annotations

from collections.abc import Iterator

from flowgazer.models import Event


def _newest_first(event: Event) -> tuple[int, str]:
    return (-event.created_at, event.id)


class SelfFeedCache:
    """Time-descending list of own notes, capped at ``max_size`` entries.

    When full, the oldest entry is dropped. Duplicate ids are ignored.
    """

    def __init__(self, max_size: int = 200) -> None:
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._events: list[Event] = []
        self._ids: set[str] = set()

    def add(self, event: Event) -> bool:
        """Insert *event*; return False if it was already cached or fell off the end."""
        if event.id in self._ids:
            return False
        self._events.append(event)
        self._events.sort(key=_newest_first)
        self._ids.add(event.id)
        while len(self._events) > self._max_size:
            dropped = self._events.pop()
            self._ids.discard(dropped.id)
        return event.id in self._ids

    def newer_than(self, timestamp: int | None) -> list[Event]:
        """Cached notes strictly newer than *timestamp* (all of them for ``None``)."""
        if timestamp is None:
            return list(self._events)
        return [e for e in self._events if e.created_at > timestamp]

    def clear(self) -> None:
        self._events.clear()
        self._ids.clear()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._ids
