"""
Canonical, deduplicated event and profile storage.

[EventStore][flowgazer.feed.store.EventStore] is the leaf of the feed core:
every event the controller receives goes through
[add_event()][flowgazer.feed.store.EventStore.add_event] exactly once before
the [FeedRouter][flowgazer.feed.router.FeedRouter] sees it. Events live for
the lifetime of the store; nothing is evicted and no index is ever pruned.

Storage layout:

```text
_events                  id -> Event               (single copy of each payload)
_by_kind                 kind -> {id}
_by_author               pubkey -> {id}
_by_referenced_event     e-tag value -> {id}
_by_referenced_pubkey    p-tag value -> {id}
_reaction_counts         target id -> [reposts, reactions]
_liked_by_me             {target id}
```

All read accessors return snapshots (``frozenset``, fresh ``list`` or
immutable models); callers never see the internal containers.

See Also:
    [verify_signature()][flowgazer.nips.nip01.verify_signature]: Default
        verifier injected into the store.
    [Session][flowgazer.feed.session.Session]: Supplies the local identity
        used for liked-by-me tracking and reaction counters.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from typing import Any, NamedTuple

from flowgazer.core.exceptions import ProtocolError
from flowgazer.core.logger import Logger
from flowgazer.core.metrics import STORE_EVENTS, STORE_SIZE
from flowgazer.models import Event, EventKind, Profile
from flowgazer.nips.nip01 import parse_profile, profile_from_dict, verify_signature

from .session import Session


Verifier = Callable[[Event], bool]

_DISPLAY_NAME_FALLBACK_LENGTH = 8


class ReactionCount(NamedTuple):
    """Aggregated reposts and reactions targeting one event."""

    reposts: int = 0
    reactions: int = 0


class EventStore:
    """Deduplicated in-memory store with secondary indices.

    Args:
        session: Shared local identity.
        verifier: Signature check applied before anything is stored.
            Defaults to [verify_signature()][flowgazer.nips.nip01.verify_signature].

    Examples:
        ```python
        store = EventStore(Session(my_pubkey))
        store.add_event(event)        # True on first acceptance
        store.add_event(event)        # False: already stored
        store.events_by_author(my_pubkey)
        ```
    """

    def __init__(self, session: Session, verifier: Verifier | None = None) -> None:
        self._session = session
        self._verifier: Verifier = verifier or verify_signature
        self._logger = Logger("flowgazer.store")

        self._events: dict[str, Event] = {}
        self._profiles: dict[str, Profile] = {}
        self._by_kind: defaultdict[int, set[str]] = defaultdict(set)
        self._by_author: defaultdict[str, set[str]] = defaultdict(set)
        self._by_referenced_event: defaultdict[str, set[str]] = defaultdict(set)
        self._by_referenced_pubkey: defaultdict[str, set[str]] = defaultdict(set)
        self._following: set[str] = set()
        self._liked_by_me: set[str] = set()
        self._reaction_counts: dict[str, list[int]] = {}

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def add_event(self, event: Event) -> bool:
        """Store *event* if its signature checks out and it is new.

        Returns:
            True only on the first successful acceptance of this id. A bad
            signature or a duplicate id returns False and leaves the store
            untouched.
        """
        if event.id in self._events:
            STORE_EVENTS.labels(outcome="duplicate").inc()
            return False

        if not self._verifier(event):
            self._logger.warning("event_rejected_signature", event_id=event.id, kind=event.kind)
            STORE_EVENTS.labels(outcome="invalid_signature").inc()
            return False

        self._events[event.id] = event
        self._index(event)

        STORE_EVENTS.labels(outcome="accepted").inc()
        STORE_SIZE.labels(name="events").set(len(self._events))
        return True

    def _index(self, event: Event) -> None:
        self._by_kind[event.kind].add(event.id)
        self._by_author[event.pubkey].add(event.id)
        for target in event.tag_values("e"):
            self._by_referenced_event[target].add(event.id)
        for pubkey in event.tag_values("p"):
            self._by_referenced_pubkey[pubkey].add(event.id)

        me = self._session.local_identity_key()
        if me is None or event.kind not in (EventKind.REPOST, EventKind.REACTION):
            return

        target = event.first_tag_value("e")
        if target is None:
            return

        if event.kind == EventKind.REACTION and event.pubkey == me:
            self._liked_by_me.add(target)

        counts = self._reaction_counts.setdefault(target, [0, 0])
        counts[0 if event.kind == EventKind.REPOST else 1] += 1

    def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def get_events(self, ids: Iterable[str]) -> list[Event]:
        """Return the stored events among *ids*, in the given order, skipping unknown ids."""
        return [self._events[i] for i in ids if i in self._events]

    def get_all_events(self) -> list[Event]:
        return list(self._events.values())

    def has_event(self, event_id: str) -> bool:
        return event_id in self._events

    def events_by_kind(self, kind: int) -> frozenset[str]:
        return frozenset(self._by_kind.get(kind, ()))

    def events_by_author(self, pubkey: str) -> frozenset[str]:
        return frozenset(self._by_author.get(pubkey, ()))

    def events_referencing_event(self, event_id: str) -> frozenset[str]:
        """Ids of events carrying an ``e`` tag pointing at *event_id*."""
        return frozenset(self._by_referenced_event.get(event_id, ()))

    def events_referencing_pubkey(self, pubkey: str) -> frozenset[str]:
        """Ids of events carrying a ``p`` tag pointing at *pubkey*."""
        return frozenset(self._by_referenced_pubkey.get(pubkey, ()))

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    # -------------------------------------------------------------------------
    # Reactions
    # -------------------------------------------------------------------------

    def get_reaction_count(self, event_id: str) -> ReactionCount:
        counts = self._reaction_counts.get(event_id)
        if counts is None:
            return ReactionCount()
        return ReactionCount(reposts=counts[0], reactions=counts[1])

    def is_liked_by_me(self, event_id: str) -> bool:
        return event_id in self._liked_by_me

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def add_profile(self, pubkey: str, profile: Profile | Mapping[str, Any]) -> bool:
        """Store *profile* unless an equally new or newer one is already stored.

        A mapping is parsed as decoded kind 0 metadata carrying its own
        ``created_at``; a malformed mapping is logged and ignored.

        Returns:
            True if the stored profile changed.
        """
        if not isinstance(profile, Profile):
            try:
                profile = profile_from_dict(profile)
            except ProtocolError as e:
                self._logger.warning("profile_rejected_malformed", pubkey=pubkey, error=str(e))
                return False

        existing = self._profiles.get(pubkey)
        if existing is not None and existing.created_at >= profile.created_at:
            return False

        self._profiles[pubkey] = profile
        STORE_SIZE.labels(name="profiles").set(len(self._profiles))
        return True

    def add_profile_event(self, event: Event) -> bool:
        """Parse a kind 0 event and store the resulting profile.

        Malformed metadata is logged and treated as "no update".
        """
        try:
            profile = parse_profile(event)
        except ProtocolError as e:
            self._logger.warning("profile_rejected_malformed", pubkey=event.pubkey, error=str(e))
            return False
        return self.add_profile(event.pubkey, profile)

    def get_profile(self, pubkey: str) -> Profile | None:
        return self._profiles.get(pubkey)

    def has_profile(self, pubkey: str) -> bool:
        return pubkey in self._profiles

    def get_display_name(self, pubkey: str) -> str:
        """Profile name when known, else the first 8 characters of the key."""
        profile = self._profiles.get(pubkey)
        if profile is not None and profile.label():
            return profile.label()  # type: ignore[return-value]
        return pubkey[:_DISPLAY_NAME_FALLBACK_LENGTH]

    # -------------------------------------------------------------------------
    # Following
    # -------------------------------------------------------------------------

    def set_following_list(self, pubkeys: Iterable[str]) -> None:
        """Replace the following set in one step."""
        following = set(pubkeys)
        self._following = following
        STORE_SIZE.labels(name="following").set(len(following))
        self._logger.info("following_list_set", count=len(following))

    def is_following(self, pubkey: str) -> bool:
        return pubkey in self._following

    @property
    def following(self) -> frozenset[str]:
        return frozenset(self._following)

    # -------------------------------------------------------------------------
    # Utilities
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_events": len(self._events),
            "profiles": len(self._profiles),
            "following": len(self._following),
            "kind_counts": {kind: len(ids) for kind, ids in sorted(self._by_kind.items())},
        }

    def clear(self) -> None:
        """Drop every event, profile, index and counter."""
        self._events.clear()
        self._profiles.clear()
        self._by_kind.clear()
        self._by_author.clear()
        self._by_referenced_event.clear()
        self._by_referenced_pubkey.clear()
        self._following = set()
        self._liked_by_me.clear()
        self._reaction_counts.clear()
        for name in ("events", "profiles", "following"):
            STORE_SIZE.labels(name=name).set(0)
        self._logger.info("store_cleared")
