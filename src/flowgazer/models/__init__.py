"""Pure frozen dataclasses for Nostr events, profiles and relay queries.

The models layer is the foundation of the package. It depends on nothing
else in ``flowgazer``; ``nostr_sdk`` is used only for interop conversions.
Every model uses ``@dataclass(frozen=True, slots=True)`` and validates in
``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    Event: Immutable NIP-01 event with exact wire round-tripping.
    Profile: Kind 0 metadata snapshot, replaced by newer ones.
    QueryFilter: Relay query descriptor with ``#e``/``#p`` tag filters.
    EventKind: Kinds relevant to feed policy.
    Tab: Closed enumeration of feed views.

See Also:
    [flowgazer.feed][]: Store and router built on these models.
"""

from .constants import EVENT_KIND_MAX, PUBLIC_TABS, EventKind, Tab
from .event import Event
from .profile import Profile
from .query import QueryFilter


__all__ = [
    "EVENT_KIND_MAX",
    "PUBLIC_TABS",
    "Event",
    "EventKind",
    "Profile",
    "QueryFilter",
    "Tab",
]
