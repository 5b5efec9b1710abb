"""Shared constants for the models layer.

Defines the event kinds the feed core understands and the closed set of
tab names. Placing them here avoids circular dependencies between the
models, nips and feed layers.

See Also:
    [flowgazer.feed.tabs][]: Binds each [Tab][flowgazer.models.constants.Tab]
        member to its membership policy.
    [flowgazer.models.event][]: Uses [EventKind][flowgazer.models.constants.EventKind]
        for the convenience predicates on [Event][flowgazer.models.event.Event].
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Well-known Nostr event kinds consumed by the feed core.

    Attributes:
        SET_METADATA: Kind 0 -- user profile metadata (NIP-01).
        TEXT_NOTE: Kind 1 -- short text note (NIP-01).
        CONTACTS: Kind 3 -- following list (NIP-02).
        REPOST: Kind 6 -- repost of a text note (NIP-18).
        REACTION: Kind 7 -- reaction to an event (NIP-25).
        CHANNEL_CREATE: Kind 40 -- public chat channel creation (NIP-28).
        CHANNEL_METADATA: Kind 41 -- public chat channel metadata (NIP-28).
        CHANNEL_MESSAGE: Kind 42 -- public chat channel message (NIP-28).
    """

    SET_METADATA = 0
    TEXT_NOTE = 1
    CONTACTS = 3
    REPOST = 6
    REACTION = 7
    CHANNEL_CREATE = 40
    CHANNEL_METADATA = 41
    CHANNEL_MESSAGE = 42


class Tab(StrEnum):
    """The closed set of feed views.

    Attributes:
        GLOBAL: Everything public except the local identity's own activity.
        FOLLOWING: The global view restricted to followed authors.
        MYPOSTS: Notes authored by the local identity.
        LIKES: Reactions, reposts and mentions addressed to the local identity.
    """

    GLOBAL = "global"
    FOLLOWING = "following"
    MYPOSTS = "myposts"
    LIKES = "likes"


# Tabs whose content comes from other people; self content is merged at read time.
PUBLIC_TABS: frozenset[Tab] = frozenset({Tab.GLOBAL, Tab.FOLLOWING})

EVENT_KIND_MAX = 65_535
