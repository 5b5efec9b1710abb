"""
Tab membership policies.

Each [Tab][flowgazer.models.constants.Tab] is bound to a
[TabPolicy][flowgazer.feed.tabs.TabPolicy] that carries, as data, the kinds
the tab admits and the predicate an event of those kinds must satisfy.
Predicates are pure functions of the event, the local identity, the store
(following set, repost targets) and the tab switches; they keep no state
between calls, so the live path and the full rebuild path always agree.

Membership summary (``me`` is the local identity):

```text
global     1, 6 [42]          not self content (see SelfExclusion)
following  1, 6 [42]          as global, and author is followed
myposts    1 [42]             author == me
likes      7 [6, 1] [42]      the first p-tag equals me
```
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowgazer.models import Event, EventKind, Tab

from .configs import SelfExclusion, TabsConfig


if TYPE_CHECKING:
    from .store import EventStore


Predicate = Callable[[Event, "str | None", "EventStore", TabsConfig], bool]


# =============================================================================
# Self-content checks
# =============================================================================


def mentions(event: Event, pubkey: str) -> bool:
    """True if one of the event's ``p`` tags names *pubkey*."""
    return event.has_tag("p", pubkey)


def reposts_content_of(event: Event, pubkey: str, store: EventStore) -> bool:
    """True if *event* is a repost whose stored original was written by *pubkey*."""
    if event.kind != EventKind.REPOST:
        return False
    target_id = event.first_tag_value("e")
    if target_id is None:
        return False
    original = store.get_event(target_id)
    return original is not None and original.pubkey == pubkey


def is_self_content(
    event: Event,
    me: str | None,
    store: EventStore,
    policy: SelfExclusion = SelfExclusion.AUTHOR_MENTION_REPOST,
) -> bool:
    """Apply a self-exclusion policy. Nothing is self content without an identity."""
    if me is None:
        return False
    if event.pubkey == me:
        return True
    if policy == SelfExclusion.AUTHOR:
        return False
    if mentions(event, me):
        return True
    if policy == SelfExclusion.AUTHOR_MENTION:
        return False
    return reposts_content_of(event, me, store)


def is_boundary_eligible(event: Event, me: str | None, store: EventStore) -> bool:
    """Whether *event* may move a public tab's ``until`` cursor.

    Always uses the strictest self check, independent of the configured
    exclusion policy, so self content never drives pagination.
    """
    return not is_self_content(event, me, store, SelfExclusion.AUTHOR_MENTION_REPOST)


# =============================================================================
# Predicates
# =============================================================================


def _global(event: Event, me: str | None, store: EventStore, config: TabsConfig) -> bool:
    return not is_self_content(event, me, store, config.self_exclusion)


def _following(event: Event, me: str | None, store: EventStore, config: TabsConfig) -> bool:
    return store.is_following(event.pubkey) and _global(event, me, store, config)


def _myposts(event: Event, me: str | None, store: EventStore, config: TabsConfig) -> bool:
    return me is not None and event.pubkey == me


def _likes(event: Event, me: str | None, store: EventStore, config: TabsConfig) -> bool:
    return me is not None and event.first_tag_value("p") == me


# =============================================================================
# Policies
# =============================================================================


@dataclass(frozen=True, slots=True)
class TabPolicy:
    """Membership rules for one tab.

    Attributes:
        tab: The tab this policy belongs to.
        base_kinds: Kinds always admitted.
        optional_kinds: Kinds admitted when ``likes_include_reposts_and_mentions``
            is set (only meaningful for likes).
        public: Public tabs get self-feed merging, boundary-eligible cursors
            and the content filters of the render pipeline.
        predicate: Extra condition on admitted kinds.
    """

    tab: Tab
    base_kinds: tuple[int, ...]
    public: bool
    predicate: Predicate
    optional_kinds: tuple[int, ...] = ()

    def kinds(self, config: TabsConfig) -> tuple[int, ...]:
        """Admitted kinds under *config*, ascending."""
        kinds = set(self.base_kinds)
        if self.optional_kinds and config.likes_include_reposts_and_mentions:
            kinds.update(self.optional_kinds)
        if self.public and config.show_channel_messages:
            kinds.add(EventKind.CHANNEL_MESSAGE)
        if not self.public and config.channel_messages_in_personal_tabs:
            kinds.add(EventKind.CHANNEL_MESSAGE)
        return tuple(sorted(int(k) for k in kinds))

    def accepts(self, event: Event, me: str | None, store: EventStore, config: TabsConfig) -> bool:
        return event.kind in self.kinds(config) and self.predicate(event, me, store, config)


TAB_POLICIES: dict[Tab, TabPolicy] = {
    Tab.GLOBAL: TabPolicy(
        tab=Tab.GLOBAL,
        base_kinds=(EventKind.TEXT_NOTE, EventKind.REPOST),
        public=True,
        predicate=_global,
    ),
    Tab.FOLLOWING: TabPolicy(
        tab=Tab.FOLLOWING,
        base_kinds=(EventKind.TEXT_NOTE, EventKind.REPOST),
        public=True,
        predicate=_following,
    ),
    Tab.MYPOSTS: TabPolicy(
        tab=Tab.MYPOSTS,
        base_kinds=(EventKind.TEXT_NOTE,),
        public=False,
        predicate=_myposts,
    ),
    Tab.LIKES: TabPolicy(
        tab=Tab.LIKES,
        base_kinds=(EventKind.REACTION,),
        optional_kinds=(EventKind.TEXT_NOTE, EventKind.REPOST),
        public=False,
        predicate=_likes,
    ),
}


def classify(event: Event, me: str | None, store: EventStore, config: TabsConfig) -> list[Tab]:
    """Every tab *event* belongs to, in ``Tab`` declaration order."""
    return [tab for tab in Tab if TAB_POLICIES[tab].accepts(event, me, store, config)]
