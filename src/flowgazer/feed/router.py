"""
Per-tab classification, pagination bookkeeping and render production.

[FeedRouter][flowgazer.feed.router.FeedRouter] sits between the controller
and the renderer:

```text
controller --add_event--> EventStore
controller --on_event_received--> FeedRouter --classify--> TabState x4
renderer   <--get_visible_events-- FeedRouter (self-feed merge + pipeline)
```

Live arrivals and full rebuilds go through the same
[TAB_POLICIES][flowgazer.feed.tabs.TAB_POLICIES] predicates and the same
cursor fold, so a tab rebuilt by
[repopulate_tab()][flowgazer.feed.router.FeedRouter.repopulate_tab] always
matches what incremental updates would have produced.

Unknown tab names passed to any tab-scoped method are logged at error level
and answered with a neutral value (``False``, ``None`` or an empty
collection); nothing is mutated.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from flowgazer.core.logger import Logger
from flowgazer.core.metrics import TAB_SIZE
from flowgazer.models import Event, EventKind, QueryFilter, Tab

from .configs import FeedConfig, TabsConfig
from .cursor import Cursor, fold_cursor
from .pipeline import FilterOptions, FilterPipeline, sort_events
from .queries import build_load_more_filter
from .scheduler import RenderScheduler
from .self_feed import SelfFeedCache
from .session import Session
from .store import EventStore
from .tabs import TAB_POLICIES, classify, is_boundary_eligible


ProfileRequester = Callable[[str], None]


class EventTabs(NamedTuple):
    """Tabs an event is visible in, and those it reached through a backlog query."""

    tabs: frozenset[Tab]
    history: frozenset[Tab]


@dataclass(slots=True)
class TabState:
    visible_ids: set[str] = field(default_factory=set)
    cursor: Cursor | None = None

    def reset(self) -> None:
        self.visible_ids = set()
        self.cursor = None


class FeedRouter:
    """Classify stored events into tabs and produce render-ready lists.

    Args:
        store: Event and profile storage; every event handed to the router
            must already have been accepted by it.
        session: Shared local identity.
        config: Feed configuration; defaults apply when omitted.
        scheduler: Repaint scheduler. A scheduler honouring
            ``config.render`` is created when omitted.
        profile_requester: Called once per unknown author key seen in a tab.
        clock: Source of "now" for the cursor fallback anchor.

    Examples:
        ```python
        router = FeedRouter(store, session, scheduler=RenderScheduler(renderer.refresh))
        if store.add_event(event):
            router.on_event_received(event)
        renderer.paint(router.get_visible_events(router.active_tab))
        ```
    """

    def __init__(
        self,
        store: EventStore,
        session: Session,
        *,
        config: FeedConfig | None = None,
        scheduler: RenderScheduler | None = None,
        profile_requester: ProfileRequester | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._session = session
        self._config = config or FeedConfig()
        self._tabs_config = self._config.tabs.model_copy()
        self._pipeline = FilterPipeline(
            self._config.pipeline,
            show_channel_messages=self._tabs_config.show_channel_messages,
        )
        self._scheduler = scheduler or RenderScheduler(
            delay=self._config.render.delay,
            auto_update=self._config.render.auto_update,
        )
        self._profile_requester = profile_requester
        self._clock = clock
        self._logger = Logger("flowgazer.router")

        self._states: dict[Tab, TabState] = {tab: TabState() for tab in Tab}
        self._active_tab = Tab.GLOBAL
        self._self_feed = SelfFeedCache(self._config.self_feed_size)
        self._event_tabs: dict[str, set[Tab]] = {}
        self._history_tabs: dict[str, set[Tab]] = {}
        self._pending_profiles: set[str] = set()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def active_tab(self) -> Tab:
        return self._active_tab

    @property
    def tabs_config(self) -> TabsConfig:
        """Live membership switches (a copy of ``config.tabs`` owned by the router)."""
        return self._tabs_config

    @property
    def scheduler(self) -> RenderScheduler:
        return self._scheduler

    @property
    def pipeline(self) -> FilterPipeline:
        return self._pipeline

    @property
    def self_feed(self) -> SelfFeedCache:
        return self._self_feed

    @property
    def pending_profiles(self) -> frozenset[str]:
        return frozenset(self._pending_profiles)

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def _resolve_tab(self, tab: Tab | str, operation: str) -> Tab | None:
        try:
            return Tab(tab)
        except ValueError:
            self._logger.error("unknown_tab", tab=tab, operation=operation)
            return None

    def classify(self, event: Event) -> list[Tab]:
        """Tabs *event* belongs to under the current identity and following set."""
        return classify(
            event, self._session.local_identity_key(), self._store, self._tabs_config
        )

    def should_show_in_tab(self, event: Event, tab: Tab | str) -> bool:
        resolved = self._resolve_tab(tab, "should_show_in_tab")
        if resolved is None:
            return False
        return TAB_POLICIES[resolved].accepts(
            event, self._session.local_identity_key(), self._store, self._tabs_config
        )

    def on_event_received(self, event: Event) -> list[Tab]:
        """Route a freshly accepted event into every tab it belongs to.

        Schedules a debounced render when the active tab changed, either by
        gaining the event or, for public tabs, by gaining a self note.

        Returns:
            The tabs the event was newly added to.
        """
        self_note_added = self._remember_self_note(event)
        added = [tab for tab in self.classify(event) if self._include(event, tab)]

        if added:
            self._request_profile(event.pubkey)

        active_public = TAB_POLICIES[self._active_tab].public
        if self._active_tab in added or (self_note_added and active_public):
            self._scheduler.schedule_render()
        return added

    def add_history_event_to_tab(self, event: Event, tab: Tab | str) -> bool:
        """Add a backlog event fetched specifically for *tab*.

        The event must still satisfy the tab's membership predicate, so a
        later rebuild keeps it.
        """
        resolved = self._resolve_tab(tab, "add_history_event_to_tab")
        if resolved is None:
            return False

        self._remember_self_note(event)
        me = self._session.local_identity_key()
        if not TAB_POLICIES[resolved].accepts(event, me, self._store, self._tabs_config):
            return False

        self._history_tabs.setdefault(event.id, set()).add(resolved)
        added = self._include(event, resolved)
        if added:
            self._request_profile(event.pubkey)
            if resolved == self._active_tab:
                self._scheduler.schedule_render()
        return added

    def _include(self, event: Event, tab: Tab) -> bool:
        state = self._states[tab]
        if event.id in state.visible_ids:
            return False

        state.visible_ids.add(event.id)
        self._event_tabs.setdefault(event.id, set()).add(tab)

        eligible = not TAB_POLICIES[tab].public or is_boundary_eligible(
            event, self._session.local_identity_key(), self._store
        )
        state.cursor = fold_cursor(
            state.cursor,
            event.created_at,
            eligible=eligible,
            fallback_until=self._fallback_until(),
        )
        TAB_SIZE.labels(tab=tab).set(len(state.visible_ids))
        return True

    def _remember_self_note(self, event: Event) -> bool:
        me = self._session.local_identity_key()
        if me is None or event.pubkey != me or event.kind != EventKind.TEXT_NOTE:
            return False
        return self._self_feed.add(event)

    def _fallback_until(self) -> int:
        return int(self._clock()) - self._config.pagination.fallback_lookback

    # -------------------------------------------------------------------------
    # Tab lifecycle
    # -------------------------------------------------------------------------

    def repopulate_tab(self, tab: Tab | str) -> bool:
        """Rebuild a tab's visible ids and cursor from every stored event."""
        resolved = self._resolve_tab(tab, "repopulate_tab")
        if resolved is None:
            return False

        self._reset_tab(resolved)
        me = self._session.local_identity_key()
        policy = TAB_POLICIES[resolved]
        for event in self._store.get_all_events():
            self._remember_self_note(event)
            if policy.accepts(event, me, self._store, self._tabs_config) and self._include(
                event, resolved
            ):
                self._request_profile(event.pubkey)

        state = self._states[resolved]
        TAB_SIZE.labels(tab=resolved).set(len(state.visible_ids))
        self._logger.debug("tab_repopulated", tab=resolved, visible=len(state.visible_ids))
        return True

    def switch_tab(self, tab: Tab | str) -> bool:
        """Activate *tab*, rebuild it from the store and render immediately."""
        resolved = self._resolve_tab(tab, "switch_tab")
        if resolved is None:
            return False

        previous = self._active_tab
        self._active_tab = resolved
        self.repopulate_tab(resolved)
        self._scheduler.render_now()
        self._logger.info("tab_switched", previous=previous, tab=resolved)
        return True

    def clear_tab(self, tab: Tab | str) -> bool:
        """Empty *tab*, dropping its history flags as well."""
        resolved = self._resolve_tab(tab, "clear_tab")
        if resolved is None:
            return False
        for event_id in self._states[resolved].visible_ids:
            history = self._history_tabs.get(event_id)
            if history is None:
                continue
            history.discard(resolved)
            if not history:
                del self._history_tabs[event_id]
        self._reset_tab(resolved)
        TAB_SIZE.labels(tab=resolved).set(0)
        return True

    def _reset_tab(self, tab: Tab) -> None:
        state = self._states[tab]
        for event_id in state.visible_ids:
            tabs = self._event_tabs.get(event_id)
            if tabs is None:
                continue
            tabs.discard(tab)
            if not tabs:
                del self._event_tabs[event_id]
        state.reset()

    def clear(self) -> None:
        """Drop every tab, the self-feed and pending work; the active tab is kept."""
        self._scheduler.cancel()
        for tab, state in self._states.items():
            state.reset()
            TAB_SIZE.labels(tab=tab).set(0)
        self._self_feed.clear()
        self._event_tabs.clear()
        self._history_tabs.clear()
        self._pending_profiles.clear()
        self._logger.info("router_cleared")

    def on_following_list_changed(self) -> None:
        """Rebuild the following tab after the following set was replaced."""
        self.repopulate_tab(Tab.FOLLOWING)
        if self._active_tab == Tab.FOLLOWING:
            self._scheduler.render_now()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def visible_ids(self, tab: Tab | str) -> frozenset[str]:
        resolved = self._resolve_tab(tab, "visible_ids")
        if resolved is None:
            return frozenset()
        return frozenset(self._states[resolved].visible_ids)

    def get_cursor(self, tab: Tab | str) -> Cursor | None:
        resolved = self._resolve_tab(tab, "get_cursor")
        if resolved is None:
            return None
        return self._states[resolved].cursor

    def get_oldest_timestamp(self, tab: Tab | str) -> int | None:
        """The tab's ``until`` cursor, or now when it has none yet."""
        resolved = self._resolve_tab(tab, "get_oldest_timestamp")
        if resolved is None:
            return None
        cursor = self._states[resolved].cursor
        return cursor.until if cursor is not None else int(self._clock())

    def get_event_tabs(self, event_id: str) -> EventTabs:
        return EventTabs(
            tabs=frozenset(self._event_tabs.get(event_id, ())),
            history=frozenset(self._history_tabs.get(event_id, ())),
        )

    def merge_self_feed(self, events: Iterable[Event]) -> list[Event]:
        """Prepend self notes newer than the newest of *events*, then re-sort.

        Self notes at or below that timestamp are left out, so the merge
        never reaches behind the top of the feed. With no events, every
        cached self note is merged.
        """
        events = list(events)
        newest = max((e.created_at for e in events), default=None)
        present = {e.id for e in events}
        merged = [e for e in self._self_feed.newer_than(newest) if e.id not in present]
        return sort_events([*merged, *events])

    def get_visible_events(
        self, tab: Tab | str, options: FilterOptions | None = None
    ) -> list[Event]:
        """Render-ready events of *tab*: self-feed merge, pipeline, sort."""
        resolved = self._resolve_tab(tab, "get_visible_events")
        if resolved is None:
            return []

        events = self._store.get_events(self._states[resolved].visible_ids)
        if TAB_POLICIES[resolved].public:
            events = self.merge_self_feed(events)
        return self._pipeline.apply(events, resolved, options)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def build_load_more_filter(
        self,
        tab: Tab | str,
        until: int | None = None,
        *,
        authors: Iterable[str] | None = None,
    ) -> QueryFilter | None:
        """Query for the page older than *until* (the tab's cursor by default)."""
        resolved = self._resolve_tab(tab, "build_load_more_filter")
        if resolved is None:
            return None
        if until is None:
            until = self.get_oldest_timestamp(resolved)
        return build_load_more_filter(
            resolved,
            until,  # type: ignore[arg-type]
            session=self._session,
            store=self._store,
            tabs=self._tabs_config,
            pagination=self._config.pagination,
            authors=authors,
        )

    def request_load_more(
        self, tab: Tab | str, *, authors: Iterable[str] | None = None
    ) -> QueryFilter | None:
        """Build the next page's query from the tab's cursor and log the request."""
        query = self.build_load_more_filter(tab, authors=authors)
        if query is not None:
            self._logger.info("load_more_requested", tab=tab, until=query.until)
        return query

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def _request_profile(self, pubkey: str) -> None:
        if self._store.has_profile(pubkey) or pubkey in self._pending_profiles:
            return
        self._pending_profiles.add(pubkey)
        if self._profile_requester is not None:
            self._profile_requester(pubkey)

    def on_profile_fetched(self, pubkey: str) -> None:
        """Clear the pending mark and repaint if the active tab shows *pubkey*."""
        self._pending_profiles.discard(pubkey)
        visible = self._states[self._active_tab].visible_ids
        if not visible.isdisjoint(self._store.events_by_author(pubkey)):
            self._scheduler.schedule_render()

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def set_forbidden_words(self, words: Iterable[str]) -> None:
        self._pipeline.set_forbidden_words(words)
        self._scheduler.render_now()

    def set_show_channel_messages(self, enabled: bool) -> None:
        """Toggle kind 42 in public tabs and rebuild them."""
        self._tabs_config.show_channel_messages = enabled
        self._pipeline.show_channel_messages = enabled
        for tab, policy in TAB_POLICIES.items():
            if policy.public:
                self.repopulate_tab(tab)
        self._scheduler.render_now()

    def set_auto_update(self, enabled: bool) -> None:
        self._scheduler.set_auto_update(enabled)

    def schedule_render(self) -> None:
        self._scheduler.schedule_render()

    def render_now(self) -> None:
        self._scheduler.render_now()

    def get_stats(self) -> dict[str, Any]:
        return {
            "active_tab": str(self._active_tab),
            "tabs": {
                str(tab): {
                    "visible": len(state.visible_ids),
                    "cursor": state.cursor.to_dict() if state.cursor else None,
                }
                for tab, state in self._states.items()
            },
            "self_feed": len(self._self_feed),
            "pending_profiles": len(self._pending_profiles),
        }
