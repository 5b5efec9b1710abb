"""
Owned lifecycle for one feed: session, store, scheduler and router.

A [FeedContext][flowgazer.feed.context.FeedContext] is constructed
explicitly and passed to the controller; there is no module-level
singleton. It owns the wiring between the parts and the reset rules:
logging in, logging out and switching relay endpoints all start from an
empty store and empty tabs.

Examples:
    ```python
    with FeedContext.from_yaml("flowgazer.yaml", refresh=renderer.refresh) as feed:
        for query in feed.subscription_filters():
            transport.subscribe(query.to_dict(), on_event=feed.handle_event)
    ```
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import Any, Self

from flowgazer.core.exceptions import ProtocolError
from flowgazer.core.logger import Logger
from flowgazer.models import Event, EventKind, QueryFilter, Tab
from flowgazer.nips.nip01 import parse_event
from flowgazer.nips.nip02 import parse_contact_list

from .configs import FeedConfig
from .queries import build_following_list_filter, build_main_timeline_filters
from .router import FeedRouter, ProfileRequester
from .scheduler import RefreshCallback, RenderScheduler
from .session import Session
from .store import EventStore, Verifier


class FeedContext:
    """Wired feed core with an explicit lifecycle.

    Args:
        config: Feed configuration; defaults apply when omitted.
        verifier: Signature check for the store.
        refresh: Renderer callback fired by the scheduler.
        profile_requester: Called for each author whose profile is unknown.
        clock: Source of "now" for cursor fallbacks.
        loop: Event loop for debounce timers.
    """

    def __init__(
        self,
        config: FeedConfig | None = None,
        *,
        verifier: Verifier | None = None,
        refresh: RefreshCallback | None = None,
        profile_requester: ProfileRequester | None = None,
        clock: Callable[[], float] = time.time,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config or FeedConfig()
        self.session = Session(self.config.session.pubkey)
        self.store = EventStore(self.session, verifier)
        self.scheduler = RenderScheduler(
            refresh,
            delay=self.config.render.delay,
            auto_update=self.config.render.auto_update,
            loop=loop,
        )
        self.router = FeedRouter(
            self.store,
            self.session,
            config=self.config,
            scheduler=self.scheduler,
            profile_requester=profile_requester,
            clock=clock,
        )
        self._contacts_created_at: int | None = None
        self._logger = Logger("flowgazer.context")

    @classmethod
    def from_config(cls, config: FeedConfig, **kwargs: Any) -> Self:
        return cls(config, **kwargs)

    @classmethod
    def from_yaml(cls, config_path: str | Path, **kwargs: Any) -> Self:
        """Build a context from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the configuration is invalid.
        """
        return cls(FeedConfig.from_yaml(config_path), **kwargs)

    # -------------------------------------------------------------------------
    # Inbound events
    # -------------------------------------------------------------------------

    def handle_event(self, event: Event) -> bool:
        """Store an inbound event and dispatch it.

        Kind 0 updates profiles, the local identity's kind 3 replaces the
        following list, everything else is routed into tabs.

        Returns:
            True if the store accepted the event.
        """
        if not self.store.add_event(event):
            return False

        if event.kind == EventKind.SET_METADATA:
            if self.store.add_profile_event(event):
                self.router.on_profile_fetched(event.pubkey)
            return True

        if event.kind == EventKind.CONTACTS and event.pubkey == self.session.local_identity_key():
            self._apply_contact_list(event)
            return True

        self.router.on_event_received(event)
        return True

    def handle_history_event(self, event: Event, tab: Tab | str) -> bool:
        """Store a backlog event and add it to the tab it was fetched for.

        Already-stored events are still offered to the tab.
        """
        if not self.store.add_event(event) and not self.store.has_event(event.id):
            return False
        return self.router.add_history_event_to_tab(event, tab)

    def handle_raw(self, payload: str | dict[str, Any]) -> bool:
        """Decode a wire event and handle it; malformed payloads are dropped."""
        try:
            event = parse_event(payload)
        except ProtocolError as e:
            self._logger.warning("event_rejected_malformed", error=str(e))
            return False
        return self.handle_event(event)

    def _apply_contact_list(self, event: Event) -> None:
        if self._contacts_created_at is not None and event.created_at <= self._contacts_created_at:
            self._logger.debug("contact_list_stale", created_at=event.created_at)
            return
        self._contacts_created_at = event.created_at
        self.store.set_following_list(parse_contact_list(event))
        self.router.on_following_list_changed()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def subscription_filters(self, *, since: int | None = None) -> list[QueryFilter]:
        """Filters for the live subscription, plus the own contact list when logged in."""
        filters = build_main_timeline_filters(
            session=self.session,
            store=self.store,
            tabs=self.router.tabs_config,
            pagination=self.config.pagination,
            since=since,
        )
        me = self.session.local_identity_key()
        if me is not None:
            filters.append(build_following_list_filter(me))
        return filters

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def login(self, pubkey: str) -> None:
        """Switch to *pubkey*, dropping everything derived from the old identity."""
        self.clear()
        self.session.login(pubkey)
        self._logger.info("session_login", pubkey=pubkey)

    def logout(self) -> None:
        self.clear()
        self.session.logout()
        self._logger.info("session_logout")

    def switch_endpoint(self, endpoint: str) -> None:
        """Reset all state before the controller reconnects to *endpoint*."""
        self.clear()
        self._logger.info("endpoint_switched", endpoint=endpoint)

    def clear(self) -> None:
        self.router.clear()
        self.store.clear()
        self._contacts_created_at = None

    def close(self) -> None:
        self.scheduler.cancel()
        self.clear()
        self._logger.info("context_closed")

    def get_stats(self) -> dict[str, Any]:
        return {"store": self.store.get_stats(), "router": self.router.get_stats()}

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
