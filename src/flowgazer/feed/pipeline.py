"""
Render-time content filter pipeline.

Stages run in a fixed order; later stages see the output of earlier ones,
so the co-visibility trim is always computed over what survived content
filtering:

```text
1. channel_messages    drop kind 42 unless enabled          (public tabs)
2. forbidden_words     drop notes containing a blocked word (public tabs)
3. note_length         drop notes over max_note_length      (public tabs)
4. client_only         keep notes carrying the client tag   (not likes)
5. authors             keep allowlisted authors             (global only)
6. covisibility        drop secondary events older than the
                       Nth-newest note                      (public tabs)
```

The result is sorted newest first, ties broken by ascending id.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from flowgazer.core.logger import Logger
from flowgazer.models import PUBLIC_TABS, Event, EventKind, Tab

from .configs import PipelineConfig


@dataclass(frozen=True, slots=True)
class FilterOptions:
    """Per-render filter toggles supplied by the renderer.

    Attributes:
        client_only: Keep only notes tagged with the configured client name.
        authors: Author allowlist for the global tab; ``None`` disables it.
    """

    client_only: bool = False
    authors: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if self.authors is not None and not isinstance(self.authors, frozenset):
            object.__setattr__(self, "authors", frozenset(self.authors))


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Newest first; equal timestamps ordered by ascending id."""
    return sorted(events, key=lambda e: (-e.created_at, e.id))


Stage = Callable[[list[Event], Tab, FilterOptions], list[Event]]


class FilterPipeline:
    """Ordered content filters applied to a tab's candidate events.

    Args:
        config: Note length cap, co-visibility window, client tag and
            forbidden words.
        show_channel_messages: Initial value of the channel message switch.
    """

    def __init__(self, config: PipelineConfig, *, show_channel_messages: bool = False) -> None:
        self._config = config
        self._forbidden_words: tuple[str, ...] = tuple(config.forbidden_words)
        self.show_channel_messages = show_channel_messages
        self._logger = Logger("flowgazer.pipeline")
        self._stages: tuple[tuple[str, Stage], ...] = (
            ("channel_messages", self._drop_channel_messages),
            ("forbidden_words", self._drop_forbidden_words),
            ("note_length", self._drop_long_notes),
            ("client_only", self._keep_client_notes),
            ("authors", self._keep_allowlisted_authors),
            ("covisibility", self._trim_covisibility),
        )

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._stages)

    @property
    def forbidden_words(self) -> tuple[str, ...]:
        return self._forbidden_words

    def set_forbidden_words(self, words: Iterable[str]) -> None:
        self._forbidden_words = tuple(w.lower() for w in words if w.strip())

    def apply(
        self, events: Iterable[Event], tab: Tab, options: FilterOptions | None = None
    ) -> list[Event]:
        """Run every stage over *events* and return the sorted survivors."""
        options = options or FilterOptions()
        result = list(events)
        for name, stage in self._stages:
            before = len(result)
            result = stage(result, tab, options)
            if len(result) != before:
                self._logger.debug("stage_dropped", stage=name, tab=tab, dropped=before - len(result))
        return sort_events(result)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _drop_channel_messages(self, events: list[Event], tab: Tab, options: FilterOptions) -> list[Event]:
        if tab not in PUBLIC_TABS or self.show_channel_messages:
            return events
        return [e for e in events if e.kind != EventKind.CHANNEL_MESSAGE]

    def _drop_forbidden_words(self, events: list[Event], tab: Tab, options: FilterOptions) -> list[Event]:
        if tab not in PUBLIC_TABS or not self._forbidden_words:
            return events
        return [
            e
            for e in events
            if not (e.is_note and any(w in e.content.lower() for w in self._forbidden_words))
        ]

    def _drop_long_notes(self, events: list[Event], tab: Tab, options: FilterOptions) -> list[Event]:
        if tab not in PUBLIC_TABS:
            return events
        limit = self._config.max_note_length
        return [e for e in events if not (e.is_note and len(e.content) > limit)]

    def _keep_client_notes(self, events: list[Event], tab: Tab, options: FilterOptions) -> list[Event]:
        if not options.client_only or tab == Tab.LIKES:
            return events
        client = self._config.client_tag
        return [e for e in events if e.is_note and e.has_tag("client", client)]

    def _keep_allowlisted_authors(
        self, events: list[Event], tab: Tab, options: FilterOptions
    ) -> list[Event]:
        if tab != Tab.GLOBAL or not options.authors:
            return events
        return [e for e in events if e.pubkey in options.authors]

    def _trim_covisibility(self, events: list[Event], tab: Tab, options: FilterOptions) -> list[Event]:
        if tab not in PUBLIC_TABS:
            return events
        note_times = sorted((e.created_at for e in events if e.is_note), reverse=True)
        if not note_times:
            return events
        threshold = note_times[min(self._config.covisibility_window, len(note_times)) - 1]
        return [e for e in events if e.is_note or e.created_at >= threshold]
