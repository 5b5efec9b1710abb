"""Feed layer: event store, tab router, filter pipeline and render scheduling.

Top of the dependency graph. Everything the controller and the renderer
touch lives here.

Attributes:
    FeedContext: Owned wiring of session, store, scheduler and router.
        See [FeedContext][flowgazer.feed.context.FeedContext].
    EventStore: Deduplicated events and profiles with secondary indices.
    FeedRouter: Per-tab classification, cursors and render lists.
    FilterPipeline: Ordered render-time content filters.
    RenderScheduler: Debounced repaint on the asyncio loop.
    FeedConfig: Pydantic configuration loaded from YAML.
"""

from .configs import (
    FeedConfig,
    LoggingConfig,
    PaginationConfig,
    PipelineConfig,
    RenderConfig,
    SelfExclusion,
    TabsConfig,
)
from .context import FeedContext
from .cursor import Cursor, fold_cursor
from .pipeline import FilterOptions, FilterPipeline, sort_events
from .queries import (
    build_following_list_filter,
    build_load_more_filter,
    build_main_timeline_filters,
    build_profile_filter,
    build_tab_history_filters,
)
from .router import EventTabs, FeedRouter
from .scheduler import RenderScheduler
from .self_feed import SelfFeedCache
from .session import Session
from .store import EventStore, ReactionCount
from .tabs import TAB_POLICIES, TabPolicy, classify, is_boundary_eligible, is_self_content


__all__ = [
    "TAB_POLICIES",
    "Cursor",
    "EventStore",
    "EventTabs",
    "FeedConfig",
    "FeedContext",
    "FeedRouter",
    "FilterOptions",
    "FilterPipeline",
    "LoggingConfig",
    "PaginationConfig",
    "PipelineConfig",
    "ReactionCount",
    "RenderConfig",
    "RenderScheduler",
    "SelfExclusion",
    "SelfFeedCache",
    "Session",
    "TabPolicy",
    "TabsConfig",
    "build_following_list_filter",
    "build_load_more_filter",
    "build_main_timeline_filters",
    "build_profile_filter",
    "build_tab_history_filters",
    "classify",
    "fold_cursor",
    "is_boundary_eligible",
    "is_self_content",
    "sort_events",
]
