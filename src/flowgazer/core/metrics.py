"""
Prometheus metrics for the feed core.

Module-level metric objects (singletons, thread-safe) updated by the store,
the router and the render scheduler. Exposition is left to the embedding
process (``prometheus_client.generate_latest()`` or its HTTP helpers).

Architecture:
    STORE_EVENTS:   Cumulative ``add_event`` outcomes by label.
    STORE_SIZE:     Point-in-time number of stored events / profiles.
    TAB_SIZE:       Point-in-time number of visible ids per tab.
    RENDERS:        Cumulative refresh invocations by trigger.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge


# outcome: accepted | duplicate | invalid_signature
STORE_EVENTS = Counter(
    "flowgazer_store_events",
    "EventStore.add_event outcomes",
    ["outcome"],
)

# name: events | profiles | following
STORE_SIZE = Gauge(
    "flowgazer_store_size",
    "EventStore collection sizes",
    ["name"],
)

TAB_SIZE = Gauge(
    "flowgazer_tab_visible_events",
    "Number of visible event ids per tab",
    ["tab"],
)

# trigger: debounced | immediate
RENDERS = Counter(
    "flowgazer_renders",
    "Renderer refresh invocations",
    ["trigger"],
)
