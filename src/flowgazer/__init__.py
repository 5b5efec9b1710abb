r"""Flowgazer -- feed core for a Nostr client.

An event store and a tab router that turn an unordered, multi-relay stream
of signed events into four independently paginated views (global,
following, my posts, likes).

Imports flow strictly downward:

```text
                feed           Store, router, pipeline, scheduler
             /   |   \
          core  nips  utils    Logging/metrics, NIP helpers, keys
             \   |   /
              models           Pure frozen dataclasses
```

Note:
    Top-level imports (``from flowgazer import FeedContext``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("flowgazer")

__all__ = [
    "Event",
    "EventKind",
    "EventStore",
    "FeedConfig",
    "FeedContext",
    "FeedRouter",
    "FilterOptions",
    "Logger",
    "Profile",
    "QueryFilter",
    "RenderScheduler",
    "Session",
    "Tab",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("flowgazer.core", "Logger"),
    "Event": ("flowgazer.models", "Event"),
    "EventKind": ("flowgazer.models", "EventKind"),
    "Profile": ("flowgazer.models", "Profile"),
    "QueryFilter": ("flowgazer.models", "QueryFilter"),
    "Tab": ("flowgazer.models", "Tab"),
    "EventStore": ("flowgazer.feed", "EventStore"),
    "FeedConfig": ("flowgazer.feed", "FeedConfig"),
    "FeedContext": ("flowgazer.feed", "FeedContext"),
    "FeedRouter": ("flowgazer.feed", "FeedRouter"),
    "FilterOptions": ("flowgazer.feed", "FilterOptions"),
    "RenderScheduler": ("flowgazer.feed", "RenderScheduler"),
    "Session": ("flowgazer.feed", "Session"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'flowgazer' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
