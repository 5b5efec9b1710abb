"""Core layer: exceptions, structured logging, YAML loading and metrics.

Depends only on ``flowgazer.models`` and is used by ``flowgazer.nips``,
``flowgazer.utils`` and ``flowgazer.feed``.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][flowgazer.core.logger.Logger].
    configure_logging: Install a single stream handler on the root logger.
    FlowgazerError: Root of the exception hierarchy.
        See [flowgazer.core.exceptions][].
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
    STORE_EVENTS, STORE_SIZE, TAB_SIZE, RENDERS: Prometheus metrics.
"""

from .exceptions import ConfigurationError, FlowgazerError, ProtocolError
from .logger import Logger, StructuredFormatter, configure_logging, format_kv_pairs
from .metrics import RENDERS, STORE_EVENTS, STORE_SIZE, TAB_SIZE
from .yaml import load_yaml


__all__ = [
    "RENDERS",
    "STORE_EVENTS",
    "STORE_SIZE",
    "TAB_SIZE",
    "ConfigurationError",
    "FlowgazerError",
    "Logger",
    "ProtocolError",
    "StructuredFormatter",
    "configure_logging",
    "format_kv_pairs",
    "load_yaml",
]
