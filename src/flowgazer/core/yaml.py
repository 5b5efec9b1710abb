"""YAML configuration loading for flowgazer.

Uses ``yaml.safe_load`` so configuration files can only produce plain
data (strings, numbers, lists, dicts). Used by
[FeedConfig.from_yaml()][flowgazer.feed.configs.FeedConfig.from_yaml].

Examples:
    ```python
    from flowgazer.core.yaml import load_yaml

    config = load_yaml("config/flowgazer.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a nested dictionary. Returns an empty dict
        if the file exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file contains invalid YAML or its top
            level is not a mapping.

    Warning:
        The returned dictionary is not schema-checked. Pass it to
        [FeedConfig][flowgazer.feed.configs.FeedConfig] for validation.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {config_path} must be a mapping")
    return data
