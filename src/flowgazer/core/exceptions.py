"""flowgazer exception hierarchy.

Only conditions the caller can act on are exceptions. Routine rejections
(bad signatures, duplicate events, unknown tab names, unmet pagination
preconditions) are logged and reported through return values instead.

Exception hierarchy:

```text
FlowgazerError (base -- never raised directly)
├── ConfigurationError   -- config validation, missing keys, bad YAML
└── ProtocolError        -- malformed wire payloads (events, metadata)
```

See Also:
    [FeedConfig.from_yaml()][flowgazer.feed.configs.FeedConfig.from_yaml]:
        Raises [ConfigurationError][flowgazer.core.exceptions.ConfigurationError].
    [parse_event()][flowgazer.nips.nip01.parse_event]: Raises
        [ProtocolError][flowgazer.core.exceptions.ProtocolError].
"""

from __future__ import annotations


class FlowgazerError(Exception):
    """Base exception for all flowgazer errors.

    Never raised directly -- always use a specific subclass.
    """


class ConfigurationError(FlowgazerError):
    """Invalid or missing configuration (YAML file, environment, schema).

    See Also:
        [load_yaml()][flowgazer.core.yaml.load_yaml]: YAML loading function
            whose output is validated into
            [FeedConfig][flowgazer.feed.configs.FeedConfig].
    """


class ProtocolError(FlowgazerError):
    """A payload received from the network does not follow the NIP it claims.

    See Also:
        [flowgazer.nips][]: NIP helpers where protocol errors originate.
    """
