"""Helpers shared by the feed layer.

Attributes:
    parse_public_key: Normalize an npub or hex key to hex.
    load_public_key_from_env: Read the local identity key from the environment.
    SessionConfig: Pydantic model for the local identity.
"""

from .keys import ENV_PUBLIC_KEY, SessionConfig, load_public_key_from_env, parse_public_key


__all__ = [
    "ENV_PUBLIC_KEY",
    "SessionConfig",
    "load_public_key_from_env",
    "parse_public_key",
]
