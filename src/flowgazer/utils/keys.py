"""Nostr public key handling for the local identity.

The feed core never holds a private key: signing is done by an external
signer. It only needs the local identity's public key, which may be given
as ``npub1...`` (bech32) or 64-char hex and is normalized to hex with
``nostr_sdk.PublicKey``.

Examples:
    ```python
    import os

    os.environ["FLOWGAZER_PUBKEY"] = "npub1..."
    pubkey = load_public_key_from_env("FLOWGAZER_PUBKEY")  # hex or None
    ```
"""

from __future__ import annotations

import os
from typing import Any

from nostr_sdk import NostrSdkError, PublicKey
from pydantic import BaseModel, Field, field_validator, model_validator


ENV_PUBLIC_KEY = "FLOWGAZER_PUBKEY"


def parse_public_key(value: str) -> str:
    """Normalize an npub or hex public key to lowercase hex.

    Raises:
        ValueError: If *value* is not a valid public key.
    """
    try:
        return PublicKey.parse(value.strip()).to_hex()
    except NostrSdkError as e:
        raise ValueError(f"invalid public key: {value!r}") from e


def load_public_key_from_env(env_var: str) -> str | None:
    """Read and normalize a public key from *env_var*.

    Returns:
        The hex public key, or ``None`` when the variable is unset or empty
        (an unauthenticated session).

    Raises:
        ValueError: If the variable is set to an invalid key.
    """
    value = os.getenv(env_var)
    if not value:
        return None
    return parse_public_key(value)


class SessionConfig(BaseModel):
    """Local identity configuration.

    ``pubkey`` is filled from the environment variable named by
    ``pubkey_env`` when it is not given explicitly. Leaving both empty
    starts an unauthenticated session.

    Attributes:
        pubkey_env: Environment variable holding the npub or hex key.
        pubkey: Normalized hex public key, or ``None``.
    """

    pubkey_env: str = Field(
        default=ENV_PUBLIC_KEY,
        min_length=1,
        description="Environment variable name for the local public key",
    )
    pubkey: str | None = Field(default=None, description="Local public key (npub or hex)")

    @model_validator(mode="before")
    @classmethod
    def _load_pubkey_from_env(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("pubkey") is None:
            env_var = data.get("pubkey_env", ENV_PUBLIC_KEY)
            data = {**data, "pubkey": load_public_key_from_env(env_var)}
        return data

    @field_validator("pubkey", mode="after")
    @classmethod
    def _normalize_pubkey(cls, v: str | None) -> str | None:
        return parse_public_key(v) if v else None
