"""
NIP-01 helpers: wire parsing, signature verification and profile metadata.

The feed core treats signature checking as an external concern; the
default verifier here delegates to ``nostr_sdk`` so that the
[EventStore][flowgazer.feed.store.EventStore] can fail closed without
knowing anything about Schnorr signatures.

See Also:
    [Event][flowgazer.models.event.Event]: The model these helpers produce
        and consume.
    [Profile][flowgazer.models.profile.Profile]: Result of
        [parse_profile()][flowgazer.nips.nip01.parse_profile].
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from nostr_sdk import NostrSdkError

from flowgazer.core.exceptions import ProtocolError
from flowgazer.models import Event, EventKind, Profile

from .parsing import FieldSpec, parse_fields


logger = logging.getLogger(__name__)

_PROFILE_SPEC = FieldSpec(
    str_fields=frozenset({"name", "display_name", "about", "picture", "nip05"}),
    aliases={"displayName": "display_name"},
)


def parse_event(payload: str | dict[str, Any]) -> Event:
    """Parse a relay payload (JSON text or decoded object) into an Event.

    Raises:
        ProtocolError: If the payload is not a valid NIP-01 event.
    """
    try:
        if isinstance(payload, str):
            return Event.from_json(payload)
        return Event.from_dict(payload)
    except (ValueError, TypeError) as e:
        raise ProtocolError(f"malformed event: {e}") from e


def verify_signature(event: Event) -> bool:
    """Check the event id and Schnorr signature with ``nostr_sdk``.

    Returns False instead of raising when the SDK refuses the payload, so
    callers can treat every failure as a plain rejection.
    """
    try:
        return bool(event.to_nostr().verify())
    except NostrSdkError as e:
        logger.debug("signature_check_failed event_id=%s error=%s", event.id, e)
        return False


def profile_from_dict(data: Mapping[str, Any], created_at: int | None = None) -> Profile:
    """Build a Profile from decoded metadata.

    ``created_at`` defaults to the ``created_at`` key of *data*, which is
    how controllers that merge the event timestamp into the metadata object
    hand profiles over.

    Raises:
        ProtocolError: If *data* is not a mapping or carries no valid timestamp.
    """
    if not isinstance(data, Mapping):
        raise ProtocolError(f"metadata must be a JSON object, got {type(data).__name__}")
    if created_at is None:
        created_at = data.get("created_at")
    if isinstance(created_at, bool) or not isinstance(created_at, int) or created_at < 0:
        raise ProtocolError(f"metadata has no valid created_at: {created_at!r}")
    return Profile(created_at=created_at, **parse_fields(dict(data), _PROFILE_SPEC))


def parse_profile(event: Event) -> Profile:
    """Build a Profile from a kind 0 metadata event.

    Unknown keys and wrongly-typed values are dropped; ``displayName`` is
    accepted as an alias of ``display_name``.

    Raises:
        ProtocolError: If the event is not kind 0 or its content is not a
            JSON object.
    """
    if event.kind != EventKind.SET_METADATA:
        raise ProtocolError(f"expected kind 0 metadata, got kind {event.kind}")
    try:
        data = json.loads(event.content)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"metadata content is not JSON: {e}") from e
    return profile_from_dict(data, created_at=event.created_at)
