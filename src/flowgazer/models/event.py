"""
Immutable Nostr event with wire-format conversion.

[Event][flowgazer.models.event.Event] is the unit stored by the
[EventStore][flowgazer.feed.store.EventStore] and routed by the
[FeedRouter][flowgazer.feed.router.FeedRouter]. It mirrors the NIP-01 JSON
shape field for field, so ``Event.from_dict(payload).to_dict() == payload``
holds for every valid payload.

Conversion to and from ``nostr_sdk.Event`` is available for the signature
verifier and for callers that receive SDK objects from a relay client.

See Also:
    [flowgazer.nips.nip01][]: Signature verification and wire parsing that
        wraps decode errors in
        [ProtocolError][flowgazer.core.exceptions.ProtocolError].
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from nostr_sdk import Event as NostrEvent

from ._validation import (
    freeze_tags,
    validate_hex,
    validate_instance,
    validate_kind,
    validate_tags,
    validate_timestamp,
)
from .constants import EventKind


_WIRE_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable Nostr event.

    Validation is performed eagerly at construction time: ids and keys must
    be 64-char lowercase hex, the signature 128-char hex, the kind within
    ``0..65535`` and every tag a non-empty list of strings. Tags are frozen
    into nested tuples.

    Attributes:
        id: Event id (SHA-256 of the serialized event, hex).
        pubkey: Author public key (hex).
        created_at: Unix timestamp in seconds.
        kind: Integer event kind.
        tags: Ordered tag tuples, e.g. ``(("e", "<id>"), ("p", "<pubkey>"))``.
        content: Raw content string.
        sig: Schnorr signature (hex).

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field has the right type but an invalid value.

    Examples:
        ```python
        event = Event.from_dict(payload)
        event.first_tag_value("e")  # first referenced event id or None
        event.to_dict() == payload  # True
        ```
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str

    def __post_init__(self) -> None:
        validate_hex(self.id, "id")
        validate_hex(self.pubkey, "pubkey")
        validate_timestamp(self.created_at, "created_at")
        validate_kind(self.kind, "kind")
        validate_tags(self.tags, "tags")
        validate_instance(self.content, str, "content")
        validate_hex(self.sig, "sig", length=128)
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    # -- tag helpers ---------------------------------------------------------

    def tag_values(self, name: str) -> tuple[str, ...]:
        """Return the first value of every tag called *name*, in tag order."""
        return tuple(tag[1] for tag in self.tags if tag[0] == name and len(tag) > 1 and tag[1])

    def first_tag_value(self, name: str) -> str | None:
        """Return the first value of the first tag called *name*, if any."""
        values = self.tag_values(name)
        return values[0] if values else None

    def has_tag(self, name: str, value: str) -> bool:
        return value in self.tag_values(name)

    @property
    def is_note(self) -> bool:
        return self.kind == EventKind.TEXT_NOTE

    # -- wire format ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object for this event."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """Build an event from a NIP-01 JSON object.

        Raises:
            ValueError: If a required field is missing or invalid.
            TypeError: If a field has the wrong type.
        """
        missing = [name for name in _WIRE_FIELDS if name not in data]
        if missing:
            raise ValueError(f"event is missing fields: {', '.join(missing)}")
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=data["created_at"],
            kind=data["kind"],
            tags=data["tags"],
            content=data["content"],
            sig=data["sig"],
        )

    @classmethod
    def from_json(cls, raw: str) -> Event:
        """Parse a NIP-01 JSON string. ``json.JSONDecodeError`` is a ``ValueError``."""
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("event JSON must be an object")
        return cls.from_dict(data)

    # -- nostr_sdk interop ---------------------------------------------------

    @classmethod
    def from_nostr(cls, inner: NostrEvent) -> Event:
        """Copy a ``nostr_sdk.Event`` into an [Event][flowgazer.models.event.Event]."""
        return cls(
            id=inner.id().to_hex(),
            pubkey=inner.author().to_hex(),
            created_at=inner.created_at().as_secs(),
            kind=inner.kind().as_u16(),
            tags=[list(tag.as_vec()) for tag in inner.tags().to_vec()],
            content=inner.content(),
            sig=inner.signature(),
        )

    def to_nostr(self) -> NostrEvent:
        """Rebuild the ``nostr_sdk.Event`` (used for signature verification)."""
        return NostrEvent.from_json(self.to_json())
