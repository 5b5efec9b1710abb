"""NIP-02 contact (following) lists."""

from __future__ import annotations

from flowgazer.core.exceptions import ProtocolError
from flowgazer.models import Event, EventKind


def parse_contact_list(event: Event) -> list[str]:
    """Return followed public keys from a kind 3 event.

    Order of first appearance is kept and duplicates are dropped. Values
    that are not 64-char hex keys are skipped.

    Raises:
        ProtocolError: If the event is not kind 3.
    """
    if event.kind != EventKind.CONTACTS:
        raise ProtocolError(f"expected kind 3 contact list, got kind {event.kind}")
    seen: dict[str, None] = {}
    for pubkey in event.tag_values("p"):
        if len(pubkey) == 64 and all(c in "0123456789abcdef" for c in pubkey):
            seen.setdefault(pubkey)
    return list(seen)
