"""Unsigned event builders for the actions a feed client publishes.

Each function returns a ``nostr_sdk.EventBuilder``; signing and relay
publication belong to the external signer and transport.
"""

from __future__ import annotations

from nostr_sdk import EventBuilder, Kind, Tag

from flowgazer.models.constants import EventKind


def build_text_note(
    content: str,
    *,
    client: str | None = None,
    client_address: str | None = None,
    client_relay: str | None = None,
) -> EventBuilder:
    """Build a kind 1 note, optionally carrying a NIP-89 ``client`` tag.

    The client tag is what the client-only feed filter looks for.
    """
    tags = []
    if client:
        values = ["client", client]
        if client_address:
            values.append(client_address)
            if client_relay:
                values.append(client_relay)
        tags.append(Tag.parse(values))
    return EventBuilder(Kind(EventKind.TEXT_NOTE), content).tags(tags)


def build_reaction(target_event_id: str, target_pubkey: str, content: str = "+") -> EventBuilder:
    """Build a kind 7 reaction per NIP-25 (``e`` and ``p`` tags)."""
    tags = [
        Tag.parse(["e", target_event_id]),
        Tag.parse(["p", target_pubkey]),
    ]
    return EventBuilder(Kind(EventKind.REACTION), content or "+").tags(tags)


def build_contact_list(pubkeys: list[str]) -> EventBuilder:
    """Build a kind 3 following list per NIP-02."""
    tags = [Tag.parse(["p", pubkey]) for pubkey in dict.fromkeys(pubkeys)]
    return EventBuilder(Kind(EventKind.CONTACTS), "").tags(tags)
