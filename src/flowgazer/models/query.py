"""Relay query descriptor (NIP-01 ``REQ`` filter).

[QueryFilter][flowgazer.models.query.QueryFilter] is what the feed core hands
to the transport collaborator when it needs more events: the pagination
builder, the main timeline builder and the per-tab history builders in
[flowgazer.feed.queries][] all return instances of it.

Examples:
    ```python
    query = QueryFilter(kinds=(1, 6), until=1_700_000_000, limit=50)
    query.to_dict()
    # {'kinds': [1, 6], 'until': 1700000000, 'limit': 50}
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nostr_sdk import (
    Alphabet,
    EventId,
    Filter,
    Kind,
    PublicKey,
    SingleLetterTag,
    Timestamp,
)

from ._validation import validate_hex, validate_kind, validate_timestamp


@dataclass(frozen=True, slots=True)
class QueryFilter:
    """Immutable subscription filter.

    Only fields that are not ``None`` appear in the wire form. Sequences are
    stored as tuples; ``to_dict`` turns them back into lists.

    Attributes:
        ids: Event ids to match.
        kinds: Event kinds to match.
        authors: Author public keys to match.
        e_tags: Values of ``#e`` (referenced event ids).
        p_tags: Values of ``#p`` (referenced public keys).
        since: Inclusive lower ``created_at`` bound.
        until: Inclusive upper ``created_at`` bound.
        limit: Maximum number of stored events the relay should return.
    """

    ids: tuple[str, ...] | None = None
    kinds: tuple[int, ...] | None = None
    authors: tuple[str, ...] | None = None
    e_tags: tuple[str, ...] | None = None
    p_tags: tuple[str, ...] | None = None
    since: int | None = None
    until: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        for name in ("ids", "kinds", "authors", "e_tags", "p_tags"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(value))
        for kind in self.kinds or ():
            validate_kind(kind, "kinds")
        if self.kinds is not None:
            object.__setattr__(self, "kinds", tuple(int(k) for k in self.kinds))
        for key in (*(self.authors or ()), *(self.p_tags or ())):
            validate_hex(key, "pubkey")
        for event_id in (*(self.ids or ()), *(self.e_tags or ())):
            validate_hex(event_id, "event id")
        for name in ("since", "until", "limit"):
            value = getattr(self, name)
            if value is not None:
                validate_timestamp(value, name)

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 filter object."""
        result: dict[str, Any] = {}
        if self.ids is not None:
            result["ids"] = list(self.ids)
        if self.kinds is not None:
            result["kinds"] = list(self.kinds)
        if self.authors is not None:
            result["authors"] = list(self.authors)
        if self.e_tags is not None:
            result["#e"] = list(self.e_tags)
        if self.p_tags is not None:
            result["#p"] = list(self.p_tags)
        if self.since is not None:
            result["since"] = self.since
        if self.until is not None:
            result["until"] = self.until
        if self.limit is not None:
            result["limit"] = self.limit
        return result

    def to_nostr_filter(self) -> Filter:
        """Build the equivalent ``nostr_sdk.Filter`` for SDK-based transports."""
        f = Filter()
        if self.ids is not None:
            f = f.ids([EventId.parse(i) for i in self.ids])
        if self.kinds is not None:
            f = f.kinds([Kind(k) for k in self.kinds])
        if self.authors is not None:
            f = f.authors([PublicKey.parse(a) for a in self.authors])
        if self.since is not None:
            f = f.since(Timestamp.from_secs(self.since))
        if self.until is not None:
            f = f.until(Timestamp.from_secs(self.until))
        if self.limit is not None:
            f = f.limit(self.limit)

        for letter, values in (("E", self.e_tags), ("P", self.p_tags)):
            if not values:
                continue
            tag = SingleLetterTag.lowercase(getattr(Alphabet, letter))
            for value in values:
                f = f.custom_tag(tag, value)
        return f
