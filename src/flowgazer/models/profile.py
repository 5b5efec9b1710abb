"""Author profile model (NIP-01 kind 0 metadata).

Profiles are replaced wholesale by newer metadata events; the
[EventStore][flowgazer.feed.store.EventStore] keeps only the one with the
greatest ``created_at``. Parsing of raw metadata JSON lives in
[flowgazer.nips.nip01][].
"""

from __future__ import annotations

from dataclasses import dataclass

from ._validation import validate_timestamp


@dataclass(frozen=True, slots=True)
class Profile:
    """Immutable snapshot of one author's metadata.

    Attributes:
        created_at: Timestamp of the metadata event this snapshot came from.
        name: Short handle.
        display_name: Longer display name.
        about: Free-form biography.
        picture: Avatar URL.
        nip05: NIP-05 internet identifier.
    """

    created_at: int
    name: str | None = None
    display_name: str | None = None
    about: str | None = None
    picture: str | None = None
    nip05: str | None = None

    def __post_init__(self) -> None:
        validate_timestamp(self.created_at, "created_at")

    def label(self) -> str | None:
        """Best human-readable name, ``name`` first then ``display_name``."""
        return self.name or self.display_name or None
