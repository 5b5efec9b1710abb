"""NIP helpers used at the edges of the feed core.

Attributes:
    parse_event: NIP-01 wire payload to [Event][flowgazer.models.event.Event].
    verify_signature: Default ``nostr_sdk`` signature verifier.
    parse_profile: Kind 0 metadata to [Profile][flowgazer.models.profile.Profile].
    parse_contact_list: Kind 3 following list to public keys.
    build_text_note, build_reaction, build_contact_list: Unsigned builders.
"""

from .event_builders import build_contact_list, build_reaction, build_text_note
from .nip01 import parse_event, parse_profile, profile_from_dict, verify_signature
from .nip02 import parse_contact_list
from .parsing import FieldSpec, parse_fields


__all__ = [
    "FieldSpec",
    "build_contact_list",
    "build_reaction",
    "build_text_note",
    "parse_contact_list",
    "parse_event",
    "parse_fields",
    "parse_profile",
    "profile_from_dict",
    "verify_signature",
]
