"""Unit tests for nips.nip01 module."""

import json
from unittest.mock import MagicMock, patch

import pytest

from flowgazer.core.exceptions import ProtocolError
from flowgazer.models import EventKind, Profile
from flowgazer.nips.nip01 import parse_event, parse_profile, profile_from_dict, verify_signature
from tests.fixtures.events import make_event


class SdkError(Exception):
    """Stand-in for nostr_sdk.NostrSdkError."""


# =============================================================================
# parse_event
# =============================================================================


class TestParseEvent:
    def test_from_json_text(self):
        event = make_event(1)
        assert parse_event(event.to_json()) == event

    def test_from_dict(self):
        event = make_event(1)
        assert parse_event(event.to_dict()) == event

    def test_malformed_json(self):
        with pytest.raises(ProtocolError, match="malformed event"):
            parse_event("{oops")

    def test_missing_fields(self):
        with pytest.raises(ProtocolError):
            parse_event({"id": "a" * 64})

    def test_wrong_type(self):
        payload = make_event(1).to_dict()
        payload["created_at"] = "yesterday"
        with pytest.raises(ProtocolError):
            parse_event(payload)


# =============================================================================
# verify_signature
# =============================================================================


class TestVerifySignature:
    def test_valid(self):
        event = make_event(1)
        with patch.object(type(event), "to_nostr") as mock_to_nostr:
            mock_to_nostr.return_value.verify.return_value = True
            assert verify_signature(event) is True

    def test_invalid(self):
        event = make_event(1)
        with patch.object(type(event), "to_nostr") as mock_to_nostr:
            mock_to_nostr.return_value.verify.return_value = False
            assert verify_signature(event) is False

    def test_sdk_error_is_rejection(self):
        event = make_event(1)
        inner = MagicMock()
        inner.verify.side_effect = SdkError("bad sig")
        with (
            patch.object(type(event), "to_nostr", return_value=inner),
            patch("flowgazer.nips.nip01.NostrSdkError", SdkError),
        ):
            assert verify_signature(event) is False


# =============================================================================
# Profiles
# =============================================================================


class TestProfileFromDict:
    def test_created_at_from_data(self):
        profile = profile_from_dict({"name": "al", "created_at": 10})
        assert profile == Profile(created_at=10, name="al")

    def test_explicit_created_at_wins(self):
        assert profile_from_dict({"created_at": 10}, created_at=20).created_at == 20

    def test_not_a_mapping(self):
        with pytest.raises(ProtocolError, match="JSON object"):
            profile_from_dict(["name"])  # type: ignore[arg-type]

    @pytest.mark.parametrize("created_at", [None, "10", -1, True])
    def test_bad_created_at(self, created_at):
        with pytest.raises(ProtocolError, match="created_at"):
            profile_from_dict({"name": "al", "created_at": created_at})


class TestParseProfile:
    def test_valid_metadata(self):
        content = json.dumps(
            {"name": "al", "displayName": "Alice", "picture": "https://x/a.png", "lud16": "zap"}
        )
        event = make_event(1, kind=EventKind.SET_METADATA, created_at=42, content=content)
        assert parse_profile(event) == Profile(
            created_at=42, name="al", display_name="Alice", picture="https://x/a.png"
        )

    def test_wrong_kind(self):
        with pytest.raises(ProtocolError, match="kind 0"):
            parse_profile(make_event(1, kind=EventKind.TEXT_NOTE))

    def test_invalid_json(self):
        event = make_event(1, kind=EventKind.SET_METADATA, content="not json")
        with pytest.raises(ProtocolError, match="not JSON"):
            parse_profile(event)

    def test_json_array(self):
        event = make_event(1, kind=EventKind.SET_METADATA, content="[]")
        with pytest.raises(ProtocolError):
            parse_profile(event)
