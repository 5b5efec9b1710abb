"""Unit tests for feed.store module."""

import json
import logging

import pytest

from flowgazer.feed.session import Session
from flowgazer.feed.store import EventStore, ReactionCount
from flowgazer.models import EventKind, Profile
from tests.fixtures.events import ALICE, BOB, CAROL, ME, accept_all, event_id, make_event


# =============================================================================
# add_event
# =============================================================================


class TestAddEvent:
    def test_first_acceptance(self, store: EventStore):
        event = make_event(1)
        assert store.add_event(event) is True
        assert store.get_event(event.id) == event
        assert len(store) == 1

    def test_idempotent(self, store: EventStore):
        event = make_event(1, tags=[["p", BOB], ["e", event_id(9)]])
        store.add_event(event)
        assert store.add_event(event) is False
        assert len(store) == 1
        assert store.events_by_kind(1) == {event.id}
        assert store.events_by_author(ALICE) == {event.id}
        assert store.events_referencing_pubkey(BOB) == {event.id}
        assert store.events_referencing_event(event_id(9)) == {event.id}

    def test_signature_failure_rejected_without_state_change(self, caplog: pytest.LogCaptureFixture):
        store = EventStore(Session(ME), verifier=lambda e: False)
        event = make_event(1, tags=[["p", BOB]])
        with caplog.at_level(logging.WARNING, logger="flowgazer.store"):
            assert store.add_event(event) is False
        assert len(store) == 0
        assert store.events_by_kind(1) == frozenset()
        assert store.events_referencing_pubkey(BOB) == frozenset()
        assert any(r.getMessage() == "event_rejected_signature" for r in caplog.records)

    def test_verifier_receives_event(self):
        seen = []
        store = EventStore(Session(ME), verifier=lambda e: seen.append(e) or True)
        event = make_event(1)
        store.add_event(event)
        assert seen == [event]

    def test_duplicate_not_reverified(self):
        calls = []
        store = EventStore(Session(ME), verifier=lambda e: calls.append(e) or True)
        event = make_event(1)
        store.add_event(event)
        store.add_event(event)
        assert len(calls) == 1


# =============================================================================
# Indices
# =============================================================================


class TestIndices:
    def test_all_indices_updated(self, store: EventStore):
        note = make_event(1, pubkey=ALICE)
        repost = make_event(2, pubkey=BOB, kind=EventKind.REPOST, tags=[["e", note.id], ["p", ALICE]])
        store.add_event(note)
        store.add_event(repost)

        assert store.events_by_kind(EventKind.TEXT_NOTE) == {note.id}
        assert store.events_by_kind(EventKind.REPOST) == {repost.id}
        assert store.events_by_author(BOB) == {repost.id}
        assert store.events_referencing_event(note.id) == {repost.id}
        assert store.events_referencing_pubkey(ALICE) == {repost.id}

    def test_unknown_keys_return_empty(self, store: EventStore):
        assert store.events_by_kind(99) == frozenset()
        assert store.events_by_author(CAROL) == frozenset()

    def test_snapshots_are_detached(self, store: EventStore):
        store.add_event(make_event(1))
        snapshot = store.events_by_kind(1)
        store.add_event(make_event(2))
        assert len(snapshot) == 1
        assert len(store.events_by_kind(1)) == 2

    def test_get_events_preserves_order_and_skips_unknown(self, store: EventStore):
        a, b = make_event(1), make_event(2)
        store.add_event(a)
        store.add_event(b)
        assert store.get_events([b.id, event_id(99), a.id]) == [b, a]

    def test_get_all_events(self, store: EventStore):
        store.add_event(make_event(1))
        store.add_event(make_event(2))
        assert {e.id for e in store.get_all_events()} == {event_id(1), event_id(2)}

    def test_contains(self, store: EventStore):
        store.add_event(make_event(1))
        assert event_id(1) in store
        assert store.has_event(event_id(1))
        assert not store.has_event(event_id(2))


# =============================================================================
# Reactions
# =============================================================================


class TestReactions:
    def test_counters(self, store: EventStore):
        target = make_event(1, pubkey=ME)
        store.add_event(target)
        store.add_event(make_event(2, pubkey=ALICE, kind=EventKind.REACTION, tags=[["e", target.id]]))
        store.add_event(make_event(3, pubkey=BOB, kind=EventKind.REACTION, tags=[["e", target.id]]))
        store.add_event(make_event(4, pubkey=BOB, kind=EventKind.REPOST, tags=[["e", target.id]]))
        assert store.get_reaction_count(target.id) == ReactionCount(reposts=1, reactions=2)

    def test_unknown_target(self, store: EventStore):
        assert store.get_reaction_count(event_id(50)) == ReactionCount(0, 0)

    def test_liked_by_me(self, store: EventStore):
        store.add_event(make_event(2, pubkey=ME, kind=EventKind.REACTION, tags=[["e", event_id(1)]]))
        assert store.is_liked_by_me(event_id(1))

    def test_others_reaction_not_liked_by_me(self, store: EventStore):
        store.add_event(make_event(2, pubkey=ALICE, kind=EventKind.REACTION, tags=[["e", event_id(1)]]))
        assert not store.is_liked_by_me(event_id(1))

    def test_reaction_without_e_tag_ignored(self, store: EventStore):
        store.add_event(make_event(2, pubkey=ME, kind=EventKind.REACTION))
        assert store.get_stats()["total_events"] == 1
        assert not store.is_liked_by_me(event_id(1))

    def test_not_tracked_without_identity(self):
        store = EventStore(Session(), verifier=accept_all)
        store.add_event(make_event(2, pubkey=ME, kind=EventKind.REACTION, tags=[["e", event_id(1)]]))
        assert store.get_reaction_count(event_id(1)) == ReactionCount()
        assert not store.is_liked_by_me(event_id(1))

    def test_duplicate_reaction_counted_once(self, store: EventStore):
        reaction = make_event(2, pubkey=ALICE, kind=EventKind.REACTION, tags=[["e", event_id(1)]])
        store.add_event(reaction)
        store.add_event(reaction)
        assert store.get_reaction_count(event_id(1)).reactions == 1


# =============================================================================
# Profiles
# =============================================================================


class TestProfiles:
    def test_last_write_wins(self, store: EventStore):
        assert store.add_profile(ALICE, {"name": "new", "created_at": 10}) is True
        assert store.add_profile(ALICE, {"name": "old", "created_at": 5}) is False
        profile = store.get_profile(ALICE)
        assert profile.created_at == 10
        assert profile.name == "new"

    def test_equal_timestamp_discarded(self, store: EventStore):
        store.add_profile(ALICE, Profile(created_at=10, name="first"))
        assert store.add_profile(ALICE, Profile(created_at=10, name="second")) is False
        assert store.get_profile(ALICE).name == "first"

    def test_newer_replaces_wholesale(self, store: EventStore):
        store.add_profile(ALICE, Profile(created_at=1, name="al", about="bio"))
        store.add_profile(ALICE, Profile(created_at=2, display_name="Alice"))
        assert store.get_profile(ALICE) == Profile(created_at=2, display_name="Alice")

    def test_malformed_mapping_is_no_update(self, store: EventStore, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="flowgazer.store"):
            assert store.add_profile(ALICE, {"name": "al"}) is False
        assert not store.has_profile(ALICE)
        assert any(r.getMessage() == "profile_rejected_malformed" for r in caplog.records)

    def test_profile_event(self, store: EventStore):
        event = make_event(
            1, pubkey=BOB, kind=EventKind.SET_METADATA, created_at=7, content=json.dumps({"name": "bob"})
        )
        assert store.add_profile_event(event) is True
        assert store.get_profile(BOB) == Profile(created_at=7, name="bob")

    def test_malformed_profile_event(self, store: EventStore):
        event = make_event(1, pubkey=BOB, kind=EventKind.SET_METADATA, content="{broken")
        assert store.add_profile_event(event) is False
        assert store.get_profile(BOB) is None

    def test_display_name(self, store: EventStore):
        store.add_profile(ALICE, Profile(created_at=1, display_name="Alice"))
        assert store.get_display_name(ALICE) == "Alice"
        assert store.get_display_name(BOB) == BOB[:8]


# =============================================================================
# Following and lifecycle
# =============================================================================


class TestFollowing:
    def test_replaces_set(self, store: EventStore):
        store.set_following_list([ALICE, BOB])
        store.set_following_list([CAROL])
        assert store.following == {CAROL}
        assert store.is_following(CAROL)
        assert not store.is_following(ALICE)

    def test_snapshot(self, store: EventStore):
        store.set_following_list([ALICE])
        assert isinstance(store.following, frozenset)


class TestLifecycle:
    def test_stats(self, store: EventStore):
        store.add_event(make_event(1))
        store.add_event(make_event(2, kind=EventKind.REPOST))
        store.add_profile(ALICE, Profile(created_at=1))
        store.set_following_list([BOB])
        assert store.get_stats() == {
            "total_events": 2,
            "profiles": 1,
            "following": 1,
            "kind_counts": {1: 1, 6: 1},
        }

    def test_clear(self, store: EventStore):
        store.add_event(make_event(1, tags=[["p", BOB]]))
        store.add_event(make_event(2, pubkey=ME, kind=EventKind.REACTION, tags=[["e", event_id(1)]]))
        store.add_profile(ALICE, Profile(created_at=1))
        store.set_following_list([BOB])
        store.clear()

        assert len(store) == 0
        assert store.get_profile(ALICE) is None
        assert store.following == frozenset()
        assert store.events_referencing_pubkey(BOB) == frozenset()
        assert store.get_reaction_count(event_id(1)) == ReactionCount()
        assert not store.is_liked_by_me(event_id(1))
        assert store.add_event(make_event(1)) is True
