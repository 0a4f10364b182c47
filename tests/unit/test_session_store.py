# ============================================================================
# tests/unit/test_session_store.py
# ============================================================================
"""
Tests for the in-memory session store
"""

import dataclasses
import pytest

from radiology_intake.core.session_store import SessionStore


class TestSessionStore:

    def test_starts_empty(self):
        store = SessionStore()

        assert len(store) == 0
        assert not store
        assert store.records == ()

    def test_append_preserves_order(self, make_record):
        store = SessionStore()
        first, second = make_record("A"), make_record("B")

        store.append(first)
        store.append(second)

        assert store.records == (first, second)
        assert [r.key_id for r in store] == ["A", "B"]

    def test_no_deduplication(self, make_record):
        store = SessionStore()
        record = make_record("A")

        store.append(record)
        store.append(record)

        assert len(store) == 2

    def test_append_many(self, make_record):
        store = SessionStore()
        store.append(make_record("A"))

        store.append_many([make_record("B"), make_record("C")])

        assert [r.key_id for r in store.records] == ["A", "B", "C"]

    def test_append_many_accepts_generators(self, make_record):
        store = SessionStore()

        store.append_many(make_record(k) for k in "XYZ")

        assert len(store) == 3

    def test_reset(self, make_record):
        store = SessionStore()
        store.append_many([make_record("A"), make_record("B")])

        store.reset()

        assert len(store) == 0
        assert store.records == ()

    def test_records_is_a_snapshot(self, make_record):
        store = SessionStore()
        store.append(make_record("A"))
        snapshot = store.records

        store.append(make_record("B"))

        assert len(snapshot) == 1

    def test_records_are_immutable(self, make_record):
        record = make_record("A")

        with pytest.raises(dataclasses.FrozenInstanceError):
            record.key_id = "changed"
