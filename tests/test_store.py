"""
Unit Tests for the record store and seed loading.
"""

import json

import pytest

from leave_portal.core.exceptions import ConfigurationError
from leave_portal.leave.days import days
from leave_portal.leave.models import LeaveRecord
from leave_portal.leave.seed import DEFAULT_SEED_RECORDS, load_seed_records
from leave_portal.leave.store import RecordStore


@pytest.fixture
def seeded_store() -> RecordStore:
    return RecordStore.from_seed(load_seed_records())


class TestRecordStore:
    """Tests for RecordStore."""

    def test_seed_computes_day_counts(self, seeded_store):
        first = seeded_store.find("GSL25021372778", "1000000001")
        assert first is not None
        assert first.inclusive_day_count == 16

    def test_every_seed_pair_is_found(self, seeded_store):
        for raw in DEFAULT_SEED_RECORDS:
            record = seeded_store.find(raw["claimCode"], raw["nationalId"])
            assert record is not None
            assert record.claim_code == raw["claimCode"]
            assert record.national_id == raw["nationalId"]

    def test_find_requires_both_fields(self, seeded_store):
        assert seeded_store.find("GSL25021372778", "1000000002") is None
        assert seeded_store.find("GSL00000000000", "1000000001") is None

    def test_append_returns_stored_record(self, append_payload):
        store = RecordStore()
        record = store.append(append_payload)

        assert isinstance(record, LeaveRecord)
        assert record.inclusive_day_count == days("2025-03-01", "2025-03-10") == 10
        assert store.find("GSL99000000001", "2000000009") == record
        assert len(store) == 1

    def test_append_ignores_supplied_day_count(self, append_payload):
        store = RecordStore()
        record = store.append({**append_payload, "inclusiveDayCount": 999})
        assert record.inclusive_day_count == 10

    def test_malformed_range_is_stored_with_zero(self, append_payload):
        store = RecordStore()
        record = store.append({**append_payload, "startDate": "2025-03-10", "endDate": "2025-03-01"})
        assert record.inclusive_day_count == 0
        assert len(store) == 1

    def test_offset_beyond_calendar_is_stored_with_zero(self, append_payload):
        store = RecordStore()
        record = store.append({**append_payload, "startDate": "0001-01-01T00:00:00+05:00"})
        assert record.inclusive_day_count == 0
        assert len(store) == 1

    def test_duplicates_first_match_wins(self, append_payload):
        store = RecordStore()
        first = store.append({**append_payload, "holderName": "First"})
        store.append({**append_payload, "holderName": "Second"})

        assert len(store) == 2
        assert store.find(append_payload["claimCode"], append_payload["nationalId"]) == first

    def test_same_claim_code_different_identifier(self, append_payload):
        store = RecordStore()
        store.append(append_payload)
        other = store.append({**append_payload, "nationalId": "3000000000"})

        assert store.find(append_payload["claimCode"], "3000000000") == other

    def test_list_is_a_snapshot(self, seeded_store):
        snapshot = seeded_store.list()
        snapshot.clear()
        assert len(seeded_store.list()) == len(DEFAULT_SEED_RECORDS)

    def test_list_is_stable_without_append(self, seeded_store):
        assert seeded_store.list() == seeded_store.list()

    def test_list_preserves_insertion_order(self, append_payload):
        store = RecordStore()
        store.append({**append_payload, "claimCode": "AAAAAAAA1"})
        store.append({**append_payload, "claimCode": "BBBBBBBB2"})
        assert [r.claim_code for r in store.list()] == ["AAAAAAAA1", "BBBBBBBB2"]

    def test_records_are_immutable(self, seeded_store):
        record = seeded_store.list()[0]
        with pytest.raises(Exception):
            record.holder_name = "changed"

    def test_empty_seed(self):
        store = RecordStore.from_seed([])
        assert len(store) == 0
        assert store.list() == []


class TestSeedLoading:
    """Tests for load_seed_records()."""

    def test_default_seed_returns_copies(self):
        records = load_seed_records()
        records[0]["holderName"] = "mutated"
        assert DEFAULT_SEED_RECORDS[0]["holderName"] != "mutated"

    def test_loads_json_file(self, tmp_path, append_payload):
        seed = tmp_path / "seed.json"
        seed.write_text(json.dumps([{**append_payload, "inclusiveDayCount": 42}]), encoding="utf-8")

        records = load_seed_records(seed)

        assert records == [append_payload]

    def test_missing_file_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_seed_records(tmp_path / "missing.json")

    def test_non_array_is_configuration_error(self, tmp_path):
        seed = tmp_path / "seed.json"
        seed.write_text('{"claimCode": "x"}', encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_seed_records(seed)

    def test_missing_field_is_configuration_error(self, tmp_path, append_payload):
        seed = tmp_path / "seed.json"
        broken = dict(append_payload)
        del broken["jobTitle"]
        seed.write_text(json.dumps([broken]), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="jobTitle"):
            load_seed_records(seed)
