import threading
from datetime import datetime, timezone

import pytest

from local_data import LocalDataStore, RecordType, normalize_patient_ref, normalize_record_id

FIXED_NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)

class TestNormalization:
    """Test id and patient reference normalization"""

    def test_record_id_accepts_int_and_numeric_string(self):
        assert normalize_record_id(1000) == 1000
        assert normalize_record_id("1000") == 1000
        assert normalize_record_id(" 1001 ") == 1001

    def test_record_id_rejects_non_numeric(self):
        assert normalize_record_id("abc") is None
        assert normalize_record_id(None) is None
        assert normalize_record_id(True) is None

    def test_patient_ref_is_canonical_string(self):
        assert normalize_patient_ref(107) == "107"
        assert normalize_patient_ref(" 107 ") == "107"
        assert normalize_patient_ref("") is None
        assert normalize_patient_ref(None) is None

class TestAddRecord:
    """Test appending to the overlay store"""

    def setup_method(self):
        self.store = LocalDataStore(clock=lambda: FIXED_NOW)

    def test_first_ids_start_at_offsets(self):
        """A fresh store hands out 1000 for encounters and 2000 for medications"""
        encounter = self.store.add_encounter({"patientRef": 42, "diagnosis": "malaria"})
        other = self.store.add_encounter({"patientRef": 43, "diagnosis": "typhoid"})
        medication = self.store.add_medication({"patient": 42, "name": "Coartem"})

        assert encounter["id"] == 1000
        assert other["id"] == 1001
        assert medication["id"] == 2000

    def test_patient_ref_written_under_both_names(self):
        record = self.store.add_encounter({"patientId": 42, "diagnosis": "malaria"})

        assert record["patient"] == "42"
        assert record["patient_id"] == "42"
        assert "patientId" not in record

    def test_created_at_is_stamped(self):
        record = self.store.add_encounter({"patient": 1})
        assert record["created_at"] == FIXED_NOW.isoformat()

    def test_supplied_created_at_is_kept(self):
        record = self.store.add_encounter({"patient": 1, "created_at": "2024-12-31T00:00:00+00:00"})
        assert record["created_at"] == "2024-12-31T00:00:00+00:00"

    def test_caller_dict_is_not_mutated(self):
        data = {"patientId": 5, "diagnosis": "asthma"}
        self.store.add_encounter(data)
        assert data == {"patientId": 5, "diagnosis": "asthma"}

    def test_unknown_record_type_raises(self):
        with pytest.raises(ValueError):
            self.store.add_record("appointment", {"patient": 1})

class TestReads:
    """Test get_all / get_by_id / get_by_patient"""

    def setup_method(self):
        self.store = LocalDataStore()
        self.first = self.store.add_encounter({"patient": 7, "diagnosis": "malaria"})
        self.second = self.store.add_encounter({"patient_id": "8", "diagnosis": "asthma"})
        self.third = self.store.add_encounter({"patient": "7", "diagnosis": "typhoid"})

    def test_get_all_in_insertion_order(self):
        ids = [r["id"] for r in self.store.get_all(RecordType.ENCOUNTER)]
        assert ids == [1000, 1001, 1002]

    def test_get_by_id_matches_string_and_int(self):
        assert self.store.get_encounter_by_id(1001)["diagnosis"] == "asthma"
        assert self.store.get_encounter_by_id("1001")["diagnosis"] == "asthma"

    def test_get_by_id_missing(self):
        assert self.store.get_encounter_by_id(9999) is None
        assert self.store.get_encounter_by_id("not-an-id") is None
        assert self.store.get_encounter_by_id("--5") is None
        assert self.store.get_encounter_by_id("²") is None
        assert self.store.get_medication_by_id("2_000") is None

    def test_get_by_patient_matches_by_value(self):
        """107 and "107" refer to the same patient"""
        results = self.store.get_encounters_by_patient(7)
        assert [r["diagnosis"] for r in results] == ["malaria", "typhoid"]
        assert len(self.store.get_encounters_by_patient("8")) == 1

    def test_get_by_patient_unknown(self):
        assert self.store.get_encounters_by_patient(99) == []

    def test_types_are_separate(self):
        assert self.store.get_medications() == []
        assert self.store.get_medications_by_patient(7) == []

    def test_reads_return_copies(self):
        record = self.store.get_encounter_by_id(1000)
        record["diagnosis"] = "changed"
        self.store.get_encounters()[0]["diagnosis"] = "changed again"

        assert self.store.get_encounter_by_id(1000)["diagnosis"] == "malaria"

    def test_clear_all_resets_counters(self):
        self.store.clear_all()
        assert self.store.count(RecordType.ENCOUNTER) == 0
        assert self.store.add_encounter({"patient": 1})["id"] == 1000

    def test_stats(self):
        stats = self.store.get_stats()
        assert stats["encounter"] == {"count": 3, "next_id": 1003}
        assert stats["medication"] == {"count": 0, "next_id": 2000}

class TestConcurrency:
    """Concurrent appends never reuse an id"""

    def test_parallel_adds_produce_unique_ids(self):
        store = LocalDataStore()
        ids = []
        ids_lock = threading.Lock()

        def worker(n):
            for i in range(50):
                record = store.add_encounter({"patient": n, "seq": i})
                with ids_lock:
                    ids.append(record["id"])

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 400
        assert len(set(ids)) == 400
        assert sorted(ids) == list(range(1000, 1400))
        assert store.count("encounter") == 400
