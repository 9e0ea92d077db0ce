"""
Local Overlay Store

In-process, append-only registry of encounters and medications created through
this backend. The EMR remains the system of record; these records are merged in
front of its results by the routers (see reconciliation.py).
"""

import copy
import logging
import re
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Plain ASCII integers only; "1_000", "--5" and "²" are not record ids
_RECORD_ID = re.compile(r"-?[0-9]+", re.ASCII)

# Attribute names a caller may use for the patient reference, in lookup order
PATIENT_REF_KEYS = ("patient", "patient_id", "patientId", "patientRef")

class RecordType(str, Enum):
    ENCOUNTER = "encounter"
    MEDICATION = "medication"

def normalize_record_id(value: Any) -> Optional[int]:
    """Canonical int form of a record id; None when it cannot be one"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _RECORD_ID.fullmatch(value.strip()):
        return int(value.strip())
    return None

def normalize_patient_ref(value: Any) -> Optional[str]:
    """Canonical string form of a patient reference (107, "107" and " 107 " match)"""
    if value is None or isinstance(value, bool):
        return None
    ref = str(value).strip()
    return ref or None

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

class _Collection:
    def __init__(self, offset: int):
        self.offset = offset
        self.next_id = offset
        self.records: List[Dict[str, Any]] = []

    def reset(self):
        self.next_id = self.offset
        self.records = []

class LocalDataStore:
    """Append-only store for locally authored encounters and medications.

    All mutations run under one lock so ids are never handed out twice, and a
    record only becomes visible once its id and ``created_at`` are set. Reads
    hand back deep copies; stored records can't be changed from outside.
    """

    def __init__(
        self,
        encounter_id_offset: int = 1000,
        medication_id_offset: int = 2000,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._collections: Dict[RecordType, _Collection] = {
            RecordType.ENCOUNTER: _Collection(encounter_id_offset),
            RecordType.MEDICATION: _Collection(medication_id_offset),
        }

    def _collection(self, record_type) -> _Collection:
        return self._collections[RecordType(record_type)]

    def add_record(self, record_type, data: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new record and return it with its assigned id"""
        record = copy.deepcopy(dict(data))

        patient_ref = None
        for key in PATIENT_REF_KEYS:
            patient_ref = normalize_patient_ref(record.get(key))
            if patient_ref is not None:
                break
        record.pop("patientId", None)
        record.pop("patientRef", None)
        record["patient"] = patient_ref
        record["patient_id"] = patient_ref

        with self._lock:
            collection = self._collection(record_type)
            record["id"] = collection.next_id
            collection.next_id += 1
            if not record.get("created_at"):
                record["created_at"] = self._clock().isoformat()
            collection.records.append(record)

        logger.debug(f"Stored local {RecordType(record_type).value} {record['id']} for patient {patient_ref}")
        return copy.deepcopy(record)

    def get_all(self, record_type) -> List[Dict[str, Any]]:
        """All records of a type, oldest first"""
        with self._lock:
            return copy.deepcopy(self._collection(record_type).records)

    def get_by_id(self, record_type, record_id: Any) -> Optional[Dict[str, Any]]:
        wanted = normalize_record_id(record_id)
        if wanted is None:
            return None
        with self._lock:
            for record in self._collection(record_type).records:
                if record["id"] == wanted:
                    return copy.deepcopy(record)
        return None

    def get_by_patient(self, record_type, patient_ref: Any) -> List[Dict[str, Any]]:
        wanted = normalize_patient_ref(patient_ref)
        if wanted is None:
            return []
        with self._lock:
            return [
                copy.deepcopy(record)
                for record in self._collection(record_type).records
                if normalize_patient_ref(record.get("patient")) == wanted
                or normalize_patient_ref(record.get("patient_id")) == wanted
            ]

    def count(self, record_type) -> int:
        with self._lock:
            return len(self._collection(record_type).records)

    def clear_all(self) -> None:
        """Reset both collections and counters (tests only)"""
        with self._lock:
            for collection in self._collections.values():
                collection.reset()

    # Encounters
    def add_encounter(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.add_record(RecordType.ENCOUNTER, data)

    def get_encounters(self) -> List[Dict[str, Any]]:
        return self.get_all(RecordType.ENCOUNTER)

    def get_encounter_by_id(self, encounter_id: Any) -> Optional[Dict[str, Any]]:
        return self.get_by_id(RecordType.ENCOUNTER, encounter_id)

    def get_encounters_by_patient(self, patient_ref: Any) -> List[Dict[str, Any]]:
        return self.get_by_patient(RecordType.ENCOUNTER, patient_ref)

    # Medications
    def add_medication(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.add_record(RecordType.MEDICATION, data)

    def get_medications(self) -> List[Dict[str, Any]]:
        return self.get_all(RecordType.MEDICATION)

    def get_medication_by_id(self, medication_id: Any) -> Optional[Dict[str, Any]]:
        return self.get_by_id(RecordType.MEDICATION, medication_id)

    def get_medications_by_patient(self, patient_ref: Any) -> List[Dict[str, Any]]:
        return self.get_by_patient(RecordType.MEDICATION, patient_ref)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                record_type.value: {
                    "count": len(collection.records),
                    "next_id": collection.next_id
                }
                for record_type, collection in self._collections.items()
            }
