from datetime import datetime, timedelta, timezone

import pytest

from adr_store import ADRReportStore
from exceptions import InvalidRequest, NotFound

class MovingClock:
    def __init__(self):
        self.now = datetime(2025, 3, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

def _report(**overrides):
    data = {"patientId": 107, "suspectedDrug": "Amoxicillin", "reaction": "Rash"}
    data.update(overrides)
    return data

class TestADRReportStore:
    """Test ADR report CRUD and statistics"""

    def setup_method(self):
        self.clock = MovingClock()
        self.store = ADRReportStore(clock=self.clock)

    def test_create_applies_defaults(self):
        report = self.store.create(_report())

        assert report["id"] == 1
        assert report["patientName"] == "Patient 107"
        assert report["severity"] == "Unknown"
        assert report["seriousness"] == "Non-serious"
        assert report["reportedBy"] == "Unknown Doctor"
        assert report["status"] == "Submitted"
        assert report["onset"] is None

    def test_create_requires_fields(self):
        with pytest.raises(InvalidRequest) as excinfo:
            self.store.create({"patientId": 107, "suspectedDrug": "Amoxicillin"})
        assert excinfo.value.details["missing"] == ["reaction"]

    def test_list_newest_first(self):
        self.store.create(_report(reaction="Rash"))
        self.clock.now += timedelta(minutes=5)
        self.store.create(_report(reaction="Nausea"))

        assert [r["reaction"] for r in self.store.list()] == ["Nausea", "Rash"]

    def test_get_missing(self):
        with pytest.raises(NotFound):
            self.store.get(42)
        with pytest.raises(NotFound):
            self.store.get("abc")

    def test_update_merges_and_keeps_id(self):
        created = self.store.create(_report())
        self.clock.now += timedelta(hours=1)

        updated = self.store.update(created["id"], {"severity": "Severe", "id": 99})

        assert updated["id"] == created["id"]
        assert updated["severity"] == "Severe"
        assert updated["updatedAt"] != created["updatedAt"]
        assert updated["createdAt"] == created["createdAt"]

    def test_delete(self):
        created = self.store.create(_report())
        self.store.delete(created["id"])

        assert self.store.count() == 0
        with pytest.raises(NotFound):
            self.store.delete(created["id"])

    def test_statistics(self):
        self.store.create(_report(severity="Severe", seriousness="Serious"))
        self.store.create(_report(severity="Mild"))
        self.clock.now += timedelta(days=45)
        self.store.create(_report(severity="Mild"))

        stats = self.store.statistics()

        assert stats["totalReports"] == 3
        assert stats["seriousReports"] == 1
        assert stats["recentReports"] == 1
        assert stats["bySeverity"] == {"Severe": 1, "Mild": 2}
