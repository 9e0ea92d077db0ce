"""
Adverse drug reaction (ADR) reports, kept in memory for the pharmacovigilance
screens. Unlike the local overlay store these reports can be edited and deleted.
"""

import copy
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from exceptions import InvalidRequest, NotFound

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("patientId", "suspectedDrug", "reaction")

# Fields a PATCH may not touch
PROTECTED_FIELDS = ("id", "createdAt")

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

class ADRReportStore:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._reports: List[Dict[str, Any]] = []
        self._next_id = 1

    def _find_index(self, report_id: Any) -> int:
        try:
            wanted = int(report_id)
        except (TypeError, ValueError):
            wanted = None
        for index, report in enumerate(self._reports):
            if report["id"] == wanted:
                return index
        raise NotFound("ADR report not found", error_code="ADR_NOT_FOUND", details={"id": report_id})

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise InvalidRequest(
                "Required fields: patientId, suspectedDrug, reaction",
                error_code="ADR_FIELDS_REQUIRED",
                details={"missing": missing}
            )

        now = self._clock().isoformat()
        with self._lock:
            report = {
                "id": self._next_id,
                "patientId": data["patientId"],
                "patientName": data.get("patientName") or f"Patient {data['patientId']}",
                "suspectedDrug": data["suspectedDrug"],
                "reaction": data["reaction"],
                "onset": data.get("onset") or None,
                "severity": data.get("severity") or "Unknown",
                "outcome": data.get("outcome") or "Unknown",
                "seriousness": data.get("seriousness") or "Non-serious",
                "notes": data.get("notes") or "",
                "reportedBy": data.get("reportedBy") or "Unknown Doctor",
                "status": "Submitted",
                "createdAt": now,
                "updatedAt": now,
            }
            self._next_id += 1
            self._reports.append(report)

        logger.info(f"ADR report {report['id']} created for patient {report['patientId']} ({report['suspectedDrug']})")
        return copy.deepcopy(report)

    def list(self) -> List[Dict[str, Any]]:
        """Newest first"""
        with self._lock:
            reports = copy.deepcopy(self._reports)
        return sorted(reports, key=lambda r: (r["createdAt"], r["id"]), reverse=True)

    def get(self, report_id: Any) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._reports[self._find_index(report_id)])

    def update(self, report_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            index = self._find_index(report_id)
            report = self._reports[index]
            report.update({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
            report["updatedAt"] = self._clock().isoformat()
            return copy.deepcopy(report)

    def delete(self, report_id: Any) -> None:
        with self._lock:
            index = self._find_index(report_id)
            del self._reports[index]
        logger.info(f"ADR report {report_id} deleted")

    def count(self) -> int:
        with self._lock:
            return len(self._reports)

    def statistics(self) -> Dict[str, Any]:
        now = self._clock()
        thirty_days_ago = now - timedelta(days=30)
        with self._lock:
            reports = copy.deepcopy(self._reports)

        by_severity: Dict[str, int] = {}
        for report in reports:
            by_severity[report["severity"]] = by_severity.get(report["severity"], 0) + 1

        return {
            "totalReports": len(reports),
            "seriousReports": sum(1 for r in reports if r["seriousness"] == "Serious"),
            "recentReports": sum(
                1 for r in reports
                if datetime.fromisoformat(r["createdAt"]) >= thirty_days_ago
            ),
            "bySeverity": by_severity,
        }
