"""Adverse drug reaction report routes"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel

from adr_store import ADRReportStore
from dependencies import get_adr_store, require_bearer_token

router = APIRouter(
    prefix="/api/adr",
    tags=["adr"],
    dependencies=[Depends(require_bearer_token)]
)

class ADRReportRequest(BaseModel):
    patientId: Optional[Union[int, str]] = None
    patientName: Optional[str] = None
    suspectedDrug: Optional[str] = None
    reaction: Optional[str] = None
    onset: Optional[str] = None
    severity: Optional[str] = None
    outcome: Optional[str] = None
    seriousness: Optional[str] = None
    notes: Optional[str] = None
    reportedBy: Optional[str] = None

@router.get("/")
async def list_reports(store: ADRReportStore = Depends(get_adr_store)):
    reports = store.list()
    return {
        "status": "success",
        "count": len(reports),
        "reports": reports
    }

@router.post("/", status_code=201)
async def create_report(request: ADRReportRequest, store: ADRReportStore = Depends(get_adr_store)):
    report = store.create(request.model_dump())
    return {
        "status": "success",
        "message": "ADR report created successfully",
        "report": report
    }

@router.get("/stats/summary")
async def report_statistics(store: ADRReportStore = Depends(get_adr_store)):
    return {
        "status": "success",
        "statistics": store.statistics(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@router.get("/{report_id}")
async def get_report(report_id: str, store: ADRReportStore = Depends(get_adr_store)):
    return {
        "status": "success",
        "report": store.get(report_id)
    }

@router.patch("/{report_id}")
async def update_report(
    report_id: str,
    changes: Dict[str, Any] = Body(...),
    store: ADRReportStore = Depends(get_adr_store)
):
    return {
        "status": "success",
        "message": "ADR report updated successfully",
        "report": store.update(report_id, changes)
    }

@router.delete("/{report_id}", status_code=204)
async def delete_report(report_id: str, store: ADRReportStore = Depends(get_adr_store)):
    store.delete(report_id)
    return Response(status_code=204)
