"""Medication safety routes"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clinical_ai import ClinicalAIService
from dependencies import get_ai_service, get_emr_client, get_local_store, require_bearer_token
from exceptions import InvalidRequest
from http_client import EMRClient
from local_data import LocalDataStore
from reconciliation import merge_with_remote, remote_results

router = APIRouter(
    prefix="/api/safety",
    tags=["safety"],
    dependencies=[Depends(require_bearer_token)]
)

class InteractionsRequest(BaseModel):
    medications: Optional[List[Dict[str, Any]]] = None

@router.post("/check/{patient_id}")
async def check_patient_safety(
    patient_id: str,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client),
    ai: ClinicalAIService = Depends(get_ai_service)
):
    patient = await emr.get(f"/v1/patients/{patient_id}") or {}
    merged = await merge_with_remote(
        store.get_medications_by_patient(patient_id),
        lambda: emr.get(f"/v1/patients/{patient_id}/medications"),
        resource="patient medications"
    )
    medications = merged["results"]

    analysis = await ai.analyze_medication_safety(patient, medications)
    return {
        "status": "success",
        "patient": {
            "id": patient.get("id"),
            "name": f"{patient.get('first_name', '')} {patient.get('last_name', '')}".strip(),
            "age": patient.get("age"),
            "gender": patient.get("gender")
        },
        "medicationCount": len(medications),
        **analysis
    }

@router.post("/interactions")
async def check_interactions(request: InteractionsRequest, ai: ClinicalAIService = Depends(get_ai_service)):
    if not request.medications:
        raise InvalidRequest("Please provide an array of medications", error_code="MEDICATIONS_REQUIRED")

    result = await ai.check_drug_interactions(request.medications)
    return {
        "status": "success",
        "medicationCount": len(request.medications),
        **result
    }

@router.get("/alerts")
async def safety_alerts(emr: EMRClient = Depends(get_emr_client)):
    patients = remote_results(await emr.get("/v1/patients"))
    with_allergies = [p for p in patients if p.get("allergies")]

    return {
        "status": "success",
        "summary": {
            "totalPatients": len(patients),
            "highRiskPatients": len(with_allergies),
            "patientsWithAllergies": len(with_allergies),
            "recentAlerts": []
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
