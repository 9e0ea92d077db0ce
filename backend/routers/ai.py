"""
Clinical assistant routes: copilot chat, free-text parsing, note analysis and
patient summaries.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clinical_ai import ClinicalAIService
from clinical_ai.rules import analyze_clinical_notes, generate_prescription_recommendation
from dependencies import get_ai_service, get_emr_client, get_local_store, require_bearer_token
from exceptions import EMRConnectionError, EMRDataError, InvalidRequest
from http_client import EMRClient
from local_data import LocalDataStore
from reconciliation import merge_with_remote

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
    dependencies=[Depends(require_bearer_token)]
)

class ChatRequest(BaseModel):
    message: Optional[str] = None
    patientId: Optional[Union[int, str]] = None
    context: Optional[str] = None

class ParsePatientRequest(BaseModel):
    text: Optional[str] = None
    context: Optional[str] = None

class AnalyzeNotesRequest(BaseModel):
    notes: Optional[str] = None
    patientContext: Optional[Dict[str, Any]] = None

class PatientNotesRequest(BaseModel):
    unstructured_data: Optional[str] = None
    medications: Optional[List[Any]] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    ai_recommendations: Optional[Any] = None

async def _patient_context(emr: EMRClient, patient_id: Any) -> Optional[Dict[str, Any]]:
    """Patient record for the chat prompt; a failed lookup just means no context"""
    if patient_id is None or str(patient_id).strip() == "":
        return None
    try:
        return await emr.get(f"/v1/patients/{patient_id}")
    except (EMRConnectionError, EMRDataError) as e:
        logger.warning(f"Patient context unavailable for {patient_id}: {e.message}")
        return None

def _require_message(message: Optional[str]) -> str:
    if not message:
        raise InvalidRequest("Message is required", error_code="MESSAGE_REQUIRED")
    return message

@router.post("/chat")
async def chat(
    request: ChatRequest,
    emr: EMRClient = Depends(get_emr_client),
    ai: ClinicalAIService = Depends(get_ai_service)
):
    message = _require_message(request.message)

    if request.context == "prescription_recommendation":
        return {
            "status": "success",
            "response": generate_prescription_recommendation(message),
            "source": "ai_prescription_generator"
        }

    patient = await _patient_context(emr, request.patientId)
    return {
        "status": "success",
        **await ai.chat_with_copilot(message, patient)
    }

@router.post("/copilot/chat")
async def copilot_chat(
    request: ChatRequest,
    emr: EMRClient = Depends(get_emr_client),
    ai: ClinicalAIService = Depends(get_ai_service)
):
    message = _require_message(request.message)
    patient = await _patient_context(emr, request.patientId)
    return {
        "status": "success",
        **await ai.chat_with_copilot(message, patient)
    }

@router.post("/parse-patient-data")
async def parse_patient_data(request: ParsePatientRequest, ai: ClinicalAIService = Depends(get_ai_service)):
    if not request.text:
        raise InvalidRequest("Text is required", error_code="TEXT_REQUIRED")
    return {
        "status": "success",
        **await ai.parse_patient_data(request.text)
    }

@router.post("/analyze-notes")
async def analyze_notes(request: AnalyzeNotesRequest):
    if not request.notes:
        raise InvalidRequest("Clinical notes are required", error_code="NOTES_REQUIRED")
    return {
        "status": "success",
        **analyze_clinical_notes(request.notes),
        "note": "Analysis generated using pattern matching."
    }

@router.get("/summary/patient/{patient_id}")
async def patient_summary(
    patient_id: str,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client),
    ai: ClinicalAIService = Depends(get_ai_service)
):
    patient = await emr.get(f"/v1/patients/{patient_id}") or {}
    encounters = await merge_with_remote(
        store.get_encounters_by_patient(patient_id),
        lambda: emr.get(f"/v1/patients/{patient_id}/encounters"),
        resource="patient encounters"
    )
    medications = await merge_with_remote(
        store.get_medications_by_patient(patient_id),
        lambda: emr.get(f"/v1/patients/{patient_id}/medications"),
        resource="patient medications"
    )

    summary = await ai.generate_patient_summary(patient, encounters["results"], medications["results"])
    return {
        "status": "success",
        "patient": {
            "id": patient.get("id"),
            "name": f"{patient.get('first_name', '')} {patient.get('last_name', '')}".strip()
        },
        **summary
    }

@router.post("/patients/{patient_id}/notes")
async def save_patient_notes(patient_id: str, request: PatientNotesRequest):
    # Acknowledged only; nothing is stored
    logger.info(
        f"Prescription notes received for patient {patient_id}: "
        f"diagnosis={request.diagnosis!r}, medications={len(request.medications or [])}"
    )
    return {
        "status": "success",
        "message": "Prescription data saved successfully",
        "patient_id": patient_id,
        "saved_at": datetime.now(timezone.utc).isoformat()
    }
