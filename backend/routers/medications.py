"""Medication routes. The EMR only exposes medications per patient."""

from fastapi import APIRouter, Depends

from dependencies import get_local_store, require_bearer_token
from exceptions import NotFound
from local_data import LocalDataStore

router = APIRouter(
    prefix="/api/medications",
    tags=["medications"],
    dependencies=[Depends(require_bearer_token)]
)

@router.get("/")
async def medications_index():
    return {
        "message": "To access medications, use /api/patients/{patientId}/medications",
        "note": "Medications are scoped to patients in the DORRA API"
    }

@router.get("/{medication_id}")
async def get_local_medication(medication_id: str, store: LocalDataStore = Depends(get_local_store)):
    medication = store.get_medication_by_id(medication_id)
    if medication is None:
        raise NotFound("Medication not found", error_code="MEDICATION_NOT_FOUND", details={"id": medication_id})
    return medication
