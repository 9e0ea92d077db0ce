"""Encounter routes; locally created encounters are listed ahead of the EMR's"""

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dependencies import get_emr_client, get_local_store, require_bearer_token
from exceptions import InvalidRequest
from http_client import EMRClient, build_query
from local_data import LocalDataStore
from reconciliation import merge_with_remote
from seed_data import create_encounter_with_medications

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/encounters",
    tags=["encounters"],
    dependencies=[Depends(require_bearer_token)]
)

class PrescribedMedication(BaseModel):
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None

class EncounterCreateRequest(BaseModel):
    patientId: Optional[Union[int, str]] = None
    diagnosis: Optional[str] = None
    symptoms: Optional[str] = None
    chiefComplaint: Optional[str] = None
    visitType: Optional[str] = None
    notes: Optional[str] = None
    encounterDate: Optional[str] = None
    medications: Optional[List[PrescribedMedication]] = None

@router.get("/")
async def list_encounters(
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client)
):
    params = build_query(ordering=ordering, page=page, search=search)
    return await merge_with_remote(
        store.get_encounters(),
        lambda: emr.get("/v1/encounters", params=params),
        resource="encounters"
    )

@router.post("/create", status_code=201)
async def create_encounter(
    request: EncounterCreateRequest,
    store: LocalDataStore = Depends(get_local_store)
):
    if request.patientId is None or str(request.patientId).strip() == "":
        raise InvalidRequest("patientId is required", error_code="PATIENT_REQUIRED")

    medications = [med.model_dump() for med in request.medications or []]
    created = create_encounter_with_medications(
        store,
        request.patientId,
        request.model_dump(exclude={"patientId", "medications", "encounterDate"}),
        medications,
        encounter_date=request.encounterDate
    )
    logger.info(
        f"Local encounter {created['encounter']['id']} created for patient {request.patientId} "
        f"with {len(created['medications'])} medications"
    )

    return {
        "status": "success",
        "encounter": created["encounter"],
        "medicationsCreated": len(created["medications"])
    }

@router.get("/{encounter_id}")
async def get_encounter(
    encounter_id: str,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client)
) -> Dict[str, Any]:
    local = store.get_encounter_by_id(encounter_id)
    if local is not None:
        return local
    return await emr.get(f"/v1/encounters/{encounter_id}")
