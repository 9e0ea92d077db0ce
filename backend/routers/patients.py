"""Patient routes: EMR proxy plus local-overlay merges for encounters and medications"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Response

from dependencies import get_emr_client, get_local_store, require_bearer_token
from http_client import EMRClient, build_query
from local_data import LocalDataStore
from reconciliation import merge_with_remote

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/patients",
    tags=["patients"],
    dependencies=[Depends(require_bearer_token)]
)

@router.get("/")
async def list_patients(
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    emr: EMRClient = Depends(get_emr_client)
):
    return await emr.get("/v1/patients", params=build_query(ordering=ordering, page=page, search=search))

@router.post("/create", status_code=201)
async def create_patient(
    data: Dict[str, Any] = Body(...),
    emr: EMRClient = Depends(get_emr_client)
):
    created = await emr.post("/v1/patients/create", data=data)
    logger.info(f"Patient created in EMR: {(created or {}).get('id')}")
    return created

@router.get("/{patient_id}")
async def get_patient(patient_id: str, emr: EMRClient = Depends(get_emr_client)):
    return await emr.get(f"/v1/patients/{patient_id}")

@router.patch("/{patient_id}")
async def update_patient(
    patient_id: str,
    data: Dict[str, Any] = Body(...),
    emr: EMRClient = Depends(get_emr_client)
):
    return await emr.patch(f"/v1/patients/{patient_id}", data=data)

@router.delete("/{patient_id}", status_code=204)
async def delete_patient(patient_id: str, emr: EMRClient = Depends(get_emr_client)):
    await emr.delete(f"/v1/patients/{patient_id}")
    return Response(status_code=204)

@router.get("/{patient_id}/encounters")
async def get_patient_encounters(
    patient_id: str,
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client)
):
    params = build_query(ordering=ordering, page=page, search=search)
    return await merge_with_remote(
        store.get_encounters_by_patient(patient_id),
        lambda: emr.get(f"/v1/patients/{patient_id}/encounters", params=params),
        resource="patient encounters"
    )

@router.get("/{patient_id}/medications")
async def get_patient_medications(
    patient_id: str,
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    created_at__date: Optional[str] = None,
    patient: Optional[str] = None,
    store: LocalDataStore = Depends(get_local_store),
    emr: EMRClient = Depends(get_emr_client)
):
    params = build_query(
        ordering=ordering,
        page=page,
        search=search,
        created_at__date=created_at__date,
        patient=patient
    )
    return await merge_with_remote(
        store.get_medications_by_patient(patient_id),
        lambda: emr.get(f"/v1/patients/{patient_id}/medications", params=params),
        resource="patient medications"
    )

@router.get("/{patient_id}/appointments")
async def get_patient_appointments(
    patient_id: str,
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    emr: EMRClient = Depends(get_emr_client)
):
    params = build_query(ordering=ordering, page=page, search=search)
    return await emr.get(f"/v1/patients/{patient_id}/appointments", params=params)

@router.get("/{patient_id}/tests")
async def get_patient_tests(
    patient_id: str,
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    created_at__date: Optional[str] = None,
    patient: Optional[str] = None,
    emr: EMRClient = Depends(get_emr_client)
):
    params = build_query(
        ordering=ordering,
        page=page,
        search=search,
        created_at__date=created_at__date,
        patient=patient
    )
    return await emr.get(f"/v1/patients/{patient_id}/tests", params=params)
