"""Appointment routes, proxied to the EMR unchanged"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Response

from dependencies import get_emr_client, require_bearer_token
from http_client import EMRClient, build_query

router = APIRouter(
    prefix="/api/appointments",
    tags=["appointments"],
    dependencies=[Depends(require_bearer_token)]
)

@router.get("/")
async def list_appointments(
    ordering: Optional[str] = None,
    page: Optional[int] = None,
    search: Optional[str] = None,
    emr: EMRClient = Depends(get_emr_client)
):
    return await emr.get("/v1/appointments", params=build_query(ordering=ordering, page=page, search=search))

@router.get("/{appointment_id}")
async def get_appointment(appointment_id: str, emr: EMRClient = Depends(get_emr_client)):
    return await emr.get(f"/v1/appointments/{appointment_id}")

@router.patch("/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    data: Dict[str, Any] = Body(...),
    emr: EMRClient = Depends(get_emr_client)
):
    return await emr.patch(f"/v1/appointments/{appointment_id}", data=data)

@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(appointment_id: str, emr: EMRClient = Depends(get_emr_client)):
    await emr.delete(f"/v1/appointments/{appointment_id}")
    return Response(status_code=204)
