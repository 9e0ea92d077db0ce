"""
Pharmacy routes. Doctors issue and revoke prescription tokens; a pharmacist
opens the prescription with the token alone (no login).
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config import Config
from dependencies import get_app_config, get_token_broker, require_bearer_token
from token_broker import PrescriptionTokenBroker, TokenRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pharmacy", tags=["pharmacy"])

class GenerateTokenRequest(BaseModel):
    patientId: Optional[Union[int, str]] = None
    prescriptionDetails: Optional[Dict[str, Any]] = None

class RevokeTokenRequest(BaseModel):
    token: Optional[str] = None

def pharmacy_url(config: Config, token: str) -> str:
    return f"{config.app.frontend_url}/pharmacy/{token}"

def render_prescription(prescription: Dict[str, Any], record: TokenRecord) -> Dict[str, Any]:
    """Shape a stored prescription for the pharmacy view, filling display defaults"""
    return {
        "patient": {
            "initials": prescription.get("patientInitials") or "N/A",
            "age": prescription.get("patientAge") or "N/A",
            "gender": prescription.get("patientGender") or "N/A",
            "allergies": prescription.get("allergies") or [],
        },
        "medications": prescription.get("medications") or [],
        "prescriptionText": prescription.get("prescriptionText") or "",
        "diagnosis": prescription.get("diagnosis") or "",
        "safetyWarnings": prescription.get("safetyWarnings") or [],
        "encounterDate": prescription.get("encounterDate") or date.today().isoformat(),
        "prescribedBy": prescription.get("doctorName") or "Dr. Unknown",
        "tokenExpiry": record.expires_at.isoformat(),
        "notes": prescription.get("notes") or "",
    }

@router.post("/generate-token", dependencies=[Depends(require_bearer_token)])
async def generate_token(
    request: GenerateTokenRequest,
    broker: PrescriptionTokenBroker = Depends(get_token_broker),
    config: Config = Depends(get_app_config)
):
    issued = broker.issue_token(request.patientId, request.prescriptionDetails)
    return {
        "status": "success",
        "token": issued.token,
        "expiresAt": issued.expires_at.isoformat(),
        "qrCodeUrl": pharmacy_url(config, issued.token)
    }

@router.post("/revoke-token", dependencies=[Depends(require_bearer_token)])
async def revoke_token(
    request: RevokeTokenRequest,
    broker: PrescriptionTokenBroker = Depends(get_token_broker)
):
    broker.revoke_token(request.token)
    return {
        "status": "success",
        "message": "Token revoked successfully"
    }

@router.get("/demo-tokens")
async def demo_tokens(
    broker: PrescriptionTokenBroker = Depends(get_token_broker),
    config: Config = Depends(get_app_config)
):
    listed = [
        {
            "token": entry["token"],
            "url": pharmacy_url(config, entry["token"]),
            "patient": entry["summary"]["patient"],
            "diagnosis": entry["summary"]["diagnosis"],
            "expiresAt": entry["expiresAt"]
        }
        for entry in broker.list_demo_tokens()
    ]
    return {
        "status": "success",
        "count": len(listed),
        "demo_tokens": listed
    }

@router.get("/prescription/{token}")
async def get_prescription(token: str, broker: PrescriptionTokenBroker = Depends(get_token_broker)):
    prescription, record = broker.resolve_with_record(token)
    logger.info(f"Prescription token …{token[-4:]} opened (subject {record.subject_ref})")
    return render_prescription(prescription, record)
