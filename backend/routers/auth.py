"""Mock authentication for the demo frontend; any credentials are accepted"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from exceptions import InvalidRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])

DEMO_USER = {
    "id": "1",
    "email": "doctor@hospital.com",
    "role": "doctor",
    "name": "Dr. Sola Adeyemi"
}

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

@router.post("/login")
async def login(request: LoginRequest):
    if not request.email or not request.password:
        raise InvalidRequest("Email and password are required", error_code="CREDENTIALS_REQUIRED")

    return {
        "status": True,
        "message": "Login successful",
        "token": "mock-token-for-hackathon",
        "user": {**DEMO_USER, "email": request.email}
    }

@router.post("/logout")
async def logout():
    return {"status": True, "message": "Logout successful"}

@router.get("/me")
async def current_user():
    return dict(DEMO_USER)
