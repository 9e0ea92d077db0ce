"""
FastAPI dependencies

Route handlers get the shared stores and clients from ``app.state`` (set up
by ``main.create_app``) instead of module globals.
"""

from typing import Optional

from fastapi import Header, Request

from adr_store import ADRReportStore
from clinical_ai import ClinicalAIService, TranslationService
from config import Config
from exceptions import AuthenticationError
from http_client import EMRClient
from local_data import LocalDataStore
from token_broker import PrescriptionTokenBroker

def get_app_config(request: Request) -> Config:
    return request.app.state.config

def get_local_store(request: Request) -> LocalDataStore:
    return request.app.state.local_store

def get_token_broker(request: Request) -> PrescriptionTokenBroker:
    return request.app.state.token_broker

def get_adr_store(request: Request) -> ADRReportStore:
    return request.app.state.adr_store

def get_emr_client(request: Request) -> EMRClient:
    return request.app.state.emr_client

def get_ai_service(request: Request) -> ClinicalAIService:
    return request.app.state.ai_service

def get_translation_service(request: Request) -> TranslationService:
    return request.app.state.translation_service

def require_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    """Presence check only; the token itself is not verified"""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("No token provided", error_code="NO_TOKEN")
    return token.strip()
