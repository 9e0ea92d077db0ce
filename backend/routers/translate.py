"""Translation routes for patient instructions"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from clinical_ai import TranslationService
from dependencies import get_translation_service, require_bearer_token
from exceptions import InvalidRequest, NotFound

router = APIRouter(
    prefix="/api/translate",
    tags=["translate"],
    dependencies=[Depends(require_bearer_token)]
)

class TranslateRequest(BaseModel):
    text: Optional[str] = None
    targetLanguage: Optional[str] = None

@router.get("/languages")
async def supported_languages(service: TranslationService = Depends(get_translation_service)):
    return {
        "success": True,
        "languages": service.get_supported_languages()
    }

@router.get("/phrasebook/{language}")
async def phrasebook(language: str, service: TranslationService = Depends(get_translation_service)):
    phrases = service.get_phrasebook(language)
    if not phrases:
        raise NotFound(
            "Language not found or no phrasebook available",
            error_code="PHRASEBOOK_NOT_FOUND",
            details={"language": language}
        )
    return {
        "success": True,
        "language": language,
        "phrases": phrases
    }

@router.post("/translate")
async def translate(request: TranslateRequest, service: TranslationService = Depends(get_translation_service)):
    if not request.text or not request.targetLanguage:
        raise InvalidRequest("Text and targetLanguage are required", error_code="TRANSLATION_FIELDS_REQUIRED")
    return await service.translate(request.text, request.targetLanguage)
