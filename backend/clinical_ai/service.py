"""
Clinical AI Service

Coordinates the text generators and the rule-based fallbacks behind the
copilot, summary and medication-safety endpoints. Each operation tries the
generators in order and falls back to deterministic rules, so callers always
get an answer.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from exceptions import AIServiceError
from . import prompts
from .llm_client import BaseTextGenerator
from .rules import (
    intelligent_summary,
    parse_patient_text,
    rule_based_chat_response,
    rule_based_safety_check,
)

logger = logging.getLogger(__name__)

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

class ClinicalAIService:
    """Ordered generator chain with rule-based fallbacks"""

    def __init__(self, generators: Sequence[BaseTextGenerator] = ()):
        self.generators = list(generators)

    async def _generate(
        self,
        purpose: str,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> Optional[Tuple[str, str]]:
        """(text, generator name) from the first generator that answers, else None"""
        for generator in self.generators:
            try:
                text = await generator.generate(
                    prompt,
                    system_prompt=system_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens
                )
            except AIServiceError as e:
                logger.warning(f"{generator.name} unavailable for {purpose}: {e.message}")
                continue
            return text, generator.name

        logger.info(f"No text generator answered for {purpose}, using rules")
        return None

    async def chat_with_copilot(self, message: str, patient: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        generated = await self._generate(
            "copilot chat",
            message,
            system_prompt=prompts.copilot_system_prompt(patient),
            temperature=0.8,
            max_tokens=1000
        )
        if generated is None:
            return rule_based_chat_response(message)

        text, source = generated
        return {
            "success": True,
            "response": text,
            "source": source,
            "timestamp": _now_iso(),
        }

    async def generate_patient_summary(
        self,
        patient: Dict[str, Any],
        encounters: List[Dict[str, Any]],
        medications: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        generated = await self._generate(
            "patient summary",
            prompts.patient_summary_prompt(patient, encounters, medications),
            system_prompt=prompts.SUMMARY_SYSTEM_PROMPT,
            max_tokens=600
        )
        if generated is None:
            return intelligent_summary(patient, encounters, medications)

        text, source = generated
        return {
            "success": True,
            "summary": text,
            "source": source,
            "timestamp": _now_iso(),
        }

    async def analyze_medication_safety(
        self,
        patient: Dict[str, Any],
        medications: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        generated = await self._generate(
            "medication safety",
            prompts.medication_safety_prompt(patient, medications),
            system_prompt=prompts.SAFETY_SYSTEM_PROMPT,
            max_tokens=800
        )
        if generated is None:
            return rule_based_safety_check(patient, medications)

        text, source = generated
        return {
            "success": True,
            "analysis": text,
            "source": source,
            "timestamp": _now_iso(),
        }

    async def check_drug_interactions(self, medications: List[Dict[str, Any]]) -> Dict[str, Any]:
        generated = await self._generate(
            "drug interactions",
            prompts.drug_interactions_prompt(medications),
            system_prompt=prompts.INTERACTIONS_SYSTEM_PROMPT,
            max_tokens=600
        )
        if generated is None:
            return {
                "success": False,
                "error": "AI service unavailable",
                "interactions": "Unable to check interactions at this time",
                "source": "error",
                "timestamp": _now_iso(),
            }

        text, source = generated
        return {
            "success": True,
            "interactions": text,
            "source": source,
            "timestamp": _now_iso(),
        }

    async def parse_patient_data(self, text: str) -> Dict[str, Any]:
        """Structured fields from free text; generator JSON first, regex second"""
        parsed: Dict[str, Any] = {}
        generated = await self._generate("patient data parsing", prompts.parse_patient_prompt(text))
        if generated is not None:
            match = re.search(r"\{[\s\S]*\}", generated[0])
            if match:
                try:
                    candidate = json.loads(match.group(0))
                except json.JSONDecodeError:
                    logger.warning("Generator returned malformed JSON for patient data, using regex")
                else:
                    if isinstance(candidate, dict):
                        parsed = candidate

        ai_used = bool(parsed)
        if not ai_used:
            parsed = parse_patient_text(text)

        return {
            **parsed,
            "method": "ai_parsing" if ai_used else "enhanced_regex_parsing",
            "ai_powered": ai_used,
        }

    async def close(self):
        for generator in self.generators:
            await generator.close()
