"""
Clinical AI Package

Text generation clients, rule-based fallbacks and translation used by the
copilot, summary, safety and translate routes.
"""

from .llm_client import BaseTextGenerator, OpenAICompatibleGenerator, build_generators
from .service import ClinicalAIService
from .translation import TranslationService

__all__ = [
    'BaseTextGenerator',
    'OpenAICompatibleGenerator',
    'build_generators',
    'ClinicalAIService',
    'TranslationService'
]
