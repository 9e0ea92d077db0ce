"""
Translation of patient instructions into Nigerian languages.

Exact phrasebook hits are answered locally; anything else goes to the text
generators in order. When none answers the original text comes back with
``success: False``.
"""

import logging
from typing import Any, Dict, List, Sequence

from exceptions import AIServiceError
from .llm_client import BaseTextGenerator
from .prompts import translation_prompt

logger = logging.getLogger(__name__)

PHRASE_BOOK: Dict[str, Dict[str, str]] = {
    "yoruba": {
        "Good morning": "Ẹ káàárọ̀",
        "How are you feeling?": "Báwo ni ìrílárá rẹ?",
        "Take this medicine": "Mu oògùn yìí",
        "Do you have pain?": "Ṣé ó ń rọ́ ọ?",
        "Come back tomorrow": "Padà wá lọ́la",
        "headache": "orí fífọ́",
        "stomach pain": "ikùn rírun",
        "fever": "ibà",
        "cough": "ikọ̀",
    },
    "igbo": {
        "Good morning": "Ụtụtụ ọma",
        "How are you feeling?": "Kedụ ka ị na-adị?",
        "Take this medicine": "Ṅụọ ọgwụ a",
        "Do you have pain?": "Ị na-enwe mgbu?",
        "Come back tomorrow": "Lọghachi echi",
        "headache": "isi mgbu",
        "stomach pain": "afọ mgbu",
        "fever": "ahụ ọkụ",
        "cough": "ụkwara",
    },
    "hausa": {
        "Good morning": "Ina kwana",
        "How are you feeling?": "Yaya jikinka?",
        "Take this medicine": "Sha wannan magani",
        "Do you have pain?": "Kana jin zafi?",
        "Come back tomorrow": "Koma gobe",
        "headache": "ciwon kai",
        "stomach pain": "ciwon ciki",
        "fever": "zazzabi",
        "cough": "tari",
    },
    "pidgin": {
        "Good morning": "Good morning",
        "How are you feeling?": "How your body dey?",
        "Take this medicine": "Take dis medicine",
        "Do you have pain?": "Body dey pain you?",
        "Come back tomorrow": "Come back tomorrow",
        "headache": "head dey pain",
        "stomach pain": "belle dey pain",
        "fever": "hot body",
        "cough": "cough",
    },
}

SUPPORTED_LANGUAGES = [
    {"code": "yoruba", "name": "Yoruba", "flag": "🇳🇬"},
    {"code": "igbo", "name": "Igbo", "flag": "🇳🇬"},
    {"code": "hausa", "name": "Hausa", "flag": "🇳🇬"},
    {"code": "pidgin", "name": "Nigerian Pidgin", "flag": "🇳🇬"},
    {"code": "english", "name": "English", "flag": "🇬🇧"},
]

class TranslationService:
    def __init__(self, generators: Sequence[BaseTextGenerator] = ()):
        self.generators = list(generators)

    def get_supported_languages(self) -> List[Dict[str, str]]:
        return [dict(language) for language in SUPPORTED_LANGUAGES]

    def get_phrasebook(self, language: str) -> Dict[str, str]:
        """Phrases for a language; empty for unknown languages"""
        return dict(PHRASE_BOOK.get(language, {}))

    async def translate(self, text: str, target_language: str = "yoruba") -> Dict[str, Any]:
        phrase = PHRASE_BOOK.get(target_language, {}).get(text)
        if phrase:
            return {
                "success": True,
                "original": text,
                "translated": phrase,
                "language": target_language,
                "source": "phrasebook",
            }

        prompt = translation_prompt(text, target_language)
        for generator in self.generators:
            try:
                translated = await generator.generate(prompt, temperature=0.7)
            except AIServiceError as e:
                logger.warning(f"Translation via {generator.name} failed: {e.message}")
                continue
            return {
                "success": True,
                "original": text,
                "translated": translated,
                "language": target_language,
                "source": generator.name,
            }

        return {
            "success": False,
            "original": text,
            "translated": text,
            "language": target_language,
            "error": "Translation unavailable",
        }
