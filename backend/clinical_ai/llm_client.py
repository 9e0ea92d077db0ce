"""
Text Generation Clients

Thin async wrappers over OpenAI-compatible chat completion endpoints (Ollama
cloud first, an optional generic cloud provider second). Every failure,
including a missing API key, surfaces as AIServiceError so the caller can move
on to the next generator in the chain.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from config import AIConfig
from exceptions import AIServiceError
from logging_config import PerformanceLogger

logger = logging.getLogger(__name__)

class BaseTextGenerator(ABC):
    """Abstract base class for text generation collaborators"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> str:
        """Return the generated text or raise AIServiceError"""
        pass

    async def close(self):
        pass

class OpenAICompatibleGenerator(BaseTextGenerator):
    """Generator for any endpoint speaking the /chat/completions dialect"""

    def __init__(
        self,
        name: str,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(name)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._perf = PerformanceLogger()

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}"
                }
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> str:
        if not self.is_configured:
            raise AIServiceError(f"{self.name} is not configured", error_code="AI_NOT_CONFIGURED")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens

        started = time.perf_counter()
        try:
            response = await self._get_client().post("/chat/completions", json=payload)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"] or ""
        except httpx.HTTPStatusError as e:
            self._perf.log_ai_request(self.name, time.perf_counter() - started, False)
            raise AIServiceError(
                f"{self.name} returned HTTP {e.response.status_code}",
                error_code="AI_HTTP_ERROR",
                details={"status_code": e.response.status_code}
            )
        except httpx.HTTPError as e:
            self._perf.log_ai_request(self.name, time.perf_counter() - started, False)
            raise AIServiceError(f"{self.name} request failed: {e}", error_code="AI_REQUEST_ERROR")
        except (ValueError, KeyError, IndexError, TypeError) as e:
            self._perf.log_ai_request(self.name, time.perf_counter() - started, False)
            raise AIServiceError(f"{self.name} returned an unexpected body: {e}", error_code="AI_INVALID_BODY")

        self._perf.log_ai_request(self.name, time.perf_counter() - started, True)
        return content.strip()

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

def build_generators(config: AIConfig) -> List[BaseTextGenerator]:
    """Generators in the order they should be tried.

    The primary (Ollama cloud) generator is always present, even without a
    key, so the chain logs why it was skipped. The secondary one only exists
    when both its URL and key are set.
    """
    generators: List[BaseTextGenerator] = [
        OpenAICompatibleGenerator(
            name="ollama",
            base_url=config.primary_url,
            api_key=config.primary_api_key,
            model=config.primary_model,
            timeout=config.primary_timeout
        )
    ]

    if config.secondary_url and config.secondary_api_key:
        generators.append(OpenAICompatibleGenerator(
            name="cloud-ai",
            base_url=config.secondary_url,
            api_key=config.secondary_api_key,
            model=config.secondary_model,
            timeout=config.secondary_timeout
        ))

    logger.info(f"Text generators configured: {[g.name for g in generators]}")
    return generators
