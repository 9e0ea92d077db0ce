import httpx
import asyncio
import time
from typing import Dict, Optional, Any
import logging
from config import EMRConfig, get_config
from exceptions import EMRConnectionError, EMRDataError
from logging_config import PerformanceLogger

logger = logging.getLogger(__name__)

class EMRClient:
    """HTTP client for the DORRA EMR with connection pooling and retry logic"""

    def __init__(self, config: Optional[EMRConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or get_config().emr
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()
        self._perf = PerformanceLogger()
        self._stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'retry_attempts': 0
        }

    def _create_client(self) -> httpx.AsyncClient:
        """Create a new HTTP client with proper configuration"""
        limits = httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10
        )

        return httpx.AsyncClient(
            base_url=self.config.base_url,
            limits=limits,
            timeout=self.config.timeout,
            transport=self._transport,
            headers={
                "User-Agent": "MedSight-Backend/1.0",
                "Authorization": f"Token {self.config.api_token}",
                "Accept": "application/json",
                "Content-Type": "application/json"
            },
            follow_redirects=True
        )

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = self._create_client()
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client:
            async with self._lock:
                if self._client:
                    await self._client.aclose()
                    self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        retries: Optional[int] = None
    ) -> Any:
        """Make an EMR request and return the decoded JSON body.

        Timeouts, transport errors and 5xx answers are retried with exponential
        backoff. 4xx answers are the caller's problem and raise immediately.
        """
        retry_count = self.config.max_retries if retries is None else retries
        last_exception = None

        for attempt in range(retry_count + 1):
            started = time.perf_counter()
            try:
                client = await self.get_client()
                response = await client.request(
                    method=method,
                    url=path,
                    params=params,
                    json=json
                )
                self._stats['total_requests'] += 1
                self._perf.log_emr_request(method, path, time.perf_counter() - started, response.status_code)

                response.raise_for_status()

                self._stats['successful_requests'] += 1
                if response.status_code == 204 or not response.content:
                    return None
                return response.json()

            except httpx.TimeoutException:
                last_exception = EMRConnectionError(
                    f"EMR request timeout after {self.config.timeout}s",
                    error_code="TIMEOUT",
                    details={"attempt": attempt + 1, "path": path}
                )
                logger.warning(f"EMR request timeout (attempt {attempt + 1}): {method} {path}")

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_exception = EMRDataError(
                    f"EMR returned HTTP {status}",
                    error_code=f"HTTP_{status}",
                    details={
                        "status_code": status,
                        "path": path,
                        "attempt": attempt + 1,
                        "upstream": _response_body(e.response)
                    }
                )
                logger.warning(f"EMR HTTP error {status} (attempt {attempt + 1}): {method} {path}")
                if status < 500:
                    self._stats['failed_requests'] += 1
                    raise last_exception

            except httpx.RequestError as e:
                last_exception = EMRConnectionError(
                    f"EMR request failed: {str(e)}",
                    error_code="REQUEST_ERROR",
                    details={"attempt": attempt + 1, "path": path}
                )
                logger.warning(f"EMR request error (attempt {attempt + 1}): {method} {path} - {e}")

            except ValueError as e:
                # Body was not JSON
                self._stats['failed_requests'] += 1
                raise EMRDataError(
                    f"EMR returned an unreadable body: {e}",
                    error_code="INVALID_BODY",
                    details={"path": path}
                )

            self._stats['failed_requests'] += 1

            if attempt < retry_count:
                self._stats['retry_attempts'] += 1
                wait_time = self.config.retry_delay * (2 ** attempt)  # Exponential backoff
                logger.info(f"Retrying EMR request in {wait_time}s (attempt {attempt + 1}/{retry_count})")
                await asyncio.sleep(wait_time)
            else:
                logger.error(f"All retry attempts failed for: {method} {path}")
                raise last_exception

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make GET request"""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Make POST request (not retried)"""
        return await self.request("POST", path, json=data, retries=0)

    async def patch(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Make PATCH request"""
        return await self.request("PATCH", path, json=data)

    async def delete(self, path: str) -> Any:
        """Make DELETE request"""
        return await self.request("DELETE", path)

    def get_stats(self) -> Dict[str, Any]:
        """Get HTTP client statistics"""
        return {
            **self._stats,
            "config": {
                "base_url": self.config.base_url,
                "timeout": self.config.timeout,
                "max_retries": self.config.max_retries,
                "retry_delay": self.config.retry_delay
            }
        }

    def reset_stats(self):
        """Reset statistics"""
        self._stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'retry_attempts': 0
        }

def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text

def build_query(**params: Any) -> Dict[str, Any]:
    """Drop empty query parameters before forwarding them to the EMR"""
    return {k: v for k, v in params.items() if v not in (None, "")}
