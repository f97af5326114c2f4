"""HTTP health probes against environment endpoints."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from bluegreen.config import EnvironmentTarget
from bluegreen.logging_config import get_logger
from bluegreen.schemas.deployment import HealthCheckResult

logger = get_logger(__name__)


class HealthProber(ABC):
    """Issues a single health probe against one endpoint of one environment."""

    @abstractmethod
    async def probe(self, target: EnvironmentTarget, endpoint: str) -> HealthCheckResult:
        ...

    async def aclose(self) -> None:
        return None


class HttpHealthProber(HealthProber):
    """GET-based prober with a per-request timeout.

    A response below HTTP 400 that arrives within ``slow_response_ms`` is
    healthy. Error statuses and slow responses are unhealthy. Timeouts and
    transport failures are reported as ``error`` instead of raising.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        slow_response_ms: float = 5000.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self.slow_response_ms = slow_response_ms
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def probe(self, target: EnvironmentTarget, endpoint: str = "/") -> HealthCheckResult:
        url = target.endpoint_url(endpoint)
        logger.debug("Health check: %s", url)
        start = time.perf_counter()
        try:
            response = await self._get_client().get(url, timeout=self.timeout)
        except httpx.TimeoutException:
            return HealthCheckResult(
                url=url, status="error", response_time=_elapsed_ms(start), error="timeout"
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return HealthCheckResult(
                url=url,
                status="error",
                response_time=_elapsed_ms(start),
                error=str(exc) or exc.__class__.__name__,
            )

        elapsed = _elapsed_ms(start)
        if response.status_code >= 400:
            return HealthCheckResult(
                url=url,
                status="unhealthy",
                response_time=elapsed,
                error=f"HTTP {response.status_code}",
            )
        if elapsed >= self.slow_response_ms:
            return HealthCheckResult(
                url=url,
                status="unhealthy",
                response_time=elapsed,
                error=f"slow response ({elapsed}ms >= {int(self.slow_response_ms)}ms)",
            )
        return HealthCheckResult(url=url, status="healthy", response_time=elapsed)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
