"""Aggregate endpoint probes into an environment-level health verdict."""

from __future__ import annotations

import asyncio

from bluegreen.config import EnvironmentTarget, HealthPolicy
from bluegreen.logging_config import get_logger
from bluegreen.schemas.deployment import EnvironmentHealth, HealthCheckResult
from bluegreen.services.health_prober import HealthProber

logger = get_logger(__name__)


class HealthChecker:
    def __init__(self, prober: HealthProber, policy: HealthPolicy):
        self.prober = prober
        self.policy = policy

    async def probe_once(self, target: EnvironmentTarget) -> HealthCheckResult:
        """Single probe against the environment's own health-check path."""
        return await self.prober.probe(target, target.health_check)

    async def wait_for_healthy(self, target: EnvironmentTarget) -> EnvironmentHealth:
        """Probe every policy endpoint, retrying until one attempt clears the threshold.

        The first attempt at or above ``healthy_threshold_percent`` wins. When
        every attempt falls short, the results of the last attempt are returned.
        """
        policy = self.policy
        results: list[HealthCheckResult] = []
        percentage = 0.0
        for attempt in range(1, policy.retries + 1):
            logger.info(
                "Health check attempt %s/%s for %s", attempt, policy.retries, target.label
            )
            results = []
            for endpoint in policy.endpoints:
                result = await self.prober.probe(target, endpoint)
                results.append(result)
                if result.is_healthy:
                    logger.info("  %s: healthy (%sms)", endpoint, result.response_time)
                else:
                    logger.warning(
                        "  %s: %s (%sms) %s",
                        endpoint,
                        result.status,
                        result.response_time,
                        result.error or "",
                    )

            healthy_count = sum(1 for r in results if r.is_healthy)
            percentage = (healthy_count / len(results)) * 100 if results else 0.0
            if percentage >= policy.healthy_threshold_percent:
                logger.info("Environment %s is healthy (%.0f%%)", target.label, percentage)
                return EnvironmentHealth(
                    environment=target.name,
                    healthy=True,
                    healthy_percentage=percentage,
                    attempts=attempt,
                    results=results,
                )

            if attempt < policy.retries:
                logger.info("Waiting %ss before retry...", policy.retry_interval_seconds)
                await asyncio.sleep(policy.retry_interval_seconds)

        logger.error("Environment %s failed health checks (%.0f%%)", target.label, percentage)
        return EnvironmentHealth(
            environment=target.name,
            healthy=False,
            healthy_percentage=percentage,
            attempts=policy.retries,
            results=results,
        )
