"""Blue-green deployment orchestration.

A deployment runs five fixed phases in order against the environment that is
not currently live:

1. health-check the live environment,
2. deploy the version to the inactive environment,
3. warm up and health-check the inactive environment,
4. switch traffic and persist the new live environment,
5. verify the production alias (warning only).

Any failure in phases 1-4 marks the deployment failed and, outside of dry
runs, restores traffic to the environment that was live before the call.
The deployment report is written on every path.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from bluegreen.config import DeploymentConfig, EnvironmentTarget, Settings, settings as default_settings
from bluegreen.logging_config import get_logger
from bluegreen.schemas.deployment import (
    POST_DEPLOYMENT_VERIFICATION,
    PRE_DEPLOYMENT_HEALTH_CHECK,
    TARGET_DEPLOYMENT,
    TRAFFIC_SWITCH,
    WARMUP_VERIFICATION,
    Deployment,
    DeploymentState,
    DeploymentStatusReport,
    EnvironmentHealth,
    EnvironmentName,
    HealthCheckResult,
    Phase,
    other_environment,
)
from bluegreen.services.actions import CommandActions, DeploymentActionError, InfrastructureActions
from bluegreen.services.health_checker import HealthChecker
from bluegreen.services.health_prober import HttpHealthProber
from bluegreen.services.reports import ReportWriter
from bluegreen.services.state_store import JsonFileStateStore, StateStore

logger = get_logger(__name__)


class DeploymentError(Exception):
    """Base class for deployment failures."""


class UnhealthyEnvironmentError(DeploymentError):
    """Raised when an environment misses the health threshold."""

    def __init__(self, message: str, environment: str, health: Optional[EnvironmentHealth] = None):
        super().__init__(message)
        self.environment = environment
        self.health = health


class RollbackFailedError(DeploymentError):
    """Raised when traffic cannot be restored to the fallback environment."""


class BlueGreenOrchestrator:
    def __init__(
        self,
        config: DeploymentConfig,
        state_store: StateStore,
        health_checker: HealthChecker,
        actions: InfrastructureActions,
        report_writer: ReportWriter,
    ):
        self.config = config
        self.state_store = state_store
        self.health_checker = health_checker
        self.actions = actions
        self.report_writer = report_writer

    async def deploy(self, version: str, dry_run: bool = False) -> Deployment:
        """Run the five-phase pipeline for `version` and return the deployment record."""
        state = self.state_store.load()
        source = state.current_environment
        target = other_environment(source)
        deployment = Deployment(
            id=f"deploy-{int(time.time() * 1000)}",
            version=version,
            source_environment=source,
            target_environment=target,
            dry_run=dry_run,
        )

        logger.info("Blue-Green deployment starting: version=%s dry_run=%s", version, dry_run)
        logger.info("Current active: %s", self.config.environment(source).label)
        logger.info("Target environment: %s", self.config.environment(target).label)

        try:
            try:
                await self._run_phases(deployment, state)
            except Exception as exc:
                deployment.status = "failed"
                deployment.error = str(exc)
                logger.error("Deployment FAILED: %s", exc)
                if not dry_run:
                    if state.last_deployment is not deployment:
                        state.record(deployment, self.config.history_limit)
                    self.state_store.save(state)
                    logger.warning("Initiating automatic rollback to %s...", source)
                    try:
                        await self._restore_traffic(source, state)
                    except RollbackFailedError as rollback_exc:
                        raise rollback_exc from exc
                raise

            deployment.status = "completed"
            if not dry_run:
                self.state_store.save(state)
            logger.info("Blue-Green deployment COMPLETED: %s is live on %s", version, target)
            return deployment
        finally:
            self.report_writer.write(deployment)

    async def _run_phases(self, deployment: Deployment, state: DeploymentState) -> None:
        dry_run = deployment.dry_run
        live = self.config.environment(deployment.source_environment)
        target = self.config.environment(deployment.target_environment)

        logger.info("Phase 1: Pre-deployment Health Check")
        started = time.perf_counter()
        health = await self.health_checker.wait_for_healthy(live)
        if not health.healthy:
            raise UnhealthyEnvironmentError(
                "Current environment is unhealthy - aborting deployment", live.name, health
            )
        self._complete_phase(deployment, PRE_DEPLOYMENT_HEALTH_CHECK, started)

        logger.info("Phase 2: Deploy to Target Environment")
        started = time.perf_counter()
        if dry_run:
            logger.info("DRY RUN: Would deploy %s to %s", deployment.version, target.name)
        else:
            await self.actions.deploy(target, deployment.version)
        self._complete_phase(deployment, TARGET_DEPLOYMENT, started)

        logger.info("Phase 3: Warmup and Health Verification")
        started = time.perf_counter()
        if dry_run:
            logger.info("DRY RUN: Would perform warmup and health checks")
        else:
            logger.info("Warming up %s environment for %ss...", target.name, self.config.warmup_seconds)
            await asyncio.sleep(self.config.warmup_seconds)
            health = await self.health_checker.wait_for_healthy(target)
            if not health.healthy:
                raise UnhealthyEnvironmentError(
                    "Target environment failed health checks", target.name, health
                )
        self._complete_phase(deployment, WARMUP_VERIFICATION, started)

        logger.info("Phase 4: Traffic Switch")
        started = time.perf_counter()
        if dry_run:
            logger.info("DRY RUN: Would switch production traffic")
        else:
            await self.actions.switch_traffic(target)
            state.current_environment = deployment.target_environment
            state.record(deployment, self.config.history_limit)
            self.state_store.save(state)
        self._complete_phase(deployment, TRAFFIC_SWITCH, started)

        logger.info("Phase 5: Post-deployment Verification")
        started = time.perf_counter()
        if dry_run:
            logger.info("DRY RUN: Would verify production environment")
        else:
            await self._verify_production(deployment)
        self._complete_phase(deployment, POST_DEPLOYMENT_VERIFICATION, started)

    async def _verify_production(self, deployment: Deployment) -> None:
        await asyncio.sleep(self.config.verification_seconds / 3)
        try:
            health = await self.health_checker.wait_for_healthy(self.config.production)
        except Exception as exc:
            message = f"Production verification errored: {exc}"
        else:
            if health.healthy:
                logger.info("Production verification successful")
                return
            message = "Production health check failed - consider rollback"
        logger.warning(message)
        deployment.warnings.append(message)

    @staticmethod
    def _complete_phase(deployment: Deployment, name: str, started: float) -> None:
        duration = int((time.perf_counter() - started) * 1000)
        deployment.phases.append(Phase(name=name, duration=duration))

    async def rollback(self) -> EnvironmentName:
        """Point traffic at the environment that is not currently live."""
        state = self.state_store.load()
        fallback = other_environment(state.current_environment)
        await self._restore_traffic(fallback, state)
        return fallback

    async def _restore_traffic(self, environment: EnvironmentName, state: DeploymentState) -> None:
        target = self.config.environment(environment)
        logger.warning("ROLLBACK: switching traffic to %s", target.label)
        try:
            await asyncio.wait_for(
                self._verify_and_switch(target), timeout=self.config.max_rollback_seconds
            )
        except asyncio.TimeoutError as exc:
            raise RollbackFailedError(
                f"Rollback to {environment} exceeded {self.config.max_rollback_seconds}s"
            ) from exc

        state.current_environment = environment
        self.state_store.save(state)
        logger.info("Rollback completed successfully; %s is live", environment)

    async def _verify_and_switch(self, target: EnvironmentTarget) -> None:
        health = await self.health_checker.wait_for_healthy(target)
        if not health.healthy:
            raise RollbackFailedError("Rollback target environment is also unhealthy")
        try:
            await self.actions.switch_traffic(target)
        except DeploymentActionError as exc:
            raise RollbackFailedError(f"Traffic switch back to {target.name} failed: {exc}") from exc

    async def status(self) -> DeploymentStatusReport:
        state = self.state_store.load()
        return DeploymentStatusReport(
            current_environment=state.current_environment,
            last_deployment=state.last_deployment,
            environments=await self.check_health(),
        )

    async def check_health(self) -> dict[str, HealthCheckResult]:
        """Probe each environment once on its health-check path."""
        results: dict[str, HealthCheckResult] = {}
        for name, target in self.config.environments.items():
            results[name] = await self.health_checker.probe_once(target)
        return results

    def history(self) -> list[Deployment]:
        return self.state_store.load().deployment_history

    def latest_report(self) -> Optional[Deployment]:
        return self.report_writer.read()

    async def aclose(self) -> None:
        await self.health_checker.prober.aclose()


def build_orchestrator(app_settings: Optional[Settings] = None) -> BlueGreenOrchestrator:
    """Wire the default file store, HTTP prober and command actions from settings."""
    app_settings = app_settings or default_settings
    config = app_settings.deployment_config()
    prober = HttpHealthProber(
        timeout=config.health.probe_timeout_seconds,
        slow_response_ms=config.health.slow_response_ms,
    )
    return BlueGreenOrchestrator(
        config=config,
        state_store=JsonFileStateStore(app_settings.state_file, history_limit=config.history_limit),
        health_checker=HealthChecker(prober, config.health),
        actions=CommandActions(
            deploy_command=app_settings.deploy_command,
            traffic_switch_command=app_settings.traffic_switch_command,
            timeout=app_settings.action_timeout_seconds,
        ),
        report_writer=ReportWriter(app_settings.report_file),
    )
