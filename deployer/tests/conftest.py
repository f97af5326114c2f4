"""Shared fixtures: a zero-delay config, scripted probers and recording actions."""

import logging
from typing import Dict, List, Optional, Tuple

import pytest

from bluegreen.config import DeploymentConfig, EnvironmentTarget, HealthPolicy
from bluegreen.schemas.deployment import HealthCheckResult
from bluegreen.services.actions import DeploymentActionError, InfrastructureActions
from bluegreen.services.health_checker import HealthChecker
from bluegreen.services.health_prober import HealthProber
from bluegreen.services.orchestrator import BlueGreenOrchestrator
from bluegreen.services.reports import ReportWriter
from bluegreen.services.state_store import JsonFileStateStore


class ScriptedProber(HealthProber):
    """Answers probes from a per-environment health table.

    ``unhealthy_endpoints`` marks individual (environment, endpoint) pairs as
    failing so partial-health thresholds can be exercised.
    """

    def __init__(self, healthy: Optional[Dict[str, bool]] = None):
        self.healthy = {"blue": True, "green": True, "production": True}
        if healthy:
            self.healthy.update(healthy)
        self.unhealthy_endpoints: set[Tuple[str, str]] = set()
        self.calls: List[Tuple[str, str]] = []
        self.closed = False

    async def probe(self, target: EnvironmentTarget, endpoint: str) -> HealthCheckResult:
        self.calls.append((target.name, endpoint))
        ok = self.healthy.get(target.name, True) and (target.name, endpoint) not in self.unhealthy_endpoints
        return HealthCheckResult(
            url=target.endpoint_url(endpoint),
            status="healthy" if ok else "unhealthy",
            response_time=12,
            error=None if ok else "HTTP 503",
        )

    def probed(self, environment: str) -> int:
        return sum(1 for name, _ in self.calls if name == environment)

    async def aclose(self) -> None:
        self.closed = True


class RecordingActions(InfrastructureActions):
    def __init__(
        self,
        fail_deploy: bool = False,
        fail_switch: bool = False,
        fail_switch_to: Tuple[str, ...] = (),
    ):
        self.fail_deploy = fail_deploy
        self.fail_switch = fail_switch
        self.fail_switch_to = fail_switch_to
        self.deployed: List[Tuple[str, str]] = []
        self.switched: List[str] = []

    async def deploy(self, target: EnvironmentTarget, version: str) -> None:
        if self.fail_deploy:
            raise DeploymentActionError("deploy command exited with 1")
        self.deployed.append((target.name, version))

    async def switch_traffic(self, target: EnvironmentTarget) -> None:
        if self.fail_switch or target.name in self.fail_switch_to:
            raise DeploymentActionError("traffic-switch command exited with 1")
        self.switched.append(target.name)


@pytest.fixture
def package_caplog(caplog):
    """caplog that also sees the non-propagating ``bluegreen`` logger."""
    package_logger = logging.getLogger("bluegreen")
    package_logger.addHandler(caplog.handler)
    previous_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    yield caplog
    package_logger.setLevel(previous_level)
    package_logger.removeHandler(caplog.handler)


@pytest.fixture
def deployment_config() -> DeploymentConfig:
    return DeploymentConfig(
        blue=EnvironmentTarget(name="blue", label="Blue Environment", url="https://blue.example.test"),
        green=EnvironmentTarget(name="green", label="Green Environment", url="https://green.example.test"),
        production=EnvironmentTarget(name="production", label="Production", url="https://example.test"),
        health=HealthPolicy(retries=3, retry_interval_seconds=0),
        warmup_seconds=0,
        verification_seconds=0,
    )


@pytest.fixture
def prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture
def actions() -> RecordingActions:
    return RecordingActions()


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "deployment-state.json"


@pytest.fixture
def report_path(tmp_path):
    return tmp_path / "deployment-report.json"


@pytest.fixture
def state_store(state_path, deployment_config) -> JsonFileStateStore:
    return JsonFileStateStore(state_path, history_limit=deployment_config.history_limit)


@pytest.fixture
def orchestrator(deployment_config, state_store, prober, actions, report_path) -> BlueGreenOrchestrator:
    return BlueGreenOrchestrator(
        config=deployment_config,
        state_store=state_store,
        health_checker=HealthChecker(prober, deployment_config.health),
        actions=actions,
        report_writer=ReportWriter(report_path),
    )
