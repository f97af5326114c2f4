"""Pydantic models for deployment state, reports and health results.

Records serialize with camelCase keys so state and report files written by
earlier tooling remain readable.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EnvironmentName = Literal["blue", "green"]
DeploymentStatus = Literal["in-progress", "completed", "failed"]
ProbeStatus = Literal["healthy", "unhealthy", "error"]

PRE_DEPLOYMENT_HEALTH_CHECK = "pre-deployment-health-check"
TARGET_DEPLOYMENT = "target-deployment"
WARMUP_VERIFICATION = "warmup-verification"
TRAFFIC_SWITCH = "traffic-switch"
POST_DEPLOYMENT_VERIFICATION = "post-deployment-verification"

PHASE_ORDER = (
    PRE_DEPLOYMENT_HEALTH_CHECK,
    TARGET_DEPLOYMENT,
    WARMUP_VERIFICATION,
    TRAFFIC_SWITCH,
    POST_DEPLOYMENT_VERIFICATION,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def other_environment(name: EnvironmentName) -> EnvironmentName:
    return "green" if name == "blue" else "blue"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Phase(CamelModel):
    name: str
    status: Literal["completed"] = "completed"
    timestamp: datetime = Field(default_factory=utc_now)
    duration: int = 0  # milliseconds


class Deployment(CamelModel):
    id: str
    timestamp: datetime = Field(default_factory=utc_now)
    version: str
    source_environment: EnvironmentName
    target_environment: EnvironmentName
    status: DeploymentStatus = "in-progress"
    phases: List[Phase] = Field(default_factory=list)
    dry_run: bool = False
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def phase_names(self) -> list[str]:
        return [phase.name for phase in self.phases]


class DeploymentState(CamelModel):
    current_environment: EnvironmentName = "blue"
    last_deployment: Optional[Deployment] = None
    deployment_history: List[Deployment] = Field(default_factory=list)

    def record(self, deployment: Deployment, limit: int) -> None:
        """Set the last deployment and append it to history, keeping the newest `limit`."""
        self.last_deployment = deployment
        self.deployment_history.append(deployment)
        self.trim_history(limit)

    def trim_history(self, limit: int) -> None:
        if len(self.deployment_history) > limit:
            self.deployment_history = self.deployment_history[-limit:]


class HealthCheckResult(CamelModel):
    url: str
    status: ProbeStatus
    response_time: int  # milliseconds
    timestamp: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"


class EnvironmentHealth(CamelModel):
    environment: str
    healthy: bool
    healthy_percentage: float
    attempts: int
    results: List[HealthCheckResult] = Field(default_factory=list)


class DeploymentStatusReport(CamelModel):
    current_environment: EnvironmentName
    last_deployment: Optional[Deployment] = None
    environments: dict[str, HealthCheckResult] = Field(default_factory=dict)
