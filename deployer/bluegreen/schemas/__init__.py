"""Pydantic schemas for deployment records."""

from bluegreen.schemas.deployment import (
    Deployment,
    DeploymentState,
    DeploymentStatusReport,
    EnvironmentHealth,
    EnvironmentName,
    HealthCheckResult,
    Phase,
)

__all__ = [
    "Deployment",
    "DeploymentState",
    "DeploymentStatusReport",
    "EnvironmentHealth",
    "EnvironmentName",
    "HealthCheckResult",
    "Phase",
]
