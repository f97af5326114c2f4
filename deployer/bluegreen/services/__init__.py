"""Services package."""

from bluegreen.services.orchestrator import (
    BlueGreenOrchestrator,
    DeploymentError,
    RollbackFailedError,
    UnhealthyEnvironmentError,
    build_orchestrator,
)

__all__ = [
    "BlueGreenOrchestrator",
    "DeploymentError",
    "RollbackFailedError",
    "UnhealthyEnvironmentError",
    "build_orchestrator",
]
