"""Read-only deployment status routes."""

import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends, HTTPException, status

from bluegreen.schemas.deployment import Deployment, DeploymentStatusReport, HealthCheckResult
from bluegreen.services.orchestrator import BlueGreenOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deployments", tags=["deployments"])


async def get_orchestrator() -> AsyncIterator[BlueGreenOrchestrator]:
    orchestrator = build_orchestrator()
    try:
        yield orchestrator
    finally:
        await orchestrator.aclose()


@router.get("/status", response_model=DeploymentStatusReport, response_model_by_alias=True)
async def get_deployment_status(
    orchestrator: BlueGreenOrchestrator = Depends(get_orchestrator),
):
    """Return the live environment, the last deployment and a probe of each environment."""
    return await orchestrator.status()


@router.get("/history", response_model=List[Deployment], response_model_by_alias=True)
async def get_deployment_history(
    orchestrator: BlueGreenOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.history()


@router.get("/report", response_model=Deployment, response_model_by_alias=True)
async def get_latest_report(
    orchestrator: BlueGreenOrchestrator = Depends(get_orchestrator),
):
    """Return the most recent deployment report."""
    report = orchestrator.latest_report()
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No deployment report found",
        )
    return report


@router.get(
    "/environments/health",
    response_model=dict[str, HealthCheckResult],
    response_model_by_alias=True,
)
async def get_environment_health(
    orchestrator: BlueGreenOrchestrator = Depends(get_orchestrator),
):
    """Probe blue, green and production once each."""
    results = await orchestrator.check_health()
    unhealthy = [name for name, result in results.items() if not result.is_healthy]
    if unhealthy:
        logger.warning("Unhealthy environments: %s", ", ".join(unhealthy))
    return results
