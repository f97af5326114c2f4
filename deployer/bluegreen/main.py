"""FastAPI application exposing deployment status."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bluegreen import __version__
from bluegreen.config import settings
from bluegreen.logging_config import setup_logging
from bluegreen.routes import deployments as deployments_module

# Initialize logging
setup_logging()
logger = logging.getLogger("bluegreen.main")

deployments_router = deployments_module.router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    logger.info("Starting deployment status API")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"State file: {settings.state_file}")
    yield
    logger.info("Shutting down deployment status API")


app = FastAPI(
    title="Blue-Green Deployer",
    description="Deployment state, history and environment health",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(deployments_router)


@app.get("/health")
async def health_check():
    """Liveness of the status API itself."""
    return {"status": "ok", "environment": settings.environment}
