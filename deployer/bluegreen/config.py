"""Deployment configuration management."""

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentTarget(BaseModel):
    """One addressable environment (blue, green or the production alias)."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    url: str
    health_check: str = "/health"

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.url.rstrip('/')}{endpoint}"


class HealthPolicy(BaseModel):
    """Retry budget and threshold applied when aggregating probe results."""

    model_config = ConfigDict(frozen=True)

    endpoints: tuple[str, ...] = ("/health", "/api/health", "/")
    retries: int = 3
    retry_interval_seconds: float = 5.0
    healthy_threshold_percent: float = 80.0
    probe_timeout_seconds: float = 30.0
    slow_response_ms: float = 5000.0


class DeploymentConfig(BaseModel):
    """Explicit configuration handed to the orchestrator."""

    model_config = ConfigDict(frozen=True)

    blue: EnvironmentTarget
    green: EnvironmentTarget
    production: EnvironmentTarget
    health: HealthPolicy = HealthPolicy()
    warmup_seconds: float = 10.0
    verification_seconds: float = 30.0
    max_rollback_seconds: float = 300.0
    history_limit: int = 10

    def environment(self, name: str) -> EnvironmentTarget:
        if name == "blue":
            return self.blue
        if name == "green":
            return self.green
        if name == "production":
            return self.production
        raise ValueError(f"Unknown environment: {name}")

    @property
    def environments(self) -> dict[str, EnvironmentTarget]:
        return {"blue": self.blue, "green": self.green, "production": self.production}


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"

    # Environment endpoints
    blue_environment_url: str = "https://blue-premium-weather-app.pages.dev"
    green_environment_url: str = "https://green-premium-weather-app.pages.dev"
    production_url: str = "https://premium-weather-app.pages.dev"
    health_check_path: str = "/health"

    # Health checks
    health_check_endpoints: str = "/health,/api/health,/"
    probe_timeout_seconds: float = 30.0
    slow_response_ms: float = 5000.0
    health_retries: int = 3
    health_retry_interval_seconds: float = 5.0
    healthy_threshold_percent: float = 80.0

    # Deployment timing
    warmup_seconds: float = 10.0
    verification_seconds: float = 30.0
    max_rollback_seconds: float = 300.0

    # Persistence
    history_limit: int = 10
    state_file: str = "./deployment-state.json"
    report_file: str = "./deployment-report.json"

    # Infrastructure hooks, e.g. "wrangler pages deploy dist --branch {environment}"
    deploy_command: str | None = None
    traffic_switch_command: str | None = None
    action_timeout_seconds: float = 600.0

    # Status API
    api_host: str = "127.0.0.1"
    api_port: int = 8200

    model_config = SettingsConfigDict(env_file=(".env.test", ".env"), case_sensitive=False)

    @property
    def health_check_endpoints_list(self) -> list[str]:
        """Parse the endpoint string into a list."""
        return [ep.strip() for ep in self.health_check_endpoints.split(",") if ep.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        env_var = os.getenv("ENVIRONMENT", "").lower() == "testing"
        pytest_flag = bool(os.getenv("PYTEST_CURRENT_TEST"))
        return self.environment == "testing" or env_var or pytest_flag

    @field_validator("healthy_threshold_percent")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError(f"HEALTHY_THRESHOLD_PERCENT must be between 0 and 100, got {v}")
        return v

    @field_validator("health_retries", "history_limit")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name.upper()} must be at least 1")
        return v

    @field_validator("health_check_endpoints")
    @classmethod
    def validate_endpoints(cls, v: str) -> str:
        if not [ep for ep in v.split(",") if ep.strip()]:
            raise ValueError("HEALTH_CHECK_ENDPOINTS must list at least one endpoint")
        return v

    def deployment_config(self) -> DeploymentConfig:
        """Build the immutable orchestrator configuration from these settings."""
        return DeploymentConfig(
            blue=EnvironmentTarget(
                name="blue",
                label="Blue Environment",
                url=self.blue_environment_url,
                health_check=self.health_check_path,
            ),
            green=EnvironmentTarget(
                name="green",
                label="Green Environment",
                url=self.green_environment_url,
                health_check=self.health_check_path,
            ),
            production=EnvironmentTarget(
                name="production",
                label="Production",
                url=self.production_url,
                health_check=self.health_check_path,
            ),
            health=HealthPolicy(
                endpoints=tuple(self.health_check_endpoints_list),
                retries=self.health_retries,
                retry_interval_seconds=self.health_retry_interval_seconds,
                healthy_threshold_percent=self.healthy_threshold_percent,
                probe_timeout_seconds=self.probe_timeout_seconds,
                slow_response_ms=self.slow_response_ms,
            ),
            warmup_seconds=self.warmup_seconds,
            verification_seconds=self.verification_seconds,
            max_rollback_seconds=self.max_rollback_seconds,
            history_limit=self.history_limit,
        )


# Global settings instance
settings = Settings()
if os.getenv("PYTEST_CURRENT_TEST"):
    settings.environment = "testing"
