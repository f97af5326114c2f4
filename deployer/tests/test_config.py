"""Tests for settings parsing and the derived deployment configuration."""

import pytest
from pydantic import ValidationError

from bluegreen.config import DeploymentConfig, Settings


def test_defaults_match_documented_policy():
    config = Settings().deployment_config()

    assert config.health.endpoints == ("/health", "/api/health", "/")
    assert config.health.retries == 3
    assert config.health.retry_interval_seconds == 5.0
    assert config.health.healthy_threshold_percent == 80.0
    assert config.history_limit == 10
    assert config.blue.url == "https://blue-premium-weather-app.pages.dev"
    assert config.production.label == "Production"


def test_environment_urls_can_be_overridden(monkeypatch):
    monkeypatch.setenv("BLUE_ENVIRONMENT_URL", "https://blue.internal")
    monkeypatch.setenv("GREEN_ENVIRONMENT_URL", "https://green.internal")
    monkeypatch.setenv("PRODUCTION_URL", "https://www.internal")

    config = Settings().deployment_config()

    assert config.blue.url == "https://blue.internal"
    assert config.green.url == "https://green.internal"
    assert config.production.endpoint_url("/health") == "https://www.internal/health"


def test_endpoint_list_is_parsed(monkeypatch):
    monkeypatch.setenv("HEALTH_CHECK_ENDPOINTS", " /ready , /live,")

    settings = Settings()

    assert settings.health_check_endpoints_list == ["/ready", "/live"]
    assert settings.deployment_config().health.endpoints == ("/ready", "/live")


@pytest.mark.parametrize(
    "name, value",
    [
        ("HEALTHY_THRESHOLD_PERCENT", "120"),
        ("HEALTH_RETRIES", "0"),
        ("HISTORY_LIMIT", "0"),
        ("HEALTH_CHECK_ENDPOINTS", " , "),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings()


def test_environment_lookup(deployment_config: DeploymentConfig):
    assert deployment_config.environment("green") is deployment_config.green
    assert list(deployment_config.environments) == ["blue", "green", "production"]
    with pytest.raises(ValueError, match="Unknown environment"):
        deployment_config.environment("purple")


def test_testing_flag_follows_environment_variable(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "testing")

    assert Settings().is_testing is True


def test_state_and_report_default_to_working_directory(monkeypatch):
    monkeypatch.delenv("STATE_FILE", raising=False)
    monkeypatch.delenv("REPORT_FILE", raising=False)

    settings = Settings()

    assert settings.state_file == "./deployment-state.json"
    assert settings.report_file == "./deployment-report.json"
