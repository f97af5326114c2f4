"""Tests for the JSON state store and the report writer."""

import json

from bluegreen.schemas.deployment import Deployment, DeploymentState
from bluegreen.services.reports import ReportWriter
from bluegreen.services.state_store import JsonFileStateStore


def _deployment(index: int, status: str = "completed") -> Deployment:
    return Deployment(
        id=f"deploy-{index}",
        version=f"v{index}",
        source_environment="blue",
        target_environment="green",
        status=status,
    )


def test_missing_file_returns_default_state(tmp_path):
    store = JsonFileStateStore(tmp_path / "missing.json")

    state = store.load()

    assert state.current_environment == "blue"
    assert state.last_deployment is None
    assert state.deployment_history == []


def test_unparsable_file_returns_default_state(tmp_path, package_caplog):
    path = tmp_path / "deployment-state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStateStore(path)

    state = store.load()

    assert state == DeploymentState()
    assert "Could not read deployment state" in package_caplog.text


def test_invalid_environment_returns_default_state(tmp_path):
    path = tmp_path / "deployment-state.json"
    path.write_text(json.dumps({"currentEnvironment": "purple"}), encoding="utf-8")

    assert JsonFileStateStore(path).load().current_environment == "blue"


def test_save_writes_camel_case_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "deployment-state.json"
    store = JsonFileStateStore(path)
    state = DeploymentState(current_environment="green")
    state.record(_deployment(1), limit=10)

    store.save(state)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["currentEnvironment"] == "green"
    assert raw["lastDeployment"]["sourceEnvironment"] == "blue"
    assert raw["deploymentHistory"][0]["id"] == "deploy-1"
    assert store.load() == state


def test_reads_state_written_by_legacy_tooling(tmp_path):
    path = tmp_path / "deployment-state.json"
    legacy_deployment = {
        "id": "deploy-1718000000000",
        "timestamp": "2024-06-10T06:13:20.000Z",
        "version": "v1.2.3",
        "sourceEnvironment": "blue",
        "targetEnvironment": "green",
        "status": "in-progress",
        "phases": [
            {
                "name": "pre-deployment-health-check",
                "status": "completed",
                "timestamp": "2024-06-10T06:13:21.000Z",
                "duration": 0,
            }
        ],
        "dryRun": False,
    }
    path.write_text(
        json.dumps(
            {
                "currentEnvironment": "green",
                "lastDeployment": legacy_deployment,
                "deploymentHistory": [legacy_deployment],
            }
        ),
        encoding="utf-8",
    )

    state = JsonFileStateStore(path).load()

    assert state.current_environment == "green"
    assert state.last_deployment.version == "v1.2.3"
    assert state.last_deployment.warnings == []
    assert state.deployment_history[0].phases[0].name == "pre-deployment-health-check"


def test_save_bounds_history(tmp_path):
    store = JsonFileStateStore(tmp_path / "deployment-state.json", history_limit=10)
    state = DeploymentState()
    state.deployment_history = [_deployment(i) for i in range(15)]

    store.save(state)

    history = store.load().deployment_history
    assert len(history) == 10
    assert history[0].id == "deploy-5"
    assert history[-1].id == "deploy-14"


def test_save_failure_is_logged_not_raised(tmp_path, package_caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStateStore(blocker / "deployment-state.json")

    store.save(DeploymentState(current_environment="green"))

    assert "Error saving deployment state" in package_caplog.text


def test_report_writer_overwrites_latest(tmp_path):
    writer = ReportWriter(tmp_path / "deployment-report.json")
    assert writer.read() is None

    writer.write(_deployment(1))
    writer.write(_deployment(2, status="failed"))

    report = writer.read()
    assert report.id == "deploy-2"
    assert report.status == "failed"
    raw = json.loads((tmp_path / "deployment-report.json").read_text(encoding="utf-8"))
    assert raw["dryRun"] is False
    assert raw["error"] is None
