"""Test configuration."""

from pathlib import Path
import os

os.environ["ENVIRONMENT"] = "testing"

# Guardrail: never let tests touch the real deployment state or report.
scratch = Path(__file__).resolve().parents[2] / "scratch" / "tests"
os.environ.setdefault("STATE_FILE", str(scratch / "deployment-state.json"))
os.environ.setdefault("REPORT_FILE", str(scratch / "deployment-report.json"))
os.environ.setdefault("LOG_DIR", str(scratch / "logs"))
