"""Deployment report persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from bluegreen.logging_config import get_logger
from bluegreen.schemas.deployment import Deployment

logger = get_logger(__name__)


class ReportWriter:
    """Overwrites a single JSON report with the most recent deployment record."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def write(self, deployment: Deployment) -> Optional[Path]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(deployment.to_json_dict(), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.error("Failed to write deployment report %s: %s", self.path, exc)
            return None
        logger.info("Deployment report saved to: %s", self.path)
        return self.path

    def read(self) -> Optional[Deployment]:
        if not self.path.exists():
            return None
        try:
            return Deployment.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Could not read deployment report %s: %s", self.path, exc)
            return None
