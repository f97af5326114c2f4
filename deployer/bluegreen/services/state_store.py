"""File-backed deployment state: which environment is live, plus bounded history."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from bluegreen.logging_config import get_logger
from bluegreen.schemas.deployment import DeploymentState

logger = get_logger(__name__)


class StateStore(ABC):
    """Persistence boundary for DeploymentState."""

    @abstractmethod
    def load(self) -> DeploymentState:
        """Return the persisted state, or the default state when none is usable."""

    @abstractmethod
    def save(self, state: DeploymentState) -> None:
        """Persist the state."""


class JsonFileStateStore(StateStore):
    """Single-writer JSON store. There is no locking; concurrent runs would race."""

    def __init__(self, path: Path | str, history_limit: int = 10):
        self.path = Path(path)
        self.history_limit = history_limit

    def load(self) -> DeploymentState:
        if not self.path.exists():
            return DeploymentState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return DeploymentState.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Could not read deployment state from %s: %s", self.path, exc)
            return DeploymentState()

    def save(self, state: DeploymentState) -> None:
        state.trim_history(self.history_limit)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(state.to_json_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Error saving deployment state to %s: %s", self.path, exc)
            return
        logger.debug("Deployment state saved to %s", self.path)
