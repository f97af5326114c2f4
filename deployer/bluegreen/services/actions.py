"""Deploy and traffic-switch operations against the hosting platform.

Commands are operator-supplied templates. ``{version}``, ``{environment}`` and
``{url}`` are substituted before the command is split with ``shlex`` and run
without a shell. An unset template makes the operation a logged no-op.
"""

from __future__ import annotations

import asyncio
import shlex
from abc import ABC, abstractmethod
from typing import Optional

from bluegreen.config import EnvironmentTarget
from bluegreen.logging_config import get_logger

logger = get_logger(__name__)


class DeploymentActionError(Exception):
    """Raised when a deploy or traffic-switch command fails."""


class InfrastructureActions(ABC):
    @abstractmethod
    async def deploy(self, target: EnvironmentTarget, version: str) -> None:
        """Ship `version` to the target environment."""

    @abstractmethod
    async def switch_traffic(self, target: EnvironmentTarget) -> None:
        """Point production traffic at the target environment."""


class CommandActions(InfrastructureActions):
    def __init__(
        self,
        deploy_command: Optional[str] = None,
        traffic_switch_command: Optional[str] = None,
        timeout: float = 600.0,
    ):
        self.deploy_command = deploy_command
        self.traffic_switch_command = traffic_switch_command
        self.timeout = timeout

    async def deploy(self, target: EnvironmentTarget, version: str) -> None:
        if not self.deploy_command:
            logger.info("No deploy command configured; skipping deploy of %s to %s", version, target.name)
            return
        logger.info("Deploying version %s to %s...", version, target.name)
        await self._run("deploy", self.deploy_command, target, version)
        logger.info("Deployment of %s to %s completed", version, target.name)

    async def switch_traffic(self, target: EnvironmentTarget) -> None:
        if not self.traffic_switch_command:
            logger.info("No traffic switch command configured; recording switch to %s only", target.name)
            return
        logger.info("Switching production traffic to %s...", target.name)
        await self._run("traffic-switch", self.traffic_switch_command, target, "")
        logger.info("Traffic switch to %s completed", target.name)

    async def _run(
        self, action: str, template: str, target: EnvironmentTarget, version: str
    ) -> None:
        try:
            command = template.format(version=version, environment=target.name, url=target.url)
        except (KeyError, IndexError) as exc:
            raise DeploymentActionError(f"Invalid {action} command template: {exc}") from exc
        argv = shlex.split(command)
        if not argv:
            raise DeploymentActionError(f"Empty {action} command")

        logger.debug("Running %s command: %s", action, argv)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise DeploymentActionError(f"Failed to launch {action} command: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            await _terminate(proc)
            raise DeploymentActionError(
                f"{action} command timed out after {self.timeout}s"
            ) from exc
        except asyncio.CancelledError:
            # A caller deadline expired; the command must not outlive it.
            logger.warning("%s command cancelled; killing pid %s", action, proc.pid)
            await _terminate(proc)
            raise

        if stdout:
            logger.debug("%s stdout: %s", action, stdout.decode(errors="replace").strip())
        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip() if stderr else ""
            raise DeploymentActionError(
                f"{action} command exited with {proc.returncode}" + (f": {detail}" if detail else "")
            )


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()
