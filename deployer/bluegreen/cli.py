"""Command-line interface for blue-green deployments.

Usage examples::

    bluegreen deploy v1.2.3
    bluegreen dry-run v1.2.3
    bluegreen status
    bluegreen health
    bluegreen rollback
    bluegreen history
    bluegreen serve --port 8200

Exit code is 0 on success (including non-critical verification warnings) and
1 on a failed deployment, a failed rollback or a missing argument.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from bluegreen.config import settings
from bluegreen.logging_config import get_logger, setup_logging
from bluegreen.schemas.deployment import Deployment, HealthCheckResult
from bluegreen.services.actions import DeploymentActionError
from bluegreen.services.orchestrator import (
    BlueGreenOrchestrator,
    DeploymentError,
    build_orchestrator,
)

logger = get_logger("cli")

RULE = "-" * 50


class _ArgumentParser(argparse.ArgumentParser):
    """Report usage errors with exit code 1."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="bluegreen",
        description="Blue-Green Deployment Manager -- zero-downtime swaps with health checks and rollback.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy a specific version.")
    deploy_parser.add_argument("version", help="Version to deploy, e.g. v1.2.3")

    dry_run_parser = subparsers.add_parser(
        "dry-run", help="Simulate a deployment without changing any state."
    )
    dry_run_parser.add_argument("version", help="Version to simulate")

    subparsers.add_parser("status", help="Show current deployment status.")
    subparsers.add_parser("rollback", help="Roll back to the previous environment.")
    subparsers.add_parser("health", help="Check environment health.")
    subparsers.add_parser("history", help="List recorded deployments.")

    serve_parser = subparsers.add_parser("serve", help="Run the read-only status API.")
    serve_parser.add_argument(
        "--host",
        default=settings.api_host,
        help=f"Bind address (default: {settings.api_host})",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"Bind port (default: {settings.api_port})",
    )
    return parser


def _format_probe(name: str, result: HealthCheckResult) -> str:
    line = f"  {name}: {result.status} ({result.response_time}ms)"
    if result.error:
        line += f" - {result.error}"
    return line


def _print_deployment(deployment: Deployment) -> None:
    print(RULE)
    print(f"Deployment: {deployment.id}")
    print(f"Version:    {deployment.version}")
    print(f"Switch:     {deployment.source_environment} -> {deployment.target_environment}")
    print(f"Dry run:    {'YES' if deployment.dry_run else 'NO'}")
    print(f"Status:     {deployment.status}")
    for phase in deployment.phases:
        print(f"  [x] {phase.name} ({phase.duration}ms)")
    for warning in deployment.warnings:
        print(f"  warning: {warning}")
    if deployment.error:
        print(f"Error:      {deployment.error}")


async def _deploy(orchestrator: BlueGreenOrchestrator, version: str, dry_run: bool) -> int:
    deployment = await orchestrator.deploy(version, dry_run=dry_run)
    _print_deployment(deployment)
    print(f"Report:     {orchestrator.report_writer.path}")
    return 0


async def _status(orchestrator: BlueGreenOrchestrator) -> int:
    report = await orchestrator.status()
    print("DEPLOYMENT STATUS")
    print(RULE)
    print(f"Current Environment: {report.current_environment}")
    if report.last_deployment:
        last = report.last_deployment
        print(f"Last Deployment: {last.version} ({last.status})")
        print(f"Deployment Time: {last.timestamp.astimezone().strftime('%Y-%m-%d %H:%M:%S')}")
    print("")
    print("Environment Health:")
    for name, result in report.environments.items():
        print(_format_probe(name, result))
    return 0


async def _health(orchestrator: BlueGreenOrchestrator) -> int:
    for name, result in (await orchestrator.check_health()).items():
        print(_format_probe(name, result).strip())
    return 0


async def _rollback(orchestrator: BlueGreenOrchestrator) -> int:
    environment = await orchestrator.rollback()
    print(f"Rollback completed; live environment is now {environment}")
    return 0


def _history(orchestrator: BlueGreenOrchestrator) -> int:
    history = orchestrator.history()
    if not history:
        print("No deployments recorded.")
        return 0
    print(f"{'ID':<22} {'VERSION':<14} {'SWITCH':<16} {'STATUS':<12} TIMESTAMP")
    for item in reversed(history):
        switch = f"{item.source_environment}->{item.target_environment}"
        print(
            f"{item.id:<22} {item.version:<14} {switch:<16} {item.status:<12} "
            f"{item.timestamp.isoformat()}"
        )
    return 0


def _serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("bluegreen.main:app", host=host, port=port, log_config=None)
    return 0


async def _dispatch(args: argparse.Namespace) -> int:
    orchestrator = build_orchestrator()
    try:
        if args.command == "deploy":
            return await _deploy(orchestrator, args.version, dry_run=False)
        if args.command == "dry-run":
            return await _deploy(orchestrator, args.version, dry_run=True)
        if args.command == "status":
            return await _status(orchestrator)
        if args.command == "health":
            return await _health(orchestrator)
        if args.command == "rollback":
            return await _rollback(orchestrator)
        if args.command == "history":
            return _history(orchestrator)
        raise ValueError(f"Unhandled command: {args.command}")
    finally:
        await orchestrator.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    setup_logging()
    if args.command == "serve":
        return _serve(args.host, args.port)

    try:
        return asyncio.run(_dispatch(args))
    except (DeploymentError, DeploymentActionError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        cause = exc.__cause__
        if isinstance(cause, (DeploymentError, DeploymentActionError)):
            logger.error("Caused by: %s", cause)
            print(f"Caused by: {cause}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
