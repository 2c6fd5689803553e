#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sentinelsync.app import deploy_sentinel_content
from sentinelsync.config import ConfigurationError, configure_logging
from sentinelsync.domain.model import DEFAULT_SEVERITIES, Severity
from sentinelsync.domain.reconciliation import DeploymentPolicy, KindPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deploy Microsoft Sentinel solutions, analytics rules and workbooks"
    )
    parser.add_argument("--resource-group", type=str, help="Resource group of the workspace")
    parser.add_argument("--workspace", type=str, help="Log Analytics workspace name")
    parser.add_argument("--region", type=str, help="Azure region of the workspace")
    parser.add_argument(
        "--subscription-id",
        type=str,
        help="Azure subscription id (defaults to AZURE_SUBSCRIPTION_ID)",
    )
    parser.add_argument(
        "--solutions",
        nargs="+",
        default=[],
        help="Solution display names; a single comma-separated value is accepted too",
    )
    parser.add_argument(
        "--severities",
        nargs="+",
        default=None,
        help="Rule severities to deploy (default: High Medium Low Informational)",
    )
    parser.add_argument(
        "--is-gov",
        action="store_true",
        default=None,
        help="Target the Azure US Government cloud",
    )

    parser.add_argument(
        "--force-solutions",
        action="store_true",
        help="Install deprecated and preview solutions too",
    )
    parser.add_argument(
        "--skip-solution-updates",
        action="store_true",
        help="Do not update installed solutions with newer catalog versions",
    )
    parser.add_argument(
        "--skip-rule-updates",
        action="store_true",
        help="Do not update installed analytics rules",
    )
    parser.add_argument(
        "--skip-rule-deployment",
        action="store_true",
        help="Skip analytics rule deployment entirely",
    )
    parser.add_argument(
        "--force-rule-deployment",
        action="store_true",
        help="Deploy rules for already-installed solutions, not only new or updated ones",
    )
    parser.add_argument(
        "--skip-workbook-updates",
        action="store_true",
        help="Do not update installed workbooks",
    )
    parser.add_argument(
        "--skip-workbook-deployment",
        action="store_true",
        help="Skip workbook deployment entirely",
    )
    parser.add_argument(
        "--force-workbook-deployment",
        action="store_true",
        help="Deploy workbooks for already-installed solutions, not only new or updated ones",
    )
    parser.add_argument(
        "--redeploy-workbooks",
        action="store_true",
        help="Redeploy workbooks that are already current",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv))


def _split_values(values: Sequence[str]) -> list[str]:
    """Flatten ``["A, B", "C"]`` into ``["A", "B", "C"]``."""

    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def _parse_severities(values: Sequence[str] | None) -> tuple[Severity, ...]:
    if not values:
        return DEFAULT_SEVERITIES
    parsed: list[Severity] = []
    for value in _split_values(values):
        severity = Severity.parse(value)
        if severity not in parsed:
            parsed.append(severity)
    return tuple(parsed)


def _build_policy(args: argparse.Namespace) -> DeploymentPolicy:
    return DeploymentPolicy(
        solutions=KindPolicy(
            force=args.force_solutions,
            skip_updates=args.skip_solution_updates,
        ),
        rules=KindPolicy(
            skip_updates=args.skip_rule_updates,
            skip_deployment=args.skip_rule_deployment,
            force_dependent=args.force_rule_deployment,
        ),
        workbooks=KindPolicy(
            skip_updates=args.skip_workbook_updates,
            skip_deployment=args.skip_workbook_deployment,
            force_dependent=args.force_workbook_deployment,
            redeploy_existing=args.redeploy_workbooks,
        ),
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        solutions = _split_values(parsed_args.solutions)
        if not solutions:
            raise ValueError("No solutions requested (use --solutions)")  # noqa: TRY301
        severities = _parse_severities(parsed_args.severities)
        policy = _build_policy(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        report = deploy_sentinel_content(
            solutions,
            severities=severities,
            policy=policy,
            subscription_id=parsed_args.subscription_id,
            resource_group=parsed_args.resource_group,
            workspace=parsed_args.workspace,
            region=parsed_args.region,
            is_gov=parsed_args.is_gov,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during deployment")
        sys.exit(1)

    if not report.succeeded:
        log.error("Deployment completed with %s failure(s)", report.failure_count)
        sys.exit(1)
    log.info("Deployment completed successfully")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console entry point: load `.env`, install the SIGINT handler, run."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
