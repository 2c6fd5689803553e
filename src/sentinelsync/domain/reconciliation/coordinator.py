"""Deployment coordinator: Solutions, then a settle delay, then Rules and Workbooks.

Rules and workbooks are looked up through the solutions that own them, so
they only start once every solution install has completed and the settle
delay has given asynchronous installs time to become visible. Each of them
is scoped to the solutions that changed in this run, plus the solutions that
were already installed when the kind's ``force_dependent`` flag is set.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .policy import DeploymentPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sentinelsync.domain.model import DeploymentOutcome

    from .policy import KindPolicy
    from .rules import RuleReconciler
    from .solutions import SolutionReconciler, SolutionRunResult
    from .workbooks import WorkbookReconciler

log = getLogger(__name__)

DEFAULT_SETTLE_DELAY_SECONDS = 60.0


@dataclass(slots=True)
class DeploymentReport:
    """Per-kind outcomes; ``None`` marks a stage that did not run."""

    solutions: DeploymentOutcome
    rules: DeploymentOutcome | None = None
    workbooks: DeploymentOutcome | None = None

    def outcomes(self) -> list[DeploymentOutcome]:
        return [
            outcome
            for outcome in (self.solutions, self.rules, self.workbooks)
            if outcome is not None
        ]

    @property
    def failure_count(self) -> int:
        return sum(outcome.failure_count for outcome in self.outcomes())

    @property
    def succeeded(self) -> bool:
        return self.failure_count == 0


@dataclass(slots=True, kw_only=True)
class DeploymentCoordinator:
    solutions: SolutionReconciler
    rules: RuleReconciler
    workbooks: WorkbookReconciler
    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep)

    def deploy(
        self,
        requested_solutions: Iterable[str],
        policy: DeploymentPolicy | None = None,
    ) -> DeploymentReport:
        """Run every stage to completion and return the aggregated report."""

        active_policy = policy or DeploymentPolicy()
        solution_result = self.solutions.run(requested_solutions, active_policy.solutions)
        report = DeploymentReport(solutions=solution_result.outcome)

        if solution_result.dispatched and self.settle_delay_seconds > 0:
            log.info(
                "Waiting %.0fs for solution installs to propagate", self.settle_delay_seconds
            )
            self.sleep(self.settle_delay_seconds)

        rule_scope = _dependent_scope(solution_result, active_policy.rules)
        if active_policy.rules.skip_deployment:
            log.info("Rule deployment disabled; skipping rules")
        elif not rule_scope:
            log.info("No new, updated or forced solutions; skipping rules")
        else:
            report.rules = self.rules.run(active_policy.rules, solution_names=rule_scope)

        workbook_scope = _dependent_scope(solution_result, active_policy.workbooks)
        if active_policy.workbooks.skip_deployment:
            log.info("Workbook deployment disabled; skipping workbooks")
        elif not workbook_scope:
            log.info("No new, updated or forced solutions; skipping workbooks")
        else:
            report.workbooks = self.workbooks.run(
                active_policy.workbooks, solution_names=workbook_scope
            )

        for outcome in report.outcomes():
            log.info(outcome.summary())
        if report.failure_count:
            log.error("Deployment finished with %s failure(s)", report.failure_count)
        return report


def _dependent_scope(result: SolutionRunResult, policy: KindPolicy) -> frozenset[str]:
    scope = set(result.changed)
    if policy.force_dependent:
        scope.update(result.already_installed)
    return frozenset(scope)
