"""Helpers shared by the orchestrators for scoping and outcome bookkeeping."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sentinelsync.domain.model import ReconciliationAction, SolutionRef, Status
from sentinelsync.domain.ports import CatalogApplicationError

from .patterns import is_expected_failure

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from sentinelsync.domain.model import (
        DeploymentOutcome,
        PlannedAction,
        RuleTemplateEntry,
        SolutionEntry,
        WorkbookTemplateEntry,
    )
    from sentinelsync.domain.ports import CatalogError

log = getLogger(__name__)

_SPECIAL_STATUSES = frozenset({Status.DEPRECATED, Status.SPECIAL})


def record_skip(outcome: DeploymentOutcome, planned: PlannedAction) -> None:
    name = planned.status.display_name
    status = planned.status.status
    if status in _SPECIAL_STATUSES:
        log.debug("Skipping %s %r: %s", outcome.kind, name, planned.reason)
        outcome.special.append(name)
        return
    if status is Status.NAME_MATCH:
        log.warning("Skipping %s %r: %s", outcome.kind, name, planned.reason)
        outcome.skipped.append(name)
        outcome.manual_review.append(name)
        return
    log.debug("Skipping %s %r: %s", outcome.kind, name, planned.reason)
    outcome.skipped.append(name)


def record_success(outcome: DeploymentOutcome, planned: PlannedAction) -> None:
    name = planned.status.display_name
    if planned.action is ReconciliationAction.UPDATE:
        delta = planned.status.version_delta
        if delta is not None and delta.is_downgrade:
            log.warning(
                "Downgraded %s %r from %s to catalog version %s",
                outcome.kind,
                name,
                delta.installed,
                delta.available,
            )
        else:
            log.info("Updated %s %r", outcome.kind, name)
        outcome.updated.append(name)
    else:
        log.info("Installed %s %r", outcome.kind, name)
        outcome.installed.append(name)


def record_failure(outcome: DeploymentOutcome, display_name: str, exc: CatalogError) -> None:
    """File a per-entry failure as expected (skippable) or as a hard failure."""

    if isinstance(exc, CatalogApplicationError) and is_expected_failure(exc.message):
        log.info("Skipping %s %r, workspace cannot host it: %s", outcome.kind, display_name, exc)
        outcome.expected_failures.append(display_name)
        return
    log.error("Failed to deploy %s %r: %s", outcome.kind, display_name, exc)
    outcome.failed.append(display_name)


def record_abort(outcome: DeploymentOutcome, exc: CatalogError) -> DeploymentOutcome:
    log.error("Catalog unavailable for %s reconciliation: %s", outcome.kind, exc)
    outcome.aborted = True
    outcome.abort_reason = str(exc)
    return outcome


def solution_sources(solutions: Iterable[SolutionEntry]) -> dict[str, SolutionRef]:
    """Index solutions by every identifier a template may use as its ``packageId``."""

    sources: dict[str, SolutionRef] = {}
    for solution in solutions:
        ref = SolutionRef(
            display_name=solution.display_name,
            package_id=solution.content_id or solution.id,
        )
        for package_id in solution.package_ids:
            sources.setdefault(package_id, ref)
    return sources


def scope_to_solutions[T: (RuleTemplateEntry, WorkbookTemplateEntry)](
    templates: Sequence[T],
    solutions: Iterable[SolutionEntry],
    solution_names: Collection[str],
) -> list[T]:
    """Keep the templates owned by one of the named solutions."""

    wanted = {name.casefold() for name in solution_names}
    package_ids: set[str] = set()
    for solution in solutions:
        if solution.display_name.casefold() in wanted:
            package_ids.update(solution.package_ids)
    return [template for template in templates if template.package_id in package_ids]
