"""Solutions orchestrator.

Solution installs are the only fan-out in a deployment: each qualifying
solution is dispatched as its own unit of work, paced by a fixed delay between
dispatches and bounded by a semaphore. The orchestrator joins every unit
before computing the outcome, and one failed install never cancels another.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sentinelsync.domain.model import DeploymentOutcome, ReconciliationAction, ResourceKind
from sentinelsync.domain.ports import CatalogError

from .classify import classify
from .normalize import normalize_packaged_content
from .outcomes import record_abort, record_failure, record_skip, record_success
from .policy import decide_action

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sentinelsync.domain.model import PlannedAction, SolutionEntry, WorkspaceParams
    from sentinelsync.domain.ports import CatalogClient

    from .policy import KindPolicy

log = getLogger(__name__)

DEFAULT_DISPATCH_DELAY_SECONDS = 1.0
DEFAULT_MAX_PARALLEL_INSTALLS = 8


@dataclass(slots=True)
class SolutionRunResult:
    """Outcome plus the hand-off consumed by rule and workbook reconciliation."""

    outcome: DeploymentOutcome
    changed: frozenset[str] = field(default_factory=frozenset["str"])
    already_installed: frozenset[str] = field(default_factory=frozenset["str"])
    dispatched: int = 0


@dataclass(slots=True, kw_only=True)
class SolutionReconciler:
    client: CatalogClient
    workspace: WorkspaceParams
    dispatch_delay_seconds: float = DEFAULT_DISPATCH_DELAY_SECONDS
    max_parallel: int = DEFAULT_MAX_PARALLEL_INSTALLS

    def run(self, requested: Iterable[str], policy: KindPolicy) -> SolutionRunResult:
        """Reconcile the requested solutions (by display name)."""

        outcome = DeploymentOutcome(kind=ResourceKind.SOLUTION)
        try:
            catalog = self.client.list_catalog_solutions()
            installed = self.client.list_installed_solution_packages()
        except CatalogError as exc:
            return SolutionRunResult(outcome=record_abort(outcome, exc))

        entries = self._select(catalog, requested, outcome)
        log.info(
            "Reconciling %s solutions (%s installed in workspace)", len(entries), len(installed)
        )

        pending: list[tuple[SolutionEntry, PlannedAction]] = []
        already_installed: set[str] = set()
        for entry in entries:
            planned = decide_action(classify(entry, installed), policy)
            if planned.action is ReconciliationAction.SKIP:
                record_skip(outcome, planned)
                if planned.status.installed is not None:
                    already_installed.add(entry.display_name)
                continue
            log.info("%s solution %r: %s", planned.action, entry.display_name, planned.reason)
            pending.append((entry, planned))

        if pending:
            results = asyncio.run(self._dispatch_all(pending))
            unexpected: BaseException | None = None
            for (entry, planned), error in zip(pending, results, strict=True):
                if error is None:
                    record_success(outcome, planned)
                elif isinstance(error, CatalogError):
                    record_failure(outcome, entry.display_name, error)
                    if planned.status.installed is not None:
                        already_installed.add(entry.display_name)
                else:
                    unexpected = unexpected or error
            if unexpected is not None:
                raise unexpected

        log.info(outcome.summary())
        return SolutionRunResult(
            outcome=outcome,
            changed=frozenset(outcome.changed),
            already_installed=frozenset(already_installed),
            dispatched=len(pending),
        )

    def _select(
        self,
        catalog: Sequence[SolutionEntry],
        requested: Iterable[str],
        outcome: DeploymentOutcome,
    ) -> list[SolutionEntry]:
        by_name: dict[str, SolutionEntry] = {}
        for entry in catalog:
            by_name.setdefault(entry.display_name.casefold(), entry)

        selected: list[SolutionEntry] = []
        seen: set[str] = set()
        for name in requested:
            key = name.strip().casefold()
            if not key or key in seen:
                continue
            seen.add(key)
            entry = by_name.get(key)
            if entry is None:
                log.warning("Solution %r is not offered by the content catalog", name)
                outcome.skipped.append(name)
                continue
            selected.append(entry)
        return selected

    async def _dispatch_all(
        self,
        pending: Sequence[tuple[SolutionEntry, PlannedAction]],
    ) -> list[BaseException | None]:
        semaphore = asyncio.Semaphore(max(1, self.max_parallel))
        tasks: list[asyncio.Task[None]] = []
        for index, (entry, _planned) in enumerate(pending):
            if index and self.dispatch_delay_seconds > 0:
                await asyncio.sleep(self.dispatch_delay_seconds)
            tasks.append(asyncio.create_task(self._install(entry, semaphore)))
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return [result if isinstance(result, BaseException) else None for result in results]

    async def _install(self, entry: SolutionEntry, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            await asyncio.to_thread(self._install_blocking, entry)

    def _install_blocking(self, entry: SolutionEntry) -> None:
        content = entry.packaged_content
        if content is None:
            content = self.client.get_solution_detail(entry.id)
        self.client.install_or_update_solution(
            entry.id,
            normalize_packaged_content(content),
            self.workspace,
        )
