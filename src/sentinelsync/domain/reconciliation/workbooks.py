"""Workbooks orchestrator.

A workbook template resolves to two resources: the workbook object itself and
a metadata record linking it to the template. Workbook identifiers are
derived from (workspace, template content id, template version), so a version
change yields a new identity. When that happens the predecessor workbook and
its metadata record are deleted before the new pair is written; a predecessor
that is already gone counts as deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, uuid5

from sentinelsync.domain.model import (
    DeploymentOutcome,
    InstalledWorkbookMetadata,
    ReconciliationAction,
    ResourceKind,
)
from sentinelsync.domain.ports import CatalogApplicationError, CatalogError

from .classify import classify
from .outcomes import (
    record_abort,
    record_failure,
    record_skip,
    record_success,
    scope_to_solutions,
    solution_sources,
)
from .policy import decide_action

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping

    from sentinelsync.domain.model import PlannedAction, SolutionRef, WorkbookTemplateEntry
    from sentinelsync.domain.ports import CatalogClient

    from .policy import KindPolicy

log = getLogger(__name__)

DEFAULT_WORKBOOK_KIND = "shared"
DEFAULT_WORKBOOK_CATEGORY = "sentinel"


def workbook_identity(workspace_resource_id: str, content_id: str, version: str | None) -> str:
    """Deterministic workbook name for one template version in one workspace."""

    seed = f"{workspace_resource_id.casefold()}/{content_id}/{version or ''}"
    return str(uuid5(NAMESPACE_URL, seed))


def metadata_identity(content_id: str) -> str:
    return f"workbook-{content_id}"


@dataclass(slots=True, kw_only=True)
class WorkbookReconciler:
    client: CatalogClient
    workspace_resource_id: str
    location: str

    def run(
        self,
        policy: KindPolicy,
        *,
        solution_names: Collection[str] | None = None,
    ) -> DeploymentOutcome:
        """Reconcile workbook templates, optionally scoped to the named solutions."""

        outcome = DeploymentOutcome(kind=ResourceKind.WORKBOOK)
        try:
            solutions = self.client.list_catalog_solutions()
            templates = self.client.list_workbook_templates()
            installed = self.client.list_installed_workbook_metadata()
        except CatalogError as exc:
            return record_abort(outcome, exc)

        if solution_names is not None:
            templates = scope_to_solutions(templates, solutions, solution_names)
        sources = solution_sources(solutions)
        log.info(
            "Reconciling %s workbook templates against %s installed workbooks",
            len(templates),
            len(installed),
        )

        for template in templates:
            planned = decide_action(classify(template, installed), policy)
            if planned.action is ReconciliationAction.SKIP:
                record_skip(outcome, planned)
                continue
            source = sources.get(template.package_id) if template.package_id else None
            self._deploy(template, planned, source, outcome)

        log.info(outcome.summary())
        return outcome

    def _deploy(
        self,
        template: WorkbookTemplateEntry,
        planned: PlannedAction,
        source: SolutionRef | None,
        outcome: DeploymentOutcome,
    ) -> None:
        workbook_id = workbook_identity(
            self.workspace_resource_id, template.content_id, template.version
        )
        previous = planned.status.installed
        try:
            detail = self.client.get_workbook_template_detail(template.id)
            if (
                isinstance(previous, InstalledWorkbookMetadata)
                and previous.workbook_id
                and previous.workbook_id != workbook_id
            ):
                self._delete_predecessor(previous)
            resource_id = self.client.put_workbook(
                workbook_id,
                build_workbook_payload(detail.workbook, template, self.workspace_resource_id),
                self.location,
            )
        except CatalogError as exc:
            record_failure(outcome, template.display_name, exc)
            return
        record_success(outcome, planned)

        try:
            self.client.put_workbook_metadata(
                metadata_identity(template.content_id),
                build_workbook_metadata(detail.metadata, template, resource_id, source),
            )
        except CatalogError as exc:
            log.warning(
                "Workbook %r deployed but its metadata could not be written: %s",
                template.display_name,
                exc,
            )
            outcome.metadata_failures.append(template.display_name)

    def _delete_predecessor(self, previous: InstalledWorkbookMetadata) -> None:
        log.info("Replacing workbook %s (metadata %s)", previous.workbook_id, previous.id)
        if previous.workbook_id:
            _ignore_not_found(self.client.delete_workbook, previous.workbook_id)
        _ignore_not_found(self.client.delete_workbook_metadata, previous.id)


def _ignore_not_found(delete: Callable[[str], None], resource_id: str) -> None:
    try:
        delete(resource_id)
    except CatalogApplicationError as exc:
        if not exc.is_not_found:
            raise
        log.debug("%s already deleted", resource_id)


def _is_template_expression(value: object) -> bool:
    return isinstance(value, str) and value.startswith("[") and value.endswith("]")


def build_workbook_payload(
    resource: Mapping[str, object],
    template: WorkbookTemplateEntry,
    workspace_resource_id: str,
) -> dict[str, object]:
    """Workbook body with unresolved template expressions replaced."""

    raw_properties = resource.get("properties")
    properties: dict[str, object] = (
        dict(raw_properties) if isinstance(raw_properties, dict) else {}  # pyright: ignore[reportUnknownArgumentType]
    )
    if not isinstance(properties.get("displayName"), str) or _is_template_expression(
        properties.get("displayName")
    ):
        properties["displayName"] = template.display_name
    properties["sourceId"] = workspace_resource_id
    if not properties.get("category") or _is_template_expression(properties.get("category")):
        properties["category"] = DEFAULT_WORKBOOK_CATEGORY

    kind = resource.get("kind")
    return {
        "kind": kind if isinstance(kind, str) and kind else DEFAULT_WORKBOOK_KIND,
        "properties": properties,
    }


def build_workbook_metadata(
    resource: Mapping[str, object],
    template: WorkbookTemplateEntry,
    workbook_resource_id: str,
    source: SolutionRef | None,
) -> dict[str, object]:
    """Metadata body linking the written workbook to its template and solution."""

    raw_properties = resource.get("properties")
    properties: dict[str, object] = {}
    if isinstance(raw_properties, dict):
        properties = {
            str(key): value
            for key, value in raw_properties.items()  # pyright: ignore[reportUnknownVariableType]
            if not _is_template_expression(value)
        }
    properties["kind"] = "Workbook"
    properties["contentId"] = template.content_id
    properties["parentId"] = workbook_resource_id
    if template.version:
        properties["version"] = template.version
    if source is not None:
        properties["source"] = {
            "kind": "Solution",
            "name": source.display_name,
            "sourceId": source.package_id,
        }
    return {"properties": properties}
