"""Port for reading and writing security content in a target workspace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from sentinelsync.domain.model import (
        InstalledRule,
        InstalledSolution,
        InstalledWorkbookMetadata,
        RuleRef,
        RuleTemplateEntry,
        Severity,
        SolutionEntry,
        SolutionRef,
        WorkbookTemplateDetail,
        WorkbookTemplateEntry,
        WorkspaceParams,
    )


class CatalogError(RuntimeError):
    """Base class for failures raised by catalog client implementations."""


class CatalogTransportError(CatalogError):
    """Network, timeout or authentication failure; the request never got a verdict."""


class CatalogApplicationError(CatalogError):
    """Structured rejection returned by the remote management API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404 or (self.code or "").casefold() in {
            "notfound",
            "resourcenotfound",
        }


@runtime_checkable
class CatalogClient(Protocol):
    """Pure I/O boundary; implementations carry no reconciliation logic."""

    def list_catalog_solutions(self) -> Sequence[SolutionEntry]: ...

    def get_solution_detail(self, solution_id: str) -> Mapping[str, object]: ...

    def list_installed_solution_packages(self) -> Sequence[InstalledSolution]: ...

    def install_or_update_solution(
        self,
        solution_id: str,
        packaged_content: Mapping[str, object],
        params: WorkspaceParams,
    ) -> None: ...

    def list_rule_templates(
        self,
        severities: Collection[Severity] | None = None,
    ) -> Sequence[RuleTemplateEntry]: ...

    def list_installed_rules(self) -> Sequence[InstalledRule]: ...

    def put_rule(
        self,
        rule_id: str,
        kind: str,
        properties: Mapping[str, object],
    ) -> RuleRef: ...

    def put_rule_metadata(
        self,
        rule: RuleRef,
        *,
        source: SolutionRef | None,
        template_name: str,
        template_version: str | None,
    ) -> None: ...

    def list_workbook_templates(self) -> Sequence[WorkbookTemplateEntry]: ...

    def list_installed_workbook_metadata(self) -> Sequence[InstalledWorkbookMetadata]: ...

    def get_workbook_template_detail(self, template_id: str) -> WorkbookTemplateDetail: ...

    def put_workbook(
        self,
        workbook_id: str,
        payload: Mapping[str, object],
        location: str,
    ) -> str: ...

    def delete_workbook(self, workbook_id: str) -> None: ...

    def delete_workbook_metadata(self, metadata_id: str) -> None: ...

    def put_workbook_metadata(self, metadata_id: str, payload: Mapping[str, object]) -> None: ...


__all__ = [
    "CatalogApplicationError",
    "CatalogClient",
    "CatalogError",
    "CatalogTransportError",
]
