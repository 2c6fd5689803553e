"""Installed resources and write-side references."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from .enums import ResourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class InstalledSolution:
    kind: ClassVar[ResourceKind] = ResourceKind.SOLUTION

    display_name: str
    version: str | None = None
    content_id: str | None = None

    @property
    def match_key(self) -> str:
        return self.display_name


@dataclass(frozen=True, slots=True, kw_only=True)
class InstalledRule:
    kind: ClassVar[ResourceKind] = ResourceKind.RULE

    id: str
    display_name: str
    alert_rule_template_name: str | None = None
    template_version: str | None = None
    rule_kind: str | None = None
    properties: Mapping[str, object] = field(default_factory=dict)

    @property
    def version(self) -> str | None:
        return self.template_version

    @property
    def match_key(self) -> str | None:
        return self.alert_rule_template_name


@dataclass(frozen=True, slots=True, kw_only=True)
class InstalledWorkbookMetadata:
    """Metadata record linking an installed workbook to its template."""

    kind: ClassVar[ResourceKind] = ResourceKind.WORKBOOK

    id: str
    content_id: str | None
    display_name: str | None = None
    version: str | None = None
    parent_id: str | None = None

    @property
    def match_key(self) -> str | None:
        return self.content_id

    @property
    def workbook_id(self) -> str | None:
        """Name of the workbook object this record points at (last ``parentId`` segment)."""

        if not self.parent_id:
            return None
        return self.parent_id.rstrip("/").rsplit("/", 1)[-1] or None


type InstalledResource = InstalledSolution | InstalledRule | InstalledWorkbookMetadata


@dataclass(frozen=True, slots=True, kw_only=True)
class WorkspaceParams:
    """Parameters handed to solution deployments."""

    workspace: str
    location: str


@dataclass(frozen=True, slots=True, kw_only=True)
class SolutionRef:
    """Source solution recorded in rule/workbook metadata."""

    display_name: str
    package_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class RuleRef:
    """Reference to a rule written by ``put_rule``."""

    name: str
    resource_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class WorkbookTemplateDetail:
    """Workbook and metadata resources embedded in a workbook template."""

    workbook: Mapping[str, object]
    metadata: Mapping[str, object] = field(default_factory=dict)
