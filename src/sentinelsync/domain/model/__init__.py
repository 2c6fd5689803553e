"""Domain model for security-content reconciliation."""

from __future__ import annotations

from .catalog import CatalogEntry, RuleTemplateEntry, SolutionEntry, WorkbookTemplateEntry
from .enums import (
    DEFAULT_SEVERITIES,
    STATUSES_BY_KIND,
    ReconciliationAction,
    ResourceKind,
    Severity,
    Status,
)
from .installed import (
    InstalledResource,
    InstalledRule,
    InstalledSolution,
    InstalledWorkbookMetadata,
    RuleRef,
    SolutionRef,
    WorkbookTemplateDetail,
    WorkspaceParams,
)
from .status import DeploymentOutcome, PlannedAction, ResourceStatus, VersionDelta

__all__ = [
    "DEFAULT_SEVERITIES",
    "STATUSES_BY_KIND",
    "CatalogEntry",
    "DeploymentOutcome",
    "InstalledResource",
    "InstalledRule",
    "InstalledSolution",
    "InstalledWorkbookMetadata",
    "PlannedAction",
    "ReconciliationAction",
    "ResourceKind",
    "ResourceStatus",
    "RuleRef",
    "RuleTemplateEntry",
    "Severity",
    "SolutionEntry",
    "SolutionRef",
    "Status",
    "VersionDelta",
    "WorkbookTemplateDetail",
    "WorkbookTemplateEntry",
    "WorkspaceParams",
]
