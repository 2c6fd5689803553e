"""Classification results, planned actions and per-kind outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import ReconciliationAction, ResourceKind, Status

if TYPE_CHECKING:
    from .installed import InstalledResource


@dataclass(frozen=True, slots=True, kw_only=True)
class VersionDelta:
    installed: str
    available: str
    is_downgrade: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceStatus:
    """Outcome of classifying one catalog entry against the installed snapshot."""

    kind: ResourceKind
    display_name: str
    status: Status
    reason: str
    installed: InstalledResource | None = None
    version_delta: VersionDelta | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PlannedAction:
    status: ResourceStatus
    action: ReconciliationAction
    reason: str


@dataclass(slots=True)
class DeploymentOutcome:
    """Aggregated results of one reconciliation pass for a single resource kind.

    ``expected_failures`` are remote rejections known to be environment-related
    (missing tables/columns, unresolvable expressions); they are reported but do
    not count as failures. ``metadata_failures`` are entries whose content was
    written but whose metadata record was not.
    """

    kind: ResourceKind
    installed: list[str] = field(default_factory=list["str"])
    updated: list[str] = field(default_factory=list["str"])
    skipped: list[str] = field(default_factory=list["str"])
    special: list[str] = field(default_factory=list["str"])
    manual_review: list[str] = field(default_factory=list["str"])
    expected_failures: list[str] = field(default_factory=list["str"])
    failed: list[str] = field(default_factory=list["str"])
    metadata_failures: list[str] = field(default_factory=list["str"])
    aborted: bool = False
    abort_reason: str | None = None

    @property
    def failure_count(self) -> int:
        return len(self.failed) + (1 if self.aborted else 0)

    @property
    def changed(self) -> list[str]:
        return [*self.installed, *self.updated]

    def summary(self) -> str:
        if self.aborted:
            return f"{self.kind}: aborted ({self.abort_reason})"
        return (
            f"{self.kind}: installed={len(self.installed)}, updated={len(self.updated)}, "
            f"skipped={len(self.skipped)}, special={len(self.special)}, "
            f"manual_review={len(self.manual_review)}, "
            f"expected_failures={len(self.expected_failures)}, failed={len(self.failed)}, "
            f"metadata_failures={len(self.metadata_failures)}"
        )
