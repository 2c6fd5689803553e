"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ResourceKind(StrEnum):
    SOLUTION = "solution"
    RULE = "rule"
    WORKBOOK = "workbook"


class Status(StrEnum):
    """Classification label computed fresh for every catalog entry on each pass."""

    # Solutions
    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"
    SPECIAL = "special"

    # Rules and workbooks
    MISSING = "missing"
    CURRENT = "current"
    NAME_MATCH = "name_match"
    DEPRECATED = "deprecated"

    # Workbooks only
    PREVIEW_MISSING = "preview_missing"
    PREVIEW_CURRENT = "preview_current"

    # Every kind
    NEEDS_UPDATE = "needs_update"


STATUSES_BY_KIND: dict[ResourceKind, frozenset[Status]] = {
    ResourceKind.SOLUTION: frozenset(
        {Status.NOT_INSTALLED, Status.INSTALLED, Status.NEEDS_UPDATE, Status.SPECIAL}
    ),
    ResourceKind.RULE: frozenset(
        {
            Status.MISSING,
            Status.CURRENT,
            Status.NEEDS_UPDATE,
            Status.NAME_MATCH,
            Status.DEPRECATED,
        }
    ),
    ResourceKind.WORKBOOK: frozenset(
        {
            Status.MISSING,
            Status.CURRENT,
            Status.NEEDS_UPDATE,
            Status.NAME_MATCH,
            Status.DEPRECATED,
            Status.PREVIEW_MISSING,
            Status.PREVIEW_CURRENT,
        }
    ),
}


class ReconciliationAction(StrEnum):
    INSTALL = "install"
    UPDATE = "update"
    SKIP = "skip"


class Severity(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFORMATIONAL = "Informational"

    @classmethod
    def parse(cls, value: str) -> Severity:
        normalized = value.strip().casefold()
        for member in cls:
            if member.value.casefold() == normalized:
                return member
        raise ValueError(f"Unknown severity: {value}")


DEFAULT_SEVERITIES: tuple[Severity, ...] = (
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFORMATIONAL,
)
