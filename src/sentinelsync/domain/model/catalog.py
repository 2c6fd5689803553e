"""Catalog entries: content definitions offered by the remote registry.

Entries are read-only snapshots for the duration of one reconciliation pass.
Every variant exposes ``display_name``, ``version`` and ``match_key`` so the
classifier can treat the three kinds uniformly without probing payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from .enums import ResourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import Severity


@dataclass(frozen=True, slots=True, kw_only=True)
class SolutionEntry:
    """Packaged solution (content product package)."""

    kind: ClassVar[ResourceKind] = ResourceKind.SOLUTION

    id: str
    display_name: str
    version: str | None = None
    content_id: str | None = None
    packaged_content: Mapping[str, object] | None = None

    @property
    def match_key(self) -> str:
        return self.display_name

    @property
    def package_ids(self) -> frozenset[str]:
        """Identifiers templates may use to reference this solution as their package."""

        ids = {self.id}
        if self.content_id:
            ids.add(self.content_id)
        return frozenset(ids)


@dataclass(frozen=True, slots=True, kw_only=True)
class RuleTemplateEntry:
    """Analytics rule template shipped inside a solution package."""

    kind: ClassVar[ResourceKind] = ResourceKind.RULE

    id: str
    package_id: str | None
    display_name: str
    template_name: str
    severity: Severity | None = None
    template_version: str | None = None
    rule_kind: str = "Scheduled"
    rule_properties: Mapping[str, object] = field(default_factory=dict)

    @property
    def version(self) -> str | None:
        return self.template_version

    @property
    def match_key(self) -> str:
        return self.template_name


@dataclass(frozen=True, slots=True, kw_only=True)
class WorkbookTemplateEntry:
    """Workbook template shipped inside a solution package."""

    kind: ClassVar[ResourceKind] = ResourceKind.WORKBOOK

    id: str
    package_id: str | None
    display_name: str
    content_id: str
    version: str | None = None

    @property
    def match_key(self) -> str:
        return self.content_id


type CatalogEntry = SolutionEntry | RuleTemplateEntry | WorkbookTemplateEntry
