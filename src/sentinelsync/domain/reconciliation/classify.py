"""Status classification of catalog entries against installed state.

One algorithm serves all three resource kinds:

1. a deprecated display name pre-empts every other check (solutions: ``SPECIAL``,
   together with preview solutions, since those may still be force-installed)
2. the entry is matched against the installed snapshot by its stable key
   (solution: display name, rule: template name, workbook: content id)
3. without a key match, rules and workbooks fall back to an exact display-name
   match, which yields the ambiguous ``NAME_MATCH``; otherwise the entry is missing
4. with a key match, versions are compared; a difference means ``NEEDS_UPDATE``
5. workbook preview markers turn ``CURRENT``/``MISSING`` into their preview variants

Classification is pure: policy flags are applied later by the orchestrators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sentinelsync.domain.model import (
    ResourceKind,
    ResourceStatus,
    Status,
    VersionDelta,
)

from .patterns import is_deprecated_name, is_preview_name
from .versions import is_downgrade, versions_differ

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sentinelsync.domain.model import CatalogEntry, InstalledResource


def classify(entry: CatalogEntry, installed: Iterable[InstalledResource]) -> ResourceStatus:
    """Classify ``entry`` against the installed resources of the same kind."""

    kind = entry.kind
    display_name = entry.display_name
    candidates = [resource for resource in installed if resource.kind is kind]

    if kind is ResourceKind.SOLUTION:
        special_reason = _special_solution_reason(display_name)
        if special_reason is not None:
            return ResourceStatus(
                kind=kind,
                display_name=display_name,
                status=Status.SPECIAL,
                reason=special_reason,
                installed=_match_by_key(entry, candidates),
            )
    elif is_deprecated_name(display_name):
        return ResourceStatus(
            kind=kind,
            display_name=display_name,
            status=Status.DEPRECATED,
            reason="display name carries a deprecated marker",
        )

    preview = kind is ResourceKind.WORKBOOK and is_preview_name(display_name)
    matched = _match_by_key(entry, candidates)

    if matched is None:
        if kind is not ResourceKind.SOLUTION:
            name_match = _match_by_display_name(display_name, candidates)
            if name_match is not None:
                return ResourceStatus(
                    kind=kind,
                    display_name=display_name,
                    status=Status.NAME_MATCH,
                    reason=(
                        "a resource with the same display name exists but is not linked "
                        f"to template {entry.match_key}"
                    ),
                    installed=name_match,
                )
        return ResourceStatus(
            kind=kind,
            display_name=display_name,
            status=_missing_status(kind, preview=preview),
            reason="no installed counterpart",
        )

    available = entry.version
    current = matched.version
    if available and current and versions_differ(current, available):
        return ResourceStatus(
            kind=kind,
            display_name=display_name,
            status=Status.NEEDS_UPDATE,
            reason=f"installed version {current} differs from available {available}",
            installed=matched,
            version_delta=VersionDelta(
                installed=current,
                available=available,
                is_downgrade=is_downgrade(current, available),
            ),
        )

    reason = (
        f"installed version {current} is current"
        if available and current
        else "version unknown on one side; treated as current"
    )
    return ResourceStatus(
        kind=kind,
        display_name=display_name,
        status=_current_status(kind, preview=preview),
        reason=reason,
        installed=matched,
    )


def _special_solution_reason(display_name: str) -> str | None:
    if is_deprecated_name(display_name):
        return "solution is deprecated"
    if is_preview_name(display_name):
        return "solution is in preview"
    return None


def _match_by_key(
    entry: CatalogEntry,
    candidates: list[InstalledResource],
) -> InstalledResource | None:
    key = entry.match_key
    if not key:
        return None
    if entry.kind is ResourceKind.SOLUTION:
        folded = key.casefold()
        return next(
            (
                resource
                for resource in candidates
                if (resource.match_key or "").casefold() == folded
            ),
            None,
        )
    return next((resource for resource in candidates if resource.match_key == key), None)


def _match_by_display_name(
    display_name: str,
    candidates: list[InstalledResource],
) -> InstalledResource | None:
    return next(
        (resource for resource in candidates if resource.display_name == display_name),
        None,
    )


def _missing_status(kind: ResourceKind, *, preview: bool) -> Status:
    if kind is ResourceKind.SOLUTION:
        return Status.NOT_INSTALLED
    if preview:
        return Status.PREVIEW_MISSING
    return Status.MISSING


def _current_status(kind: ResourceKind, *, preview: bool) -> Status:
    if kind is ResourceKind.SOLUTION:
        return Status.INSTALLED
    if preview:
        return Status.PREVIEW_CURRENT
    return Status.CURRENT
