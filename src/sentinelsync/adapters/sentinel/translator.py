"""Translate ARM content payloads into domain entries."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sentinelsync.domain.model import (
    InstalledRule,
    InstalledSolution,
    InstalledWorkbookMetadata,
    RuleTemplateEntry,
    Severity,
    SolutionEntry,
    WorkbookTemplateDetail,
    WorkbookTemplateEntry,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from .schema import (
        AlertRuleResource,
        ContentPackageResource,
        ContentTemplateResource,
        MetadataResource,
        WorkbookResource,
    )

log = getLogger(__name__)

RULE_RESOURCE_SUFFIXES = ("/alertruletemplates", "/alertrules")
WORKBOOK_RESOURCE_TYPE = "microsoft.insights/workbooks"
METADATA_RESOURCE_SUFFIX = "/metadata"


def to_solution_entry(resource: ContentPackageResource) -> SolutionEntry | None:
    props = resource.properties
    if not props.display_name:
        log.debug("Skipping content package %s without a display name", resource.name)
        return None
    return SolutionEntry(
        id=resource.name,
        display_name=props.display_name,
        version=props.version,
        content_id=props.content_id,
        packaged_content=props.packaged_content,
    )


def to_installed_solution(resource: ContentPackageResource) -> InstalledSolution | None:
    props = resource.properties
    if not props.display_name:
        return None
    return InstalledSolution(
        display_name=props.display_name,
        version=props.version,
        content_id=props.content_id,
    )


def to_rule_template(resource: ContentTemplateResource) -> RuleTemplateEntry | None:
    """Build a rule template entry from the rule resource embedded in ``mainTemplate``."""

    props = resource.properties
    rule_resource = _find_resource(props.main_template, _is_rule_resource)
    if rule_resource is None:
        log.debug("Template %s carries no alert rule resource; skipping", resource.name)
        return None

    rule_properties = _as_dict(rule_resource.get("properties"))
    display_name = _as_str(rule_properties.get("displayName")) or props.display_name
    if not display_name:
        log.debug("Template %s has no display name; skipping", resource.name)
        return None

    return RuleTemplateEntry(
        id=resource.name,
        package_id=props.package_id,
        display_name=display_name,
        template_name=props.content_id or resource.name,
        severity=_parse_severity(rule_properties.get("severity"), resource.name),
        template_version=props.version,
        rule_kind=_as_str(rule_resource.get("kind")) or "Scheduled",
        rule_properties=rule_properties,
    )


def to_installed_rule(resource: AlertRuleResource) -> InstalledRule:
    props = resource.properties
    return InstalledRule(
        id=resource.name,
        display_name=_as_str(props.get("displayName")) or resource.name,
        alert_rule_template_name=_as_str(props.get("alertRuleTemplateName")),
        template_version=_as_version(props.get("templateVersion")),
        rule_kind=resource.kind,
        properties=props,
    )


def to_workbook_template(resource: ContentTemplateResource) -> WorkbookTemplateEntry:
    props = resource.properties
    content_id = props.content_id or resource.name
    display_name = props.display_name or content_id
    return WorkbookTemplateEntry(
        id=resource.name,
        package_id=props.package_id,
        display_name=display_name,
        content_id=content_id,
        version=props.version,
    )


def to_installed_workbook_metadata(resource: MetadataResource) -> InstalledWorkbookMetadata:
    props = resource.properties
    return InstalledWorkbookMetadata(
        id=resource.name,
        content_id=props.content_id,
        display_name=props.display_name,
        version=props.version,
        parent_id=props.parent_id,
    )


def to_installed_workbooks(
    metadata: Iterable[MetadataResource],
    workbooks: Iterable[WorkbookResource],
) -> list[InstalledWorkbookMetadata]:
    """Join workbook metadata records with the workbooks they point at.

    Metadata carries no display name of its own, so it is taken from the linked
    workbook. Workbooks no record points at are returned as unlinked records
    (``content_id`` is None): they can only ever match a template by name.
    """

    by_name = {workbook.name.casefold(): workbook for workbook in workbooks}
    linked: set[str] = set()
    installed: list[InstalledWorkbookMetadata] = []
    for resource in metadata:
        record = to_installed_workbook_metadata(resource)
        key = (record.workbook_id or "").casefold()
        workbook = by_name.get(key)
        if workbook is not None:
            linked.add(key)
            if record.display_name is None:
                record = replace(record, display_name=workbook.properties.display_name)
        installed.append(record)

    installed.extend(
        _unlinked_workbook(workbook) for key, workbook in by_name.items() if key not in linked
    )
    return installed


def split_workbook_template(resource: ContentTemplateResource) -> WorkbookTemplateDetail:
    """Pick the workbook and its metadata record out of a workbook template."""

    main_template = resource.properties.main_template
    workbook = _find_resource(main_template, _is_workbook_resource)
    if workbook is None:
        raise ValueError(f"Workbook template {resource.name} contains no workbook resource")
    metadata = _find_resource(main_template, _is_metadata_resource) or {}
    return WorkbookTemplateDetail(workbook=workbook, metadata=metadata)


def _unlinked_workbook(workbook: WorkbookResource) -> InstalledWorkbookMetadata:
    return InstalledWorkbookMetadata(
        id=workbook.name,
        content_id=None,
        display_name=workbook.properties.display_name,
        parent_id=workbook.id or workbook.name,
    )


def _iter_resources(main_template: Mapping[str, Any] | None) -> Iterator[dict[str, Any]]:
    if not main_template:
        return
    resources = main_template.get("resources")
    if not isinstance(resources, list):
        return
    for item in resources:
        if isinstance(item, dict):
            yield item


def _find_resource(
    main_template: Mapping[str, Any] | None,
    predicate: Callable[[Mapping[str, Any]], bool],
) -> dict[str, Any] | None:
    return next((item for item in _iter_resources(main_template) if predicate(item)), None)


def _resource_type(resource: Mapping[str, Any]) -> str:
    value = resource.get("type")
    return value.casefold() if isinstance(value, str) else ""


def _is_rule_resource(resource: Mapping[str, Any]) -> bool:
    return _resource_type(resource).endswith(RULE_RESOURCE_SUFFIXES)


def _is_workbook_resource(resource: Mapping[str, Any]) -> bool:
    return _resource_type(resource) == WORKBOOK_RESOURCE_TYPE


def _is_metadata_resource(resource: Mapping[str, Any]) -> bool:
    return _resource_type(resource).endswith(METADATA_RESOURCE_SUFFIX)


def _parse_severity(value: object, template_name: str) -> Severity | None:
    if not isinstance(value, str):
        return None
    try:
        return Severity.parse(value)
    except ValueError:
        log.debug("Template %s has unknown severity %r", template_name, value)
        return None


def _as_dict(value: object) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _as_version(value: object) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return _as_str(value)
