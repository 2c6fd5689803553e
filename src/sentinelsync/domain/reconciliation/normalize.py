"""Template normalization ahead of install/update requests.

Content templates published in the registry are not always shaped the way the
write API accepts them. This module coerces the known inconsistencies:

- scalar values where a list is expected are wrapped in a list
- one-element lists where an object is expected are unwrapped
- shorthand durations (``4h``, ``2d``, ``30m``) become ISO-8601 durations
- an absent or empty incident grouping configuration gets a conservative default
- post-deployment hooks are stripped from packaged solution content

Every function returns a new structure, is idempotent, and never raises:
shapes it does not recognise are passed through untouched and left for the
write API to accept or reject.
"""

from __future__ import annotations

import copy
import re
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

type JsonObject = dict[str, Any]

_DURATION_PATTERN: Final = re.compile(r"^\s*(\d+)\s*([hdm])\s*$", re.IGNORECASE)

_LIST_FIELDS: Final[tuple[str, ...]] = (
    "tactics",
    "techniques",
    "subTechniques",
    "entityMappings",
    "sentinelEntitiesMappings",
)
_OBJECT_FIELDS: Final[tuple[str, ...]] = (
    "incidentConfiguration",
    "eventGroupingSettings",
    "alertDetailsOverride",
    "customDetails",
)
_DURATION_FIELDS: Final[tuple[str, ...]] = (
    "queryFrequency",
    "queryPeriod",
    "suppressionDuration",
)
_GROUPING_LIST_FIELDS: Final[tuple[str, ...]] = (
    "groupByEntities",
    "groupByAlertDetails",
    "groupByCustomDetails",
)
_INCIDENT_RULE_KINDS: Final[frozenset[str]] = frozenset({"scheduled", "nrt"})

_POST_DEPLOYMENT_KEYS: Final[frozenset[str]] = frozenset(
    {"postdeployment", "postdeploymentsteps"}
)
_HOOK_RESOURCE_TYPES: Final[frozenset[str]] = frozenset(
    {"microsoft.resources/deploymentscripts"}
)

DEFAULT_LOOKBACK_DURATION: Final = "PT1H"
DEFAULT_MATCHING_METHOD: Final = "AllEntities"


def default_grouping_configuration() -> dict[str, object]:
    return {
        "enabled": False,
        "reopenClosedIncident": False,
        "lookbackDuration": DEFAULT_LOOKBACK_DURATION,
        "matchingMethod": DEFAULT_MATCHING_METHOD,
        "groupByEntities": [],
        "groupByAlertDetails": [],
        "groupByCustomDetails": [],
    }


def normalize_duration(value: object) -> object:
    """Rewrite ``<N>h``/``<N>d``/``<N>m`` into ISO-8601; anything else is returned as-is."""

    if not isinstance(value, str):
        return value
    match = _DURATION_PATTERN.match(value)
    if match is None:
        return value
    amount, unit = match.group(1), match.group(2).lower()
    if unit == "d":
        return f"P{amount}D"
    return f"PT{amount}{unit.upper()}"


def normalize_rule_properties(
    properties: Mapping[str, object],
    *,
    rule_kind: str | None = None,
) -> dict[str, object]:
    """Return a copy of analytics-rule ``properties`` in the shape the write API expects."""

    normalized: JsonObject = copy.deepcopy(dict(properties))

    for key in _OBJECT_FIELDS:
        _unwrap_object(normalized, key)
    for key in _LIST_FIELDS:
        _wrap_list(normalized, key)

    mappings = normalized.get("entityMappings")
    if isinstance(mappings, list):
        for mapping in mappings:
            if isinstance(mapping, dict):
                _wrap_list(mapping, "fieldMappings")

    override = normalized.get("alertDetailsOverride")
    if isinstance(override, dict):
        _wrap_list(override, "alertDynamicProperties")

    for key in _DURATION_FIELDS:
        if key in normalized:
            normalized[key] = normalize_duration(normalized[key])

    if (rule_kind or "").casefold() in _INCIDENT_RULE_KINDS:
        _normalize_incident_configuration(normalized)

    return normalized


def normalize_packaged_content(content: Mapping[str, object]) -> dict[str, object]:
    """Return a copy of solution ``content`` without post-deployment hooks."""

    stripped = _strip_hooks(copy.deepcopy(dict(content)))
    if isinstance(stripped, dict):
        return stripped
    return dict(content)


def _normalize_incident_configuration(properties: JsonObject) -> None:
    incident = properties.get("incidentConfiguration")
    if not isinstance(incident, dict):
        return

    _unwrap_object(incident, "groupingConfiguration")
    grouping = incident.get("groupingConfiguration")
    if grouping is None or grouping == {} or grouping == []:
        incident["groupingConfiguration"] = default_grouping_configuration()
        return
    if not isinstance(grouping, dict):
        return

    for key in _GROUPING_LIST_FIELDS:
        _wrap_list(grouping, key)
    if "lookbackDuration" in grouping:
        grouping["lookbackDuration"] = normalize_duration(grouping["lookbackDuration"])


def _wrap_list(container: JsonObject, key: str) -> None:
    value = container.get(key)
    if value is None or isinstance(value, list):
        return
    container[key] = [value]


def _unwrap_object(container: JsonObject, key: str) -> None:
    value = container.get(key)
    if isinstance(value, list) and len(value) == 1 and isinstance(value[0], dict):
        container[key] = value[0]


def _strip_hooks(node: object) -> object:
    if isinstance(node, dict):
        cleaned: dict[str, object] = {}
        for key, value in node.items():
            if isinstance(key, str) and key.casefold() in _POST_DEPLOYMENT_KEYS:
                continue
            if key == "resources" and isinstance(value, list):
                value = [item for item in value if not _is_hook_resource(item)]  # noqa: PLW2901
            cleaned[str(key)] = _strip_hooks(value)
        return cleaned
    if isinstance(node, list):
        return [_strip_hooks(item) for item in node]
    return node


def _is_hook_resource(resource: object) -> bool:
    if not isinstance(resource, dict):
        return False
    resource_type = resource.get("type")
    return isinstance(resource_type, str) and resource_type.casefold() in _HOOK_RESOURCE_TYPES
