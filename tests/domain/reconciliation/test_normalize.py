from __future__ import annotations

import pytest

from sentinelsync.domain.reconciliation import (
    normalize_duration,
    normalize_packaged_content,
    normalize_rule_properties,
)
from sentinelsync.domain.reconciliation.normalize import default_grouping_configuration


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("4h", "PT4H"),
        ("2d", "P2D"),
        ("30m", "PT30M"),
        ("PT1H", "PT1H"),
        ("5 minutes", "5 minutes"),
        (5, 5),
    ],
)
def test_normalize_duration(raw: object, expected: object) -> None:
    assert normalize_duration(raw) == expected


def test_scalar_tactics_are_wrapped_in_a_list() -> None:
    normalized = normalize_rule_properties({"tactics": "Persistence", "techniques": ["T1098"]})

    assert normalized["tactics"] == ["Persistence"]
    assert normalized["techniques"] == ["T1098"]


def test_single_element_incident_configuration_is_unwrapped() -> None:
    normalized = normalize_rule_properties(
        {"incidentConfiguration": [{"createIncident": True, "groupingConfiguration": {}}]},
        rule_kind="Scheduled",
    )

    incident = normalized["incidentConfiguration"]
    assert isinstance(incident, dict)
    assert incident["createIncident"] is True
    assert incident["groupingConfiguration"] == default_grouping_configuration()


def test_missing_grouping_configuration_is_defaulted_for_scheduled_rules() -> None:
    normalized = normalize_rule_properties(
        {"incidentConfiguration": {"createIncident": True}}, rule_kind="NRT"
    )

    incident = normalized["incidentConfiguration"]
    assert isinstance(incident, dict)
    grouping = incident["groupingConfiguration"]
    assert isinstance(grouping, dict)
    assert grouping["matchingMethod"] == "AllEntities"
    assert grouping["lookbackDuration"] == "PT1H"
    assert grouping["enabled"] is False


def test_existing_grouping_configuration_is_kept_and_normalized() -> None:
    normalized = normalize_rule_properties(
        {
            "incidentConfiguration": {
                "createIncident": True,
                "groupingConfiguration": {
                    "enabled": True,
                    "lookbackDuration": "5h",
                    "matchingMethod": "Selected",
                    "groupByEntities": "Account",
                },
            }
        },
        rule_kind="Scheduled",
    )

    incident = normalized["incidentConfiguration"]
    assert isinstance(incident, dict)
    assert incident["groupingConfiguration"] == {
        "enabled": True,
        "lookbackDuration": "PT5H",
        "matchingMethod": "Selected",
        "groupByEntities": ["Account"],
    }


def test_fusion_rules_do_not_get_a_grouping_default() -> None:
    normalized = normalize_rule_properties(
        {"incidentConfiguration": {"createIncident": True}}, rule_kind="Fusion"
    )

    assert normalized["incidentConfiguration"] == {"createIncident": True}


def test_entity_mapping_field_mappings_are_wrapped() -> None:
    normalized = normalize_rule_properties(
        {
            "entityMappings": {
                "entityType": "Account",
                "fieldMappings": {"identifier": "FullName", "columnName": "Account"},
            }
        }
    )

    assert normalized["entityMappings"] == [
        {
            "entityType": "Account",
            "fieldMappings": [{"identifier": "FullName", "columnName": "Account"}],
        }
    ]


def test_rule_durations_are_converted() -> None:
    normalized = normalize_rule_properties(
        {"queryFrequency": "1h", "queryPeriod": "14d", "suppressionDuration": "PT5H"}
    )

    assert normalized["queryFrequency"] == "PT1H"
    assert normalized["queryPeriod"] == "P14D"
    assert normalized["suppressionDuration"] == "PT5H"


def test_rule_normalization_does_not_mutate_input_and_is_idempotent() -> None:
    raw: dict[str, object] = {
        "tactics": "Execution",
        "queryFrequency": "4h",
        "incidentConfiguration": [{"createIncident": False}],
        "alertDetailsOverride": {"alertDynamicProperties": {"alertProperty": "ProductName"}},
    }

    once = normalize_rule_properties(raw, rule_kind="Scheduled")
    twice = normalize_rule_properties(once, rule_kind="Scheduled")

    assert raw["tactics"] == "Execution"
    assert raw["incidentConfiguration"] == [{"createIncident": False}]
    assert once == twice


def test_unrecognized_shapes_pass_through() -> None:
    raw: dict[str, object] = {"customDetails": [{"a": "b"}, {"c": "d"}], "query": 42}

    assert normalize_rule_properties(raw) == raw


def test_packaged_content_post_deployment_hooks_are_removed() -> None:
    content: dict[str, object] = {
        "parameters": {"workspace": {"type": "string"}},
        "resources": [
            {"type": "Microsoft.OperationalInsights/workspaces/providers/metadata"},
            {"type": "Microsoft.Resources/deploymentScripts", "name": "hook"},
            {
                "type": "Microsoft.OperationalInsights/workspaces/providers/contentPackages",
                "properties": {"postDeployment": ["step"], "version": "3.0.0"},
            },
        ],
        "postDeploymentSteps": [{"name": "configure"}],
    }

    normalized = normalize_packaged_content(content)

    assert "postDeploymentSteps" not in normalized
    resources = normalized["resources"]
    assert isinstance(resources, list)
    assert [resource["type"] for resource in resources] == [
        "Microsoft.OperationalInsights/workspaces/providers/metadata",
        "Microsoft.OperationalInsights/workspaces/providers/contentPackages",
    ]
    assert resources[1]["properties"] == {"version": "3.0.0"}
    assert len(content["resources"]) == 3  # type: ignore[arg-type]
    assert normalize_packaged_content(normalized) == normalized
