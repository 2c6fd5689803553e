from __future__ import annotations

from typing import TYPE_CHECKING

from sentinelsync.app import deploy_sentinel_content
from sentinelsync.config import ReconcileSettings
from sentinelsync.domain.model import Severity
from sentinelsync.domain.reconciliation import DeploymentPolicy, KindPolicy
from tests.support.fake_catalog import (
    FakeCatalogClient,
    make_rule_template,
    make_solution,
    make_workbook_template,
)

if TYPE_CHECKING:
    from sentinelsync.config import SentinelConfig

NO_DELAYS = ReconcileSettings(settle_delay_seconds=0, dispatch_delay_seconds=0)


def _catalog() -> FakeCatalogClient:
    dns = make_solution("DNS")
    return FakeCatalogClient(
        solutions=[dns],
        rule_templates=[
            make_rule_template("High Rule", solution=dns, severity=Severity.HIGH),
            make_rule_template("Low Rule", solution=dns, severity=Severity.LOW),
        ],
        workbook_templates=[make_workbook_template("DNS Workbook", solution=dns)],
    )


def test_deploy_wires_configuration_into_every_stage() -> None:
    catalog = _catalog()
    seen: list[SentinelConfig] = []

    def factory(config: SentinelConfig) -> FakeCatalogClient:
        seen.append(config)
        return catalog

    report = deploy_sentinel_content(
        ["DNS"],
        severities=(Severity.HIGH,),
        subscription_id="sub",
        resource_group="rg",
        workspace="ws",
        region="eastus",
        client_factory=factory,
        settings=NO_DELAYS,
    )

    assert report.succeeded
    assert report.solutions.installed == ["DNS"]
    assert report.rules is not None
    assert report.rules.installed == ["High Rule"]
    assert report.workbooks is not None
    assert report.workbooks.installed == ["DNS Workbook"]
    (config,) = seen
    assert config.target.workspace == "ws"
    (workbook,) = catalog.workbooks.values()
    assert workbook["location"] == "eastus"
    properties = workbook["properties"]
    assert isinstance(properties, dict)
    assert properties["sourceId"] == config.target.workspace_resource_id


def test_deploy_honours_policy() -> None:
    catalog = _catalog()

    report = deploy_sentinel_content(
        ["DNS"],
        policy=DeploymentPolicy(workbooks=KindPolicy(skip_deployment=True)),
        subscription_id="sub",
        resource_group="rg",
        workspace="ws",
        region="eastus",
        client_factory=lambda _config: catalog,
        settings=NO_DELAYS,
    )

    assert report.rules is not None
    assert sorted(report.rules.installed) == ["High Rule", "Low Rule"]
    assert report.workbooks is None
    assert catalog.calls_to("list_workbook_templates") == []
