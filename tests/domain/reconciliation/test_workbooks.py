from __future__ import annotations

from sentinelsync.domain.model import InstalledWorkbookMetadata
from sentinelsync.domain.ports import CatalogApplicationError
from sentinelsync.domain.reconciliation import KindPolicy, WorkbookReconciler
from sentinelsync.domain.reconciliation.workbooks import metadata_identity, workbook_identity
from tests.support.fake_catalog import (
    RESOURCE_GROUP_ID,
    WORKSPACE_ID,
    FakeCatalogClient,
    make_solution,
    make_workbook_template,
)

DNS = make_solution("DNS")


def _reconciler(client: FakeCatalogClient) -> WorkbookReconciler:
    return WorkbookReconciler(client=client, workspace_resource_id=WORKSPACE_ID, location="eastus")


def _installed(content_id: str, version: str, workbook_id: str) -> InstalledWorkbookMetadata:
    return InstalledWorkbookMetadata(
        id=metadata_identity(content_id),
        content_id=content_id,
        version=version,
        parent_id=f"{RESOURCE_GROUP_ID}/providers/Microsoft.Insights/workbooks/{workbook_id}",
    )


def test_workbook_identity_is_deterministic_per_version() -> None:
    first = workbook_identity(WORKSPACE_ID, "workbook-dns", "1.0.0")

    assert first == workbook_identity(WORKSPACE_ID.upper(), "workbook-dns", "1.0.0")
    assert first != workbook_identity(WORKSPACE_ID, "workbook-dns", "1.0.1")
    assert first != workbook_identity(WORKSPACE_ID, "workbook-other", "1.0.0")


def test_unlinked_workbook_with_the_same_name_is_left_alone() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS)
    manual = InstalledWorkbookMetadata(
        id="hand-made",
        content_id=None,
        display_name="DNS Overview",
        parent_id=f"{RESOURCE_GROUP_ID}/providers/Microsoft.Insights/workbooks/hand-made",
    )
    client = FakeCatalogClient(
        solutions=[DNS], workbook_templates=[template], installed_workbooks=[manual]
    )

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert outcome.skipped == ["DNS Overview"]
    assert outcome.manual_review == ["DNS Overview"]
    assert client.calls_to("put_workbook") == []
    assert client.calls_to("delete_workbook") == []


def test_install_writes_workbook_and_metadata() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS)
    client = FakeCatalogClient(solutions=[DNS], workbook_templates=[template])

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    workbook_id = workbook_identity(WORKSPACE_ID, template.content_id, template.version)
    assert outcome.installed == ["DNS Overview"]
    written = client.workbooks[workbook_id]
    assert written["kind"] == "shared"
    assert written["location"] == "eastus"
    properties = written["properties"]
    assert isinstance(properties, dict)
    assert properties["displayName"] == "DNS Overview"
    assert properties["sourceId"] == WORKSPACE_ID
    assert properties["serializedData"] == "{}"

    metadata = client.workbook_metadata[metadata_identity(template.content_id)]["properties"]
    assert isinstance(metadata, dict)
    assert metadata["kind"] == "Workbook"
    assert metadata["contentId"] == template.content_id
    assert metadata["version"] == "1.0.0"
    assert str(metadata["parentId"]).endswith(f"/workbooks/{workbook_id}")
    assert metadata["description"] == "DNS Overview workbook"
    assert metadata["source"] == {"kind": "Solution", "name": "DNS", "sourceId": DNS.id}


def test_preview_workbook_counts_as_installed() -> None:
    template = make_workbook_template("DNS Insights (Preview)", solution=DNS)
    client = FakeCatalogClient(solutions=[DNS], workbook_templates=[template])

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert outcome.installed == ["DNS Insights (Preview)"]


def test_version_change_replaces_predecessor_and_ignores_missing_workbook() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS, version="2.0.0")
    previous = _installed(template.content_id, "1.0.0", "old-workbook")
    client = FakeCatalogClient(
        solutions=[DNS], workbook_templates=[template], installed_workbooks=[previous]
    )

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert outcome.updated == ["DNS Overview"]
    assert outcome.failure_count == 0
    assert client.calls_to("delete_workbook") == ["old-workbook"]
    assert client.calls_to("delete_workbook_metadata") == [previous.id]
    new_id = workbook_identity(WORKSPACE_ID, template.content_id, "2.0.0")
    assert client.calls_to("put_workbook") == [new_id]


def test_failed_predecessor_delete_is_a_failure_and_nothing_is_written() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS, version="2.0.0")
    previous = _installed(template.content_id, "1.0.0", "old-workbook")
    client = FakeCatalogClient(
        solutions=[DNS], workbook_templates=[template], installed_workbooks=[previous]
    )
    client.fail(
        "delete_workbook", "old-workbook", CatalogApplicationError("Locked", status_code=409)
    )

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert outcome.failed == ["DNS Overview"]
    assert client.calls_to("put_workbook") == []


def test_redeploy_existing_overwrites_in_place() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS)
    workbook_id = workbook_identity(WORKSPACE_ID, template.content_id, template.version)
    current = _installed(template.content_id, "1.0.0", workbook_id)
    client = FakeCatalogClient(
        solutions=[DNS], workbook_templates=[template], installed_workbooks=[current]
    )

    skipped = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])
    redeployed = _reconciler(client).run(KindPolicy(redeploy_existing=True), solution_names=["DNS"])

    assert skipped.skipped == ["DNS Overview"]
    assert redeployed.updated == ["DNS Overview"]
    assert client.calls_to("delete_workbook") == []
    assert client.calls_to("put_workbook") == [workbook_id]


def test_metadata_failure_keeps_the_workbook() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS)
    client = FakeCatalogClient(solutions=[DNS], workbook_templates=[template])
    client.fail("put_workbook_metadata", "*", CatalogApplicationError("Bad", status_code=400))

    outcome = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert outcome.installed == ["DNS Overview"]
    assert outcome.metadata_failures == ["DNS Overview"]
    assert outcome.failure_count == 0


def test_second_pass_is_idempotent() -> None:
    template = make_workbook_template("DNS Overview", solution=DNS)
    client = FakeCatalogClient(solutions=[DNS], workbook_templates=[template])

    _reconciler(client).run(KindPolicy(), solution_names=["DNS"])
    second = _reconciler(client).run(KindPolicy(), solution_names=["DNS"])

    assert second.changed == []
    assert second.skipped == ["DNS Overview"]
    assert len(client.calls_to("put_workbook")) == 1
