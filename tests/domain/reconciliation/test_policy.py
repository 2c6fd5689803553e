from __future__ import annotations

import pytest

from sentinelsync.domain.model import ReconciliationAction, ResourceKind, ResourceStatus, Status
from sentinelsync.domain.reconciliation import KindPolicy, decide_action


def _status(label: Status, kind: ResourceKind = ResourceKind.RULE) -> ResourceStatus:
    return ResourceStatus(kind=kind, display_name="Entry", status=label, reason="test")


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        (Status.MISSING, ReconciliationAction.INSTALL),
        (Status.NOT_INSTALLED, ReconciliationAction.INSTALL),
        (Status.PREVIEW_MISSING, ReconciliationAction.INSTALL),
        (Status.NEEDS_UPDATE, ReconciliationAction.UPDATE),
        (Status.CURRENT, ReconciliationAction.SKIP),
        (Status.INSTALLED, ReconciliationAction.SKIP),
        (Status.PREVIEW_CURRENT, ReconciliationAction.SKIP),
        (Status.NAME_MATCH, ReconciliationAction.SKIP),
        (Status.DEPRECATED, ReconciliationAction.SKIP),
        (Status.SPECIAL, ReconciliationAction.SKIP),
    ],
)
def test_default_policy(label: Status, expected: ReconciliationAction) -> None:
    assert decide_action(_status(label), KindPolicy()).action is expected


def test_skip_updates_turns_needs_update_into_skip() -> None:
    planned = decide_action(_status(Status.NEEDS_UPDATE), KindPolicy(skip_updates=True))

    assert planned.action is ReconciliationAction.SKIP


def test_redeploy_existing_updates_current_workbooks() -> None:
    policy = KindPolicy(redeploy_existing=True)
    workbook = ResourceKind.WORKBOOK

    assert (
        decide_action(_status(Status.CURRENT, workbook), policy).action
        is ReconciliationAction.UPDATE
    )
    assert (
        decide_action(_status(Status.PREVIEW_CURRENT, workbook), policy).action
        is ReconciliationAction.UPDATE
    )


@pytest.mark.parametrize(
    ("kind", "label"),
    [
        (ResourceKind.RULE, Status.CURRENT),
        (ResourceKind.SOLUTION, Status.INSTALLED),
    ],
)
def test_redeploy_existing_is_ignored_outside_workbooks(kind: ResourceKind, label: Status) -> None:
    planned = decide_action(_status(label, kind), KindPolicy(redeploy_existing=True))

    assert planned.action is ReconciliationAction.SKIP


def test_force_installs_special_solutions() -> None:
    planned = decide_action(
        _status(Status.SPECIAL, ResourceKind.SOLUTION), KindPolicy(force=True)
    )

    assert planned.action is ReconciliationAction.INSTALL


def test_name_match_and_deprecated_ignore_every_flag() -> None:
    policy = KindPolicy(force=True, redeploy_existing=True)

    assert decide_action(_status(Status.NAME_MATCH), policy).action is ReconciliationAction.SKIP
    assert decide_action(_status(Status.DEPRECATED), policy).action is ReconciliationAction.SKIP
