"""Policy stage: turn classifications into reconciliation actions.

The mapping is deterministic given the status and the per-kind flags:

- ``DEPRECATED`` and ``NAME_MATCH`` are always skipped
- ``CURRENT``/``INSTALLED`` are skipped unless ``redeploy_existing`` asks for an update
  (workbooks only)
- ``NEEDS_UPDATE`` is updated unless ``skip_updates`` is set
- ``MISSING``/``NOT_INSTALLED`` (and the preview variant) are installed
- ``SPECIAL`` solutions are skipped unless ``force`` is set
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sentinelsync.domain.model import PlannedAction, ReconciliationAction, ResourceKind, Status

if TYPE_CHECKING:
    from sentinelsync.domain.model import ResourceStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class KindPolicy:
    """Caller flags for one resource kind."""

    force: bool = False
    skip_updates: bool = False
    skip_deployment: bool = False
    redeploy_existing: bool = False
    force_dependent: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class DeploymentPolicy:
    solutions: KindPolicy = field(default_factory=KindPolicy)
    rules: KindPolicy = field(default_factory=KindPolicy)
    workbooks: KindPolicy = field(default_factory=KindPolicy)


_INSTALL_STATUSES = frozenset({Status.MISSING, Status.NOT_INSTALLED, Status.PREVIEW_MISSING})
_CURRENT_STATUSES = frozenset({Status.CURRENT, Status.INSTALLED, Status.PREVIEW_CURRENT})


def decide_action(status: ResourceStatus, policy: KindPolicy) -> PlannedAction:
    """Map one classification to an action under ``policy``."""

    label = status.status
    action = ReconciliationAction.SKIP

    if label is Status.DEPRECATED:
        reason = "deprecated content is never deployed"
    elif label is Status.NAME_MATCH:
        reason = "display name collides with an unlinked resource; needs manual reconciliation"
    elif label in _INSTALL_STATUSES:
        action = ReconciliationAction.INSTALL
        reason = "not installed"
    elif label is Status.NEEDS_UPDATE:
        if policy.skip_updates:
            reason = "update available but updates are disabled"
        else:
            action = ReconciliationAction.UPDATE
            reason = status.reason
    elif label in _CURRENT_STATUSES:
        if policy.redeploy_existing and status.kind is ResourceKind.WORKBOOK:
            action = ReconciliationAction.UPDATE
            reason = "redeploying current content on request"
        else:
            reason = "already current"
    elif label is Status.SPECIAL:
        if policy.force:
            action = ReconciliationAction.INSTALL
            reason = f"forced install ({status.reason})"
        else:
            reason = status.reason
    else:
        reason = f"unhandled status {label}"

    return PlannedAction(status=status, action=action, reason=reason)
