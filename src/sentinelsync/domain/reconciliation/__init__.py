"""Reconciliation core for security content.

Layered flow per resource kind:
1) fetch catalog entries and the installed snapshot through the catalog port
2) optionally scope entries to the solutions that changed in this run
3) classify every entry (pure, policy-free)
4) map classifications to actions under the caller's policy flags
5) normalize template payloads and execute installs/updates
6) aggregate per-entry results into a ``DeploymentOutcome``

``DeploymentCoordinator`` sequences the kinds: solutions first, then rules
and workbooks scoped to the solutions that changed.
"""

from __future__ import annotations

from .classify import classify
from .coordinator import DeploymentCoordinator, DeploymentReport
from .normalize import normalize_duration, normalize_packaged_content, normalize_rule_properties
from .policy import DeploymentPolicy, KindPolicy, decide_action
from .rules import RuleReconciler
from .solutions import SolutionReconciler, SolutionRunResult
from .workbooks import WorkbookReconciler

__all__ = [
    "DeploymentCoordinator",
    "DeploymentPolicy",
    "DeploymentReport",
    "KindPolicy",
    "RuleReconciler",
    "SolutionReconciler",
    "SolutionRunResult",
    "WorkbookReconciler",
    "classify",
    "decide_action",
    "normalize_duration",
    "normalize_packaged_content",
    "normalize_rule_properties",
]
