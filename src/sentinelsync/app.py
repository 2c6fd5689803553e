"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sentinelsync.adapters.sentinel import SentinelClient, default_session
from sentinelsync.config import get_reconcile_settings, get_sentinel_config
from sentinelsync.domain.model import DEFAULT_SEVERITIES, WorkspaceParams
from sentinelsync.domain.reconciliation import (
    DeploymentCoordinator,
    DeploymentPolicy,
    RuleReconciler,
    SolutionReconciler,
    WorkbookReconciler,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Sequence

    from sentinelsync.config import ReconcileSettings, SentinelConfig
    from sentinelsync.domain.model import Severity
    from sentinelsync.domain.ports import CatalogClient
    from sentinelsync.domain.reconciliation import DeploymentReport

log = getLogger(__name__)

type ClientFactory = Callable[[SentinelConfig], CatalogClient]


def _default_client(config: SentinelConfig) -> CatalogClient:
    return SentinelClient(config=config, session=default_session(config.cloud))


def build_coordinator(
    client: CatalogClient,
    config: SentinelConfig,
    *,
    settings: ReconcileSettings,
    severities: Collection[Severity] = DEFAULT_SEVERITIES,
) -> DeploymentCoordinator:
    target = config.target
    return DeploymentCoordinator(
        solutions=SolutionReconciler(
            client=client,
            workspace=WorkspaceParams(workspace=target.workspace, location=target.region),
            dispatch_delay_seconds=settings.dispatch_delay_seconds,
            max_parallel=settings.max_parallel_installs,
        ),
        rules=RuleReconciler(client=client, severities=severities),
        workbooks=WorkbookReconciler(
            client=client,
            workspace_resource_id=target.workspace_resource_id,
            location=target.region,
        ),
        settle_delay_seconds=settings.settle_delay_seconds,
    )


def deploy_sentinel_content(
    solutions: Sequence[str],
    *,
    severities: Collection[Severity] = DEFAULT_SEVERITIES,
    policy: DeploymentPolicy | None = None,
    subscription_id: str | None = None,
    resource_group: str | None = None,
    workspace: str | None = None,
    region: str | None = None,
    is_gov: bool | None = None,
    client_factory: ClientFactory | None = None,
    settings: ReconcileSettings | None = None,
) -> DeploymentReport:
    """Reconcile the requested solutions and their rules and workbooks into one workspace."""

    config = get_sentinel_config(
        subscription_id=subscription_id,
        resource_group=resource_group,
        workspace=workspace,
        region=region,
        is_gov=is_gov,
    )
    effective_settings = settings or get_reconcile_settings()
    client = (client_factory or _default_client)(config)
    log.info(
        "Starting Sentinel content deployment: workspace=%s, resource_group=%s, cloud=%s, "
        "solutions=%s, severities=%s",
        config.target.workspace,
        config.target.resource_group,
        config.cloud.name,
        len(solutions),
        ", ".join(severities),
    )

    coordinator = build_coordinator(
        client, config, settings=effective_settings, severities=severities
    )
    try:
        report = coordinator.deploy(solutions, policy or DeploymentPolicy())
    finally:
        if isinstance(client, SentinelClient):
            client.close()

    log.info(
        "Finished Sentinel content deployment: failures=%s, succeeded=%s",
        report.failure_count,
        report.succeeded,
    )
    return report
