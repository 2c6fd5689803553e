"""Target workspace and cloud environment configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_flag, resolve_values
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

SECURITY_INSIGHTS_API_VERSION: Final = "2025-03-01"
WORKBOOKS_API_VERSION: Final = "2022-04-01"
DEPLOYMENTS_API_VERSION: Final = "2021-04-01"

ARM_TIMEOUT_SECONDS: Final = 120.0


@dataclass(frozen=True, slots=True)
class CloudEnvironment:
    """Endpoints of one Azure cloud."""

    name: str
    resource_manager: str
    authority_host: str

    @property
    def token_scope(self) -> str:
        return f"{self.resource_manager.rstrip('/')}/.default"


AZURE_PUBLIC_CLOUD: Final = CloudEnvironment(
    name="AzureCloud",
    resource_manager="https://management.azure.com",
    authority_host="https://login.microsoftonline.com",
)
AZURE_US_GOVERNMENT: Final = CloudEnvironment(
    name="AzureUSGovernment",
    resource_manager="https://management.usgovcloudapi.net",
    authority_host="https://login.microsoftonline.us",
)


def get_cloud_environment(*, is_gov: bool | None = None) -> CloudEnvironment:
    gov = env_flag("SENTINEL_IS_GOV") if is_gov is None else is_gov
    return AZURE_US_GOVERNMENT if gov else AZURE_PUBLIC_CLOUD


@dataclass(frozen=True, slots=True)
class WorkspaceTarget:
    """The Log Analytics workspace hosting the Sentinel content."""

    subscription_id: str
    resource_group: str
    workspace: str
    region: str

    @property
    def resource_group_path(self) -> str:
        return f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"

    @property
    def workspace_resource_id(self) -> str:
        return (
            f"{self.resource_group_path}/providers/Microsoft.OperationalInsights"
            f"/workspaces/{self.workspace}"
        )


@dataclass(frozen=True, slots=True)
class SentinelConfig:
    target: WorkspaceTarget
    cloud: CloudEnvironment
    resilience: ResilienceConfig


def default_resilience_config(cloud: CloudEnvironment) -> ResilienceConfig:
    return ResilienceConfig(
        name="arm",
        base_url=cloud.resource_manager,
        timeout_seconds=ARM_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=5),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def get_sentinel_config(
    *,
    subscription_id: str | None = None,
    resource_group: str | None = None,
    workspace: str | None = None,
    region: str | None = None,
    is_gov: bool | None = None,
    resilience: ResilienceConfig | None = None,
) -> SentinelConfig:
    """Build the target configuration from explicit values, falling back to the environment."""

    values = resolve_values(
        {
            "AZURE_SUBSCRIPTION_ID": subscription_id,
            "SENTINEL_RESOURCE_GROUP": resource_group,
            "SENTINEL_WORKSPACE": workspace,
            "SENTINEL_REGION": region,
        }
    )
    cloud = get_cloud_environment(is_gov=is_gov)
    return SentinelConfig(
        target=WorkspaceTarget(
            subscription_id=values["AZURE_SUBSCRIPTION_ID"],
            resource_group=values["SENTINEL_RESOURCE_GROUP"],
            workspace=values["SENTINEL_WORKSPACE"],
            region=values["SENTINEL_REGION"],
        ),
        cloud=cloud,
        resilience=resilience or default_resilience_config(cloud),
    )
