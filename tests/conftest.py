from __future__ import annotations

import pytest

from sentinelsync.config import (
    AZURE_PUBLIC_CLOUD,
    ResilienceConfig,
    RetryPolicy,
    SentinelConfig,
    WorkspaceTarget,
)
from tests.support.fake_catalog import FakeCatalogClient, make_solution

SENTINEL_ENV_VARS = (
    "AZURE_SUBSCRIPTION_ID",
    "SENTINEL_RESOURCE_GROUP",
    "SENTINEL_WORKSPACE",
    "SENTINEL_REGION",
    "SENTINEL_IS_GOV",
    "SENTINEL_SETTLE_DELAY_SECONDS",
    "SENTINEL_DISPATCH_DELAY_SECONDS",
    "SENTINEL_MAX_PARALLEL_INSTALLS",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in SENTINEL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sentinel_config() -> SentinelConfig:
    return SentinelConfig(
        target=WorkspaceTarget(
            subscription_id="sub",
            resource_group="rg",
            workspace="ws",
            region="eastus",
        ),
        cloud=AZURE_PUBLIC_CLOUD,
        resilience=ResilienceConfig(
            name="arm-test",
            base_url=AZURE_PUBLIC_CLOUD.resource_manager,
            retry=RetryPolicy(total=0),
        ),
    )


@pytest.fixture
def fake_catalog() -> FakeCatalogClient:
    return FakeCatalogClient(solutions=[make_solution("Azure Activity"), make_solution("DNS")])
