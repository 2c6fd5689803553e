"""Shared fixtures for Sentinel adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sentinelsync.adapters.sentinel import SentinelClient
from tests.support.arm import make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sentinelsync.config import SentinelConfig
    from tests.support.arm import Handler


@pytest.fixture
def make_sentinel_client(
    sentinel_config: SentinelConfig,
) -> Iterator[Callable[[Handler], SentinelClient]]:
    built: list[SentinelClient] = []

    def build(handler: Handler) -> SentinelClient:
        client = SentinelClient(
            config=sentinel_config,
            client_factory=make_client_factory(handler),
            deployment_poll_seconds=0,
        )
        built.append(client)
        return client

    yield build
    for client in built:
        client.close()
