from __future__ import annotations

import httpx
import pytest
from azure.core.credentials import AccessToken
from azure.core.exceptions import AzureError, ClientAuthenticationError, ServiceRequestError

from sentinelsync.adapters.sentinel import ArmSession, TokenCredentialAuth
from sentinelsync.config import AZURE_US_GOVERNMENT
from sentinelsync.domain.ports import CatalogTransportError


class FakeCredential:
    def __init__(self, *, fail: AzureError | None = None) -> None:
        self.fail = fail
        self.scopes: list[tuple[str, ...]] = []

    def get_token(self, *scopes: str, **_kwargs: object) -> AccessToken:
        self.scopes.append(scopes)
        if self.fail is not None:
            raise self.fail
        return AccessToken("token-value", 4102444800)


def test_requests_carry_a_bearer_token_for_the_cloud_scope() -> None:
    credential = FakeCredential()
    auth = TokenCredentialAuth(ArmSession(credential=credential, cloud=AZURE_US_GOVERNMENT))
    request = httpx.Request("GET", "https://management.usgovcloudapi.net/subscriptions")

    sent = next(auth.auth_flow(request))

    assert sent.headers["Authorization"] == "Bearer token-value"
    assert credential.scopes == [("https://management.usgovcloudapi.net/.default",)]


@pytest.mark.parametrize(
    "error",
    [
        ClientAuthenticationError("no credential available"),
        ServiceRequestError("token endpoint unreachable"),
    ],
)
def test_credential_failures_become_transport_errors(error: AzureError) -> None:
    auth = TokenCredentialAuth(
        ArmSession(credential=FakeCredential(fail=error), cloud=AZURE_US_GOVERNMENT)
    )
    request = httpx.Request("GET", "https://management.usgovcloudapi.net/subscriptions")

    with pytest.raises(CatalogTransportError):
        next(auth.auth_flow(request))
