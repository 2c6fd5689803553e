"""Bearer-token authentication for Azure Resource Manager requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential

from sentinelsync.domain.ports import CatalogTransportError

if TYPE_CHECKING:
    from collections.abc import Generator

    from azure.core.credentials import TokenCredential

    from sentinelsync.config.sentinel import CloudEnvironment


@dataclass(frozen=True, slots=True)
class ArmSession:
    """Credentials plus the cloud they are valid for."""

    credential: TokenCredential
    cloud: CloudEnvironment


def default_session(cloud: CloudEnvironment) -> ArmSession:
    credential = DefaultAzureCredential(authority=cloud.authority_host)
    return ArmSession(credential=credential, cloud=cloud)


class TokenCredentialAuth(httpx.Auth):
    """httpx auth flow that stamps each request with a fresh ARM access token."""

    def __init__(self, session: ArmSession) -> None:
        self._session = session

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        try:
            token = self._session.credential.get_token(self._session.cloud.token_scope)
        except AzureError as exc:
            raise CatalogTransportError(f"Could not acquire an ARM token: {exc}") from exc
        request.headers["Authorization"] = f"Bearer {token.token}"
        yield request
