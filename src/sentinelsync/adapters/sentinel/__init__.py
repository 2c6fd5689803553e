"""Microsoft Sentinel adapter: the catalog port over Azure Resource Manager."""

from __future__ import annotations

from .auth import ArmSession, TokenCredentialAuth, default_session
from .client import SentinelClient, deployment_name

__all__ = [
    "ArmSession",
    "SentinelClient",
    "TokenCredentialAuth",
    "default_session",
    "deployment_name",
]
