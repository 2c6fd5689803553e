"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, env_int, require_env_vars, resolve_values
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconcile import ReconcileSettings, get_reconcile_settings
from .sentinel import (
    AZURE_PUBLIC_CLOUD,
    AZURE_US_GOVERNMENT,
    DEPLOYMENTS_API_VERSION,
    SECURITY_INSIGHTS_API_VERSION,
    WORKBOOKS_API_VERSION,
    CloudEnvironment,
    SentinelConfig,
    WorkspaceTarget,
    get_cloud_environment,
    get_sentinel_config,
)

__all__ = [
    "AZURE_PUBLIC_CLOUD",
    "AZURE_US_GOVERNMENT",
    "DEPLOYMENTS_API_VERSION",
    "SECURITY_INSIGHTS_API_VERSION",
    "WORKBOOKS_API_VERSION",
    "CloudEnvironment",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileSettings",
    "ResilienceConfig",
    "RetryPolicy",
    "SentinelConfig",
    "WorkspaceTarget",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_int",
    "get_cloud_environment",
    "get_reconcile_settings",
    "get_sentinel_config",
    "require_env_vars",
    "resolve_values",
]
