"""Timing and concurrency defaults for reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int

DEFAULT_SETTLE_DELAY_SECONDS = 60.0
DEFAULT_DISPATCH_DELAY_SECONDS = 1.0
DEFAULT_MAX_PARALLEL_INSTALLS = 8


@dataclass(frozen=True, slots=True)
class ReconcileSettings:
    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS
    dispatch_delay_seconds: float = DEFAULT_DISPATCH_DELAY_SECONDS
    max_parallel_installs: int = DEFAULT_MAX_PARALLEL_INSTALLS


def get_reconcile_settings() -> ReconcileSettings:
    return ReconcileSettings(
        settle_delay_seconds=env_float(
            "SENTINEL_SETTLE_DELAY_SECONDS", default=DEFAULT_SETTLE_DELAY_SECONDS
        ),
        dispatch_delay_seconds=env_float(
            "SENTINEL_DISPATCH_DELAY_SECONDS", default=DEFAULT_DISPATCH_DELAY_SECONDS
        ),
        max_parallel_installs=env_int(
            "SENTINEL_MAX_PARALLEL_INSTALLS", default=DEFAULT_MAX_PARALLEL_INSTALLS
        ),
    )
