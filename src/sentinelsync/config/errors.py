"""Configuration errors raised before any request reaches Azure."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A configuration value is present but unusable (bad number, bad flag, ...)."""


class MissingConfigurationError(ConfigurationError):
    """One or more required settings were neither passed explicitly nor set in the environment."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
