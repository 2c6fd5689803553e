"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import (
    CatalogApplicationError,
    CatalogClient,
    CatalogError,
    CatalogTransportError,
)

__all__ = [
    "CatalogApplicationError",
    "CatalogClient",
    "CatalogError",
    "CatalogTransportError",
]
