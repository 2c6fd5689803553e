"""Text patterns that drive special-casing of display names and remote errors.

Kept apart from the orchestrators so the lists can grow without touching any
control flow.
"""

from __future__ import annotations

import re
from typing import Final

DEPRECATED_MARKERS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\[\s*deprecated\s*\]", re.IGNORECASE),
    re.compile(r"\(\s*deprecated\s*\)", re.IGNORECASE),
    re.compile(r"^\s*deprecated\s*[-:]", re.IGNORECASE),
)

PREVIEW_MARKERS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\[\s*preview\s*\]", re.IGNORECASE),
    re.compile(r"\(\s*preview\s*\)", re.IGNORECASE),
)

# Rejections from the query engine that depend on the workspace's data
# sources rather than on the content itself.
EXPECTED_FAILURE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"table.*(does not exist|could not be found|not found)", re.IGNORECASE),
    re.compile(r"failed to resolve table", re.IGNORECASE),
    re.compile(r"column.*(does not exist|could not be found|not found|missing)", re.IGNORECASE),
    re.compile(r"failed to resolve (scalar expression|column)", re.IGNORECASE),
    re.compile(r"invalid (query )?expression", re.IGNORECASE),
    re.compile(r"semantic error", re.IGNORECASE),
)


def _matches_any(patterns: tuple[re.Pattern[str], ...], text: str | None) -> bool:
    if not text:
        return False
    return any(pattern.search(text) for pattern in patterns)


def is_deprecated_name(display_name: str | None) -> bool:
    return _matches_any(DEPRECATED_MARKERS, display_name)


def is_preview_name(display_name: str | None) -> bool:
    return _matches_any(PREVIEW_MARKERS, display_name)


def is_expected_failure(message: str | None) -> bool:
    """Return True when a remote rejection is environment-related and skippable."""

    return _matches_any(EXPECTED_FAILURE_PATTERNS, message)
