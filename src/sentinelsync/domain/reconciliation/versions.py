"""Numeric-aware comparison of content version strings.

Registry versions are free-form strings (``"3.0.1"``, ``"2"``, ``"1.0.0-preview"``).
They are not parsed as semantic versions: each dot-separated component is split
into digit and non-digit runs, digit runs compare as integers and the rest
compares case-insensitively. That keeps ``"2" < "10"`` and ``"1.0.01" == "1.0.1"``
while still treating any other textual difference as a difference.
"""

from __future__ import annotations

import re
from typing import Final

_TOKEN_PATTERN: Final = re.compile(r"\d+|\D+")

type VersionKey = tuple[tuple[tuple[int, int | str], ...], ...]


def version_key(version: str) -> VersionKey:
    components = version.strip().lstrip("vV").split(".")
    key = [_component_key(component) for component in components]
    # "1.0" and "1.0.0" describe the same release.
    while len(key) > 1 and key[-1] == ((0, 0),):
        key.pop()
    return tuple(key)


def _component_key(component: str) -> tuple[tuple[int, int | str], ...]:
    tokens = _TOKEN_PATTERN.findall(component.strip())
    if not tokens:
        return ((0, 0),)
    return tuple((0, int(token)) if token.isdigit() else (1, token.casefold()) for token in tokens)


def versions_differ(installed: str, available: str) -> bool:
    return version_key(installed) != version_key(available)


def is_downgrade(installed: str, available: str) -> bool:
    """True when the catalog offers an older version than the one installed."""

    return version_key(available) < version_key(installed)
