"""YAML-based clip profiles.

A profile file holds a ``default`` block and per-domain overrides::

    default:
      ready_timeout: 10
    domains:
      example.com:
        hero_limit: 1

The longest matching domain suffix wins.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from pageclip import settings


class ProfileError(ValueError):
    """Raised when a profile file cannot be read or holds unknown keys."""


@dataclass(frozen=True)
class ClipSettings:
    """Per-call knobs for :func:`pageclip.clip`."""

    ready_timeout: float | None = settings.READY_TIMEOUT
    hero_limit: int = settings.HERO_LIMIT
    selection_hero_min_width: int = settings.SELECTION_HERO_MIN_WIDTH
    selection_hero_min_height: int = settings.SELECTION_HERO_MIN_HEIGHT
    title_fallback: str = ""
    description_fallback: str = ""
    name_fallback: str = ""

    def merged(self, overrides: dict[str, Any]) -> ClipSettings:
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ProfileError(f"Unknown profile keys: {', '.join(unknown)}")
        return dataclasses.replace(self, **overrides)


def _domain_overrides(domains: Any, host: str) -> dict[str, Any]:
    """Overrides of the longest domain key that *host* equals or ends with."""
    if not host or not isinstance(domains, dict):
        return {}
    matches = [
        (len(key), cfg)
        for key, cfg in domains.items()
        if isinstance(key, str) and isinstance(cfg, dict)
        and (host == key.lower() or host.endswith("." + key.lower()))
    ]
    if not matches:
        return {}
    return max(matches, key=lambda m: m[0])[1]


def load_profile(path: str | Path, url: str) -> ClipSettings:
    """Load a YAML profile and return the merged settings for *url*."""
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ProfileError(f"Could not read profile {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {path} must be a mapping")

    overrides: dict[str, Any] = {}
    default = data.get("default") or {}
    if isinstance(default, dict):
        overrides.update(default)
    overrides.update(_domain_overrides(data.get("domains"), urlparse(url).hostname or ""))
    return ClipSettings().merged(overrides)
