"""
YAML → UserSettings loader.

Loads default settings from settings.yaml (bundled with the package) and
optionally merges user overrides from ~/.gzclp-sync/settings.yaml.

Usage:
    from gzclp_sync.core.engine.config_loader import load_settings
    settings = load_settings()
    settings.rest_timers["T1"]

If the user override file has parse errors or invalid values, a warning is
emitted and the override is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_REST_TIMERS
from ..models import VALID_TIERS, VALID_UNITS, UserSettings

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; raise ValueError on anything else."""
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _settings_from_dict(data: dict[str, Any]) -> UserSettings:
    unit = data.get("weight_unit", "kg")
    if unit not in VALID_UNITS:
        raise ValueError(f"weight_unit must be one of {VALID_UNITS}, got {unit!r}")

    timers = dict(DEFAULT_REST_TIMERS)
    for tier, seconds in (data.get("rest_timers") or {}).items():
        if tier not in VALID_TIERS:
            raise ValueError(f"Unknown tier in rest_timers: {tier!r}")
        if not isinstance(seconds, int) or isinstance(seconds, bool) or seconds < 0:
            raise ValueError(f"rest_timers.{tier} must be a non-negative integer")
        timers[tier] = seconds

    return UserSettings(weight_unit=unit, rest_timers=timers)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path:
    """Return the path to the bundled settings.yaml."""
    ref = importlib.resources.files("gzclp_sync").joinpath("settings.yaml")
    with importlib.resources.as_file(ref) as p:
        return p


def get_user_yaml_path() -> Path | None:
    """Return ~/.gzclp-sync/settings.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".gzclp-sync" / "settings.yaml"
    return p if p.exists() else None


def load_settings(user_path: Path | None = None) -> UserSettings:
    """
    Load and merge user settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/gzclp_sync/settings.yaml
    2. ``user_path``, or ~/.gzclp-sync/settings.yaml when not given

    A broken override is reported with ``warnings.warn`` and skipped; the
    bundled defaults are always valid.
    """
    defaults = _load_yaml_file(get_bundled_yaml_path())

    override_path = user_path if user_path is not None else get_user_yaml_path()
    if override_path is None or not override_path.exists():
        return _settings_from_dict(defaults)

    try:
        return _settings_from_dict(_deep_merge(defaults, _load_yaml_file(override_path)))
    except ValueError as e:
        warnings.warn(f"Ignoring settings override: {e}", stacklevel=2)
        return _settings_from_dict(defaults)
