# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: configuration loader for patchdiff. loads settings from a JSON file and environment
      variables, with sensible defaults. handles PyInstaller frozen executables by detecting
      the base directory correctly. returns a frozen Config dataclass with the report path,
      context window sizes, and the external tool settings the comparison run needs.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "PATCHDIFF_"


class ConfigError(ValueError):
    """Invalid configuration or run arguments; the run stops before comparing anything."""


# figure out where the app is running from (handles PyInstaller bundles)
def _resolve_base_dir() -> Path:
    import sys

    # if we are frozen (PyInstaller), use the executable's directory
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    # otherwise, go up one level from this file (dashboard/config.py -> project root)
    return Path(__file__).resolve().parents[1]


# frozen dataclass to hold all config values (immutable once created)
@dataclass(frozen=True)
class Config:
    base_dir: Path  # root directory of the project
    output_path: Path  # where the diff report is written
    context_before: int = 1  # unchanged lines shown before each changed line
    context_after: int = 1  # unchanged lines shown after each changed line
    objdump_path: str = "objdump"  # disassembler executable
    disassembler_timeout: float = 0.0  # seconds, 0 waits forever
    diff_timeout: float = 1.0  # seconds the diff oracle may spend per file, 0 = no limit


# get a config value with priority: environment variable > JSON file > default
def _get(obj: dict, key: str, default):
    # check for environment variable first (PATCHDIFF_* prefix)
    value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
    if value is None:
        # fall back to JSON file value, or default if not found
        value = obj.get(key, default)
    # coerce to the default's type; anything unusable falls back to the default
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
    if isinstance(default, float):
        try:
            return float(value)
        except (TypeError, ValueError):
            return default
    # for strings, only accept a string
    return value if isinstance(value, str) else default


def _load_json(cfg_file: Path) -> dict:
    if not cfg_file.exists():
        return {}
    try:
        obj = json.loads(cfg_file.read_text(encoding="utf-8") or "{}")
    except (json.JSONDecodeError, ValueError):
        # if JSON is broken, just use empty dict (all defaults)
        return {}
    return obj if isinstance(obj, dict) else {}


# load configuration from JSON file and environment variables
def load_config() -> Config:
    # base directory can be overridden by env var, otherwise auto-detect
    env_base = os.getenv(f"{ENV_PREFIX}BASE_DIR")
    base = Path(env_base or _resolve_base_dir())
    # config file lives in data/config.json
    obj = _load_json(base / "data" / "config.json")

    # a relative report path lands in the working directory, not next to the installed code
    report_dir = Path(env_base) if env_base else Path.cwd()

    # each value checks: env var > JSON file > default
    cfg = Config(
        base_dir=base,
        output_path=report_dir / _get(obj, "output_path", "diff.html"),
        context_before=_get(obj, "context_before", 1),
        context_after=_get(obj, "context_after", 1),
        objdump_path=_get(obj, "objdump_path", "objdump"),
        disassembler_timeout=_get(obj, "disassembler_timeout", 0.0),
        diff_timeout=_get(obj, "diff_timeout", 1.0),
    )
    validate(cfg)
    return cfg


def validate(cfg: Config) -> None:
    if cfg.context_before < 0 or cfg.context_after < 0:
        raise ConfigError("context_before and context_after must be non-negative")
    if cfg.disassembler_timeout < 0 or cfg.diff_timeout < 0:
        raise ConfigError("timeouts must be non-negative")
