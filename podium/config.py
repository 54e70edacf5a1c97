"""
podium.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for **infrastructure-only** settings (app identity,
dashboard port, team defaults, session lifetime).  Secrets and connection
strings come from the environment (``.env``), never from this file.

Usage::

    from podium.config import load_config

    cfg = load_config()            # reads ./config.yaml by default
    print(cfg.app_name)            # "Podium"
    print(cfg.default_max_athletes)  # 50
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PodiumConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str

    # Dashboard
    dashboard_port: int

    # Teams
    default_max_athletes: int  # Member cap applied to newly created teams

    # Join codes: when True an ambiguous code is rejected instead of
    # resolving to the first matching team.
    strict_team_codes: bool = False

    # Auth
    session_ttl_hours: int = 12


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> PodiumConfig:
    """Read *path* and return a :class:`PodiumConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return PodiumConfig(
        app_name=raw["app_name"],
        dashboard_port=int(raw["dashboard_port"]),
        default_max_athletes=int(raw["default_max_athletes"]),
        strict_team_codes=bool(raw.get("strict_team_codes", False)),
        session_ttl_hours=int(raw.get("session_ttl_hours", 12)),
    )
