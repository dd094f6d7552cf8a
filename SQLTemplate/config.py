#!/usr/bin/env python3

"""YAML configuration for SQLTemplate.

One configuration is loaded per process and shared. Its ``db`` section holds
the psycopg2 connection settings plus the pool options understood by
:meth:`SQLTemplate.db.DatabaseManager.from_config`::

    db:
      host: localhost
      database: app
      user: app
      pool:
        maxconn: 5

The file is looked up in this order: the path passed to `get_config` or
`reload_config`, the `SQLTEMPLATE_CONFIG` environment variable, then
`./config.yml`. Only a missing default file is tolerated (empty config).
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


ENV_VAR = "SQLTEMPLATE_CONFIG"
DEFAULT_PATH = "./config.yml"

_LOCK = threading.RLock()
_CONFIG: Optional["Config"] = None
_CONFIG_PATH: Optional[str] = None


@dataclass
class Config:
    raw: Dict[str, Any] = field(default_factory=dict)

    def get(self, path: str, default: Any = None) -> Any:
        """Look up a nested key such as ``'db.pool.maxconn'``."""
        node: Any = self.raw
        for key in path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    @property
    def db(self) -> Dict[str, Any]:
        """The database section, or an empty dict when absent."""
        section = self.raw.get("db") or {}
        if not isinstance(section, dict):
            raise ValueError("Configuration key 'db' must be a mapping")
        return section


def _read(path: str, required: bool) -> Dict[str, Any]:
    source = Path(path)
    if not source.exists():
        if required:
            raise FileNotFoundError(f"Configuration file not found: {path}")
        return {}

    with source.open("r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root in {path} must be a mapping")
    return data


def _load(path: Optional[str], refresh: bool) -> Config:
    global _CONFIG, _CONFIG_PATH
    with _LOCK:
        if _CONFIG is not None and not refresh:
            return _CONFIG

        env_path = os.environ.get(ENV_VAR)
        resolved = path or env_path or DEFAULT_PATH
        _CONFIG = Config(raw=_read(resolved, required=bool(path or env_path)))
        _CONFIG_PATH = resolved
        return _CONFIG


def get_config(path: Optional[str] = None) -> Config:
    """Return the shared Config, loading it on first use.

    Once loaded, later calls return the same instance regardless of
    ``path``; use `reload_config` to read a file again.
    """
    return _load(path, refresh=False)


def reload_config(path: Optional[str] = None) -> Config:
    """Re-read the configuration from ``path`` or the file used last."""
    return _load(path if path is not None else _CONFIG_PATH, refresh=True)


def configured() -> bool:
    return _CONFIG is not None


def set_config_for_testing(cfg: Optional[Config]) -> None:
    """Replace the shared configuration; None forgets it entirely."""
    global _CONFIG, _CONFIG_PATH
    with _LOCK:
        _CONFIG = cfg
        if cfg is None:
            _CONFIG_PATH = None
