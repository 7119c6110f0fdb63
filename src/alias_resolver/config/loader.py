"""Locate and read the optional TOML config file."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

DEFAULT_CONFIG_PATH = Path("config.toml")
CONFIG_PATH_ENV = "ALIAS_CONFIG"


def config_path(path: str | Path | None = None) -> Path:
    """Explicit ``path`` wins, then ``$ALIAS_CONFIG``, then ``./config.toml``."""

    if path is not None:
        return Path(path)
    return Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Return the parsed config as a plain dict.

    A missing file yields ``{}`` so every setting falls back to environment
    variables. Invalid TOML raises :class:`tomllib.TOMLDecodeError`.
    """
    target = config_path(path)
    if not target.is_file():
        return {}
    with target.open("rb") as handle:
        return tomllib.load(handle)


__all__ = ["load_raw_config", "config_path", "DEFAULT_CONFIG_PATH", "CONFIG_PATH_ENV"]
