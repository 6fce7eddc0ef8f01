"""Config file loading with environment and CLI overrides."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from .constants import BASE_URL_ENV_VAR
from .domain.config import ClientConfig


def read_config_file(path: str) -> dict[str, Any]:
    """Read a JSON config file into a raw mapping.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or not a JSON object
    """
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")
    return data


def load_config(
    path: Optional[str] = None,
    *,
    base_url: Optional[str] = None,
) -> ClientConfig:
    """Load client config.

    Precedence (lowest to highest): built-in defaults, config file,
    ``INFRACHAT_BASE_URL`` environment variable, explicit ``base_url``.
    """
    raw: dict[str, Any] = read_config_file(path) if path else {}

    env_base_url = os.environ.get(BASE_URL_ENV_VAR)
    if env_base_url:
        raw["base_url"] = env_base_url
    if base_url:
        raw["base_url"] = base_url

    return ClientConfig.from_dict(raw)
