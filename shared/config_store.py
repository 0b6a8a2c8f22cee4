"""Per-tool configuration lookup.

Each tool keeps a single JSON file in data/config/ named after the tool
(e.g. "business-application.json"). Values fall back to the hardcoded
defaults passed by the caller. Deployment settings can additionally be
overridden through environment variables, optionally loaded from the
project .env file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

CONFIG_DIR = Path(__file__).resolve().parent.parent / "data" / "config"

# Load .env from the project root (where deployment overrides live)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
if _ENV_PATH.exists():
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def load_config(tool_name: str) -> dict | None:
    """Load a tool's JSON config. Returns None if missing or unreadable."""
    path = CONFIG_DIR / f"{tool_name}.json"
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def get_config_value(tool_name: str, key: str, default: Any) -> Any:
    """Get a single key from a tool's config, with fallback to default."""
    config = load_config(tool_name)
    if config is None:
        return default
    return config.get(key, default)


def get_setting(tool_name: str, key: str, env_var: str, default: Any) -> Any:
    """Resolve a deployment setting.

    The environment variable wins when set to a non-empty string; otherwise
    the tool config is consulted, then *default*. Environment values are
    coerced to the type of *default* for ints and floats.
    """
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return get_config_value(tool_name, key, default)
    if isinstance(default, bool):
        return raw.lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            return default
    return raw
