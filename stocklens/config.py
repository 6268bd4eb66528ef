"""Settings and API keys for StockLens.

``configs/settings.yaml`` holds tunables, ``.env`` holds provider keys.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIGS_DIR = PROJECT_ROOT / "configs"

load_dotenv(PROJECT_ROOT / ".env")


def load_settings(path: Path = CONFIGS_DIR / "settings.yaml") -> dict:
    """Read the settings file; a missing or empty file yields ``{}``."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


SETTINGS = load_settings()


def setting(dotted_key: str, default: Any = None, settings: dict | None = None) -> Any:
    """Look up ``"section.key"`` in the settings, falling back to *default*."""
    node: Any = SETTINGS if settings is None else settings
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


class Keys:
    """Provider API keys. Alpha Vantage and FMP accept the public ``demo`` key."""

    ALPHA_VANTAGE = os.getenv("ALPHA_VANTAGE_API_KEY", "demo")
    FMP = os.getenv("FMP_API_KEY", "demo")
    POLYGON = os.getenv("POLYGON_API_KEY", "")
