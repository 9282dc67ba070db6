"""Static configuration for beacon.

All user-editable settings (message catalog, evaluation attributes, engine
and logging) live in a single JSON file for quick edits without touching
Python. BEACON_CONFIG and BEACON_DB_PATH can point elsewhere, via the
environment or a .env file.
"""

import json
import os

from dotenv import load_dotenv

from core.config import EngineConfig

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to store the SQLite database (message metadata and telemetry events).
DB_PATH = os.getenv("BEACON_DB_PATH") or os.path.join(os.path.dirname(__file__), "beacon.db")

# The catalog is read from this file on every request, so edits apply on the
# next selection without a restart.
CONFIG_PATH = os.getenv("BEACON_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Attributes the trigger expressions are evaluated against, e.g.
# {"is_default_browser": false, "days_since_install": 3}.
CONTEXT_ATTRIBUTES = _CONFIG.get("context", {})

# Engine settings:
# - feature_id: name reported with experiment exposure events
# - internal_scheme: prepended to actions that start with "://"
_engine = _CONFIG.get("engine", {})
ENGINE = EngineConfig(
    feature_id=str(_engine.get("feature_id", "messaging")),
    internal_scheme=str(_engine.get("internal_scheme", "internal")),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
