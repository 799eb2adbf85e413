"""Environment-driven configuration for storage and the leaderboard."""

from __future__ import annotations

import json
import os
from pathlib import Path

DB_CONFIG_ENV = "REROLL_SIM_DB_CONFIG"
DATA_DIR_ENV = "REROLL_SIM_DATA_DIR"
DEFAULT_DB_CONFIG = Path.home() / ".reroll-sim" / "db-config.json"
DEFAULT_DATA_DIR = Path.home() / ".reroll-sim"


def get_database_url() -> str:
    """DATABASE_URL, else ``database_url`` from the JSON config file."""
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return db_url
    config_path = Path(os.environ.get(DB_CONFIG_ENV, DEFAULT_DB_CONFIG))
    with open(config_path) as f:
        return json.load(f)["database_url"]


def get_data_dir() -> Path:
    return Path(os.environ.get(DATA_DIR_ENV, DEFAULT_DATA_DIR))
