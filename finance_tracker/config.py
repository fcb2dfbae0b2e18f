"""Configuration utilities for the Finance Tracker.

Provides the default settings and a helper to load user-defined overrides
(secret key, database location, display labels) from a JSON file and the
environment.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent

CONFIG_ENV_VAR = "FINANCE_TRACKER_CONFIG"

# Display labels for the closed set of transaction types.
DEFAULT_TYPE_LABELS: Dict[str, str] = {
    "revenue": "Revenue",
    "fixed-expense": "Fixed expense",
    "variable-expense": "Variable expense",
}


@dataclass
class AppConfig:
    secret_key: str = "dev"
    database: str = str(PROJECT_ROOT / "finance_tracker.db")
    log_level: str = "INFO"
    currency_symbol: str = "R$"
    type_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_LABELS))

    @staticmethod
    def load(config_path: Optional[str | Path] = None) -> "AppConfig":
        """Load config from JSON if provided, else use defaults.

        JSON format:
        {
          "secret_key": "change-me",
          "database": "/var/lib/finance_tracker/data.db",
          "log_level": "DEBUG",
          "currency_symbol": "R$",
          "type_labels": {"revenue": "Receita"}
        }

        ``FINANCE_TRACKER_SECRET_KEY``, ``FINANCE_TRACKER_DATABASE`` and
        ``FINANCE_TRACKER_LOG_LEVEL`` override whatever the file says.
        """

        cfg = AppConfig()
        path_value = config_path or os.getenv(CONFIG_ENV_VAR)

        if path_value:
            p = Path(path_value)
            if p.exists():
                with p.open("r", encoding="utf-8") as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    if raw.get("secret_key"):
                        cfg.secret_key = str(raw["secret_key"])
                    if raw.get("database"):
                        db_path = Path(str(raw["database"]))
                        if not db_path.is_absolute():
                            db_path = p.parent / db_path
                        cfg.database = str(db_path)
                    if raw.get("log_level"):
                        cfg.log_level = str(raw["log_level"]).upper()
                    if raw.get("currency_symbol"):
                        cfg.currency_symbol = str(raw["currency_symbol"])
                    if isinstance(raw.get("type_labels"), dict):
                        # Only known types can be relabelled
                        for key, label in raw["type_labels"].items():
                            if key in cfg.type_labels and label:
                                cfg.type_labels[key] = str(label)

        cfg.secret_key = os.getenv("FINANCE_TRACKER_SECRET_KEY", cfg.secret_key)
        cfg.database = os.getenv("FINANCE_TRACKER_DATABASE", cfg.database)
        cfg.log_level = os.getenv("FINANCE_TRACKER_LOG_LEVEL", cfg.log_level).upper()
        return cfg
