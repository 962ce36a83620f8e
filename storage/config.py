"""
storage/config.py

Runtime settings for MedBook, read from the environment.

Environment
-----------
MEDBOOK_DATA_DIR             directory holding the notifications file (``./data``)
MEDBOOK_NOTIFICATIONS_FILE   file name inside the data dir (``notifications.json``)
APP_DATA_KEY                 Fernet key; when set, notifications are encrypted at rest
MEDBOOK_STORE_LATENCY_MS     artificial document-store latency (``0``)
MEDBOOK_PASSWORD_ITERATIONS  PBKDF2 iterations (``260000``)
MEDBOOK_DEMO_MODE            seed demo accounts on startup (``true``)
MEDBOOK_LOG_LEVEL            root log level (``INFO``)
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

_PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Global, not per recipient.
NOTIFICATION_CAP = 50

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    data_dir: Path = _PROJECT_ROOT / "data"
    notifications_file: str = "notifications.json"
    data_key: str | None = Field(default=None, repr=False)
    store_latency_ms: int = Field(default=0, ge=0)
    password_iterations: int = Field(default=260_000, ge=1)
    demo_mode: bool = True
    log_level: str = "INFO"

    @property
    def notifications_path(self) -> Path:
        return self.data_dir / self.notifications_file

    @property
    def encrypt_notifications(self) -> bool:
        return bool(self.data_key)

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        values: dict = {}
        if env.get("MEDBOOK_DATA_DIR"):
            values["data_dir"] = Path(env["MEDBOOK_DATA_DIR"])
        if env.get("MEDBOOK_NOTIFICATIONS_FILE"):
            values["notifications_file"] = env["MEDBOOK_NOTIFICATIONS_FILE"]
        if env.get("APP_DATA_KEY"):
            values["data_key"] = env["APP_DATA_KEY"]
        if env.get("MEDBOOK_STORE_LATENCY_MS"):
            values["store_latency_ms"] = int(env["MEDBOOK_STORE_LATENCY_MS"])
        if env.get("MEDBOOK_PASSWORD_ITERATIONS"):
            values["password_iterations"] = int(env["MEDBOOK_PASSWORD_ITERATIONS"])
        if env.get("MEDBOOK_DEMO_MODE"):
            values["demo_mode"] = env["MEDBOOK_DEMO_MODE"].strip().lower() in _TRUTHY
        if env.get("MEDBOOK_LOG_LEVEL"):
            values["log_level"] = env["MEDBOOK_LOG_LEVEL"].upper()
        return cls(**values)
