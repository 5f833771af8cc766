"""Configuration defaults, config file loading, and environment overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PORT = 41800
DEFAULT_DB_NAME = "skillhub.db"
DEFAULT_DOCUMENTS_DIR = "documents"
CONFIG_FILE_NAME = ".skillhub.json"


def get_data_dir() -> Path:
    env = os.environ.get("SKILLHUB_DATA_DIR")
    if env:
        return Path(env)
    return Path.home() / ".skillhub" / "data"


def _safe_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _safe_float(value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class HubConfig:
    port: int = DEFAULT_PORT
    db_name: str = DEFAULT_DB_NAME
    documents_dir_name: str = DEFAULT_DOCUMENTS_DIR
    webhook_url: str | None = None
    webhook_timeout: float = 10.0
    task_max_attempts: int = 5
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return get_data_dir() / self.db_name

    @property
    def documents_dir(self) -> Path:
        return get_data_dir() / self.documents_dir_name


def load_config(path: Path | None = None) -> HubConfig:
    """Load hub config from .skillhub.json with env var overrides."""
    if path is None:
        path = Path.cwd() / CONFIG_FILE_NAME
    config = HubConfig()

    if path.exists():
        try:
            text = path.read_text()
            if text.strip():
                data = json.loads(text)
                if not isinstance(data, dict):
                    logger.warning(f"Ignoring hub config {path}: expected a JSON object")
                elif isinstance(section := data.get("hub", {}), dict):
                    _apply(config, section)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load hub config from {path}: {e}")

    if port := os.environ.get("SKILLHUB_PORT"):
        config.port = _safe_int(port, config.port)
    if webhook_url := os.environ.get("SKILLHUB_WEBHOOK_URL"):
        config.webhook_url = webhook_url
    if timeout := os.environ.get("SKILLHUB_WEBHOOK_TIMEOUT"):
        config.webhook_timeout = _safe_float(timeout, config.webhook_timeout)
    if attempts := os.environ.get("SKILLHUB_TASK_MAX_ATTEMPTS"):
        config.task_max_attempts = _safe_int(attempts, config.task_max_attempts)
    if level := os.environ.get("SKILLHUB_LOG_LEVEL"):
        config.log_level = level.upper()

    return config


def _apply(config: HubConfig, data: dict[str, object]) -> None:
    if "port" in data and isinstance(data["port"], int):
        config.port = data["port"]
    if "db_name" in data and isinstance(data["db_name"], str):
        config.db_name = data["db_name"]
    if "documents_dir_name" in data and isinstance(data["documents_dir_name"], str):
        config.documents_dir_name = data["documents_dir_name"]
    if "webhook_url" in data and isinstance(data["webhook_url"], str):
        config.webhook_url = data["webhook_url"] or None
    if "webhook_timeout" in data and isinstance(data["webhook_timeout"], int | float):
        config.webhook_timeout = float(data["webhook_timeout"])
    if "task_max_attempts" in data and isinstance(data["task_max_attempts"], int):
        config.task_max_attempts = data["task_max_attempts"]
    if "log_level" in data and isinstance(data["log_level"], str):
        config.log_level = data["log_level"].upper()
