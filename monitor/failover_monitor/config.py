"""
Configuration for the failover monitor.

All configuration is done via MONITOR_* environment variables, loaded with
pydantic-settings. Every setting has a default suitable for local use.

Invariants:
    - The archiver database lives at data_dir / database_name
    - log_format is either "json" or "text"

How to change safely:
    - Add new settings with defaults that keep existing deployments working
    - Never log secrets from log_config()
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

LOG_FORMATS = ("json", "text")


class MonitorSettings(BaseSettings):
    """Monitor configuration loaded from environment."""

    # Storage
    data_dir: str = Field(
        default="/var/lib/failover-monitor", description="Directory for the monitor database"
    )
    database_name: str = Field(default="monitor.db", description="SQLite database file name")
    wal_mode: bool = Field(default=True, description="Enable SQLite WAL mode")
    busy_timeout_ms: int = Field(
        default=5000, ge=0, description="How long writers wait for the database lock"
    )
    cache_size_pages: int = Field(default=-64000, description="SQLite cache size (negative = KB)")

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json, text)")

    model_config = {"env_prefix": "MONITOR_"}

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of: {', '.join(LOG_FORMATS)}")
        return value

    @property
    def db_path(self) -> Path:
        """Full path of the monitor database."""
        return Path(self.data_dir) / self.database_name

    def log_config(self) -> None:
        """Log the loaded settings."""
        logger.info(
            "Monitor configuration loaded",
            extra={
                "db_path": str(self.db_path),
                "wal_mode": self.wal_mode,
                "busy_timeout_ms": self.busy_timeout_ms,
                "log_level": self.log_level,
                "log_format": self.log_format,
            },
        )
