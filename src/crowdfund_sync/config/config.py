# -*- coding: utf-8 -*-
"""Environment-driven settings for the ledger sync service.

Each section is its own model; nested variables use <SECTION>__<FIELD>, for
example LEDGER__EVENTS_URL=... or SYNC__POLL_INTERVAL_SECONDS=30.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RotateWhen = Literal["S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"]


class AppSettings(BaseSettings):
    """Service identity stamped on every log line."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "crowdfund-sync"
    service_name: Optional[str] = Field(default=None, description="Overrides app_name in Logfire.")
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Where structlog output goes and at which level."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: LogLevel = "INFO"
    file_level: LogLevel = "INFO"
    logfire_level: LogLevel = "INFO"

    log_to_console: bool = True
    log_to_file: bool = Field(default=False, description="Also write JSON lines to log_file_path.")
    log_file_path: str = "logs/crowdfund_sync.log"
    log_file_when: RotateWhen = Field(default="midnight", description="TimedRotatingFileHandler rotation unit.")
    log_file_interval: int = Field(default=1, ge=1)
    log_file_backup_count: int = Field(default=14, ge=0, description="Rotated files kept on disk.")
    log_file_utc: bool = True

    json_format: bool = Field(default=False, description="Render console output as JSON.")

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class LedgerSettings(BaseSettings):
    """Configuration for the ledger node API and the optional event indexer."""

    model_config = SettingsConfigDict(extra="ignore")

    api_host: str = Field(
        default="https://api.testnet.hiro.so",
        description="Ledger node API base URL.",
    )
    submit_path: str = Field(
        default="/v2/transactions",
        description="Path used to broadcast signed transfers.",
    )
    tx_status_path: str = Field(
        default="/extended/v1/tx/{tx_id}",
        description="Path template used to query a transaction by id.",
    )
    events_url: Optional[str] = Field(
        default=None,
        description="Full URL of the contract event feed. Unset disables event sync.",
    )
    explorer_url_template: str = Field(
        default="https://explorer.hiro.so/txid/{tx_id}?chain=testnet",
        description="Block explorer link for a transaction.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )
    max_retries: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Maximum number of attempts for failed requests.",
    )
    token_decimals: int = Field(
        default=6,
        ge=0,
        le=18,
        description="Decimals of the funding token; event amounts given in whole tokens are scaled by this.",
    )


class TrackerSettings(BaseSettings):
    """Configuration for transaction confirmation polling."""

    model_config = SettingsConfigDict(extra="ignore")

    wait_timeout_seconds: float = Field(default=60.0, gt=0.0, le=3600.0)
    wait_poll_interval_seconds: float = Field(default=2.0, gt=0.0, le=60.0)
    max_poll_attempts: int = Field(default=30, ge=1, le=500)
    backoff_initial_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    backoff_max_seconds: float = Field(default=8.0, gt=0.0, le=600.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)


class SyncSettings(BaseSettings):
    """Configuration for the ledger event sync loop."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True
    poll_interval_seconds: float = Field(
        default=60.0,
        ge=1.0,
        le=86400.0,
        description="Seconds between scheduled sync cycles.",
    )
    start_block: int = Field(
        default=0,
        ge=0,
        description="Initial cursor position when none has been persisted.",
    )
    max_attempts: int = Field(default=5, ge=1, le=20)
    backoff_initial_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    backoff_max_seconds: float = Field(default=8.0, gt=0.0, le=600.0)
    stop_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="How long stop() waits for an in-flight cycle before abandoning it.",
    )


class ConsoleNotificationSettings(BaseSettings):
    """Console alert channel."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True
    event_types: list[str] = Field(
        default_factory=list,
        description="Alert types to print (sync_failed, transaction_failed, ...). Empty prints all.",
    )


class Settings(BaseSettings):
    """All configuration sections, read once from the environment and .env.

    Services receive this object (or a section of it) by injection instead
    of reading os.environ themselves.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Environment values with per-section overrides on top.

        Example: Settings.from_env(sync={"poll_interval_seconds": 5}).
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings, built on first call.

    Call get_settings.cache_clear() after changing the environment.
    """
    return Settings()
