"""Central configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class OkexConfig(BaseSettings):
    ws_url: str = Field(default="wss://real.okex.com:8443/ws/v3", alias="OKEX_WS_URL")
    access_key: str = Field(default="", alias="OKEX_ACCESS_KEY")
    secret_key: str = Field(default="", alias="OKEX_SECRET_KEY")
    passphrase: str = Field(default="", alias="OKEX_PASSPHRASE")
    proxy_url: str = Field(default="", alias="OKEX_PROXY_URL")

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key and self.passphrase)


class TuningConfig(BaseSettings):
    ws_ping_interval: float = Field(default=10, alias="WS_PING_INTERVAL")
    ws_pong_timeout: float = Field(default=10, alias="WS_PONG_TIMEOUT")
    ws_open_timeout: float = Field(default=10, alias="WS_OPEN_TIMEOUT")
    ws_max_size: int = Field(default=10 * 1024 * 1024, alias="WS_MAX_SIZE")
    read_retry_delay: float = Field(default=0.1, alias="WS_READ_RETRY_DELAY")
    login_settle_delay: float = Field(default=0.1, alias="WS_LOGIN_SETTLE_DELAY")
    close_timeout: float = Field(default=5.0, alias="WS_CLOSE_TIMEOUT")
    # Off by default: subscriptions are replayed without waiting for the login ack.
    replay_after_login_ack: bool = Field(default=False, alias="WS_REPLAY_AFTER_LOGIN_ACK")


class LoggingConfig(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")


class AppConfig:
    """Aggregated application configuration."""

    def __init__(self) -> None:
        self.okex = OkexConfig()
        self.tuning = TuningConfig()
        self.logging = LoggingConfig()


def get_config() -> AppConfig:
    """Create and return the application configuration."""
    return AppConfig()
