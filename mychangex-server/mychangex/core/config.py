"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./mychangex.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    connect_timeout_seconds: float = 10.0


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me-please", min_length=8)
    algorithm: str = "HS256"
    # 30 days, matching the mobile client's cached session lifetime
    access_token_expire_minutes: int = 60 * 24 * 30


class TransferSettings(BaseModel):
    coupon_threshold: Decimal = Decimal("1.00")
    history_limit: int = 100
    default_history_limit: int = 50
    resync_delay_seconds: float = 2.0
    # re-read the sender balance before responding instead of after a delay
    reconcile_inline: bool = True


class PhoneSettings(BaseModel):
    country_code: str = "263"
    mobile_prefix: str = "7"


class NotificationSettings(BaseModel):
    enabled: bool = True
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = 5.0


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MYCHANGEX_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "MyChangeX Wallet Server"
    api_prefix: str = "/api"
    currency: str = "USD"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    transfer: TransferSettings = TransferSettings()
    phone: PhoneSettings = PhoneSettings()
    notifications: NotificationSettings = NotificationSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def coupon_threshold(self) -> Decimal:
        return self.transfer.coupon_threshold


@lru_cache()
def get_settings() -> Settings:
    return Settings()
