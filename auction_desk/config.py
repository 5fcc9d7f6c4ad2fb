"""Application configuration for the seller auction desk."""

from __future__ import annotations

from datetime import tzinfo
from functools import cached_property, lru_cache
from typing import List
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AUCTION_DESK_", extra="allow")

    # General
    environment: str = "development"
    log_level: str = "INFO"

    # Marketplace REST API
    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the marketplace API (without trailing slash)",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for marketplace API requests",
    )
    user_agent: str = Field(
        default="AuctionDesk/1.0",
        description="User-Agent header for marketplace API requests",
    )
    session_cookie_name: str = "session"
    session_token: str | None = None

    # Auction presentation
    auction_timezone: str = Field(
        default="Asia/Manila",
        description="IANA zone used for the naive YYYY-MM-DDTHH:MM edit inputs",
    )
    currency_symbol: str = "₱"

    # Dashboard polling
    tick_interval_seconds: float = 1.0
    list_refresh_seconds: int = 30
    default_status_filter: str | None = None

    # Business rules the server enforces; mirrored locally only to hide actions
    edit_running_auctions: bool = Field(
        default=True,
        description="Expose Edit for active/paused auctions (server decides which fields stick)",
    )
    stale_state_status_codes: List[int] = [409]

    @cached_property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.auction_timezone)


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
