"""Data models for gobbler: pydantic configuration and feed records."""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = "gobbler/0.1 (+https://github.com/gobbler-rss/gobbler)"


@dataclass(frozen=True)
class Subscription:
    """A named pointer to one feed's address."""

    name: str
    url: str


@dataclass(frozen=True)
class FeedItem:
    title: str
    id: str
    updated_at: datetime


@dataclass
class FeedResult:
    """Posts collected from one subscription, newest first."""

    subscription_name: str
    items: list[FeedItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass
class FetchedFeed:
    """What the feed source hands back for one URL."""

    url: str
    format: str
    items: list[FeedItem] = field(default_factory=list)
    entry_count: int = 0


class CheckConfig(BaseModel):
    weeks: int = 4
    limit: int = 10
    run_days: int = 1

    @field_validator("weeks", "limit", "run_days")
    @classmethod
    def positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class FetchConfig(BaseModel):
    timeout: float = 30.0
    connect_timeout: float = 10.0
    max_redirects: int = 5
    per_host_connections: int = 4
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("timeout", "connect_timeout")
    @classmethod
    def positive_float(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("max_redirects", "per_host_connections")
    @classmethod
    def positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class Config(BaseModel):
    base_dir: str = "~/.gobbler"
    subscriptions_file: str = ""
    state_db: str = ""
    log_level: str = "WARNING"
    json_logs: bool = False
    check: CheckConfig = Field(default_factory=CheckConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return level
