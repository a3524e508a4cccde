"""
Runtime configuration.

``Settings`` is immutable and handed to the pipeline at construction time;
``Settings.from_env()`` reads overrides from the environment (and a ``.env``
file when present). Tests build their own ``Settings`` with smaller limits.
"""

import os
import logging
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIST: Tuple[str, ...] = (
    "https://rsshub.app/github/trending/daily",
    "https://rsshub.app/hackernews/best/comments",
)

DEFAULT_CACHE_PATH = os.path.join(os.path.dirname(__file__), "storage", "data", "cache.json")

MAX_CONCURRENT = 5
DEFAULT_CACHE_TTL = 3600         # seconds
MAX_DYNAMIC_FEEDS = 20
DEFAULT_PAGE_SIZE = 20


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    values = tuple(v.strip() for v in raw.split(",") if v.strip())
    return values or default


@dataclass(frozen=True)
class Settings:
    feed_list: Tuple[str, ...] = DEFAULT_FEED_LIST
    max_concurrent: int = MAX_CONCURRENT
    default_ttl: int = DEFAULT_CACHE_TTL
    max_dynamic_feeds: int = MAX_DYNAMIC_FEEDS
    default_page_size: int = DEFAULT_PAGE_SIZE
    fetch_timeout: float = 10.0          # seconds, per request
    http_retries: int = 0
    user_agent: str = "FeedAggregator/1.0 (+https://localhost)"
    refresh_interval_minutes: int = 60
    cache_backend: str = "memory"        # "memory" or "json"
    cache_path: str = DEFAULT_CACHE_PATH
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env: bool = True, dotenv_override: bool = True) -> "Settings":
        if load_env:
            load_dotenv(override=dotenv_override)
        return cls(
            feed_list=_env_list("FEED_LIST", DEFAULT_FEED_LIST),
            max_concurrent=_env_int("MAX_CONCURRENT", cls.max_concurrent),
            default_ttl=_env_int("CACHE_TTL", cls.default_ttl),
            max_dynamic_feeds=_env_int("MAX_DYNAMIC_FEEDS", cls.max_dynamic_feeds),
            default_page_size=_env_int("PAGE_SIZE", cls.default_page_size),
            fetch_timeout=_env_float("FETCH_TIMEOUT", cls.fetch_timeout),
            http_retries=_env_int("HTTP_RETRIES", cls.http_retries),
            user_agent=os.getenv("USER_AGENT") or cls.user_agent,
            refresh_interval_minutes=_env_int("REFRESH_INTERVAL_MINUTES", cls.refresh_interval_minutes),
            cache_backend=(os.getenv("CACHE_BACKEND") or cls.cache_backend).lower(),
            cache_path=os.getenv("CACHE_PATH") or DEFAULT_CACHE_PATH,
            log_level=os.getenv("LOG_LEVEL") or cls.log_level,
        )
