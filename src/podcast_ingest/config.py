from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import config_constants


# SKIP .env loading in test environments - tests should use Config objects and
# environment variables directly, never rely on .env files
def _is_test_environment() -> bool:
    """Check if we're running in a test environment."""
    import sys

    if "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ:
        return True
    if os.environ.get("TESTING", "").lower() in ("1", "true", "yes"):
        return True
    return False


if not _is_test_environment():
    try:
        load_dotenv(override=False)
    except (PermissionError, OSError):
        # If loading fails, continue without .env file
        pass

# Re-exported for convenience
DEFAULT_LOG_LEVEL = config_constants.DEFAULT_LOG_LEVEL
DEFAULT_TIMEOUT_SECONDS = config_constants.DEFAULT_TIMEOUT_SECONDS
DEFAULT_USER_AGENT = config_constants.DEFAULT_USER_AGENT
DEFAULT_HTTP_RETRIES = config_constants.DEFAULT_HTTP_RETRIES
DEFAULT_CACHE_TTL_SECONDS = config_constants.DEFAULT_CACHE_TTL_SECONDS
DEFAULT_EPISODES_PER_PAGE = config_constants.DEFAULT_EPISODES_PER_PAGE
MAX_EPISODES_PER_PAGE = config_constants.MAX_EPISODES_PER_PAGE
VALID_LOG_LEVELS = config_constants.VALID_LOG_LEVELS
MIN_TIMEOUT_SECONDS = config_constants.MIN_TIMEOUT_SECONDS

# Environment variables read by Config (config file values win unless noted)
ENV_FEED_URL = "PODCAST_FEED_URL"
ENV_CACHE_TTL = "FEED_CACHE_TTL"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_FILE = "LOG_FILE"


class Config(BaseModel):
    """Configuration model for feed ingestion.

    Configuration can be created programmatically or loaded from JSON/YAML files
    using `load_config_file()`. The model is immutable (frozen) after creation.

    Attributes:
        feed_url: Default feed URL served by ``FeedService`` (alias: ``rss``).
        cache_ttl_seconds: Freshness bound for cached feeds (default: 3600).
        cache_wait_timeout: Seconds a reader waits on another reader's in-flight
            fetch before failing with a timeout (None waits for the fetch).
        timeout: Upstream request timeout in seconds (minimum: 1).
        user_agent: User-Agent header sent upstream.
        http_retries: Transport-level retries for the upstream request (default: 0).
        episodes_per_page: Default page size for episode lists (1-100).
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file path for file output.
    """

    feed_url: Optional[str] = Field(
        default=None,
        alias="rss",
        description="Feed URL used when a read does not name one",
    )
    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        ge=0,
        description="Seconds a parsed feed stays fresh in the cache",
    )
    cache_wait_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait on another reader's fetch (None: no limit)",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=MIN_TIMEOUT_SECONDS,
        description="Upstream request timeout in seconds",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header identifying the ingester",
    )
    http_retries: int = Field(
        default=DEFAULT_HTTP_RETRIES,
        ge=0,
        description="Transport-level retries; retry policy otherwise belongs to the caller",
    )
    episodes_per_page: int = Field(
        default=DEFAULT_EPISODES_PER_PAGE,
        ge=1,
        le=MAX_EPISODES_PER_PAGE,
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)
    log_file: Optional[str] = Field(default=None)

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _preprocess_config_data(cls, data: Any) -> Any:
        """Apply environment variables before validation.

        LOG_LEVEL takes precedence over config values; PODCAST_FEED_URL,
        FEED_CACHE_TTL and LOG_FILE only fill values the config left unset.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        env_log_level = os.getenv(ENV_LOG_LEVEL)
        if env_log_level:
            env_value = env_log_level.strip().upper()
            if env_value in VALID_LOG_LEVELS:
                data["log_level"] = env_value

        if data.get("feed_url") is None and data.get("rss") is None:
            env_feed_url = (os.getenv(ENV_FEED_URL) or "").strip()
            if env_feed_url:
                data["feed_url"] = env_feed_url

        if data.get("cache_ttl_seconds") is None:
            env_ttl = os.getenv(ENV_CACHE_TTL)
            if env_ttl:
                try:
                    data["cache_ttl_seconds"] = float(env_ttl)
                except ValueError:
                    pass  # Invalid value, keep the default

        if data.get("log_file") is None:
            env_log_file = (os.getenv(ENV_LOG_FILE) or "").strip()
            if env_log_file:
                data["log_file"] = env_log_file

        return data

    @field_validator("feed_url", mode="before")
    @classmethod
    def _strip_feed_url(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("user_agent", mode="before")
    @classmethod
    def _coerce_user_agent(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_USER_AGENT
        value_str = str(value).strip()
        return value_str or DEFAULT_USER_AGENT

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_LOG_LEVEL
        value_str = str(value).strip().upper()
        if value_str not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got: {value}")
        return value_str


def load_config_file(path: str) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    The file format is auto-detected from the extension (`.json`, `.yaml`, `.yml`).

    Args:
        path: Path to configuration file. Supports tilde expansion.

    Returns:
        Dict[str, Any]: Configuration values, suitable for ``Config(**data)``.

    Raises:
        ValueError: If the path is empty or missing, the format is unsupported,
            the file does not parse, or the top level is not a mapping

    Example:
        >>> cfg = Config(**load_config_file("feed.yaml"))
    """
    if not path:
        raise ValueError("Config path cannot be empty")

    cfg_path = Path(path).expanduser()
    try:
        resolved = cfg_path.resolve()
    except (OSError, RuntimeError) as exc:
        raise ValueError(f"Invalid config path: {path} ({exc})") from exc

    if not resolved.exists():
        raise ValueError(f"Config file not found: {resolved}")

    suffix = resolved.suffix.lower()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Failed to read config file {resolved}: {exc}") from exc

    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON config file {resolved}: {exc}") from exc
    elif suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML config file {resolved}: {exc}") from exc
    else:
        raise ValueError(f"Unsupported config file type: {resolved.suffix}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping/object at the top level")

    return data
