"""
Client configuration.

Values come from keyword arguments first, then ``OLLAMA_*`` environment
variables (or a ``.env`` file), then the defaults below.
"""
from enum import Enum
from functools import lru_cache
from typing import Optional

import httpx
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST = "http://localhost:11434"
DEFAULT_PORT = 11434
DEFAULT_TIMEOUT = 120.0  # generation on CPU can be slow


class ExecutionMode(str, Enum):
    """How the client runs a request."""
    BLOCKING = "blocking"  # plain calls, occupy the calling thread
    SUSPENDING = "suspending"  # calls return coroutines


def normalize_host(value: str) -> str:
    """
    Turn a host setting into a base URL.

    ``localhost``, ``0.0.0.0:11434`` and ``http://example.com/`` are all
    accepted; a missing scheme means ``http`` and, in that case, a missing
    port means 11434. Raises ``ValueError`` for anything that is not an
    http(s) URL with a host.
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("base URL must not be empty")

    has_scheme = "://" in value
    if not has_scheme:
        value = f"http://{value}"

    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise ValueError(f"malformed base URL {value!r}: {e}") from e

    if url.scheme not in ("http", "https"):
        raise ValueError(f"unsupported scheme in base URL {value!r}")
    if not url.host:
        raise ValueError(f"base URL {value!r} has no host")
    if url.query or url.fragment:
        raise ValueError(f"base URL {value!r} must not carry a query or fragment")

    if not has_scheme and url.port is None:
        url = url.copy_with(port=DEFAULT_PORT)

    return str(url).rstrip("/")


class ClientSettings(BaseSettings):
    """Configuration of one client. Immutable once built."""

    model_config = SettingsConfigDict(
        env_prefix="OLLAMA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Server
    host: str = DEFAULT_HOST
    timeout: Optional[float] = DEFAULT_TIMEOUT  # seconds, None waits forever

    # Execution
    execution_mode: ExecutionMode = ExecutionMode.BLOCKING

    # Logging
    enable_logging: bool = False
    log_level: str = "info"
    log_path: str = ""  # e.g. /var/log/ollama-rest.log

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        return normalize_host(value)

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("execution_mode", mode="before")
    @classmethod
    def _lowercase_mode(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def base_url(self) -> str:
        return self.host


@lru_cache()
def get_settings() -> ClientSettings:
    """Get cached settings read from the environment only."""
    return ClientSettings()
