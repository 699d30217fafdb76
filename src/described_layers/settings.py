"""
Settings and configuration for described layers.

Centralizes tunables for verified reads and remote content sources, with
fail-fast validation. The core never reads the environment on its own;
callers (and the CLI) opt in via create_settings_from_env().
"""
from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["Settings", "create_settings_from_env", "CHUNK_SIZE"]

CHUNK_SIZE = 1024 * 1024  # 1 MiB


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for layer reads.

    Verification:
        chunk_size: Read size used when draining a stream on close
        drain_on_close: Drain and verify unread bytes on close; when False,
            closing a partially read stream raises UnverifiedCloseError

    HTTP content sources:
        http_timeout_s: Request timeout in seconds
        http_retry: Extra attempts on connect/timeout failures (0=no retry)
        http_insecure: Skip TLS certificate verification for local/dev use
    """
    chunk_size: int = CHUNK_SIZE
    drain_on_close: bool = True
    http_timeout_s: float = 30.0
    http_retry: int = 2
    http_insecure: bool = False

    def __post_init__(self):
        """Validate settings on construction."""
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - LAYERS_CHUNK_SIZE (default: 1048576)
        - LAYERS_DRAIN_ON_CLOSE (default: true)
        - LAYERS_HTTP_TIMEOUT (default: 30.0)
        - LAYERS_HTTP_RETRY (default: 2)
        - LAYERS_HTTP_INSECURE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If a value cannot be parsed or fails validation

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    return Settings(
        chunk_size=get_int("LAYERS_CHUNK_SIZE", CHUNK_SIZE),
        drain_on_close=str_to_bool(os.getenv("LAYERS_DRAIN_ON_CLOSE", "true")),
        http_timeout_s=get_float("LAYERS_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("LAYERS_HTTP_RETRY", 2),
        http_insecure=str_to_bool(os.getenv("LAYERS_HTTP_INSECURE", "false")),
    )
