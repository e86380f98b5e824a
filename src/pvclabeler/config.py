"""Configuration management with validation.

Settings are read from the environment once at startup and validated at
construction time so a misconfigured labeler fails before touching any disk.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


# GCE label constraints
MAX_LABELS_PER_DISK = 64
MAX_LABEL_LENGTH = 63

# Operation polling, in seconds
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_POLL_TIMEOUT_SECONDS = 60.0
MAX_POLL_INTERVAL_SECONDS = 60.0
MAX_POLL_TIMEOUT_SECONDS = 3600.0

# Label request documents
MAX_REQUEST_FILE_SIZE_BYTES = 1024 * 1024  # 1MB max request file

LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class Config:
    """Labeler configuration loaded from environment variables.

    All fields are validated at construction time. Invalid configurations
    raise ConfigurationError immediately rather than failing mid-poll.
    """

    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    poll_timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS

    log_level: str = "INFO"
    log_format: str = "json"

    # Compute and log label changes without writing them
    dry_run: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        errors: list[str] = []

        if not (0 < self.poll_interval_seconds <= MAX_POLL_INTERVAL_SECONDS):
            errors.append(
                f"POLL_INTERVAL_SECONDS must be greater than 0 and at most "
                f"{MAX_POLL_INTERVAL_SECONDS:g}: {self.poll_interval_seconds:g}"
            )

        if not (self.poll_interval_seconds <= self.poll_timeout_seconds <= MAX_POLL_TIMEOUT_SECONDS):
            errors.append(
                f"POLL_TIMEOUT_SECONDS must be between POLL_INTERVAL_SECONDS and "
                f"{MAX_POLL_TIMEOUT_SECONDS:g}: {self.poll_timeout_seconds:g}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            errors.append(f"LOG_LEVEL is not a valid logging level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"LOG_FORMAT must be one of {list(LOG_FORMATS)}: {self.log_format}")

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ConfigurationError(error_msg)

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Environment Variables:
            POLL_INTERVAL_SECONDS: Seconds between operation status checks (default: 1)
            POLL_TIMEOUT_SECONDS: Seconds to wait for an operation to finish (default: 60)
            LOG_LEVEL: Logging level name (default: INFO)
            LOG_FORMAT: "json" or "text" (default: json)
            DRY_RUN: If "true", compute label changes without writing them (default: false)
        """

        def get_float(key: str, default: float) -> float:
            value = os.environ.get(key)
            if value is None:
                return default
            try:
                return float(value)
            except ValueError as e:
                raise ConfigurationError(f"{key} must be a number: {value}") from e

        def get_bool(key: str, default: bool) -> bool:
            value = os.environ.get(key, "").lower()
            if not value:
                return default
            return value in ("true", "1", "yes")

        return cls(
            poll_interval_seconds=get_float("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS),
            poll_timeout_seconds=get_float("POLL_TIMEOUT_SECONDS", DEFAULT_POLL_TIMEOUT_SECONDS),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "json").lower(),
            dry_run=get_bool("DRY_RUN", False),
        )
