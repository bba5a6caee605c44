"""
Configuration module for the content hub migration tool.

This module provides functions for loading configuration settings from YAML
files, creating default configurations, and merging command-line overrides
into the loaded settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from content_migrator.constants import (
    DEFAULT_MAPPING_DIR,
    MAX_CONCURRENT_WRITES,
    PUBLISH_ATTEMPT_DELAY,
    PUBLISH_MAX_ATTEMPTS,
    PUBLISH_MAX_IN_FLIGHT,
    PUBLISH_RATE_LIMIT_PER_MINUTE,
)
from content_migrator.exceptions import ConfigError
from content_migrator.utils.logging import log_with_context


@dataclass
class PublishQueueConfig:
    """Limits applied to publish jobs started after an import."""

    max_in_flight: int = PUBLISH_MAX_IN_FLIGHT
    max_attempts: int = PUBLISH_MAX_ATTEMPTS
    attempt_delay: float = PUBLISH_ATTEMPT_DELAY
    rate_limit_per_minute: int = PUBLISH_RATE_LIMIT_PER_MINUTE

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PublishQueueConfig:
        if not data:
            return cls()
        return cls(
            max_in_flight=data.get("max_in_flight", PUBLISH_MAX_IN_FLIGHT),
            max_attempts=data.get("max_attempts", PUBLISH_MAX_ATTEMPTS),
            attempt_delay=data.get("attempt_delay", PUBLISH_ATTEMPT_DELAY),
            rate_limit_per_minute=data.get(
                "rate_limit_per_minute", PUBLISH_RATE_LIMIT_PER_MINUTE
            ),
        )


@dataclass
class MigrationConfig:
    """Typed configuration for the migration tool.

    All fields have defaults so an empty or missing file is a valid config.
    """

    # Decision gates
    force: bool = False
    skip_incomplete: bool = False

    # Publishing
    publish: bool = False
    republish: bool = False
    publish_queue: PublishQueueConfig = field(default_factory=PublishQueueConfig)

    # Content filtering
    exclude_keys: bool = False

    # Throughput
    max_concurrent_writes: int = MAX_CONCURRENT_WRITES

    # Mapping files
    mapping_dir: str = DEFAULT_MAPPING_DIR

    # Retry
    max_retries: int = 3
    retry_delay: int = 2
    request_timeout: int = 60

    def __post_init__(self) -> None:
        if self.max_concurrent_writes < 1:
            raise ConfigError(
                f"max_concurrent_writes must be at least 1, got {self.max_concurrent_writes}"
            )
        if self.publish_queue.max_in_flight < 1:
            raise ConfigError(
                f"publish_queue.max_in_flight must be at least 1, got {self.publish_queue.max_in_flight}"
            )

    @property
    def should_publish(self) -> bool:
        """Republishing implies publishing."""
        return self.publish or self.republish

    @property
    def retry_config(self) -> dict[str, Any]:
        return {"max_retries": self.max_retries, "retry_delay": self.retry_delay}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationConfig:
        """Create a MigrationConfig from a raw config dictionary."""
        return cls(
            force=data.get("force", False),
            skip_incomplete=data.get("skip_incomplete", False),
            publish=data.get("publish", False),
            republish=data.get("republish", False),
            publish_queue=PublishQueueConfig.from_dict(data.get("publish_queue")),
            exclude_keys=data.get("exclude_keys", False),
            max_concurrent_writes=data.get(
                "max_concurrent_writes", MAX_CONCURRENT_WRITES
            ),
            mapping_dir=data.get("mapping_dir") or DEFAULT_MAPPING_DIR,
            max_retries=data.get("max_retries", 3),
            retry_delay=data.get("retry_delay", 2),
            request_timeout=data.get("request_timeout", 60),
        )

    def with_overrides(self, **overrides: Any) -> MigrationConfig:
        """Return a copy with command-line flags applied.

        Boolean flags only switch options on; ``None`` values are ignored.
        """
        changes = {
            key: value
            for key, value in overrides.items()
            if value is not None and value is not False
        }
        return replace(self, **changes)


def load_config(config_path: Path) -> MigrationConfig:
    """
    Load configuration from YAML file and apply default values.

    If the file doesn't exist or is invalid, a warning is logged and default
    settings are used.

    Args:
        config_path: Path to the config YAML file

    Returns:
        MigrationConfig with all necessary defaults applied
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                loaded_config = yaml.safe_load(f)
                # Handle None result from empty file
                if loaded_config is not None:
                    if not isinstance(loaded_config, dict):
                        raise ConfigError(
                            f"Config file {config_path} must contain a mapping"
                        )
                    raw = loaded_config
            log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
        except (yaml.YAMLError, OSError) as e:
            log_with_context(
                logging.WARNING, f"Failed to load config file {config_path}: {e}"
            )
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    return MigrationConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file with recommended settings.

    The function will not overwrite an existing configuration file.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        "force": False,
        "skip_incomplete": False,
        "publish": False,
        "republish": False,
        "exclude_keys": False,
        "max_concurrent_writes": MAX_CONCURRENT_WRITES,
        "mapping_dir": DEFAULT_MAPPING_DIR,
        "publish_queue": {
            "max_in_flight": PUBLISH_MAX_IN_FLIGHT,
            "max_attempts": PUBLISH_MAX_ATTEMPTS,
            "attempt_delay": PUBLISH_ATTEMPT_DELAY,
            "rate_limit_per_minute": PUBLISH_RATE_LIMIT_PER_MINUTE,
        },
        "max_retries": 3,
        "retry_delay": 2,
        "request_timeout": 60,
    }

    try:
        with open(output_path, "w") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False
