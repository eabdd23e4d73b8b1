"""
StreamingStore Configuration.

All values configurable via QUADSTREAM_* environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from quadstream.exceptions import ConfigError


DEFAULT_BACKLOG_WARN_THRESHOLD = 10_000         # Buffered quads per channel before warning
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = ".quadstream/logs"


def _env_int(key: str, default: int) -> int:
    """Read integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_str(key: str, default: str) -> str:
    """Read string from environment variable."""
    value = os.getenv(key)
    if not value:
        return default
    return value


@dataclass
class StreamingStoreConfig:
    """
    Runtime configuration for a StreamingStore.

    Environment Variables:
        QUADSTREAM_BACKLOG_WARN: Buffered quads per live channel before a
            slow-consumer warning is logged (default: 10000)
        QUADSTREAM_LOG_LEVEL: Console log level (default: INFO)
        QUADSTREAM_LOG_DIR: Directory for the opt-in log file (default: .quadstream/logs)
    """

    backlog_warn_threshold: int = field(default_factory=lambda: _env_int(
        "QUADSTREAM_BACKLOG_WARN", DEFAULT_BACKLOG_WARN_THRESHOLD
    ))
    log_level: str = field(default_factory=lambda: _env_str(
        "QUADSTREAM_LOG_LEVEL", DEFAULT_LOG_LEVEL
    ).upper())
    log_dir: str = field(default_factory=lambda: _env_str(
        "QUADSTREAM_LOG_DIR", DEFAULT_LOG_DIR
    ))

    def validate(self) -> "StreamingStoreConfig":
        """Raise ConfigError on values the store cannot work with."""
        if self.backlog_warn_threshold <= 0:
            raise ConfigError(
                f"backlog_warn_threshold must be positive, got {self.backlog_warn_threshold}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary (for JSON output)."""
        return {
            "backlog_warn_threshold": self.backlog_warn_threshold,
            "log_level": self.log_level,
            "log_dir": self.log_dir,
        }


# Global instance for convenience
_default_config: Optional[StreamingStoreConfig] = None


def get_config() -> StreamingStoreConfig:
    """Get the global configuration."""
    global _default_config
    if _default_config is None:
        _default_config = StreamingStoreConfig().validate()
    return _default_config


def reset_config() -> None:
    """Reset global config (useful after env var changes or for testing)."""
    global _default_config
    _default_config = None
