"""
Execution settings for ERC-7821 batch calls.
"""

from dataclasses import dataclass
from typing import Optional

from .base import BaseConfig, ConfigError


@dataclass
class ExecutionConfig(BaseConfig):
    """Settings for capability probing and execute error handling."""

    # 0 keeps every probe result for the life of the process
    CAPABILITY_CACHE_MAX_ENTRIES: int = BaseConfig.get_env_int(
        "ERC7821_CACHE_MAX_ENTRIES", 0
    )

    # Include raw revert bytes in failure logs
    LOG_REVERT_DATA: bool = BaseConfig.get_env_bool("ERC7821_LOG_REVERT_DATA", False)

    def _validate_config(self):
        super()._validate_config()
        if self.CAPABILITY_CACHE_MAX_ENTRIES < 0:
            raise ConfigError(
                "ERC7821_CACHE_MAX_ENTRIES must be >= 0, "
                f"got: {self.CAPABILITY_CACHE_MAX_ENTRIES}"
            )

    @property
    def cache_max_entries(self) -> Optional[int]:
        """Cache bound, or None when unbounded."""
        return self.CAPABILITY_CACHE_MAX_ENTRIES or None
