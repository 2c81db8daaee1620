"""
Configuration management for the ERC-7821 executor.

Use get_config() to access all configuration settings.

Example:
    from src.config import get_config

    config = get_config()

    # Async web3 client for the default chain
    web3 = config.chains.make_web3()

    # Capability cache bound for executors
    max_entries = config.execution.cache_max_entries
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .execution import ExecutionConfig
from .manager import ConfigManager, get_config, reload_config

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ExecutionConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
