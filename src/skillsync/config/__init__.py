"""
Configuration management for skillsync.
"""

from .config_manager import (
    ConfigManager, AppConfig, GitHubConfig, RepositoryConfig, PathsConfig,
    LoggingConfig, get_config_manager, reset_config_manager, get_config
)

__all__ = [
    "ConfigManager",
    "AppConfig",
    "GitHubConfig",
    "RepositoryConfig",
    "PathsConfig",
    "LoggingConfig",
    "get_config_manager",
    "reset_config_manager",
    "get_config"
]
