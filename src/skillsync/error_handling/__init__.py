"""
Error taxonomy for skillsync.
"""

from .exceptions import (
    SkillSyncError, DependencyMissingError, AuthenticationError,
    RemoteUnavailableError, NotInstalledError, ConflictError,
    VersionControlError, ConfigurationError
)

__all__ = [
    "SkillSyncError",
    "DependencyMissingError",
    "AuthenticationError",
    "RemoteUnavailableError",
    "NotInstalledError",
    "ConflictError",
    "VersionControlError",
    "ConfigurationError"
]
