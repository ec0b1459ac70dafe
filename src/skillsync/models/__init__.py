"""
Data models for skillsync.
"""

from .managed_directory import ManagedDirectory
from .backup import BackupSnapshot
from .remote import ForkingStrategy, UpdateMode, RemoteBinding, ORIGIN, UPSTREAM
from .results import RestoreReport, UpdateResult, InstallResult

__all__ = [
    "ManagedDirectory",
    "BackupSnapshot",
    "ForkingStrategy",
    "UpdateMode",
    "RemoteBinding",
    "ORIGIN",
    "UPSTREAM",
    "RestoreReport",
    "UpdateResult",
    "InstallResult"
]
