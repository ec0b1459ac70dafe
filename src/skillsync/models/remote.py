"""
Remote binding and sync mode models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

ORIGIN = "origin"
UPSTREAM = "upstream"


class ForkingStrategy(Enum):
    """How the ``origin`` remote of a fresh install is chosen."""
    AUTO = "auto"            # ensure the user owns a fork, use it
    FIXED_URL = "fixed_url"  # use a configured URL verbatim
    NONE = "none"            # clone the canonical repository directly


class UpdateMode(Enum):
    """Which remote an update rebases onto."""
    ORIGIN = "origin"
    UPSTREAM = "upstream"


@dataclass
class RemoteBinding:
    """Named remotes attached to a working copy."""

    remotes: Dict[str, str] = field(default_factory=dict)

    @property
    def origin(self) -> Optional[str]:
        return self.remotes.get(ORIGIN)

    @property
    def upstream(self) -> Optional[str]:
        return self.remotes.get(UPSTREAM)

    def has(self, name: str) -> bool:
        return name in self.remotes
