"""
Fail-fast checks for external tools and the hosting session.
"""

import logging

from ..error_handling import DependencyMissingError
from .context import SyncContext

logger = logging.getLogger(__name__)

INSTALL_HINTS = {
    "git": (
        "Install git:\n"
        "  macOS:   brew install git\n"
        "  Ubuntu:  sudo apt install git\n"
        "  Windows: https://git-scm.com/downloads"
    ),
    "gh": (
        "Install GitHub CLI:\n"
        "  macOS:   brew install gh\n"
        "  Ubuntu:  https://github.com/cli/cli/blob/trunk/docs/install_linux.md\n"
        "  Windows: winget install GitHub.cli\n"
        "\n"
        "Then authenticate: gh auth login"
    ),
}


def _require(name: str, available: bool) -> None:
    if not available:
        raise DependencyMissingError(
            f"{name} is required but not installed.",
            dependency=name,
            remediation=INSTALL_HINTS.get(name)
        )


def check_dependencies(ctx: SyncContext) -> None:
    """
    Verify required tools are on PATH and, when forking automatically,
    that the hosting client holds a valid session.

    Raises:
        DependencyMissingError: A required binary is missing
        AuthenticationError: The hosting session is missing or expired
    """
    logger.info("Checking dependencies...")
    _require(ctx.vcs.name, ctx.vcs.is_available())

    if ctx.needs_hosting:
        hosting = ctx.hosting
        if hosting is None:
            raise DependencyMissingError(
                "Automatic forking needs a hosting API client",
                dependency="gh",
                remediation=INSTALL_HINTS["gh"]
            )
        _require(hosting.name, hosting.is_available())
        hosting.check_auth()

    logger.info("Dependencies OK.")
