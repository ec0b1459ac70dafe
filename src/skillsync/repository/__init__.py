"""
Version control and hosting API clients.
"""

from .base import VersionControlClient, HostingApiClient
from .git_client import GitClient
from .gh_cli_client import GhCliClient
from .github_client import GitHubClient, GitHubAPIError
from .remote_client import RemoteRepositoryClient

__all__ = [
    "VersionControlClient",
    "HostingApiClient",
    "GitClient",
    "GhCliClient",
    "GitHubClient",
    "GitHubAPIError",
    "RemoteRepositoryClient"
]
