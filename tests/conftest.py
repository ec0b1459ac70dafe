"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src/ to path for imports when the package is not installed
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from skillsync.config import reset_config_manager  # noqa: E402
from skillsync.logging import close_logging  # noqa: E402
from skillsync.models import ForkingStrategy, ManagedDirectory  # noqa: E402
from skillsync.repository import RemoteRepositoryClient  # noqa: E402
from skillsync.sync import SyncContext  # noqa: E402

from fakes import FORK, UPSTREAM, FakeHosting, FakeRemote, FakeVersionControl, url_for  # noqa: E402


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the global config manager and logging between tests."""
    reset_config_manager()
    yield
    reset_config_manager()
    close_logging()


@pytest.fixture
def upstream_remote():
    return FakeRemote(
        files={"README.md": "canonical\n", "install.sh": "#!/bin/bash\n", "update.sh": "#!/bin/bash\n",
               "skills/writing/SKILL.md": "writing v1\n"},
        head="1" * 40
    )


@pytest.fixture
def fork_remote(upstream_remote):
    return FakeRemote(files=dict(upstream_remote.files), head=upstream_remote.head)


@pytest.fixture
def vcs(upstream_remote, fork_remote):
    return FakeVersionControl(remotes={url_for(UPSTREAM): upstream_remote, url_for(FORK): fork_remote})


@pytest.fixture
def hosting():
    return FakeHosting(user="alice", repositories={UPSTREAM})


@pytest.fixture
def managed_path(tmp_path):
    return tmp_path / "home" / ".claude"


@pytest.fixture
def make_context(managed_path, vcs, hosting):
    """Build a SyncContext over a temporary home directory."""
    def _make(strategy=ForkingStrategy.AUTO, origin_url=None, hosting_client=hosting, vcs_client=vcs):
        remote = RemoteRepositoryClient(
            vcs=vcs_client,
            hosting=hosting_client,
            upstream=UPSTREAM,
            forking_strategy=strategy,
            origin_url=origin_url
        )
        return SyncContext(
            managed=ManagedDirectory(path=managed_path),
            backup_root=managed_path.parent,
            remote=remote,
            branch="main",
            clock=lambda: datetime(2026, 10, 19, 12, 0, 0)
        )
    return _make

