"""
Shared fixtures for docclone tests.

The git client is always mocked: ``remote_files`` plays the part of the
remote repository, and ``sparse_checkout_add`` writes the requested files
into the working directory the way a partial clone would.
"""

import logging
import os
import pytest
from unittest.mock import MagicMock

from docclone.config import get_default_config
from docclone.infra.git_client import GitClient, GitResult
from docclone.services.remote_gateway import RemoteGateway


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Keep tests away from the real ~/.docclone configuration."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("DOCCLONE_"):
            monkeypatch.delenv(key, raising=False)
    return home


def make_mock_git(remote_files=None):
    """Mock GitClient backed by a dict of path -> content."""
    remote_files = {} if remote_files is None else remote_files
    git = MagicMock(spec=GitClient)

    git.is_git_repo.return_value = False
    git.remote_url.return_value = None
    git.remote_default_branch.return_value = "main"
    git.branch_exists.return_value = False
    git.is_sparse_checkout.return_value = True
    git.ls_tree.side_effect = lambda path, subpath=None, ref="HEAD": sorted(
        p for p in remote_files if not subpath or p.startswith(subpath.rstrip("/") + "/")
    )

    def add(root, files):
        for relative in files:
            if relative in remote_files:
                target = os.path.join(root, *relative.split("/"))
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with open(target, "w", encoding="utf-8") as f:
                    f.write(remote_files[relative])
        return GitResult(("sparse-checkout", "add", "--stdin"), 0)

    git.sparse_checkout_add.side_effect = add
    git.remote_files = remote_files
    return git


@pytest.fixture
def remote_files():
    return {}


@pytest.fixture
def mock_git(remote_files):
    return make_mock_git(remote_files)


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "repo"
    return path


@pytest.fixture
def gateway(workdir, mock_git):
    """Uninitialized gateway over a mocked git client."""
    return RemoteGateway(str(workdir), git_client=mock_git, config=get_default_config())


@pytest.fixture
def initialized_gateway(gateway):
    gateway.initialize("https://example.com/org/docs.git", branch="main")
    return gateway


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
