"""
End-to-end tests against a real git binary.

A local source repository is served over file:// with partial-clone
filters enabled, so the sparse, blob-less clone and the on-demand
materialization run exactly as they would against a hosted remote.
"""

import json
import shutil
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from docclone.api import create
from docclone.cli import cli
from docclone.config import get_default_config
from docclone.services.remote_gateway import RemoteGateway

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

SOURCE_FILES = {
    "docs/docfx.json": json.dumps({"build": {"content": [{"files": ["index.md"]}]}}),
    "docs/index.md": "[Guide](guide/a.md)\n![diagram](img/x.png)\n[Odd](weird%20%5B1%5D.md)\n",
    "docs/guide/a.md": "# Guide\n",
    "docs/img/x.png": "png",
    "docs/weird [1].md": "# Odd name\n",
    "docs/unused.md": "# Never referenced\n",
    "readme.md": "# Repository readme\n",
}


def git(cwd, *args):
    return subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)


@pytest.fixture
def source_repo(tmp_path):
    """A committed repository on branch main that allows filtered fetches."""
    repo_path = tmp_path / "source"
    repo_path.mkdir()
    git(repo_path, "init")
    git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo_path, "config", "user.email", "test@example.com")
    git(repo_path, "config", "user.name", "Test User")
    git(repo_path, "config", "uploadpack.allowFilter", "true")
    git(repo_path, "config", "uploadpack.allowAnySHA1InWant", "true")

    for relative, text in SOURCE_FILES.items():
        path = repo_path.joinpath(*relative.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    git(repo_path, "add", "-A")
    git(repo_path, "commit", "-m", "Initial commit")
    return repo_path


@pytest.fixture
def source_url(source_repo):
    return Path(source_repo).as_uri()


@pytest.fixture
def clone_dir(tmp_path):
    return tmp_path / "clone"


@pytest.fixture
def gateway(clone_dir):
    return RemoteGateway(str(clone_dir), config=get_default_config())


class TestSparseClone:
    """Repository handle operations over a real partial clone."""

    def test_initialize_materializes_nothing(self, gateway, source_url, clone_dir):
        gateway.initialize(source_url)

        assert gateway.branch == "main"
        assert gateway.git.is_sparse_checkout(str(clone_dir))
        assert [p.name for p in clone_dir.iterdir()] == [".git"]

    def test_list_tree(self, gateway, source_url):
        gateway.initialize(source_url)

        assert gateway.list_tree() == tuple(sorted(SOURCE_FILES))
        assert gateway.list_tree("docs/guide") == ("docs/guide/a.md",)

    def test_fetch_paths(self, gateway, source_url, clone_dir):
        gateway.initialize(source_url, branch="main")

        submitted = gateway.fetch_paths(["docs/guide/a.md", "docs/weird [1].md"])

        assert submitted == frozenset({"docs/guide/a.md", "docs/weird [1].md"})
        assert (clone_dir / "docs" / "guide" / "a.md").read_text() == "# Guide\n"
        assert (clone_dir / "docs" / "weird [1].md").read_text() == "# Odd name\n"
        assert not (clone_dir / "docs" / "unused.md").exists()
        assert not (clone_dir / "readme.md").exists()

    def test_path_absent_from_tree(self, gateway, source_url):
        gateway.initialize(source_url)

        gateway.fetch_paths(["docs/guide/a.md", "docs/not-there.md"])

        assert gateway.is_fetched("docs/guide/a.md")
        assert not gateway.is_fetched("docs/not-there.md")
        assert gateway.missing_paths() == frozenset({"docs/not-there.md"})

    def test_reinitialize_existing_directory(self, gateway, source_url, clone_dir):
        gateway.initialize(source_url)
        gateway.fetch_paths(["docs/index.md"])

        again = RemoteGateway(str(clone_dir), config=get_default_config())
        again.initialize(source_url)
        again.fetch_paths(["docs/guide/a.md"])

        assert again.is_fetched("docs/guide/a.md")
        assert (clone_dir / "docs" / "guide" / "a.md").exists()
        assert not (clone_dir / "readme.md").exists()


class TestCloneAndParse:
    """The three materialization passes against a real remote."""

    def test_only_needed_files_checked_out(self, source_url, clone_dir):
        report = create(str(clone_dir), config=get_default_config()).clone_and_parse(source_url, "docs")

        expected = {"docs/docfx.json", "docs/index.md", "docs/guide/a.md",
                    "docs/img/x.png", "docs/weird [1].md"}
        assert report.checked_out == frozenset(expected)
        assert report.prefetched == frozenset({"docs/index.md"})
        assert report.fetched_on_demand == ["docs/guide/a.md", "docs/weird [1].md"]
        assert report.swept == frozenset({"docs/img/x.png"})
        assert report.unavailable == []

        for relative in expected:
            assert clone_dir.joinpath(*relative.split("/")).is_file()
        assert not (clone_dir / "readme.md").exists()
        assert not (clone_dir / "docs" / "unused.md").exists()

    def test_parse_existing_sparse_clone(self, source_url, clone_dir):
        create(str(clone_dir), config=get_default_config()).clone_and_parse(source_url, "docs")

        report = create(str(clone_dir), config=get_default_config()).parse_with_checkout("docs")

        assert report.sparse
        assert report.swept == frozenset()
        assert "docs/img/x.png" in report.checked_out

    def test_cli_clone(self, source_url, clone_dir):
        result = CliRunner().invoke(cli, ["clone", source_url, "docs", "-o", str(clone_dir), "--silent"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["config"] == "docfx.json"
        assert "weird [1].md" in [f["path"] for f in data["files"]]
