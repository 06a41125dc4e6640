"""
Tests for the docclone command line.

The integration is patched out; these tests cover argument handling,
output and exit codes.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from docclone.api import CloneReport
from docclone.cli import cli, main
from docclone.commands.clone import default_output_dir, repo_name_from_url
from docclone.domain import DependencyResult, FileEntry
from docclone.errors import ConfigurationNotFoundError, RemoteUnreachableError
from docclone.infra.git_client import GitCommandError, GitResult

URL = "https://github.com/org/docs.git"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def report(tmp_path):
    result = DependencyResult(config_path="docfx.json")
    result.add(FileEntry("docfx.json", "config"))
    result.add(FileEntry("index.md", "content", ("images/logo.png",)))
    return CloneReport(
        result=result,
        config_path="docs/docfx.json",
        root=str(tmp_path),
        prefetched=frozenset({"docs/index.md"}),
        checked_out=frozenset({"docs/docfx.json", "docs/index.md"}),
    )


@pytest.fixture
def mock_create(report):
    with patch("docclone.commands.clone.create") as create:
        integration = MagicMock()
        integration.clone_and_parse.return_value = report
        create.return_value = integration
        yield create


class TestRepoName:
    """Tests for output directory naming."""

    @pytest.mark.parametrize("url,name", [
        ("https://github.com/org/docs.git", "docs"),
        ("https://github.com/org/docs/", "docs"),
        ("git@github.com:org/azure-docs.git", "azure-docs"),
        ("/srv/git/manual.git", "manual"),
        ("git@host:repo.git", "repo"),
    ])
    def test_repo_name_from_url(self, url, name):
        assert repo_name_from_url(url) == name

    def test_default_output_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert default_output_dir(URL) == str(tmp_path / "docs")


class TestCloneCommand:
    """Tests for 'docclone clone'."""

    def test_json_result_on_stdout(self, runner, mock_create, tmp_path):
        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path / "out"), "--silent"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["config"] == "docfx.json"
        assert data["files"][1]["references"] == ["images/logo.png"]

    def test_arguments_passed_through(self, runner, mock_create, tmp_path):
        out = tmp_path / "out"
        runner.invoke(cli, ["clone", URL, "docs", "-o", str(out), "-b", "live", "--silent"])

        assert mock_create.call_args[0][0] == str(out)
        integration = mock_create.return_value
        integration.clone_and_parse.assert_called_once_with(
            URL, "docs", branch="live", create_default=False
        )

    def test_create_default_flag(self, runner, mock_create, tmp_path):
        runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--create-default", "--silent"])

        kwargs = mock_create.return_value.clone_and_parse.call_args[1]
        assert kwargs["create_default"] is True

    def test_create_default_from_config(self, runner, mock_create, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCCLONE_CHECKOUT_CREATE_DEFAULT", "true")
        runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--silent"])

        kwargs = mock_create.return_value.clone_and_parse.call_args[1]
        assert kwargs["create_default"] is True

    def test_yaml_format(self, runner, mock_create, tmp_path):
        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "-f", "yaml", "--silent"])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["config"] == "docfx.json"

    def test_summary_rendered_when_not_silent(self, runner, mock_create, tmp_path):
        with patch("docclone.commands.clone.render_summary") as render:
            result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path)])

        assert result.exit_code == 0
        render.assert_called_once()
        assert render.call_args[0][0]["checked_out_files"] == 2

    def test_operation_error_exit_code(self, runner, mock_create, tmp_path):
        cause = GitCommandError(GitResult(("fetch",), 128, "", "fatal: Could not resolve host"))
        mock_create.return_value.clone_and_parse.side_effect = RemoteUnreachableError(
            f"Could not fetch from {URL}", cause=cause
        )

        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--silent"])

        assert result.exit_code == 2
        assert "Error: Could not fetch from" in result.output
        assert "Could not resolve host" in result.output

    def test_missing_config_exit_code(self, runner, mock_create, tmp_path):
        mock_create.return_value.clone_and_parse.side_effect = ConfigurationNotFoundError("docs/docfx.json")

        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--silent"])

        assert result.exit_code == 2
        assert "DocFX configuration file not found" in result.output

    @pytest.mark.parametrize("error", [RuntimeError("boom"), ValueError("bad value")])
    def test_unexpected_error_exit_code(self, runner, mock_create, tmp_path, error):
        mock_create.return_value.clone_and_parse.side_effect = error

        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--silent"])

        assert result.exit_code == 2
        assert str(error) in result.output

    def test_interrupted(self, runner, mock_create, tmp_path):
        mock_create.return_value.clone_and_parse.side_effect = KeyboardInterrupt()

        result = runner.invoke(cli, ["clone", URL, "docs", "-o", str(tmp_path), "--silent"])

        assert result.exit_code == 130

    def test_missing_arguments(self, runner):
        result = runner.invoke(cli, ["clone", URL])
        assert result.exit_code != 0
        assert "CONFIG_PATH" in result.output


class TestParseCommand:
    """Tests for 'docclone parse'."""

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(cli, ["parse", str(tmp_path / "nope"), "docs", "--silent"])

        assert result.exit_code == 1
        assert "Directory not found" in result.output

    def test_parses_regular_checkout(self, runner, tmp_path):
        docs = tmp_path / "docs"
        docs.mkdir()
        (docs / "docfx.json").write_text(json.dumps({"build": {"content": [{"files": ["*.md"]}]}}))
        (docs / "index.md").write_text("# Home\n")

        result = runner.invoke(cli, ["parse", str(tmp_path), "docs", "--silent"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [f["path"] for f in data["files"]] == ["docfx.json", "index.md"]

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["parse", str(tmp_path), "docs", "--silent"])

        assert result.exit_code == 2
        assert "DocFX configuration file not found" in result.output


class TestMain:
    """Tests for the console entry point."""

    def test_usage_error_returns_one(self):
        assert main(["clone"]) == 1

    def test_unknown_command(self):
        assert main(["frobnicate"]) == 1

    def test_command_exit_code(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", str(tmp_path / "nope"), "docs", "--silent"])
        assert exc_info.value.code == 1

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "clone" in result.output
        assert "parse" in result.output
