"""
Handles the 'clone' command: sparse-clone a repository and fetch only
the files its docfx project needs.
"""

import click
import os
from typing import Optional

from ..api import create
from ..cli_utils import standard_command, add_common_options, resolve_create_default
from ..render import render_summary


def repo_name_from_url(repo_url: str) -> str:
    """
    Derive a directory name from a repository URL.

    Handles HTTPS, SSH (git@host:owner/repo.git) and local paths.
    """
    name = repo_url.rstrip("/").split("/")[-1].split(":")[-1]
    if name.endswith(".git"):
        name = name[:-len(".git")]
    return name or "repository"


def default_output_dir(repo_url: str) -> str:
    return os.path.join(os.getcwd(), repo_name_from_url(repo_url))


@click.command("clone")
@click.argument("repo_url")
@click.argument("config_path")
@click.option("-o", "--output", "output_dir", help="Output directory (default: ./<repo-name>)")
@click.option("-b", "--branch", help="Branch to clone (default: remote HEAD)")
@add_common_options('create_default', 'silent', 'verbose', 'format')
@standard_command
def clone_handler(repo_url, config_path, output_dir: Optional[str], branch: Optional[str],
                  create_default, silent, verbose, format, progress, config, **kwargs):
    """
    Clone a repository and parse its DocFX project with sparse checkout.

    Only the repository structure is downloaded up front; file content is
    fetched for the files docfx.json selects and for the files the parser
    reaches through references.

    CONFIG_PATH is docfx.json inside the repository, or the directory
    that contains it.

    Examples:

    \b
        docclone clone https://github.com/org/docs.git docs/docfx.json
        docclone clone https://github.com/org/docs.git docs -o /tmp/docs -b main
        docclone clone git@github.com:org/docs.git . --silent -f yaml
    """
    output_dir = os.path.abspath(os.path.expanduser(output_dir or default_output_dir(repo_url)))

    progress(f"Cloning repository: {repo_url}")
    progress(f"DocFX config: {config_path}")
    progress(f"Output directory: {output_dir}")
    if branch:
        progress(f"Branch: {branch}")

    integration = create(output_dir, config=config, progress=progress)
    report = integration.clone_and_parse(
        repo_url,
        config_path,
        branch=branch,
        create_default=resolve_create_default(create_default, config)
    )

    progress.success("Successfully cloned and parsed DocFX project")
    if not silent:
        render_summary(report.summary())

    return report.result.to_dict()
