"""
Handles the 'parse' command: parse a DocFX project in an existing
directory, fetching files on demand when it is a sparse clone.
"""

import click
import os

from ..api import create
from ..cli_utils import standard_command, add_common_options, resolve_create_default
from ..exit_codes import PreconditionError
from ..render import render_summary


@click.command("parse")
@click.argument("local_dir")
@click.argument("config_path")
@add_common_options('create_default', 'silent', 'verbose', 'format')
@standard_command
def parse_handler(local_dir, config_path, create_default, silent, verbose, format,
                  progress, config, **kwargs):
    """
    Parse an existing repository with on-demand file checkout.

    LOCAL_DIR is a directory from an earlier 'docclone clone' or a regular
    checkout. CONFIG_PATH is docfx.json inside it, or its directory.

    Examples:

    \b
        docclone parse ./docs-repo docs/docfx.json
        docclone parse ./docs-repo docs --silent
    """
    local_dir = os.path.abspath(os.path.expanduser(local_dir))
    if not os.path.isdir(local_dir):
        raise PreconditionError(f"Directory not found: {local_dir}")

    progress(f"Parsing DocFX project: {config_path}")
    progress(f"Repository directory: {local_dir}")

    integration = create(local_dir, config=config, progress=progress)
    report = integration.parse_with_checkout(
        config_path,
        create_default=resolve_create_default(create_default, config)
    )

    progress.success("Successfully parsed DocFX project")
    if not silent:
        render_summary(report.summary())

    return report.result.to_dict()
