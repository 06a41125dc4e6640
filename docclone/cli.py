#!/usr/bin/env python3

import click
import sys

from docclone.commands.clone import clone_handler
from docclone.commands.parse import parse_handler
from docclone.exit_codes import USAGE_ERROR, INTERRUPTED


@click.group()
@click.version_option(package_name="docclone")
def cli():
    """docclone - Fetch only the files a DocFX project needs from a git repository.

    Sets up a shallow, blob-less, sparse clone, then checks out the files
    docfx.json selects and the files the dependency parser reaches.
    """
    pass


cli.add_command(clone_handler, name='clone')
cli.add_command(parse_handler, name='parse')


def main(args=None):
    """Console entry point. Usage errors exit with 1, not click's default 2."""
    try:
        return cli.main(args=args, standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return INTERRUPTED
    except click.UsageError as e:
        e.show()
        return USAGE_ERROR
    except click.ClickException as e:
        e.show()
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main() or 0)
