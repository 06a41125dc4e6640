"""
Common CLI utilities and decorators for consistent command behavior.
"""

import sys
import click
from functools import wraps
from typing import Any, Dict, Optional

from .config import configure_logging, load_config
from .exit_codes import SUCCESS, INTERRUPTED, OPERATION_ERROR, CommandError
from .format_utils import format_result, resolve_format
from .progress import get_progress


def error_details(exc: BaseException) -> Optional[str]:
    """Message of the nested cause, if the error carries one."""
    cause = getattr(exc, 'cause', None) or exc.__cause__
    if cause is None or cause is exc:
        return None
    return str(cause)


def report_error(progress, exc: BaseException) -> None:
    """Print the error and its nested cause to stderr."""
    progress.error(str(exc))
    details = error_details(exc)
    if details and details not in str(exc):
        print(f"Details: {details}", file=sys.stderr, flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Configuration and logging set up from the config file
    - Progress reporting on stderr (off with --silent, forced with --verbose)
    - The structured result on stdout in the requested format
    - Consistent error handling and exit codes

    The wrapped command receives ``progress`` and ``config`` keyword
    arguments and returns a dictionary to print, or None.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        silent = kwargs.get('silent', False)
        verbose = kwargs.get('verbose', False)
        output_format = kwargs.get('format', None)

        config = load_config()
        configure_logging(config, silent=silent)

        if silent:
            progress = get_progress(enabled=False)
        else:
            progress = get_progress(enabled=True if verbose else None)

        kwargs['progress'] = progress
        kwargs['config'] = config

        try:
            result = func(*args, **kwargs)

            if result is not None:
                output_format = resolve_format(output_format, config)
                print(format_result(result, output_format), flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            report_error(progress, e)
            sys.exit(e.exit_code)
        except Exception as e:
            report_error(progress, e)
            sys.exit(OPERATION_ERROR)

    return wrapper


# Standard options that commands share
common_options = {
    'silent': click.option('--silent', is_flag=True,
                           help='Suppress progress output'),
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Force progress output even when piped'),
    'format': click.option('-f', '--format',
                           type=click.Choice(['json', 'yaml']),
                           help='Result format (default: json, or from DOCCLONE_FORMAT env)'),
    'create_default': click.option('--create-default', is_flag=True,
                                   help='Write a default docfx.json when none exists'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('silent', 'format')
        def my_command(silent, format):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def resolve_create_default(flag: Optional[bool], config: Dict[str, Any]) -> bool:
    """--create-default flag, falling back to checkout.create_default."""
    if flag:
        return True
    return bool(config.get("checkout", {}).get("create_default", False))
