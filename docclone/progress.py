"""
Progress reporting utilities for docclone.

Progress goes to stderr so stdout stays clean for the structured result.
"""

import sys
import os
import time
from contextlib import contextmanager
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log levels for progress messages."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_colors: Use ANSI colors in output
        """
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty()
        else:
            self.enabled = enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

        self.colors = {
            'reset': '\033[0m',
            'dim': '\033[2m',
            'red': '\033[31m',
            'green': '\033[32m',
            'yellow': '\033[33m',
        }

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            force: Force output even if disabled
            level: Log level for the message
        """
        if not (force or self.enabled):
            return

        if level == LogLevel.ERROR:
            message = self._colorize(f"✗ {message}", 'red')
        elif level == LogLevel.WARNING:
            message = self._colorize(f"⚠ {message}", 'yellow')
        elif level == LogLevel.SUCCESS:
            message = self._colorize(f"✓ {message}", 'green')
        elif level == LogLevel.DEBUG:
            message = self._colorize(f"  {message}", 'dim')

        print(message, file=sys.stderr, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        print(self._colorize(f"Error: {message}", 'red'), file=sys.stderr, flush=True)

    def warning(self, message: str):
        """Output warnings to stderr if enabled."""
        if self.enabled:
            self(message, level=LogLevel.WARNING)

    def success(self, message: str):
        """Output success message if enabled."""
        if self.enabled:
            self(message, level=LogLevel.SUCCESS)

    def file_checkout(self, relative_path: str):
        """Announce a file about to be fetched."""
        self(f"Checking out: {relative_path}", level=LogLevel.DEBUG)

    @contextmanager
    def task(self, description: str, total: Optional[int] = None):
        """
        Context manager for timing a task.

        Example:
            with progress.task("Fetching files", total=12):
                gateway.fetch_paths(paths)
        """
        start_time = time.time()

        if self.enabled:
            if total:
                print(f"{description} ({total} items)...", file=sys.stderr, flush=True)
            else:
                print(f"{description}...", file=sys.stderr, flush=True)

        try:
            yield
        finally:
            if self.enabled:
                elapsed = time.time() - start_time
                print(f"Completed in {elapsed:.1f}s", file=sys.stderr, flush=True)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display

    Returns:
        ProgressReporter instance
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


def silent_progress() -> ProgressReporter:
    """A reporter that prints nothing but errors."""
    return ProgressReporter(enabled=False, use_colors=False)
