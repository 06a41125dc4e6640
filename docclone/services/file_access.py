"""
File access hooks handed to the dependency parser.

The parser calls ``before_read`` once for each file it is about to open.
The git-backed hook fetches the file the first time it is asked for and
blocks until the fetch returns, so a synchronous parser never sees a
pending result.
"""

import logging
import os
from typing import List, Protocol

from ..errors import DocCloneError

logger = logging.getLogger(__name__)


class FileAccessHook(Protocol):
    """Read-hook contract expected by the dependency parser."""

    def before_read(self, path: str, purpose: str = "") -> bool:
        """Make sure ``path`` exists locally; return False if it does not."""
        ...

    def after_read(self, path: str, purpose: str = "") -> None:
        ...

    def on_read_error(self, path: str, purpose: str, error: Exception) -> None:
        ...


class LocalFileAccessHook:
    """Hook for fully checked-out repositories: files either exist or not."""

    def before_read(self, path: str, purpose: str = "") -> bool:
        return os.path.isfile(path)

    def after_read(self, path: str, purpose: str = "") -> None:
        pass

    def on_read_error(self, path: str, purpose: str, error: Exception) -> None:
        # Read errors are the parser's concern
        pass


class GitFileAccessHook:
    """
    Hook that fetches files from the remote on first access.

    Fetch failures never propagate: the file is reported unavailable, logged
    at WARNING and recorded in ``unavailable`` so callers can report it.

    Example:
        hook = GitFileAccessHook(gateway)
        parser = DocfxDependencyParser(hook)
        result = parser.collect(gateway.full_path("docs/docfx.json"))
        if hook.unavailable:
            print("missing:", hook.unavailable)
    """

    def __init__(self, gateway):
        """
        Args:
            gateway: An initialized RemoteGateway
        """
        if gateway is None:
            raise ValueError("gateway is required")
        self.gateway = gateway
        self.unavailable: List[str] = []
        self.fetched_on_demand: List[str] = []

    def before_read(self, path: str, purpose: str = "") -> bool:
        relative = self.gateway.relative_path(path)
        if relative is None:
            logger.debug(f"Not fetching {path}: outside the repository")
            return os.path.isfile(path)

        if not self.gateway.is_requested(relative) and not self.gateway.mark_present(relative):
            try:
                if self.gateway.fetch_path(relative) and os.path.isfile(path):
                    self.fetched_on_demand.append(relative)
            except (DocCloneError, ValueError, OSError) as e:
                logger.warning(f"Could not fetch {relative}{f' ({purpose})' if purpose else ''}: {e}")
                self._report_unavailable(relative)
                return False

        exists = os.path.isfile(path)
        if not exists:
            self._report_unavailable(relative)
        return exists

    def _report_unavailable(self, relative: str) -> None:
        if relative not in self.unavailable:
            self.unavailable.append(relative)

    def after_read(self, path: str, purpose: str = "") -> None:
        pass

    def on_read_error(self, path: str, purpose: str, error: Exception) -> None:
        # Read errors are the parser's concern
        pass
