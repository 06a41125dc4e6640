"""
Post-parse sweep.

After the parser returns, every file in its result and every reference it
lists is mapped back to a repository path; whatever has not been fetched
yet goes out as one final batch. This covers references the parser
resolved without reading them through the hook (images, for example).
"""

import logging
import os
import re
from typing import FrozenSet, Iterable, List, Optional

from ..domain.result import DependencyResult
from ..progress import ProgressReporter, silent_progress

logger = logging.getLogger(__name__)

_URL = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')


def _candidate_paths(result: DependencyResult) -> Iterable[str]:
    for entry in result.files:
        yield entry.path
        for reference in entry.references or ():
            yield reference


def collect_unfetched(result: DependencyResult, docfx_dir: str, gateway) -> List[str]:
    """
    Repository-relative paths from ``result`` the gateway has not fetched.

    Files already in the working directory are recorded as fetched instead,
    and paths an earlier batch found absent from the tree are left out.

    Args:
        result: Parser output, paths relative to ``docfx_dir``
        docfx_dir: Absolute directory of docfx.json
        gateway: The RemoteGateway that owns the working directory

    Returns:
        Sorted, de-duplicated (case-insensitive) paths
    """
    missing = {}
    for candidate in _candidate_paths(result):
        if not candidate or not candidate.strip() or _URL.match(candidate):
            continue

        full_path = os.path.normpath(os.path.join(docfx_dir, candidate.replace('/', os.sep)))
        relative = gateway.relative_path(full_path)
        if not relative:
            logger.debug(f"Skipping {candidate}: outside the repository")
            continue

        if gateway.is_requested(relative) or gateway.mark_present(relative):
            continue
        missing.setdefault(relative.casefold(), relative)

    return sorted(missing.values())


class SweepService:
    """Fetches whatever the parse result references but nobody fetched."""

    def __init__(self, gateway, progress: Optional[ProgressReporter] = None):
        self.gateway = gateway
        self.progress = progress or silent_progress()

    def sweep(self, result: DependencyResult, docfx_dir: str) -> FrozenSet[str]:
        """
        Submit every unfetched file of the result as one request.

        Returns:
            Paths submitted for fetch
        """
        missing = collect_unfetched(result, docfx_dir, self.gateway)
        if not missing:
            return frozenset()

        self.progress(f"Checking out remaining files: {len(missing)} not yet checked out")
        return self.gateway.fetch_paths(missing)
