"""
Checkout state tracking for docclone.

Records which repository paths have had their content fetched. Paths are
normalized and compared case-insensitively so platform separator and
casing differences never cause duplicate fetches.
"""

import posixpath
from typing import Dict, FrozenSet, Iterable, Iterator


def normalize_path(path: str) -> str:
    """
    Normalize a repository-relative path to git's convention.

    Backslashes become forward slashes, surrounding separators are removed
    and ``.`` segments collapse.

    Example:
        normalize_path("/docs/./intro.md/") == "docs/intro.md"
    """
    path = path.replace('\\', '/').strip().strip('/')
    if not path:
        return ""
    path = posixpath.normpath(path)
    return "" if path == "." else path


class CheckoutState:
    """
    The Checked-Out Set.

    A path present here has been fetched at least once. Absence only means
    this engine has not fetched it yet. The set never shrinks.

    Paths that were requested but that git did not materialize (absent from
    the remote tree) are kept apart as missing, so they are neither
    reported as checked out nor requested again.
    """

    def __init__(self):
        # casefolded key -> first spelling seen
        self._paths: Dict[str, str] = {}
        self._missing: Dict[str, str] = {}

    @staticmethod
    def _key(path: str) -> str:
        return normalize_path(path).casefold()

    def mark_fetched(self, path: str) -> None:
        normalized = normalize_path(path)
        if normalized:
            key = normalized.casefold()
            self._paths.setdefault(key, normalized)
            self._missing.pop(key, None)

    def mark_all_fetched(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.mark_fetched(path)

    def mark_missing(self, path: str) -> None:
        normalized = normalize_path(path)
        key = normalized.casefold()
        if normalized and key not in self._paths:
            self._missing.setdefault(key, normalized)

    def is_fetched(self, path: str) -> bool:
        return self._key(path) in self._paths

    def is_missing(self, path: str) -> bool:
        return self._key(path) in self._missing

    def is_requested(self, path: str) -> bool:
        """True once a fetch for ``path`` has completed, whether or not it materialized."""
        key = self._key(path)
        return key in self._paths or key in self._missing

    def all_fetched(self) -> FrozenSet[str]:
        return frozenset(self._paths.values())

    def all_missing(self) -> FrozenSet[str]:
        return frozenset(self._missing.values())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.is_fetched(path)

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths.values()))
