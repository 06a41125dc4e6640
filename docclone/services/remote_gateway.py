"""
Remote gateway for docclone.

The gateway is the Repository Handle: one local working directory bound to
one origin and one branch. It sets up a shallow, blob-less, sparse view of
the remote, lists the tree without any content present, and materializes
files in batches, remembering what it already fetched.

Git commands are issued one at a time. One gateway owns its directory for
the life of the process; two gateways must never share a directory.
"""

import logging
import os
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Set, Tuple

from ..config import load_config
from ..domain.checkout_state import CheckoutState, normalize_path
from ..errors import (
    AlreadyInitializedError,
    FetchError,
    InitializationError,
    NotInitializedError,
    RefNotFoundError,
    RemoteUnreachableError,
)
from ..infra.git_client import GitClient, GitCommandError
from ..progress import ProgressReporter, silent_progress

logger = logging.getLogger(__name__)

REF_NOT_FOUND_MARKERS = (
    "couldn't find remote ref",
    "could not find remote ref",
    "no such ref",
    "unknown revision",
)


def _classify_fetch_error(error: GitCommandError, remote_url: str, branch: str) -> InitializationError:
    """Map a failed metadata fetch onto the error taxonomy."""
    diagnostic = error.diagnostic
    lowered = diagnostic.lower()
    if any(marker in lowered for marker in REF_NOT_FOUND_MARKERS):
        return RefNotFoundError(
            f"Branch '{branch}' not found on {remote_url}: {diagnostic}", cause=error
        )
    return RemoteUnreachableError(
        f"Could not fetch from {remote_url}: {diagnostic}", cause=error
    )


class RemoteGateway:
    """
    Partial, on-demand view of a remote git repository.

    Example:
        gateway = RemoteGateway("/tmp/docs-repo")
        gateway.initialize("https://github.com/org/docs.git", branch="main")
        tree = gateway.list_tree()
        gateway.fetch_paths({"docs/docfx.json", "docs/index.md"})
    """

    def __init__(
        self,
        local_path: str,
        git_client: Optional[GitClient] = None,
        progress: Optional[ProgressReporter] = None,
        config: Optional[dict] = None
    ):
        """
        Initialize RemoteGateway.

        Args:
            local_path: Working directory for the sparse clone
            git_client: GitClient instance (built from config if None)
            progress: Progress reporter (silent if None)
            config: Configuration dict (loads default if None)
        """
        self.config = config or load_config()
        self.root = os.path.abspath(local_path)
        self.git = git_client or GitClient.from_config(self.config)
        self.progress = progress or silent_progress()
        self.state = CheckoutState()
        self.remote_url: Optional[str] = None
        self.branch: Optional[str] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError()

    def initialize(self, remote_url: str, branch: Optional[str] = None) -> None:
        """
        Create a sparse, blob-less, shallow clone with nothing materialized.

        Args:
            remote_url: URL of the origin remote
            branch: Branch to track (remote default HEAD if None)

        Raises:
            AlreadyInitializedError: On a second call
            RemoteUnreachableError: The remote could not be fetched
            RefNotFoundError: The branch does not exist on the remote
            InitializationError: Any other setup step failed
        """
        if not remote_url or not remote_url.strip():
            raise ValueError("Repository URL cannot be empty")

        if self._initialized:
            raise AlreadyInitializedError()

        try:
            Path(self.root).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InitializationError(f"Cannot create {self.root}: {e}", cause=e) from e

        try:
            self._ensure_repository()
            self._ensure_origin(remote_url)
            branch = self._resolve_branch(branch)
        except GitCommandError as e:
            raise InitializationError(
                f"Failed to initialize sparse clone: {e.diagnostic}", cause=e
            ) from e

        self.progress(f"Fetching repository structure for '{branch}' (no file content)")
        depth = int(self.config.get("git", {}).get("depth", 1) or 1)
        try:
            self.git.fetch_metadata(self.root, branch, depth=depth)
        except GitCommandError as e:
            raise _classify_fetch_error(e, remote_url, branch) from e

        try:
            self.git.enable_sparse_checkout(self.root)
            if self.git.branch_exists(self.root, branch):
                self.git.checkout(self.root, branch)
                self.git.reset_hard(self.root, "FETCH_HEAD")
            else:
                self.git.checkout_new_branch(self.root, branch, "FETCH_HEAD")
        except GitCommandError as e:
            raise InitializationError(
                f"Failed to set up branch '{branch}': {e.diagnostic}", cause=e
            ) from e
        except OSError as e:
            raise InitializationError(f"Failed to enable sparse checkout: {e}", cause=e) from e

        self.remote_url = remote_url
        self.branch = branch
        self._initialized = True
        self.progress.success(f"Repository initialized at {self.root}, files will be checked out on demand")

    def _ensure_repository(self) -> None:
        if self.git.is_git_repo(self.root):
            self.progress("Using existing git repository")
        else:
            self.progress("Initializing repository")
            self.git.init(self.root)

    def _ensure_origin(self, remote_url: str) -> None:
        current = self.git.remote_url(self.root)
        if current is None:
            self.progress(f"Adding remote origin {remote_url}")
            self.git.add_remote(self.root, remote_url)
        elif current.strip().casefold() != remote_url.strip().casefold():
            self.progress(f"Updating remote origin to {remote_url}")
            self.git.set_remote_url(self.root, remote_url)
        else:
            logger.debug("Using existing remote origin")

    def _resolve_branch(self, branch: Optional[str]) -> str:
        if branch:
            return branch
        remote_head = self.git.remote_default_branch(self.root)
        if remote_head:
            return remote_head
        return self.config.get("git", {}).get("default_branch", "main")

    def attach(self) -> None:
        """
        Bind to a sparse working directory set up by an earlier run.

        Raises:
            AlreadyInitializedError: If the handle is already initialized
            InitializationError: If the directory is not a sparse checkout
        """
        if self._initialized:
            raise AlreadyInitializedError()
        if not self.git.is_git_repo(self.root):
            raise InitializationError(f"Not a git repository: {self.root}")
        try:
            if not self.git.is_sparse_checkout(self.root):
                raise InitializationError(f"Sparse checkout is not enabled in {self.root}")
            self.remote_url = self.git.remote_url(self.root)
        except GitCommandError as e:
            raise InitializationError(f"Cannot attach to {self.root}: {e.diagnostic}", cause=e) from e
        self._initialized = True

    def list_tree(self, path: Optional[str] = None) -> Tuple[str, ...]:
        """
        List every tracked file under ``path`` (or the root) at HEAD.

        No file content needs to be present locally.

        Raises:
            NotInitializedError: Before initialize()
            FetchError: If the listing command fails
        """
        self._require_initialized()
        subpath = normalize_path(path) if path else None
        try:
            entries = self.git.ls_tree(self.root, subpath or None)
        except GitCommandError as e:
            raise FetchError(f"Failed to list files in tree: {e.diagnostic}", cause=e) from e
        return tuple(sorted(entries))

    def fetch_paths(self, paths: Iterable[str]) -> FrozenSet[str]:
        """
        Materialize files in one batch.

        Paths already requested are skipped, and files already on disk are
        recorded as fetched without a git call. After the batch, only paths
        git actually materialized are recorded as fetched; the rest are
        recorded as missing and not requested again. If the batch fails,
        files that did land on disk are still recorded before FetchError is
        raised.

        Returns:
            The paths actually submitted to git (empty if nothing to do)

        Raises:
            NotInitializedError: Before initialize()
            FetchError: If git rejects the batch
        """
        self._require_initialized()

        pending: Set[str] = set()
        seen: Set[str] = set()
        for path in paths:
            normalized = normalize_path(path or "")
            key = normalized.casefold()
            if not normalized or key in seen or self.state.is_requested(normalized):
                continue
            seen.add(key)
            if not self.mark_present(normalized):
                pending.add(normalized)

        if not pending:
            return frozenset()

        ordered = sorted(pending)
        for path in ordered:
            self.progress.file_checkout(path)

        try:
            self.git.sparse_checkout_add(self.root, ordered)
        except GitCommandError as e:
            for path in ordered:
                self.mark_present(path)
            raise FetchError(
                f"Failed to checkout files: {e.diagnostic}", paths=pending, cause=e
            ) from e

        for path in ordered:
            if not self.mark_present(path):
                logger.debug(f"{path} was requested but is not in the tree")
                self.state.mark_missing(path)
        return frozenset(pending)

    def fetch_path(self, path: str) -> bool:
        """
        Materialize a single file.

        Returns:
            True if a fetch was issued, False if it was already requested
            or already on disk
        """
        if not normalize_path(path or ""):
            raise ValueError("Relative path cannot be empty")
        return bool(self.fetch_paths([path]))

    def mark_present(self, path: str) -> bool:
        """
        Record ``path`` as fetched if its file exists in the working directory.

        Returns:
            True if the file is present
        """
        if not os.path.isfile(self.full_path(path)):
            return False
        self.state.mark_fetched(path)
        return True

    def is_fetched(self, path: str) -> bool:
        return self.state.is_fetched(path)

    def is_requested(self, path: str) -> bool:
        return self.state.is_requested(path)

    def fetched_paths(self) -> FrozenSet[str]:
        return self.state.all_fetched()

    def missing_paths(self) -> FrozenSet[str]:
        return self.state.all_missing()

    def full_path(self, relative_path: Optional[str] = None) -> str:
        """Local path for a repository-relative path (the root if empty)."""
        normalized = normalize_path(relative_path or "")
        if not normalized:
            return self.root
        return os.path.join(self.root, *normalized.split('/'))

    def relative_path(self, absolute_path: str) -> Optional[str]:
        """
        Repository-relative, forward-slash path for a local path.

        Returns:
            The relative path, or None if it lies outside the repository
        """
        relative = os.path.relpath(os.path.abspath(absolute_path), self.root)
        relative = normalize_path(relative)
        if relative == ".." or relative.startswith("../"):
            return None
        return relative
