"""
High-level Python API for docclone.

Ties the pieces together: sparse clone, pre-fetch from docfx.json glob
sections, dependency parsing with on-demand fetches, and the post-parse
sweep.

Example:
    import docclone

    integration = docclone.create("/tmp/docs-repo")
    report = integration.clone_and_parse(
        "https://github.com/org/docs.git", "docs/docfx.json", branch="main"
    )
    print(report.total_files, "files,", report.checked_out_files, "checked out")

    # Parse an existing directory (sparse or regular checkout)
    report = docclone.create("/tmp/docs-repo").parse_with_checkout("docs")
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from .config import load_config
from .domain.result import DependencyResult
from .errors import ConfigurationNotFoundError, FetchError
from .infra.git_client import GitClient, GitCommandError
from .parser import DocfxDependencyParser
from .progress import ProgressReporter, silent_progress
from .services.file_access import FileAccessHook, GitFileAccessHook, LocalFileAccessHook
from .services.prefetch_service import PrefetchService
from .services.remote_gateway import RemoteGateway
from .services.sweep_service import SweepService

logger = logging.getLogger(__name__)

DOCFX_FILENAME = "docfx.json"

DEFAULT_DOCFX_CONFIG = {
    "build": {
        "content": [
            {"files": ["**/*.yml", "**/*.md"]}
        ],
        "resource": [
            {"files": ["**/*.jpg", "**/*.png"]}
        ],
        "dest": "_site"
    }
}


def normalize_config_path(config_path: Optional[str], filename: str = DOCFX_FILENAME) -> str:
    """
    Point a user-supplied path at docfx.json.

    Examples:
        normalize_config_path("") == "docfx.json"
        normalize_config_path("docs") == "docs/docfx.json"
        normalize_config_path("docs/") == "docs/docfx.json"
        normalize_config_path("docs/DocFX.json") == "docs/DocFX.json"
    """
    if not config_path or not config_path.strip():
        return filename

    config_path = config_path.strip().replace('\\', '/')
    if config_path.lower().endswith(filename.lower()):
        return config_path
    if config_path.endswith('/'):
        return config_path + filename
    return f"{config_path}/{filename}"


def write_default_config(full_path: str) -> None:
    """Write a minimal docfx.json with one content and one resource section."""
    path = Path(full_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(DEFAULT_DOCFX_CONFIG, indent=2) + "\n", encoding="utf-8")


@dataclass
class CloneReport:
    """Outcome of a clone-and-parse or parse run."""
    result: DependencyResult
    config_path: str
    root: str
    sparse: bool = True
    created_default: bool = False
    prefetched: FrozenSet[str] = frozenset()
    fetched_on_demand: List[str] = field(default_factory=list)
    swept: FrozenSet[str] = frozenset()
    checked_out: FrozenSet[str] = frozenset()
    unavailable: List[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.result.files)

    @property
    def checked_out_files(self) -> int:
        return len(self.checked_out)

    def summary(self) -> Dict[str, Any]:
        return {
            'root': self.root,
            'config': self.config_path,
            'sparse': self.sparse,
            'created_default_config': self.created_default,
            'total_files': self.total_files,
            'checked_out_files': self.checked_out_files,
            'prefetched': len(self.prefetched),
            'fetched_on_demand': len(self.fetched_on_demand),
            'swept': len(self.swept),
            'unavailable': sorted(self.unavailable),
        }


ParserFactory = Callable[[FileAccessHook], Any]


class DocfxIntegration:
    """
    Clones only what a docfx project needs.

    Args:
        gateway: RemoteGateway for the working directory
        progress: Progress reporter (silent if None)
        parser_factory: Builds a parser from a file access hook
        config_filename: File name appended to directory config paths
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        progress: Optional[ProgressReporter] = None,
        parser_factory: Optional[ParserFactory] = None,
        config_filename: str = DOCFX_FILENAME
    ):
        if gateway is None:
            raise ValueError("gateway is required")
        self.gateway = gateway
        self.progress = progress or silent_progress()
        self.parser_factory = parser_factory or DocfxDependencyParser
        self.config_filename = config_filename or DOCFX_FILENAME

    def clone_and_parse(
        self,
        repository_url: str,
        config_path: str,
        branch: Optional[str] = None,
        create_default: bool = False
    ) -> CloneReport:
        """
        Initialize a sparse clone and parse the docfx project, fetching
        files on demand.

        Raises:
            InitializationError: If the sparse clone cannot be set up
            ConfigurationNotFoundError: If docfx.json is missing and
                create_default is False
            FetchError: If a batch fetch fails
        """
        config_path = normalize_config_path(config_path, self.config_filename)
        self.gateway.initialize(repository_url, branch)

        created = self._ensure_config(config_path, create_default)
        return self._fetch_and_parse(config_path, created)

    def parse_with_checkout(self, config_path: str, create_default: bool = False) -> CloneReport:
        """
        Parse a project in an existing directory.

        A sparse working copy from an earlier clone gets the full
        fetch/parse/sweep treatment; a regular checkout is parsed as is.
        """
        config_path = normalize_config_path(config_path, self.config_filename)

        if self._is_sparse_working_copy():
            self.gateway.attach()
            created = self._ensure_config(config_path, create_default)
            return self._fetch_and_parse(config_path, created)

        full_path = self.gateway.full_path(config_path)
        created = False
        if not os.path.isfile(full_path):
            if not create_default:
                raise ConfigurationNotFoundError(config_path)
            write_default_config(full_path)
            created = True
            self.progress.success(f"Created default configuration at {config_path}")

        parser = self.parser_factory(LocalFileAccessHook())
        result = parser.collect(full_path)
        return CloneReport(
            result=result,
            config_path=config_path,
            root=self.gateway.root,
            sparse=False,
            created_default=created
        )

    def _is_sparse_working_copy(self) -> bool:
        git: GitClient = self.gateway.git
        if not git.is_git_repo(self.gateway.root):
            return False
        try:
            return git.is_sparse_checkout(self.gateway.root)
        except GitCommandError as e:
            logger.debug(f"Could not read sparse checkout setting: {e.diagnostic}")
            return False

    def _ensure_config(self, config_path: str, create_default: bool) -> bool:
        """
        Fetch docfx.json, or write the default one.

        Returns:
            True if a default configuration was written
        """
        full_path = self.gateway.full_path(config_path)
        cause = None
        try:
            self.gateway.fetch_path(config_path)
        except FetchError as e:
            logger.debug(f"Fetching {config_path} failed: {e}")
            cause = e

        if os.path.isfile(full_path):
            return False

        if create_default:
            write_default_config(full_path)
            self.progress.success(f"Created default configuration at {config_path}")
            return True

        raise ConfigurationNotFoundError(config_path) from cause

    def _fetch_and_parse(self, config_path: str, created_default: bool) -> CloneReport:
        full_path = self.gateway.full_path(config_path)

        prefetch = PrefetchService(self.gateway, self.progress).prefetch(config_path)

        hook = GitFileAccessHook(self.gateway)
        parser = self.parser_factory(hook)
        result = parser.collect(full_path)

        swept = SweepService(self.gateway, self.progress).sweep(result, os.path.dirname(full_path))

        if hook.unavailable:
            self.progress.warning(f"{len(hook.unavailable)} referenced files were unavailable")

        return CloneReport(
            result=result,
            config_path=config_path,
            root=self.gateway.root,
            sparse=True,
            created_default=created_default,
            prefetched=prefetch.submitted,
            fetched_on_demand=list(hook.fetched_on_demand),
            swept=swept,
            checked_out=self.gateway.fetched_paths(),
            unavailable=list(hook.unavailable)
        )


def create(
    local_path: str,
    config: Optional[Dict[str, Any]] = None,
    progress: Optional[ProgressReporter] = None
) -> DocfxIntegration:
    """
    Build an integration for a working directory from configuration.

    Args:
        local_path: Working directory
        config: Configuration dict (loads default if None)
        progress: Progress reporter (silent if None)
    """
    config = config or load_config()
    gateway = RemoteGateway(
        local_path,
        git_client=GitClient.from_config(config),
        progress=progress,
        config=config
    )
    return DocfxIntegration(
        gateway,
        progress=progress,
        config_filename=config.get("checkout", {}).get("config_filename", DOCFX_FILENAME)
    )
