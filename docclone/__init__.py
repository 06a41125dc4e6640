"""
docclone - Fetch only the files a DocFX project needs from a git repository.

docclone avoids full checkouts of large documentation repositories. It
builds a shallow, blob-less, sparse view of the remote, then materializes
files in three passes: the files docfx.json's glob sections select, the
files the dependency parser opens while following references, and a final
sweep of everything the parse result lists.

Quick Start:
    import docclone

    integration = docclone.create("/tmp/docs-repo")
    report = integration.clone_and_parse(
        "https://github.com/org/docs.git", "docs/docfx.json"
    )
    print(report.summary())

Lower level:
    gateway = docclone.RemoteGateway("/tmp/docs-repo")
    gateway.initialize("https://github.com/org/docs.git", branch="main")
    tree = gateway.list_tree()
    wanted = [p for p in tree if docclone.matches(p, "docs/**/*.{md,yml}")]
    gateway.fetch_paths(wanted)
"""

__version__ = "0.3.0"

# High-level API
from .api import DocfxIntegration, CloneReport, create, normalize_config_path

# Domain objects
from .domain import CheckoutState, GlobSection, DependencyResult, FileEntry

# Services
from .services import (
    RemoteGateway,
    PrefetchService,
    SweepService,
    GitFileAccessHook,
    LocalFileAccessHook,
)

# Glob matching
from .glob_matcher import GlobSet, matches, matches_any

# Parser
from .parser import DocfxDependencyParser

# Errors
from .errors import (
    DocCloneError,
    NotInitializedError,
    AlreadyInitializedError,
    InitializationError,
    RemoteUnreachableError,
    RefNotFoundError,
    FetchError,
    ConfigurationNotFoundError,
    GlobSyntaxError,
)

# Configuration
from .config import load_config

__all__ = [
    "__version__",
    # High-level API
    "DocfxIntegration",
    "CloneReport",
    "create",
    "normalize_config_path",
    # Domain objects
    "CheckoutState",
    "GlobSection",
    "DependencyResult",
    "FileEntry",
    # Services
    "RemoteGateway",
    "PrefetchService",
    "SweepService",
    "GitFileAccessHook",
    "LocalFileAccessHook",
    # Glob matching
    "GlobSet",
    "matches",
    "matches_any",
    # Parser
    "DocfxDependencyParser",
    # Errors
    "DocCloneError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "InitializationError",
    "RemoteUnreachableError",
    "RefNotFoundError",
    "FetchError",
    "ConfigurationNotFoundError",
    "GlobSyntaxError",
    # Configuration
    "load_config",
]
