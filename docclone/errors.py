"""
Error taxonomy for docclone.

Engine errors carry the underlying git diagnostic as ``cause`` (and as
``__cause__`` when raised with ``from``) so the CLI can show both.
"""

from typing import Optional


class DocCloneError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NotInitializedError(DocCloneError):
    """Raised when a gateway operation runs before initialize()."""
    def __init__(self, message: str = "Repository not initialized. Call initialize() first."):
        super().__init__(message)


class AlreadyInitializedError(DocCloneError):
    """Raised when initialize() is called twice on the same handle."""
    def __init__(self, message: str = "Repository already initialized"):
        super().__init__(message)


class InitializationError(DocCloneError):
    """A step of the sparse clone setup failed."""


class RemoteUnreachableError(InitializationError):
    """The remote could not be contacted during the metadata fetch."""


class RefNotFoundError(InitializationError):
    """The requested branch or ref does not exist on the remote."""


class FetchError(DocCloneError):
    """A materialization batch failed."""

    def __init__(self, message: str, paths=None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.paths = frozenset(paths or ())


class ConfigurationNotFoundError(DocCloneError):
    """The docfx.json file is absent and no default was requested."""

    def __init__(self, path: str):
        super().__init__(f"DocFX configuration file not found: {path}")
        self.path = path


class GlobSyntaxError(DocCloneError):
    """A glob pattern is malformed (for example unbalanced braces)."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")
        self.pattern = pattern
