"""
Domain layer for docclone.

Contains pure domain objects with no I/O or side effects:
- CheckoutState: The set of repository paths already materialized
- GlobSection: One include/exclude group from docfx.json
- DependencyResult / FileEntry: What the dependency parser found

These objects provide serialization methods for JSON output.
"""

from .checkout_state import CheckoutState, normalize_path
from .glob_section import GlobSection
from .result import DependencyResult, FileEntry

__all__ = [
    'CheckoutState',
    'normalize_path',
    'GlobSection',
    'DependencyResult',
    'FileEntry',
]
