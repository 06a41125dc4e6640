"""
Service layer for docclone.

Contains the logic that drives the sparse clone:
- RemoteGateway: Repository handle (init, tree listing, batch fetch)
- PrefetchService: Fetch what docfx.json glob sections select
- GitFileAccessHook: Fetch files on first read during parsing
- SweepService: Fetch whatever the parse result still references

The high-level orchestration lives in ``docclone.api``.
"""

from .remote_gateway import RemoteGateway
from .prefetch_service import PrefetchService, PrefetchReport, extract_glob_sections, select_paths
from .file_access import FileAccessHook, GitFileAccessHook, LocalFileAccessHook
from .sweep_service import SweepService, collect_unfetched

__all__ = [
    'RemoteGateway',
    'PrefetchService',
    'PrefetchReport',
    'extract_glob_sections',
    'select_paths',
    'FileAccessHook',
    'GitFileAccessHook',
    'LocalFileAccessHook',
    'SweepService',
    'collect_unfetched',
]
