"""
Pattern-driven pre-fetch for docfx projects.

Reads the glob sections of docfx.json, matches them against the full tree
listing and materializes every match in a single batch. After this runs,
every file the glob sections select is present locally; files reachable
only through cross-references are left to the on-demand hook.
"""

import json
import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set

from ..domain.checkout_state import normalize_path
from ..domain.glob_section import GlobSection
from ..errors import ConfigurationNotFoundError
from ..glob_matcher import GlobSet
from ..progress import ProgressReporter, silent_progress

logger = logging.getLogger(__name__)

SECTION_GROUPS = ("content", "resource", "overwrite")


def _as_pattern_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def extract_glob_sections(
    docfx_config: Dict[str, Any],
    docfx_dir: str = "",
    within_repository: bool = True
) -> List[GlobSection]:
    """
    Extract glob sections from a parsed docfx.json.

    Args:
        docfx_config: Parsed docfx.json content
        docfx_dir: Repository-relative directory of docfx.json ("" for the root)
        within_repository: Skip sections whose src climbs above the root.
            Pass False when docfx_dir is "" and src is relative to
            docfx.json itself, so "../articles" is a valid src.

    Returns:
        Sections in declaration order, ``src`` resolved relative to the root
    """
    build = docfx_config.get("build") if isinstance(docfx_config, dict) else None
    if not isinstance(build, dict):
        return []

    base = normalize_path(docfx_dir)
    sections = []
    for group in SECTION_GROUPS:
        entries = build.get(group)
        if not isinstance(entries, list):
            continue

        for entry in entries:
            if not isinstance(entry, dict):
                continue

            includes = _as_pattern_list(entry.get("files"))
            if not includes:
                continue

            src = str(entry.get("src") or "").replace('\\', '/').strip()
            joined = posixpath.normpath(posixpath.join(base, src)) if src else base
            src_dir = normalize_path(joined)
            if within_repository and (src_dir == ".." or src_dir.startswith("../")):
                logger.warning(f"Skipping {group} section: src '{src}' is outside the repository")
                continue

            sections.append(GlobSection(
                group=group,
                src=src_dir,
                includes=tuple(includes),
                excludes=tuple(_as_pattern_list(entry.get("exclude")))
            ))

    return sections


def select_paths(sections: Iterable[GlobSection], tree: Iterable[str]) -> Set[str]:
    """
    Match tree entries against every section and union the results.

    Each section only sees entries under its ``src``; patterns apply to the
    path with that prefix stripped.
    """
    tree = list(tree)
    selected: Set[str] = set()

    for section in sections:
        globs = GlobSet(section.includes, section.excludes)
        for entry in tree:
            relative = section.relative_to_src(entry)
            if relative and globs.matches(relative):
                selected.add(entry)

    return selected


@dataclass
class PrefetchReport:
    """What a pre-fetch pass did."""
    sections: List[GlobSection] = field(default_factory=list)
    matched: FrozenSet[str] = frozenset()
    submitted: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sections': [s.to_dict() for s in self.sections],
            'matched': len(self.matched),
            'submitted': len(self.submitted),
        }


class PrefetchService:
    """
    Materializes the files docfx.json's glob sections select.

    Example:
        service = PrefetchService(gateway)
        report = service.prefetch("docs/docfx.json")
        print(f"{len(report.submitted)} files fetched")
    """

    def __init__(self, gateway, progress: Optional[ProgressReporter] = None):
        self.gateway = gateway
        self.progress = progress or silent_progress()

    def load_docfx(self, docfx_path: str) -> Dict[str, Any]:
        """Read docfx.json from the working directory."""
        full_path = self.gateway.full_path(docfx_path)
        if not os.path.isfile(full_path):
            raise ConfigurationNotFoundError(docfx_path)
        with open(full_path, 'r', encoding='utf-8-sig') as f:
            return json.load(f)

    def prefetch(self, docfx_path: str, docfx_config: Optional[Dict[str, Any]] = None) -> PrefetchReport:
        """
        Fetch every tree entry the configuration's glob sections match.

        Args:
            docfx_path: Repository-relative path of docfx.json
            docfx_config: Already parsed configuration (read from disk if None)

        Returns:
            PrefetchReport
        """
        if docfx_config is None:
            docfx_config = self.load_docfx(docfx_path)

        docfx_dir = posixpath.dirname(normalize_path(docfx_path))
        sections = extract_glob_sections(docfx_config, docfx_dir)
        if not sections:
            logger.info(f"No glob sections in {docfx_path}")
            return PrefetchReport(sections=sections)

        tree = self.gateway.list_tree()
        matched = select_paths(sections, tree)

        submitted: FrozenSet[str] = frozenset()
        if matched:
            self.progress(f"Checking out {len(matched)} files matching docfx.json patterns")
            with self.progress.task("Fetching matched files", total=len(matched)):
                submitted = self.gateway.fetch_paths(matched)

        return PrefetchReport(sections=sections, matched=frozenset(matched), submitted=submitted)
