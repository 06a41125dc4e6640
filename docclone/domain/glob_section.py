"""
Glob section domain object.

A glob section is one include/exclude pattern group from docfx.json,
scoped to a source directory.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class GlobSection:
    """One ``build.content``/``build.resource``/``build.overwrite`` entry."""
    group: str                   # content, resource or overwrite
    src: str                     # repository-relative directory, "" for the root
    includes: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    @property
    def prefix(self) -> str:
        """Prefix a tree entry must start with to lie under ``src``."""
        return f"{self.src}/" if self.src else ""

    def relative_to_src(self, path: str) -> str:
        """Strip the section prefix (case-insensitive) or return "" if outside."""
        prefix = self.prefix
        if not prefix:
            return path
        if path[:len(prefix)].casefold() == prefix.casefold():
            return path[len(prefix):]
        return ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'group': self.group,
            'src': self.src,
            'files': list(self.includes),
            'exclude': list(self.excludes),
        }
