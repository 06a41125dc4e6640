"""
Dependency result domain objects.

A DependencyResult is what the parser returns: every file it visited and
the references it resolved, relative to the docfx.json directory.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FileEntry:
    """A file visited by the parser."""
    path: str
    kind: str = "content"        # config, content, resource, overwrite, reference
    references: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'kind': self.kind,
            'references': list(self.references),
        }


@dataclass
class DependencyResult:
    """Graph of files and their resolved content references."""
    config_path: str
    files: List[FileEntry] = field(default_factory=list)

    def add(self, entry: FileEntry) -> None:
        self.files.append(entry)

    def find(self, path: str) -> Optional[FileEntry]:
        key = path.casefold()
        for entry in self.files:
            if entry.path.casefold() == key:
                return entry
        return None

    def paths(self) -> List[str]:
        return [entry.path for entry in self.files]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': self.config_path,
            'files': [entry.to_dict() for entry in self.files],
        }
