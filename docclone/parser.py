"""
DocFX dependency parser.

Walks docfx.json, enumerates the files its glob sections select, and
follows Markdown and YAML TOC references transitively. Every file the
parser opens goes through a FileAccessHook first, which is how the sparse
clone learns which files to fetch.

Binary references (images, downloads) are recorded but never opened; the
post-parse sweep materializes them.
"""

import json
import logging
import os
import posixpath
import re
from collections import deque
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import unquote

import yaml

from .domain.result import DependencyResult, FileEntry
from .errors import ConfigurationNotFoundError
from .glob_matcher import GlobSet
from .services.file_access import FileAccessHook, LocalFileAccessHook
from .services.prefetch_service import extract_glob_sections

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {'.md', '.markdown'}
YAML_EXTENSIONS = {'.yml', '.yaml'}
PARSEABLE_EXTENSIONS = MARKDOWN_EXTENSIONS | YAML_EXTENSIONS

TOC_KEYS = ('href', 'topicHref', 'tocHref', 'homepage')

_INLINE_LINK = re.compile(r'!?\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+["\'(][^)]*)?\)')
_LINK_DEFINITION = re.compile(r'^\s{0,3}\[[^\]]+\]:\s*<?(\S+?)>?(?:\s|$)', re.MULTILINE)
_SRC_ATTRIBUTE = re.compile(r'\bsrc\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
_SCHEME = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')


def resolve_reference(source: str, reference: str) -> Optional[str]:
    """
    Resolve a link found in ``source`` to a path relative to the docfx
    directory, or None if it is not a local file reference.

    Example:
        resolve_reference("guide/intro.md", "../images/a.png#x") == "images/a.png"
    """
    reference = reference.strip().strip('"\'')
    if not reference or reference.startswith(('#', '/', '~', '\\')) or _SCHEME.match(reference):
        return None

    reference = reference.split('#', 1)[0].split('?', 1)[0]
    reference = unquote(reference).replace('\\', '/')
    if not reference:
        return None

    if reference.endswith('/'):
        reference += 'toc.yml'

    resolved = posixpath.normpath(posixpath.join(posixpath.dirname(source), reference))
    return None if resolved == '.' else resolved


def extract_markdown_references(text: str) -> List[str]:
    """Raw link targets from Markdown: inline links, images, includes, definitions, src attributes."""
    found = []
    for regex in (_INLINE_LINK, _LINK_DEFINITION, _SRC_ATTRIBUTE):
        found.extend(match.group(1) for match in regex.finditer(text))
    return found


def extract_toc_references(node: Any) -> List[str]:
    """Raw hrefs from a parsed YAML TOC, walking nested ``items``."""
    found = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key in TOC_KEYS and isinstance(value, str):
                found.append(value)
            else:
                found.extend(extract_toc_references(value))
    elif isinstance(node, list):
        for item in node:
            found.extend(extract_toc_references(item))
    return found


def _extension(path: str) -> str:
    return posixpath.splitext(path)[1].lower()


class DocfxDependencyParser:
    """
    Collects the files a docfx project depends on.

    Example:
        parser = DocfxDependencyParser(GitFileAccessHook(gateway))
        result = parser.collect("/tmp/docs-repo/docs/docfx.json")
    """

    def __init__(self, hook: Optional[FileAccessHook] = None):
        self.hook = hook or LocalFileAccessHook()

    def collect(self, docfx_path: str) -> DependencyResult:
        """
        Parse docfx.json and everything it reaches.

        Args:
            docfx_path: Local path of docfx.json

        Returns:
            DependencyResult with paths relative to the docfx.json directory

        Raises:
            ConfigurationNotFoundError: If docfx.json cannot be read
        """
        docfx_path = os.path.abspath(docfx_path)
        docfx_dir = os.path.dirname(docfx_path)
        config_name = os.path.basename(docfx_path)

        if not self.hook.before_read(docfx_path, "config"):
            raise ConfigurationNotFoundError(docfx_path)
        try:
            with open(docfx_path, 'r', encoding='utf-8-sig') as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            self.hook.on_read_error(docfx_path, "config", e)
            raise
        self.hook.after_read(docfx_path, "config")

        result = DependencyResult(config_path=config_name)
        result.add(FileEntry(path=config_name, kind="config"))

        visited = {config_name.casefold()}
        queue = deque(self._section_files(config, docfx_dir))

        while queue:
            path, kind = queue.popleft()
            key = path.casefold()
            if key in visited:
                continue
            visited.add(key)

            if _extension(path) not in PARSEABLE_EXTENSIONS:
                if kind != "reference":
                    result.add(FileEntry(path=path, kind=kind))
                continue

            references = self._read_references(docfx_dir, path, kind)
            if references is None:
                continue

            result.add(FileEntry(path=path, kind=kind, references=tuple(references)))
            for reference in references:
                if _extension(reference) in PARSEABLE_EXTENSIONS and reference.casefold() not in visited:
                    queue.append((reference, "reference"))

        return result

    def _section_files(self, config: Dict[str, Any], docfx_dir: str) -> Iterable[tuple]:
        """
        Local files selected by each glob section, relative to docfx_dir.

        A section src may climb out of docfx_dir ("../articles"); its
        files then carry the same "../" prefix.
        """
        for section in extract_glob_sections(config, "", within_repository=False):
            globs = GlobSet(section.includes, section.excludes)
            base = os.path.normpath(os.path.join(docfx_dir, *section.src.split('/'))) if section.src else docfx_dir
            if not os.path.isdir(base):
                continue

            for dirpath, dirnames, filenames in os.walk(base):
                dirnames[:] = sorted(d for d in dirnames if d != '.git')
                for filename in sorted(filenames):
                    relative = os.path.relpath(os.path.join(dirpath, filename), base).replace(os.sep, '/')
                    if globs.matches(relative):
                        yield posixpath.join(section.src, relative) if section.src else relative, section.group

    def _read_references(self, docfx_dir: str, path: str, kind: str) -> Optional[List[str]]:
        """
        Read one file through the hook and return its resolved references,
        or None if the hook reports it unavailable.
        """
        full_path = os.path.join(docfx_dir, *path.split('/'))
        if not self.hook.before_read(full_path, kind):
            logger.debug(f"Skipping unavailable file {path}")
            return None

        try:
            with open(full_path, 'r', encoding='utf-8-sig', errors='replace') as f:
                text = f.read()
        except OSError as e:
            self.hook.on_read_error(full_path, kind, e)
            return []

        if _extension(path) in YAML_EXTENSIONS:
            try:
                raw = extract_toc_references(yaml.safe_load(text))
            except yaml.YAMLError as e:
                self.hook.on_read_error(full_path, kind, e)
                raw = []
        else:
            raw = extract_markdown_references(text)
        self.hook.after_read(full_path, kind)

        references = []
        for target in raw:
            resolved = resolve_reference(path, target)
            if resolved and resolved not in references:
                references.append(resolved)
        return references
