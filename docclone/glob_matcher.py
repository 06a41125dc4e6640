"""
Glob matching for docfx.json file patterns.

Rules, in precedence order:

1. ``**/*`` and ``**`` match every path.
2. ``{a,b,c}`` expands to one pattern per alternative; nested groups are
   expanded one level at a time until none remain. A path matches if any
   expansion matches.
3. ``**/`` matches zero or more leading path segments.
4. A bare ``**`` matches any characters, separators included.
5. ``*`` matches any characters except ``/``.
6. ``?`` matches exactly one character.
7. Everything else is literal. Matching is case-insensitive.

Patterns are compiled to regular expressions once and memoized, so
evaluating a large tree listing does not re-derive them per path.
"""

import logging
import re
from functools import lru_cache
from typing import Callable, Iterable, List, Tuple

from .errors import GlobSyntaxError

logger = logging.getLogger(__name__)

MATCH_ALL_PATTERNS = frozenset({"**/*", "**"})

Predicate = Callable[[str], bool]


def _match_all(path: str) -> bool:
    return True


def _find_closing_brace(pattern: str, start: int) -> int:
    depth = 0
    for i in range(start, len(pattern)):
        if pattern[i] == '{':
            depth += 1
        elif pattern[i] == '}':
            depth -= 1
            if depth == 0:
                return i
    return -1


def _split_alternatives(body: str) -> List[str]:
    """Split a brace body on commas that are not inside a nested group."""
    parts = []
    depth = 0
    current = []
    for char in body:
        if char == ',' and depth == 0:
            parts.append(''.join(current))
            current = []
            continue
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
        current.append(char)
    parts.append(''.join(current))
    return parts


def expand_braces(pattern: str) -> List[str]:
    """
    Expand brace groups into plain patterns.

    Example:
        expand_braces("**/*.{md,yml}") == ["**/*.md", "**/*.yml"]

    Raises:
        GlobSyntaxError: If braces are unbalanced
    """
    start = pattern.find('{')
    if start == -1:
        if '}' in pattern:
            raise GlobSyntaxError(pattern, "unmatched '}'")
        return [pattern]

    if '}' in pattern[:start]:
        raise GlobSyntaxError(pattern, "unmatched '}'")

    end = _find_closing_brace(pattern, start)
    if end == -1:
        raise GlobSyntaxError(pattern, "unmatched '{'")

    prefix = pattern[:start]
    suffix = pattern[end + 1:]

    expanded: List[str] = []
    for alternative in _split_alternatives(pattern[start + 1:end]):
        for candidate in expand_braces(prefix + alternative.strip() + suffix):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def translate(pattern: str) -> str:
    """Translate a brace-free glob into an anchored regular expression."""
    parts = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('.')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return '^' + ''.join(parts) + '$'


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Predicate:
    """
    Compile a glob pattern into a path predicate.

    Raises:
        GlobSyntaxError: If the pattern is malformed
    """
    pattern = pattern.replace('\\', '/').strip()
    if pattern in MATCH_ALL_PATTERNS:
        return _match_all

    expansions = expand_braces(pattern)
    if any(p in MATCH_ALL_PATTERNS for p in expansions):
        return _match_all

    regexes = [re.compile(translate(p), re.IGNORECASE | re.DOTALL) for p in expansions]

    def predicate(path: str) -> bool:
        path = path.replace('\\', '/')
        return any(regex.match(path) for regex in regexes)

    return predicate


def _safe_compile(pattern: str) -> Predicate:
    try:
        return compile_pattern(pattern)
    except GlobSyntaxError as e:
        logger.warning(f"{e}; pattern will match nothing")
        return lambda path: False


def matches(path: str, pattern: str) -> bool:
    """Return True if the relative path matches the glob pattern."""
    return _safe_compile(pattern)(path)


def matches_any(path: str, includes: Iterable[str], excludes: Iterable[str] = ()) -> bool:
    """True if path matches at least one include and no exclude."""
    if not any(matches(path, pattern) for pattern in includes):
        return False
    return not any(matches(path, pattern) for pattern in excludes)


class GlobSet:
    """
    Include and exclude patterns compiled once for repeated matching.

    Example:
        globs = GlobSet(["**/*.md"], ["drafts/**"])
        globs.matches("guide/intro.md")   # True
        globs.matches("drafts/wip.md")    # False
    """

    def __init__(self, includes: Iterable[str], excludes: Iterable[str] = ()):
        self.includes: Tuple[str, ...] = tuple(includes)
        self.excludes: Tuple[str, ...] = tuple(excludes)
        self._include_predicates = [_safe_compile(p) for p in self.includes]
        self._exclude_predicates = [_safe_compile(p) for p in self.excludes]

    def matches(self, path: str) -> bool:
        if not any(predicate(path) for predicate in self._include_predicates):
            return False
        return not any(predicate(path) for predicate in self._exclude_predicates)

    def filter(self, paths: Iterable[str]) -> List[str]:
        return [path for path in paths if self.matches(path)]
