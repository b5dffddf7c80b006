"""Glob-based filtering of changed paths."""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .exceptions import PatternError

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> None:
    """
    Check that a glob pattern is well formed.
    
    fnmatch silently treats an unclosed "[" as a literal, so
    malformed patterns are rejected here instead.
    
    Raises:
        PatternError: On an unterminated character class
    """
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        # a leading "]" is a literal member of the class
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            j += 1
        if j >= n:
            raise PatternError(pattern, "unterminated character class")
        i = j + 1


class PathFilter:
    """
    Decides whether a changed path should be ignored.
    
    Patterns are checked in order against the final path component,
    the full path and, when a root is given, the path relative to that
    root; the first match wins. With root "/proj", "vendor/*" ignores
    "/proj/vendor/lib.go".
    """

    def __init__(self, patterns: Iterable[str] = (), root: Optional[Union[str, Path]] = None):
        self.patterns: List[str] = list(patterns)
        self.root = Path(root) if root is not None else None

    def _candidates(self, path: Path) -> List[str]:
        candidates = [path.name, str(path)]
        if self.root is not None:
            try:
                candidates.append(str(path.relative_to(self.root)))
            except ValueError:
                pass
        return candidates

    def validate(self) -> None:
        """Raise PatternError for the first malformed pattern."""
        for pattern in self.patterns:
            validate_pattern(pattern)

    def should_ignore(self, path: Union[str, Path]) -> bool:
        """
        Check if a path matches any ignore pattern.
        
        Args:
            path: Path to check
            
        Returns:
            True if the path should be ignored
            
        Raises:
            PatternError: If a pattern reached during matching is malformed
        """
        path = Path(path)
        candidates = self._candidates(path)

        for pattern in self.patterns:
            validate_pattern(pattern)
            if any(fnmatch.fnmatch(candidate, pattern) for candidate in candidates):
                logger.debug(f"Ignoring {path} (matched {pattern!r})")
                return True
        
        return False

    def __len__(self) -> int:
        return len(self.patterns)
