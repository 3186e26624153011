"""Gitignore-style pruning of the discovery walk.

Patterns come from:
- .nsenumignore file in the project root (gitignore syntax)
- discovery.ignore list in the config (gitignore syntax)

Matching uses the pathspec library, so ``**`` globbing, ``!`` negation and
``#`` comments behave exactly as in git.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pathspec

from nsenum.core.logging import get_logger

LOGGER = get_logger(__name__)

NSENUMIGNORE_NAMES = [".nsenumignore"]


class IgnorePatterns:
    """Compiled ignore patterns anchored at a project root."""

    def __init__(
        self,
        patterns: List[str],
        source: str = "config",
    ) -> None:
        self._source = source
        self._raw_patterns = list(patterns)

        clean_patterns = [
            p for p in patterns if p.strip() and not p.strip().startswith("#")
        ]
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", clean_patterns)
        self._empty = not clean_patterns

        if clean_patterns:
            LOGGER.debug(f"Loaded {len(clean_patterns)} ignore patterns from {source}")

    @property
    def source(self) -> str:
        return self._source

    def __bool__(self) -> bool:
        return not self._empty

    def matches(self, path: Path, root: Path, is_dir: bool = False) -> bool:
        """Check if a path matches any ignore pattern.

        Paths outside ``root`` never match.
        """
        if self._empty:
            return False
        try:
            rel_path = path.resolve().relative_to(root.resolve())
        except ValueError:
            return False

        # pathspec expects forward-slash paths; directories carry a trailing slash
        rel_str = rel_path.as_posix()
        if is_dir:
            rel_str += "/"
        return self._spec.match_file(rel_str)

    @classmethod
    def from_file(cls, file_path: Path) -> Optional["IgnorePatterns"]:
        """Load patterns from a file, or None if it does not exist."""
        if not file_path.exists():
            return None

        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as e:
            LOGGER.warning(f"Failed to load ignore file {file_path}: {e}")
            return None
        return cls(content.splitlines(), source=str(file_path))

    @classmethod
    def merge(cls, *pattern_sets: Optional["IgnorePatterns"]) -> "IgnorePatterns":
        """Merge several pattern sets, in order."""
        all_patterns: List[str] = []
        sources: List[str] = []

        for ps in pattern_sets:
            if ps is not None:
                all_patterns.extend(ps._raw_patterns)
                sources.append(ps._source)

        return cls(all_patterns, source="+".join(sources) if sources else "empty")


def find_nsenumignore(project_root: Path) -> Optional[Path]:
    """Find the .nsenumignore file in the project root."""
    for name in NSENUMIGNORE_NAMES:
        ignore_path = project_root / name
        if ignore_path.exists():
            return ignore_path
    return None


def load_ignore_patterns(
    project_root: Path,
    config_patterns: List[str],
) -> IgnorePatterns:
    """Load and merge ignore patterns from the ignore file and the config.

    File patterns come first so config patterns (including ``!`` negations)
    can override them.
    """
    ignore_file = find_nsenumignore(project_root)
    file_patterns = IgnorePatterns.from_file(ignore_file) if ignore_file else None

    config_ignore = (
        IgnorePatterns(config_patterns, source="discovery.ignore")
        if config_patterns
        else None
    )

    return IgnorePatterns.merge(file_patterns, config_ignore)
