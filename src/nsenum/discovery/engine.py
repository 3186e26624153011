"""Namespace enumeration engine.

Resolves a namespace to search directories through the manifest, walks each
directory recursively, scans candidate files textually and keeps the classes
that satisfy the query conditions.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from nsenum.config.ignore import IgnorePatterns
from nsenum.core.exceptions import InvalidQueryError
from nsenum.core.logging import get_logger
from nsenum.core.models import ConditionSet, Manifest, ModulePath, SearchTask
from nsenum.discovery.conditions import TypeInfoCache, matches, parse_conditions
from nsenum.discovery.introspection import Introspector, SourceIntrospector
from nsenum.discovery.scanner import DeclarationScanner
from nsenum.manifest.resolver import resolve_roots

LOGGER = get_logger(__name__)

# Subdirectories must look like a namespace segment to be descended into
SUBNAMESPACE_PATTERN = re.compile(r"^[A-Za-z_]+$")


class DiscoveryEngine:
    """Finds classes declared beneath a namespace."""

    def __init__(
        self,
        manifest: Manifest,
        introspector: Optional[Introspector] = None,
        scanner: Optional[DeclarationScanner] = None,
        ignore: Optional[IgnorePatterns] = None,
        permissive: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            manifest: Autoload manifest to resolve namespaces with.
            introspector: Deep introspection for conditions; defaults to
                reading class sources through the manifest.
            scanner: Textual declaration scanner; defaults to ``.php`` files.
            ignore: Patterns pruning files and directories from the walk.
            permissive: Accept and ignore unknown condition kinds instead of
                rejecting the query.
        """
        self.manifest = manifest
        self.scanner = scanner or DeclarationScanner()
        self.introspector = introspector or SourceIntrospector(manifest, self.scanner.extensions)
        self.ignore = ignore
        self.permissive = permissive

    def discover(
        self,
        namespace: ModulePath | str,
        conditions: Optional[Sequence[ConditionSet]] = None,
    ) -> List[str]:
        """List fully-qualified names of matching classes under ``namespace``.

        Results are de-duplicated and ordered by search task, then by
        lexical directory order.

        Raises:
            InvalidQueryError: If ``namespace`` is the root namespace or the
                conditions are malformed.
        """
        query = namespace if isinstance(namespace, ModulePath) else ModulePath.parse(namespace)
        if query.is_root:
            raise InvalidQueryError("Enumerating the root namespace is not allowed")
        parsed = parse_conditions(list(conditions or []), permissive=self.permissive)

        search = _Search(self, parsed)
        for task in resolve_roots(query, self.manifest):
            LOGGER.debug(f"Searching {task.directory} as {task.prefix}")
            search.run(task)

        LOGGER.info(f"Found {len(search.results)} class(es) under {query}")
        return list(search.results)


class _Search:
    """State for one discover() call: results, visited directories, introspection memo."""

    def __init__(self, engine: DiscoveryEngine, conditions: List[Dict[str, Any]]) -> None:
        self.engine = engine
        self.conditions = conditions
        self.cache = TypeInfoCache(engine.introspector)
        self.results: Dict[str, None] = {}
        self.rejected: Set[str] = set()
        self.visited: Set[Tuple[Path, ModulePath]] = set()
        self.active: Set[Path] = set()

    def run(self, task: SearchTask) -> None:
        self._walk(task.prefix, task.directory)

    def _walk(self, prefix: ModulePath, directory: Path) -> None:
        try:
            real = directory.resolve()
            # A directory may be walked once per namespace, never inside itself.
            if (real, prefix) in self.visited or real in self.active:
                return
            self.visited.add((real, prefix))
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            LOGGER.debug(f"Skipping inaccessible directory {directory}: {e}")
            return

        self.active.add(real)
        try:
            self._visit(prefix, entries)
        finally:
            self.active.discard(real)

    def _visit(self, prefix: ModulePath, entries: List[Path]) -> None:
        for entry in entries:
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if self._ignored(entry, is_dir):
                continue
            if is_dir:
                if SUBNAMESPACE_PATTERN.match(entry.name):
                    self._walk(prefix.child(entry.name), entry)
            elif self.engine.scanner.is_source_file(entry):
                self._consider(prefix, entry)

    def _consider(self, prefix: ModulePath, path: Path) -> None:
        discovered = self.engine.scanner.scan_file(prefix, path)
        if discovered is None:
            return
        fqcn = discovered.fqcn
        if fqcn in self.results or fqcn in self.rejected:
            return
        if matches(
            discovered,
            self.conditions,
            self.engine.introspector,
            cache=self.cache,
            permissive=self.engine.permissive,
        ):
            self.results[fqcn] = None
        else:
            self.rejected.add(fqcn)

    def _ignored(self, path: Path, is_dir: bool) -> bool:
        ignore = self.engine.ignore
        if not ignore:
            return False
        if ignore.matches(path, self.engine.manifest.project_root, is_dir=is_dir):
            LOGGER.debug(f"Ignoring {path}")
            return True
        return False
