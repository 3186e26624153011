"""Mapping namespaces onto filesystem locations."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from nsenum.core.exceptions import InvalidQueryError
from nsenum.core.logging import get_logger
from nsenum.core.models import Manifest, ModulePath, SearchTask

LOGGER = get_logger(__name__)

DEFAULT_SOURCE_SUFFIX = ".php"


def resolve_roots(query: ModulePath, manifest: Manifest) -> List[SearchTask]:
    """List the directories that may hold classes under ``query``.

    An entry contributes when its prefix shares at least one leading segment
    with the query. Each of its roots yields a task for
    ``root / <query segments past the shared part>``, provided that directory
    exists. The task namespace is the entry prefix when it is deeper than
    the query, otherwise the query itself.

    Raises:
        InvalidQueryError: If ``query`` is the root namespace.
    """
    if query.is_root:
        raise InvalidQueryError("Enumerating the root namespace is not allowed")

    tasks: List[SearchTask] = []
    for entry in manifest.entries:
        shared = entry.prefix.common_prefix_length(query)
        if shared == 0:
            continue

        prefix = entry.prefix if len(entry.prefix) > len(query) else query
        remainder = query.segments[shared:]
        for root in entry.roots:
            directory = root.joinpath(*remainder)
            if directory.is_dir():
                tasks.append(SearchTask(prefix=prefix, directory=directory))
            else:
                LOGGER.debug(f"Skipping {directory} for {entry.prefix}: not a directory")

    LOGGER.debug(f"Resolved {query} to {len(tasks)} search task(s)")
    return tasks


def find_file(
    fqcn: str,
    manifest: Manifest,
    suffixes: Iterable[str] = (DEFAULT_SOURCE_SUFFIX,),
) -> Optional[Path]:
    """Locate the file defining ``fqcn`` the way Composer's PSR-4 lookup does.

    Entries whose prefix contains the class namespace are tried longest
    prefix first; within one prefix, roots are tried in manifest order.
    """
    class_path = ModulePath.parse(fqcn)
    if len(class_path) < 2:
        return None

    candidates = [
        entry for entry in manifest.entries
        if len(entry.prefix) < len(class_path) and class_path.startswith(entry.prefix)
    ]
    candidates.sort(key=lambda entry: len(entry.prefix), reverse=True)

    suffixes = tuple(suffixes)
    for entry in candidates:
        relative = class_path.segments[len(entry.prefix):]
        for root in entry.roots:
            base = root.joinpath(*relative[:-1])
            for suffix in suffixes:
                path = base / f"{relative[-1]}{suffix}"
                if path.is_file():
                    return path
    return None
