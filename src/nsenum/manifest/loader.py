"""Composer autoload manifest loading.

Builds the namespace-prefix to directory mapping from Composer's JSON
metadata, so no PHP is executed:

- the project's composer.json (``autoload`` and ``autoload-dev``)
- vendor/composer/installed.json (Composer 1 list or Composer 2 object form)

PSR-0 roots are narrowed to ``<root>/<prefix as path>`` when that directory
exists, then PSR-4 roots for the same prefix are appended after them.

The loaded manifest is cached for the lifetime of the process, one entry per
project root. The first load is guarded by a lock; afterwards the manifest is
read-only and shared freely.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from nsenum.bootstrap.paths import ProjectPaths
from nsenum.core.exceptions import ManifestError
from nsenum.core.logging import get_logger
from nsenum.core.models import Manifest, ManifestEntry, ModulePath

LOGGER = get_logger(__name__)

AUTOLOAD_SECTIONS = ("autoload", "autoload-dev")

_CacheKey = Tuple[Path, str, Tuple[Tuple[str, Tuple[str, ...]], ...]]

_MANIFEST_CACHE: Dict[_CacheKey, Manifest] = {}
_MANIFEST_LOCK = threading.Lock()


def get_manifest(
    project_root: Path,
    vendor_dir: str = "vendor",
    extra_namespaces: Optional[Mapping[str, Iterable[str]]] = None,
) -> Manifest:
    """Return the cached manifest for a project, loading it on first use.

    Raises:
        ManifestError: If the Composer metadata is missing or malformed.
    """
    key: _CacheKey = (
        project_root.resolve(),
        vendor_dir,
        tuple(sorted((prefix, tuple(dirs)) for prefix, dirs in (extra_namespaces or {}).items())),
    )
    manifest = _MANIFEST_CACHE.get(key)
    if manifest is not None:
        return manifest

    with _MANIFEST_LOCK:
        manifest = _MANIFEST_CACHE.get(key)
        if manifest is None:
            manifest = load_manifest(key[0], vendor_dir, extra_namespaces)
            _MANIFEST_CACHE[key] = manifest
    return manifest


def load_manifest(
    project_root: Path,
    vendor_dir: str = "vendor",
    extra_namespaces: Optional[Mapping[str, Iterable[str]]] = None,
) -> Manifest:
    """Load the autoload manifest for a project without caching.

    Args:
        project_root: Composer project root.
        vendor_dir: Vendor directory name relative to the root.
        extra_namespaces: Additional ``{prefix: [dir, ...]}`` mappings,
            relative to the project root, appended after Composer's.

    Raises:
        ManifestError: If neither composer.json nor installed.json exists,
            or either contains invalid JSON.
    """
    paths = ProjectPaths(project_root, vendor_dir_name=vendor_dir)
    root_package = _read_json(paths.composer_json)
    installed = _read_json(paths.installed_json)

    if root_package is None and installed is None:
        raise ManifestError(
            f"No Composer metadata found: expected {paths.composer_json} or {paths.installed_json}"
        )

    builder = _ManifestBuilder()
    packages: Dict[str, Path] = {}

    if root_package is not None:
        if not isinstance(root_package, dict):
            raise ManifestError(f"{paths.composer_json} must contain a JSON object")
        for section in AUTOLOAD_SECTIONS:
            builder.add_autoload(root_package.get(section), project_root)

    for package in _installed_packages(installed, paths.installed_json):
        name = package.get("name")
        if not isinstance(name, str) or not name:
            LOGGER.debug(f"Skipping unnamed package entry in {paths.installed_json}")
            continue
        install_path = package.get("install-path")
        if isinstance(install_path, str):
            package_dir = (paths.composer_dir / install_path).resolve()
        else:
            package_dir = paths.vendor_dir / name
        packages[name] = package_dir
        builder.add_autoload(package.get("autoload"), package_dir)

    for prefix, dirs in (extra_namespaces or {}).items():
        builder.add(prefix, [project_root / d for d in dirs])

    manifest = Manifest(
        project_root=project_root,
        entries=builder.entries(),
        packages=packages,
    )
    LOGGER.debug(
        f"Loaded manifest for {project_root}: {len(manifest.entries)} namespace(s), "
        f"{len(packages)} package(s)"
    )
    return manifest


class _ManifestBuilder:
    """Accumulates prefix → roots, merging roots of identical prefixes in order."""

    def __init__(self) -> None:
        self._roots: Dict[ModulePath, List[Path]] = {}

    def add(self, prefix: str, roots: Iterable[Path]) -> None:
        module_path = ModulePath.parse(prefix)
        if module_path.is_root:
            # Fallback directories can never overlap a non-empty query.
            LOGGER.debug(f"Ignoring root-namespace autoload directories: {list(roots)}")
            return
        bucket = self._roots.setdefault(module_path, [])
        for root in roots:
            if root not in bucket:
                bucket.append(root)

    def add_autoload(self, autoload: Any, base_dir: Path) -> None:
        if not isinstance(autoload, dict):
            return
        for prefix, dirs in _mapping(autoload.get("psr-0")):
            subpath = Path(*ModulePath.parse(prefix).segments)
            roots = []
            for d in dirs:
                root = base_dir / d
                narrowed = root / subpath
                roots.append(narrowed if narrowed != root and narrowed.is_dir() else root)
            self.add(prefix, roots)
        for prefix, dirs in _mapping(autoload.get("psr-4")):
            self.add(prefix, [base_dir / d for d in dirs])

    def entries(self) -> Tuple[ManifestEntry, ...]:
        return tuple(
            ManifestEntry(prefix, tuple(roots))
            for prefix, roots in self._roots.items()
        )


def _mapping(section: Any) -> List[Tuple[str, List[str]]]:
    """Normalize a psr-0/psr-4 section; each value may be a string or a list."""
    if not isinstance(section, dict):
        return []
    result = []
    for prefix, dirs in section.items():
        if isinstance(dirs, str):
            dirs = [dirs]
        if not isinstance(dirs, list):
            raise ManifestError(f"Autoload directories for {prefix!r} must be a string or list")
        result.append((str(prefix), [str(d) for d in dirs]))
    return result


def _installed_packages(installed: Any, source: Path) -> List[Dict[str, Any]]:
    if installed is None:
        return []
    if isinstance(installed, dict):
        installed = installed.get("packages", [])
    if not isinstance(installed, list):
        raise ManifestError(f"Unexpected structure in {source}")
    return [p for p in installed if isinstance(p, dict)]


def _read_json(path: Path) -> Any:
    """Read a JSON file, returning None if it does not exist."""
    if not path.is_file():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
