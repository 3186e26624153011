"""Public entry points for namespace enumeration.

Typical use::

    from nsenum import get_classes

    plugins = get_classes("App\\Plugins", [{"implements": "App\\Plugin", "abstract": False}])

The module-level functions share one :class:`Enumerator` per process, bound
to the project root found from the environment on first use.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from nsenum.bootstrap.paths import find_project_root
from nsenum.config.ignore import load_ignore_patterns
from nsenum.config.loader import load_config
from nsenum.config.models import NsenumConfig
from nsenum.core.logging import get_logger
from nsenum.core.models import ConditionSet, Manifest
from nsenum.discovery.engine import DiscoveryEngine
from nsenum.discovery.introspection import Introspector
from nsenum.discovery.scanner import DeclarationScanner
from nsenum.manifest.loader import get_manifest
from nsenum.manifest.resolver import find_file

LOGGER = get_logger(__name__)


class Enumerator:
    """Class enumeration bound to one Composer project."""

    def __init__(
        self,
        project_root: Path,
        config: Optional[NsenumConfig] = None,
        manifest: Optional[Manifest] = None,
        introspector: Optional[Introspector] = None,
    ) -> None:
        self.project_root = project_root
        self.config = config or NsenumConfig()
        self._manifest = manifest
        self._introspector = introspector
        self._engine: Optional[DiscoveryEngine] = None

    @classmethod
    def from_project(
        cls,
        project_root: Optional[Path | str] = None,
        config_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "Enumerator":
        """Resolve the project root and configuration, then build an enumerator.

        An explicit ``project_root`` wins over ``project.root`` from a custom
        config file, which wins over environment-based discovery.

        Raises:
            ConfigError: If the config file is missing or invalid.
            ProjectRootError: If no project root can be determined.
        """
        config = None
        explicit = project_root
        if config_path is not None:
            config = load_config(None, cli_config_path=config_path, cli_overrides=overrides)
            explicit = explicit or config.project.root

        root = find_project_root(explicit)
        if config is None:
            config = load_config(root, cli_overrides=overrides)
        LOGGER.debug(f"Using project root {root}")
        return cls(root, config)

    @property
    def manifest(self) -> Manifest:
        """The project's autoload manifest, loaded on first use."""
        if self._manifest is None:
            self._manifest = get_manifest(
                self.project_root,
                vendor_dir=self.config.project.vendor_dir,
                extra_namespaces=self.config.manifest.namespaces,
            )
        return self._manifest

    @property
    def engine(self) -> DiscoveryEngine:
        if self._engine is None:
            self._engine = DiscoveryEngine(
                self.manifest,
                introspector=self._introspector,
                scanner=DeclarationScanner(self.config.discovery.extensions),
                ignore=load_ignore_patterns(self.project_root, self.config.discovery.ignore),
                permissive=self.config.conditions.permissive,
            )
        return self._engine

    def get_classes(
        self,
        namespace: str,
        conditions: Optional[Sequence[ConditionSet]] = None,
    ) -> list[str]:
        """Return the classes declared under ``namespace``.

        Args:
            namespace: Namespace name; leading and trailing backslashes are
                ignored. The root namespace is rejected.
            conditions: OR-combined condition sets, each an AND of
                ``implements`` (interface name) and ``abstract`` (bool)
                entries, e.g. ``[{"implements": "Some\\Iface", "abstract": False}]``.

        Raises:
            InvalidQueryError: For the root namespace or malformed conditions.
            ManifestError: If the Composer metadata cannot be loaded.
        """
        return self.engine.discover(namespace, conditions)

    def locate(self, class_name: str) -> Optional[Path]:
        """Return the file Composer would autoload ``class_name`` from, if it exists."""
        return find_file(class_name, self.manifest, self.engine.scanner.extensions)

    def get_owning_module(self, class_name: str) -> Optional[str]:
        """Return the Composer package a class physically lives in.

        Returns:
            ``vendor/package`` for classes inside an installed package's
            directory, or None for the project's own classes and for classes
            that cannot be located.
        """
        path = self.locate(class_name)
        if path is None:
            return None

        real = path.resolve()
        owner: Optional[str] = None
        owner_depth = -1
        for name, package_dir in self.manifest.packages.items():
            package_real = package_dir.resolve()
            if real.is_relative_to(package_real) and len(package_real.parts) > owner_depth:
                owner, owner_depth = name, len(package_real.parts)
        return owner


_DEFAULT: Optional[Enumerator] = None
_DEFAULT_LOCK = threading.Lock()


def default_enumerator() -> Enumerator:
    """Return the process-wide enumerator, creating it on first use."""
    global _DEFAULT
    if _DEFAULT is None:
        with _DEFAULT_LOCK:
            if _DEFAULT is None:
                _DEFAULT = Enumerator.from_project()
    return _DEFAULT


def get_classes(namespace: str, conditions: Optional[Sequence[ConditionSet]] = None) -> list[str]:
    """Return the classes under ``namespace`` in the current project."""
    return default_enumerator().get_classes(namespace, conditions)


def get_owning_module(class_name: str) -> Optional[str]:
    """Return the Composer package owning ``class_name`` in the current project."""
    return default_enumerator().get_owning_module(class_name)
