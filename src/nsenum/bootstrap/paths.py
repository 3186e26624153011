"""Project root resolution.

Every manifest path is relative to the project base directory, so nothing
can be discovered until it is known. Failure to find it is fatal.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from nsenum.core.exceptions import ProjectRootError
from nsenum.core.logging import get_logger

LOGGER = get_logger(__name__)

# Environment variable to override project root discovery
NSENUM_ROOT_ENV = "NSENUM_ROOT"

# Files whose presence marks a Composer project root, checked in order
ROOT_MARKERS = (
    Path("vendor") / "autoload.php",
    Path("composer.json"),
)


def find_project_root(
    explicit: Optional[Path | str] = None,
    start: Optional[Path] = None,
) -> Path:
    """Determine the project base directory.

    Resolution order:
    1. ``explicit`` argument (CLI flag or config value)
    2. NSENUM_ROOT environment variable (if set)
    3. Walk up from ``start`` (default: cwd) to the first directory holding
       ``vendor/autoload.php`` or ``composer.json``

    Raises:
        ProjectRootError: If no candidate is found, or an explicit root is
            not a directory.
    """
    if explicit:
        return _checked(Path(explicit), "explicit project root")

    env_root = os.environ.get(NSENUM_ROOT_ENV)
    if env_root:
        return _checked(Path(env_root), f"${NSENUM_ROOT_ENV}")

    origin = (start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        for marker in ROOT_MARKERS:
            if (candidate / marker).is_file():
                LOGGER.debug(f"Found project root {candidate} via {marker}")
                return candidate

    raise ProjectRootError("Unable to determine project base directory")


def _checked(path: Path, source: str) -> Path:
    resolved = path.expanduser().resolve()
    if not resolved.is_dir():
        raise ProjectRootError(f"Project root from {source} is not a directory: {path}")
    return resolved


@dataclass
class ProjectPaths:
    """Well-known locations inside a Composer project.

    Directory structure:
        <root>/
            composer.json              - project autoload rules
            vendor/
                autoload.php
                composer/installed.json - installed packages and their autoload rules
                <vendor>/<package>/    - package install directories
    """

    root: Path
    vendor_dir_name: str = "vendor"

    _COMPOSER_JSON: ClassVar[str] = "composer.json"
    _COMPOSER_DIR: ClassVar[str] = "composer"
    _INSTALLED_JSON: ClassVar[str] = "installed.json"

    @classmethod
    def discover(cls, explicit: Optional[Path | str] = None) -> "ProjectPaths":
        """Create paths from the resolved project root."""
        return cls(find_project_root(explicit))

    @property
    def composer_json(self) -> Path:
        return self.root / self._COMPOSER_JSON

    @property
    def vendor_dir(self) -> Path:
        return self.root / self.vendor_dir_name

    @property
    def composer_dir(self) -> Path:
        """Directory holding Composer's generated metadata."""
        return self.vendor_dir / self._COMPOSER_DIR

    @property
    def installed_json(self) -> Path:
        return self.composer_dir / self._INSTALLED_JSON
