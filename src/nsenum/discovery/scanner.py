"""Textual declaration scanning.

A file is never parsed or executed. Instead it is read line by line looking
for two signals, and reading stops as soon as both have been seen:

1. Namespace signal: a line that, stripped of surrounding whitespace, is
   exactly ``namespace <Expected\\Prefix>;``. No tolerance for extra spaces
   or other casing.
2. Class signal: a stripped line in the recognized declaration form::

       [abstract|final|readonly ...] class <Name>
           [extends <Name>] [implements <Name>[, <Name> ...]] [{ | ,]

   where the declared name is the file name without extension, or that
   name fully qualified with a leading backslash.

Files written differently, such as a brace-style ``namespace X { ... }``
block or a declaration broken across lines before the class name, are
skipped. This is the accepted price of not loading every file.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional

from nsenum.core.logging import get_logger
from nsenum.core.models import NAMESPACE_SEPARATOR, DiscoveredType, ModulePath

LOGGER = get_logger(__name__)

DEFAULT_EXTENSIONS = (".php",)

_NAME = r"[A-Za-z_\\][A-Za-z0-9_\\]*"

CLASS_DECLARATION = re.compile(
    r"^\s*(?:(?:abstract|final|readonly)\s+)*class\s+(" + _NAME + r")"
    r"(?:\s+(?:extends|implements)\s+" + _NAME + r"(?:\s*,\s*" + _NAME + r")*)*"
    r"\s*[{,]?$"
)


def namespace_statement(prefix: ModulePath) -> str:
    """The exact namespace line a file under ``prefix`` must contain."""
    return f"namespace {prefix};"


class DeclarationScanner:
    """Decides from file text alone whether a file declares an expected class."""

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)

    def is_source_file(self, path: Path) -> bool:
        return path.suffix in self.extensions

    def scan_file(
        self,
        expected_prefix: ModulePath,
        path: Path,
        name: Optional[str] = None,
    ) -> Optional[DiscoveredType]:
        """Scan one file for a class ``name`` in namespace ``expected_prefix``.

        Args:
            expected_prefix: Namespace the file must declare.
            path: File to read.
            name: Expected class name; defaults to the file name without
                extension.

        Returns:
            The discovered class, or None if the file is not a recognized
            source file, cannot be read, or lacks either signal.
        """
        if not self.is_source_file(path):
            return None

        class_name = name if name is not None else path.stem
        wanted_namespace = namespace_statement(expected_prefix)
        accepted_names = {
            class_name,
            f"{NAMESPACE_SEPARATOR}{expected_prefix.qualify(class_name)}",
        }

        found_namespace = found_class = False
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    stripped = line.strip()
                    if stripped == wanted_namespace:
                        found_namespace = True
                    else:
                        match = CLASS_DECLARATION.match(stripped)
                        if match and match.group(1) in accepted_names:
                            found_class = True

                    if found_namespace and found_class:
                        break
        except OSError as e:
            LOGGER.debug(f"Skipping unreadable file {path}: {e}")
            return None

        if found_namespace and found_class:
            return DiscoveredType(namespace=expected_prefix, name=class_name, path=path)
        return None


def scan_file(
    expected_prefix: ModulePath,
    path: Path,
    name: Optional[str] = None,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Optional[DiscoveredType]:
    """Convenience wrapper around :meth:`DeclarationScanner.scan_file`."""
    return DeclarationScanner(extensions).scan_file(expected_prefix, path, name)
