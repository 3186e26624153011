"""Composer autoload manifest loading and namespace resolution."""

from __future__ import annotations

from nsenum.manifest.loader import get_manifest, load_manifest
from nsenum.manifest.resolver import find_file, resolve_roots

__all__ = [
    "find_file",
    "get_manifest",
    "load_manifest",
    "resolve_roots",
]
