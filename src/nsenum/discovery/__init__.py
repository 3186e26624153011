"""Class discovery: textual scanning, condition filtering, and the walk that ties them together."""

from __future__ import annotations

from nsenum.discovery.conditions import (
    ABSTRACT,
    IMPLEMENTS,
    TypeInfoCache,
    matches,
    parse_conditions,
)
from nsenum.discovery.engine import DiscoveryEngine
from nsenum.discovery.introspection import Introspector, SourceIntrospector
from nsenum.discovery.scanner import DeclarationScanner, scan_file

__all__ = [
    "ABSTRACT",
    "IMPLEMENTS",
    "DeclarationScanner",
    "DiscoveryEngine",
    "Introspector",
    "SourceIntrospector",
    "TypeInfoCache",
    "matches",
    "parse_conditions",
    "scan_file",
]
