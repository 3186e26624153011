"""Typed configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

DEFAULT_EXTENSIONS = [".php"]

# How the condition evaluator treats condition kinds it does not know
UNKNOWN_CONDITIONS_STRICT = "strict"
UNKNOWN_CONDITIONS_PERMISSIVE = "permissive"


@dataclass
class ProjectConfig:
    """Project location settings."""

    root: Optional[str] = None
    vendor_dir: str = "vendor"


@dataclass
class DiscoveryConfig:
    """Directory walk and file scanning settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    ignore: List[str] = field(default_factory=list)


@dataclass
class ConditionsConfig:
    """Condition evaluation settings."""

    unknown: str = UNKNOWN_CONDITIONS_STRICT

    @property
    def permissive(self) -> bool:
        return self.unknown == UNKNOWN_CONDITIONS_PERMISSIVE


@dataclass
class ManifestConfig:
    """Extra namespace mappings merged into the Composer autoload rules."""

    namespaces: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class NsenumConfig:
    """Complete nsenum configuration."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    conditions: ConditionsConfig = field(default_factory=ConditionsConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)

    # Where the configuration came from, for diagnostics
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
