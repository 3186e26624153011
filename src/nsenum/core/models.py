from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from nsenum.core.exceptions import InvalidQueryError

NAMESPACE_SEPARATOR = "\\"

# A single AND-combined group of filter predicates, e.g. {"implements": "Foo", "abstract": False}.
ConditionSet = Mapping[str, Any]


@dataclass(frozen=True)
class ModulePath:
    """An immutable, case-sensitive namespace path such as ``Datto\\Core``.

    The empty path is the root namespace. Discovery under the root is not
    allowed, but the value itself is representable so callers can check it.
    """

    segments: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            if not segment or NAMESPACE_SEPARATOR in segment:
                raise InvalidQueryError(f"Invalid namespace segment {segment!r} in {self.segments!r}")

    @classmethod
    def parse(cls, value: str) -> "ModulePath":
        """Parse a namespace string. Leading and trailing backslashes are ignored."""
        trimmed = value.strip().strip(NAMESPACE_SEPARATOR)
        if not trimmed:
            return cls()
        return cls(tuple(trimmed.split(NAMESPACE_SEPARATOR)))

    @property
    def is_root(self) -> bool:
        return not self.segments

    def child(self, segment: str) -> "ModulePath":
        return ModulePath(self.segments + (segment,))

    def startswith(self, other: "ModulePath") -> bool:
        return self.segments[: len(other)] == other.segments

    def common_prefix_length(self, other: "ModulePath") -> int:
        """Length of the longest shared leading run of segments."""
        k = min(len(self), len(other))
        while k > 0 and self.segments[:k] != other.segments[:k]:
            k -= 1
        return k

    def qualify(self, name: str) -> str:
        """Return the fully-qualified name of ``name`` inside this namespace."""
        if self.is_root:
            return name
        return f"{self}{NAMESPACE_SEPARATOR}{name}"

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return NAMESPACE_SEPARATOR.join(self.segments)


@dataclass(frozen=True)
class ManifestEntry:
    """One namespace prefix and the directories that may hold its classes."""

    prefix: ModulePath
    roots: Tuple[Path, ...]


@dataclass(frozen=True)
class Manifest:
    """Resolved autoload mapping for a project.

    Entries keep their load order: several entries may share a prefix, and
    every root of every matching entry is searched.
    """

    project_root: Path
    entries: Tuple[ManifestEntry, ...] = ()
    packages: Mapping[str, Path] = field(default_factory=dict)
    """Installed package name (``vendor/name``) to its install directory."""

    @classmethod
    def from_mapping(
        cls,
        project_root: Path,
        mapping: Mapping[str, Iterable[str | Path]],
        packages: Optional[Mapping[str, str | Path]] = None,
    ) -> "Manifest":
        """Build a manifest from a plain ``{prefix: [dir, ...]}`` mapping.

        Relative directories are resolved against ``project_root``.
        """
        entries = []
        for prefix, roots in mapping.items():
            resolved = tuple(_absolute(project_root, root) for root in roots)
            entries.append(ManifestEntry(ModulePath.parse(prefix), resolved))
        package_dirs: Dict[str, Path] = {
            name: _absolute(project_root, path) for name, path in (packages or {}).items()
        }
        return cls(project_root=project_root, entries=tuple(entries), packages=package_dirs)


@dataclass(frozen=True)
class SearchTask:
    """A directory to walk and the namespace its direct children belong to."""

    prefix: ModulePath
    directory: Path


@dataclass(frozen=True)
class DiscoveredType:
    """A class found by textual scanning.

    ``namespace`` is the namespace under which the containing directory was
    reached, never one re-derived from the file contents.
    """

    namespace: ModulePath
    name: str
    path: Path

    @property
    def fqcn(self) -> str:
        return self.namespace.qualify(self.name)


@dataclass(frozen=True)
class TypeInfo:
    """What deep introspection knows about a class."""

    fqcn: str
    interfaces: FrozenSet[str] = frozenset()
    abstract: bool = False

    def implements(self, interface: str) -> bool:
        return interface.strip(NAMESPACE_SEPARATOR) in self.interfaces


def _absolute(project_root: Path, path: str | Path) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = project_root / candidate
    return candidate
