"""Deep introspection of discovered classes.

This is the expensive step, run only when a condition needs it. The
:class:`Introspector` protocol is what the condition evaluator depends on;
:class:`SourceIntrospector` answers it by reading the whole class file and
resolving its ``use`` imports. Interfaces inherited through a parent class
or through interface inheritance are not followed.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from nsenum.core.exceptions import IntrospectionError
from nsenum.core.logging import get_logger
from nsenum.core.models import NAMESPACE_SEPARATOR, Manifest, ModulePath, TypeInfo
from nsenum.manifest.resolver import DEFAULT_SOURCE_SUFFIX, find_file

LOGGER = get_logger(__name__)

_NAME = r"\\?[A-Za-z_][A-Za-z0-9_]*(?:\\[A-Za-z_][A-Za-z0-9_]*)*"

BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
LINE_COMMENT = re.compile(r"(?://|#(?!\[)).*?$", re.MULTILINE)
NAMESPACE_DECLARATION = re.compile(r"^\s*namespace\s+(" + _NAME + r")\s*[;{]", re.MULTILINE)
USE_STATEMENT = re.compile(r"^\s*use\s+([^;]+);", re.MULTILINE)
CLASS_HEADER = re.compile(
    r"(?P<modifiers>(?:\b(?:abstract|final|readonly)\s+)*)\bclass\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"(?:\s+extends\s+" + _NAME + r")?"
    r"(?:\s+implements\s+(?P<interfaces>" + _NAME + r"(?:\s*,\s*" + _NAME + r")*))?"
    r"\s*\{"
)


class Introspector(Protocol):
    """Answers structural questions about a fully-qualified class."""

    def inspect(self, fqcn: str, path: Optional[Path] = None) -> TypeInfo:
        """Return what is known about ``fqcn``.

        Args:
            fqcn: Fully-qualified class name, without a leading backslash.
            path: File the class was discovered in, when already known.

        Raises:
            IntrospectionError: If the class cannot be located or inspected.
        """
        ...


class SourceIntrospector:
    """Introspects classes by reading their complete source file."""

    def __init__(self, manifest: Manifest, suffixes: Iterable[str] = (DEFAULT_SOURCE_SUFFIX,)) -> None:
        self.manifest = manifest
        self.suffixes = tuple(suffixes)

    def inspect(self, fqcn: str, path: Optional[Path] = None) -> TypeInfo:
        fqcn = fqcn.strip(NAMESPACE_SEPARATOR)
        if path is None:
            path = find_file(fqcn, self.manifest, self.suffixes)
        if path is None:
            raise IntrospectionError(fqcn, "class file not found in autoload manifest")

        try:
            source = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise IntrospectionError(fqcn, str(e)) from e

        LOGGER.debug(f"Introspecting {fqcn} from {path}")
        return parse_type_info(fqcn, source)


def parse_type_info(fqcn: str, source: str) -> TypeInfo:
    """Extract the declaration of ``fqcn`` from PHP source text.

    Raises:
        IntrospectionError: If no declaration of the class is present.
    """
    short_name = ModulePath.parse(fqcn).segments[-1]
    code = LINE_COMMENT.sub("", BLOCK_COMMENT.sub("", source))

    header = None
    for match in CLASS_HEADER.finditer(code):
        if match.group("name") == short_name:
            header = match
            break
    if header is None:
        raise IntrospectionError(fqcn, "class declaration not found")

    preamble = code[: header.start()]
    namespace_match = NAMESPACE_DECLARATION.search(preamble)
    namespace = ModulePath.parse(namespace_match.group(1)) if namespace_match else ModulePath()
    imports = parse_imports(preamble)

    interfaces: List[str] = []
    if header.group("interfaces"):
        for name in header.group("interfaces").split(","):
            interfaces.append(resolve_name(name.strip(), namespace, imports))

    return TypeInfo(
        fqcn=fqcn,
        interfaces=frozenset(interfaces),
        abstract="abstract" in header.group("modifiers").split(),
    )


def parse_imports(code: str) -> Dict[str, str]:
    """Map import aliases to fully-qualified names.

    Handles plain, aliased, comma-separated and grouped (``A\\{B, C as D}``)
    class imports. ``use function`` and ``use const`` are ignored.
    """
    imports: Dict[str, str] = {}
    for match in USE_STATEMENT.finditer(code):
        body = " ".join(match.group(1).split())
        if body.startswith(("function ", "const ")):
            continue
        for target, alias in _expand_use(body):
            imports[alias] = target
    return imports


def _expand_use(body: str) -> List[Tuple[str, str]]:
    group_start = body.find("{")
    if group_start != -1:
        base = body[:group_start].strip().strip(NAMESPACE_SEPARATOR)
        members = body[group_start + 1: body.rfind("}")]
        clauses = [f"{base}{NAMESPACE_SEPARATOR}{m.strip()}" for m in members.split(",") if m.strip()]
    else:
        clauses = [c.strip() for c in body.split(",") if c.strip()]

    result = []
    for clause in clauses:
        parts = clause.split()
        target = parts[0].strip(NAMESPACE_SEPARATOR)
        if len(parts) == 3 and parts[1].lower() == "as":
            alias = parts[2]
        else:
            alias = target.rsplit(NAMESPACE_SEPARATOR, 1)[-1]
        result.append((target, alias))
    return result


def resolve_name(name: str, namespace: ModulePath, imports: Dict[str, str]) -> str:
    """Resolve a class reference the way PHP does at compile time."""
    if name.startswith(NAMESPACE_SEPARATOR):
        return name.strip(NAMESPACE_SEPARATOR)
    first, _, rest = name.partition(NAMESPACE_SEPARATOR)
    if first in imports:
        return f"{imports[first]}{NAMESPACE_SEPARATOR}{rest}" if rest else imports[first]
    if first.lower() == "namespace" and rest:
        return namespace.qualify(rest)
    return namespace.qualify(name)
