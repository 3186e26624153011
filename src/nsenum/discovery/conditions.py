"""Post-discovery condition filtering.

Conditions are an ordered list of condition sets. A class matches when every
entry of at least one set holds (OR across sets, AND within a set). An empty
list matches everything.

Supported kinds:
- ``implements``: interface name (leading backslash optional), or a list of
  names, the class must directly implement
- ``abstract``: boolean the class's abstractness must equal

Evaluation is lazy: sets are tried in order, each set stops at its first
failing entry, and the first passing set ends evaluation. Introspection runs
at most once per class within one :class:`TypeInfoCache`.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from nsenum.core.exceptions import IntrospectionError, InvalidQueryError
from nsenum.core.logging import get_logger
from nsenum.core.models import ConditionSet, DiscoveredType, TypeInfo
from nsenum.discovery.introspection import Introspector

LOGGER = get_logger(__name__)

IMPLEMENTS = "implements"
ABSTRACT = "abstract"
KNOWN_CONDITIONS = {IMPLEMENTS, ABSTRACT}


class TypeInfoCache:
    """Memoizes introspection results by fully-qualified name for one query.

    Failures are remembered as well, so a class that cannot be inspected is
    only attempted once.
    """

    def __init__(self, introspector: Introspector) -> None:
        self.introspector = introspector
        self._results: Dict[str, Union[TypeInfo, IntrospectionError]] = {}

    def get(self, discovered: DiscoveredType) -> TypeInfo:
        fqcn = discovered.fqcn
        if fqcn not in self._results:
            try:
                self._results[fqcn] = self.introspector.inspect(fqcn, discovered.path)
            except IntrospectionError as e:
                self._results[fqcn] = e
        result = self._results[fqcn]
        if isinstance(result, IntrospectionError):
            raise result
        return result

    def __len__(self) -> int:
        return len(self._results)


def parse_conditions(raw: Any, permissive: bool = False) -> List[Dict[str, Any]]:
    """Validate a user-supplied condition list.

    Args:
        raw: Sequence of mappings, or None for "no conditions".
        permissive: Keep unknown condition kinds (they are then ignored by
            the evaluator) instead of rejecting them.

    Raises:
        InvalidQueryError: If the structure or a value is malformed, or an
            unknown kind is present and ``permissive`` is False.
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping) or isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise InvalidQueryError("Conditions must be a list of mappings")

    parsed: List[Dict[str, Any]] = []
    for index, condition_set in enumerate(raw):
        if not isinstance(condition_set, Mapping):
            raise InvalidQueryError(f"Condition set #{index} must be a mapping")
        for kind, value in condition_set.items():
            if kind == IMPLEMENTS:
                if not _interface_names(value):
                    raise InvalidQueryError(
                        f"'{IMPLEMENTS}' in condition set #{index} must be an interface name or list of names"
                    )
            elif kind == ABSTRACT:
                if not isinstance(value, bool):
                    raise InvalidQueryError(f"'{ABSTRACT}' in condition set #{index} must be a boolean")
            elif permissive:
                LOGGER.warning(f"Ignoring unknown condition '{kind}' in condition set #{index}")
            else:
                raise InvalidQueryError(
                    f"Unknown condition '{kind}' in condition set #{index}",
                    suggestion=_suggest_condition(str(kind)),
                )
        parsed.append(dict(condition_set))
    return parsed


def _suggest_condition(kind: str) -> Optional[str]:
    close = get_close_matches(kind, sorted(KNOWN_CONDITIONS), n=1, cutoff=0.6)
    return close[0] if close else None


def matches(
    discovered: DiscoveredType,
    conditions: Sequence[ConditionSet],
    introspector: Introspector,
    cache: Optional[TypeInfoCache] = None,
    permissive: bool = False,
) -> bool:
    """Check a discovered class against OR-combined condition sets.

    Args:
        discovered: The class to check.
        conditions: Ordered condition sets; empty means match-all.
        introspector: Deep introspection capability.
        cache: Per-query memo shared across calls; a private one is used
            when omitted.
        permissive: Treat unknown condition kinds as passing. Otherwise an
            unknown kind fails its set.
    """
    if not conditions:
        return True

    if cache is None:
        cache = TypeInfoCache(introspector)

    warned = False
    for condition_set in conditions:
        try:
            if _set_holds(discovered, condition_set, cache, permissive):
                return True
        except IntrospectionError as e:
            # The set fails; later sets may not need introspection at all.
            if not warned:
                LOGGER.warning(f"{e}; treating conditions that need it as unmet")
                warned = True
    return False


def _set_holds(
    discovered: DiscoveredType,
    condition_set: ConditionSet,
    cache: TypeInfoCache,
    permissive: bool,
) -> bool:
    for kind, expected in condition_set.items():
        if kind == IMPLEMENTS:
            names = _interface_names(expected)
            if not names:
                return False
            info = cache.get(discovered)
            if not all(info.implements(name) for name in names):
                return False
        elif kind == ABSTRACT:
            if cache.get(discovered).abstract is not bool(expected):
                return False
        elif not permissive:
            return False
    return True


def _interface_names(value: Any) -> List[str]:
    """Normalize an ``implements`` value; empty when malformed."""
    names = [value] if isinstance(value, str) else value
    if not isinstance(names, (list, tuple)) or not names:
        return []
    if not all(isinstance(name, str) and name.strip("\\") for name in names):
        return []
    return list(names)
