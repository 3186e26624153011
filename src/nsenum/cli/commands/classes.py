"""Classes command implementation.

Lists the classes declared beneath a namespace, in text or JSON form.
"""

from __future__ import annotations

import json
from argparse import Namespace
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from nsenum.enumerator import Enumerator

from nsenum.cli.commands import Command
from nsenum.cli.exit_codes import EXIT_SUCCESS
from nsenum.core.exceptions import InvalidQueryError
from nsenum.discovery.conditions import ABSTRACT, IMPLEMENTS


def build_conditions(args: Namespace) -> List[Dict[str, Any]]:
    """Translate CLI flags into a condition list.

    ``--conditions`` carries a complete JSON condition list. Otherwise
    ``--implements`` and ``--abstract``/``--concrete`` form a single
    condition set in which every flag must hold.

    Raises:
        InvalidQueryError: If the JSON is malformed or mixed with flags.
    """
    raw_json = getattr(args, "conditions", None)
    interfaces = list(getattr(args, "implements", None) or [])
    abstract = getattr(args, "abstract", None)

    if raw_json:
        if interfaces or abstract is not None:
            raise InvalidQueryError("--conditions cannot be combined with --implements/--abstract/--concrete")
        try:
            conditions = json.loads(raw_json)
        except json.JSONDecodeError as e:
            raise InvalidQueryError(f"Invalid JSON in --conditions: {e}") from e
        if not isinstance(conditions, list):
            raise InvalidQueryError("--conditions must be a JSON array of objects")
        return conditions

    condition_set: Dict[str, Any] = {}
    if interfaces:
        condition_set[IMPLEMENTS] = interfaces[0] if len(interfaces) == 1 else interfaces
    if abstract is not None:
        condition_set[ABSTRACT] = abstract
    return [condition_set] if condition_set else []


class ClassesCommand(Command):
    """Enumerates classes beneath a namespace."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "classes"

    def execute(self, args: Namespace, enumerator: Optional["Enumerator"] = None) -> int:
        """Execute the classes command.

        Returns:
            Exit code (0 on success; query and config errors propagate to
            the runner).
        """
        if enumerator is None:
            raise ValueError("classes command requires an enumerator")

        results = enumerator.get_classes(args.namespace, build_conditions(args))

        if args.format == "json":
            print(json.dumps(results, indent=2))
        else:
            for fqcn in results:
                print(fqcn)
        return EXIT_SUCCESS
