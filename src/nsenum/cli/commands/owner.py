"""Owner command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from nsenum.enumerator import Enumerator

from nsenum.cli.commands import Command
from nsenum.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from nsenum.core.logging import get_logger

LOGGER = get_logger(__name__)

PROJECT_OWNER_LABEL = "(project)"


class OwnerCommand(Command):
    """Prints the Composer package a class belongs to."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "owner"

    def execute(self, args: Namespace, enumerator: Optional["Enumerator"] = None) -> int:
        """Execute the owner command.

        Prints ``vendor/package``, or ``(project)`` for the project's own
        classes.

        Returns:
            Exit code: 0 on success, 3 if the class cannot be located.
        """
        if enumerator is None:
            raise ValueError("owner command requires an enumerator")

        if enumerator.locate(args.class_name) is None:
            LOGGER.error(f"Class not found in autoload manifest: {args.class_name}")
            return EXIT_INVALID_USAGE

        owner = enumerator.get_owning_module(args.class_name)
        print(owner if owner is not None else PROJECT_OWNER_LABEL)
        return EXIT_SUCCESS
