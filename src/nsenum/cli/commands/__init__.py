"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from nsenum.enumerator import Enumerator


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, enumerator: Optional["Enumerator"] = None) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            enumerator: Enumerator for the resolved project, for commands
                that need one.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# ruff: noqa: E402
from nsenum.cli.commands.classes import ClassesCommand
from nsenum.cli.commands.owner import OwnerCommand
from nsenum.cli.commands.validate import ValidateCommand

__all__ = [
    "Command",
    "ClassesCommand",
    "OwnerCommand",
    "ValidateCommand",
]
