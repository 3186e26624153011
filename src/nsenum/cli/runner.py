"""CLI runner orchestration.

This module handles command dispatch and execution for the nsenum CLI.
"""

from __future__ import annotations

from argparse import Namespace
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, Iterable, Optional

from nsenum.cli.arguments import build_parser
from nsenum.cli.commands import ClassesCommand, Command, OwnerCommand, ValidateCommand
from nsenum.cli.exit_codes import EXIT_CONFIG_ERROR, EXIT_INVALID_USAGE, EXIT_SUCCESS
from nsenum.core.exceptions import ConfigError, InvalidQueryError
from nsenum.core.logging import configure_logging, get_logger
from nsenum.enumerator import Enumerator

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get nsenum version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("nsenum")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from nsenum import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.classes_cmd = ClassesCommand()
        self.owner_cmd = OwnerCommand()
        self.validate_cmd = ValidateCommand()
        self._project_commands: Dict[str, Command] = {
            self.classes_cmd.name: self.classes_cmd,
            self.owner_cmd.name: self.owner_cmd,
        }

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        try:
            args = self.parser.parse_args(list(argv) if argv is not None else None)
        except SystemExit as e:
            # argparse exits 0 for --help and 2 for usage errors
            return EXIT_SUCCESS if e.code == 0 else EXIT_INVALID_USAGE

        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)

        if command == self.validate_cmd.name:
            return self.validate_cmd.execute(args)
        if command in self._project_commands:
            return self._run_project_command(self._project_commands[command], args)

        self.parser.print_help()
        return EXIT_SUCCESS

    def _run_project_command(self, cmd: Command, args: Namespace) -> int:
        """Run a command that needs the project's manifest.

        Configuration problems are fatal and rejected queries are usage
        errors; both are reported through the log rather than a traceback.
        """
        try:
            enumerator = Enumerator.from_project(
                project_root=args.project_root,
                config_path=args.config,
            )
            return cmd.execute(args, enumerator)
        except ConfigError as e:
            LOGGER.error(str(e))
            return EXIT_CONFIG_ERROR
        except InvalidQueryError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE
