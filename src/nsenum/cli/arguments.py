"""Argument parser construction for the nsenum CLI.

This module builds the argument parser with subcommands:
- nsenum classes  - List classes declared beneath a namespace
- nsenum owner    - Show which Composer package a class lives in
- nsenum validate - Validate an nsenum configuration file
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show nsenum version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        metavar="DIR",
        help="Composer project root (default: $NSENUM_ROOT or search upwards from cwd).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Path to a custom config file (default: .nsenum.yml in the project root).",
    )


def _build_classes_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'classes' subcommand parser."""
    classes_parser = subparsers.add_parser(
        "classes",
        help="List classes declared beneath a namespace.",
        description=(
            "Scan the directories Composer maps to NAMESPACE and list every class "
            "declared there, optionally filtered by interface and abstractness."
        ),
    )
    classes_parser.add_argument(
        "namespace",
        help="Namespace to enumerate, e.g. 'App\\Plugins'.",
    )
    classes_parser.add_argument(
        "--implements",
        action="append",
        default=[],
        metavar="INTERFACE",
        help="Only classes implementing INTERFACE (repeatable; all must hold).",
    )
    abstract_group = classes_parser.add_mutually_exclusive_group()
    abstract_group.add_argument(
        "--abstract",
        dest="abstract",
        action="store_const",
        const=True,
        default=None,
        help="Only abstract classes.",
    )
    abstract_group.add_argument(
        "--concrete",
        dest="abstract",
        action="store_const",
        const=False,
        help="Only non-abstract classes.",
    )
    classes_parser.add_argument(
        "--conditions",
        metavar="JSON",
        help=(
            "Full condition list as JSON, OR across sets and AND within a set, e.g. "
            "'[{\"implements\": \"A\\\\B\"}, {\"abstract\": true}]'. "
            "Cannot be combined with --implements/--abstract/--concrete."
        ),
    )
    classes_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text).",
    )


def _build_owner_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'owner' subcommand parser."""
    owner_parser = subparsers.add_parser(
        "owner",
        help="Show the Composer package a class lives in.",
        description=(
            "Locate CLASS through the autoload manifest and print the installed "
            "package containing it, or '(project)' for the project's own classes."
        ),
    )
    owner_parser.add_argument(
        "class_name",
        metavar="CLASS",
        help="Fully-qualified class name.",
    )


def _build_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'validate' subcommand parser."""
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate an nsenum configuration file.",
        description="Check a configuration file for syntax errors, unknown keys and bad values.",
    )
    validate_parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Config file to validate (default: --config or the project config).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the complete argument parser."""
    parser = argparse.ArgumentParser(
        prog="nsenum",
        description="nsenum - discover PHP classes beneath a namespace without loading them.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    _build_classes_parser(subparsers)
    _build_owner_parser(subparsers)
    _build_validate_parser(subparsers)
    return parser
