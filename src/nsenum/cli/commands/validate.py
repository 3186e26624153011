"""Validate command implementation.

Checks an nsenum configuration file for syntax errors, unknown keys and bad
values, then checks that the directories it maps namespaces onto exist.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from nsenum.enumerator import Enumerator

from nsenum.bootstrap.paths import find_project_root
from nsenum.cli.commands import Command
from nsenum.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_ISSUES_FOUND, EXIT_SUCCESS
from nsenum.config.loader import PROJECT_CONFIG_NAMES, dict_to_config, find_project_config, load_yaml_file
from nsenum.config.validation import (
    ConfigValidationIssue,
    ValidationSeverity,
    validate_config_file,
)
from nsenum.core.exceptions import ConfigError, ProjectRootError

_SEVERITY_HEADINGS = (
    (ValidationSeverity.ERROR, "Errors"),
    (ValidationSeverity.WARNING, "Warnings"),
)


class ValidateCommand(Command):
    """Validates nsenum configuration files."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "validate"

    def execute(self, args: Namespace, enumerator: Optional["Enumerator"] = None) -> int:
        """Execute the validate command.

        Returns:
            Exit code: 0 = valid, 1 = has errors, 3 = file not found.
        """
        config_path = self._config_path(args)

        if config_path is None:
            print("No configuration file found.")
            print(f"Looked for: {', '.join(PROJECT_CONFIG_NAMES)}")
            return EXIT_INVALID_USAGE

        if not config_path.exists():
            print(f"Configuration file not found: {config_path}")
            return EXIT_INVALID_USAGE

        print(f"Validating {config_path}...")

        is_valid, issues = validate_config_file(config_path)
        if is_valid:
            issues.extend(self._missing_directories(config_path, args))

        if not issues:
            print("Configuration is valid.")
            return EXIT_SUCCESS

        for severity, heading in _SEVERITY_HEADINGS:
            selected = [i for i in issues if i.severity == severity]
            if selected:
                print(f"\n{heading} ({len(selected)}):")
                for issue in selected:
                    self._print_issue(issue)

        error_count = sum(1 for i in issues if i.severity == ValidationSeverity.ERROR)
        if error_count:
            print(f"\nConfiguration is invalid ({error_count} error(s)).")
            return EXIT_ISSUES_FOUND
        print(f"\nConfiguration is valid with {len(issues)} warning(s).")
        return EXIT_SUCCESS

    def _config_path(self, args: Namespace) -> Optional[Path]:
        """Pick the file to validate: positional path, --config, then the project config."""
        explicit = getattr(args, "path", None) or getattr(args, "config", None)
        if explicit:
            return Path(explicit)
        return find_project_config(self._project_root(args, None))

    def _project_root(self, args: Namespace, configured: Optional[str]) -> Path:
        try:
            return find_project_root(getattr(args, "project_root", None) or configured)
        except ProjectRootError:
            return Path.cwd()

    def _missing_directories(self, config_path: Path, args: Namespace) -> List[ConfigValidationIssue]:
        """Warn about manifest.namespaces directories that do not exist."""
        try:
            config = dict_to_config(load_yaml_file(config_path))
        except ConfigError as e:
            return [ConfigValidationIssue(
                message=str(e),
                source=str(config_path),
                severity=ValidationSeverity.ERROR,
            )]

        root = self._project_root(args, config.project.root)
        issues = []
        for prefix, dirs in config.manifest.namespaces.items():
            for directory in dirs:
                if not (root / directory).is_dir():
                    issues.append(ConfigValidationIssue(
                        message=f"Directory '{directory}' for namespace '{prefix}' does not exist under {root}",
                        source=str(config_path),
                        severity=ValidationSeverity.WARNING,
                        key=f"manifest.namespaces.{prefix}",
                    ))
        return issues

    def _print_issue(self, issue: ConfigValidationIssue) -> None:
        location = f" [{issue.key}]" if issue.key else ""
        print(f"  - {issue.message}{location}")
        if issue.suggestion:
            print(f"    Did you mean '{issue.suggestion}'?")
