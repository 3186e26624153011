"""Configuration validation for nsenum.

Validates known configuration keys and value types, and warns on unknown keys
with a close-match suggestion.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from nsenum.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at runtime
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


VALID_TOP_LEVEL_KEYS: Set[str] = {
    "version",
    "project",
    "discovery",
    "conditions",
    "manifest",
}

VALID_SECTION_KEYS: Dict[str, Set[str]] = {
    "project": {"root", "vendor_dir"},
    "discovery": {"extensions", "ignore"},
    "conditions": {"unknown"},
    "manifest": {"namespaces"},
}

VALID_UNKNOWN_CONDITION_MODES: Set[str] = {"strict", "permissive"}

# Phrases marking a warning as a hard error in validate_config_file
_ERROR_PHRASES = ("must be a", "Invalid value", "Config must be")


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Does not raise exceptions - returns warnings instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings  # type: ignore[unreachable]

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            _warn(warnings, f"Unknown top-level key '{key}'", source, key,
                  _suggest_key(key, VALID_TOP_LEVEL_KEYS))

    for section, valid_keys in VALID_SECTION_KEYS.items():
        section_data = data.get(section)
        if section_data is None:
            continue
        if not isinstance(section_data, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'{section}' must be a mapping, got {type(section_data).__name__}",
                source=source,
                key=section,
            ))
            continue
        for key in section_data.keys():
            if key not in valid_keys:
                _warn(warnings, f"Unknown key '{section}.{key}'", source, f"{section}.{key}",
                      _suggest_key(key, valid_keys))

    project = data.get("project")
    if isinstance(project, dict):
        for key in ("root", "vendor_dir"):
            value = project.get(key)
            if value is not None and not isinstance(value, str):
                _type_error(warnings, f"project.{key}", "a string", value, source)

    discovery = data.get("discovery")
    if isinstance(discovery, dict):
        for key in ("extensions", "ignore"):
            value = discovery.get(key)
            if value is not None and not isinstance(value, (str, list)):
                _type_error(warnings, f"discovery.{key}", "a string or list", value, source)

    conditions = data.get("conditions")
    if isinstance(conditions, dict):
        mode = conditions.get("unknown")
        if mode is not None:
            if not isinstance(mode, str):
                _type_error(warnings, "conditions.unknown", "a string", mode, source)
            elif mode.lower() not in VALID_UNKNOWN_CONDITION_MODES:
                _warn(
                    warnings,
                    f"Invalid value '{mode}' for 'conditions.unknown'. "
                    f"Valid values: {', '.join(sorted(VALID_UNKNOWN_CONDITION_MODES))}",
                    source,
                    "conditions.unknown",
                    _suggest_key(mode.lower(), VALID_UNKNOWN_CONDITION_MODES),
                )

    manifest = data.get("manifest")
    if isinstance(manifest, dict):
        namespaces = manifest.get("namespaces")
        if namespaces is not None and not isinstance(namespaces, dict):
            _type_error(warnings, "manifest.namespaces", "a mapping", namespaces, source)

    return warnings


def _warn(
    warnings: List[ConfigValidationWarning],
    message: str,
    source: str,
    key: Optional[str],
    suggestion: Optional[str] = None,
) -> None:
    warning = ConfigValidationWarning(message=message, source=source, key=key, suggestion=suggestion)
    warnings.append(warning)
    _log_warning(warning)


def _type_error(
    warnings: List[ConfigValidationWarning],
    key: str,
    expected: str,
    value: Any,
    source: str,
) -> None:
    warnings.append(ConfigValidationWarning(
        message=f"'{key}' must be {expected}, got {type(value).__name__}",
        source=source,
        key=key,
    ))


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)


def validate_config_file(config_path: Path) -> Tuple[bool, List[ConfigValidationIssue]]:
    """Validate a configuration file from disk.

    Checks file existence, YAML syntax, and configuration semantics.

    Returns:
        Tuple of (is_valid, issues) where is_valid is False if any errors exist.
    """
    issues: List[ConfigValidationIssue] = []
    source = str(config_path)

    if not config_path.exists():
        issues.append(ConfigValidationIssue(
            message=f"Configuration file not found: {config_path}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        issues.append(ConfigValidationIssue(
            message=f"Invalid YAML syntax: {e}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    if data is None:
        issues.append(ConfigValidationIssue(
            message="Configuration file is empty",
            source=source,
            severity=ValidationSeverity.WARNING,
        ))
        return True, issues

    for warning in validate_config(data, source):
        is_error = any(phrase in warning.message for phrase in _ERROR_PHRASES)
        issues.append(ConfigValidationIssue(
            message=warning.message,
            source=warning.source,
            severity=ValidationSeverity.ERROR if is_error else ValidationSeverity.WARNING,
            key=warning.key,
            suggestion=warning.suggestion,
        ))

    has_errors = any(issue.severity == ValidationSeverity.ERROR for issue in issues)
    return not has_errors, issues
