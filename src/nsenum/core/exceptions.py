"""Exception hierarchy for nsenum.

Configuration-type errors are fatal and never retried. Invalid queries are
rejected before any filesystem work happens. Per-file I/O problems never
surface as exceptions; they are handled where the file is read.
"""

from __future__ import annotations

from typing import Optional


class NsenumError(Exception):
    """Base class for all nsenum errors."""


class ConfigError(NsenumError):
    """Configuration loading or parsing error."""


class ManifestError(ConfigError):
    """Composer autoload metadata is missing or malformed."""


class ProjectRootError(ConfigError):
    """The project base directory could not be determined."""


class InvalidQueryError(NsenumError, ValueError):
    """A discovery query was rejected before running.

    Raised for an empty namespace, a malformed condition list, or an unknown
    condition kind when conditions are evaluated strictly.
    """

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        if suggestion:
            message = f"{message} (did you mean '{suggestion}'?)"
        super().__init__(message)
        self.suggestion = suggestion


class IntrospectionError(NsenumError):
    """A class could not be located or inspected."""

    def __init__(self, fqcn: str, reason: str) -> None:
        super().__init__(f"Cannot introspect {fqcn}: {reason}")
        self.fqcn = fqcn
        self.reason = reason
