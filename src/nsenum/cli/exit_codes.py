"""Process exit codes for the nsenum CLI."""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_ISSUES_FOUND = 1  # validate: configuration has errors
EXIT_CONFIG_ERROR = 2  # manifest, config file or project root unusable
EXIT_INVALID_USAGE = 3  # bad arguments or rejected query
