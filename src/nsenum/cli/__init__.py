"""Command-line interface for nsenum."""

from __future__ import annotations

import sys
from typing import Iterable, Optional


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Console script entry point."""
    from nsenum.cli.runner import CLIRunner

    return CLIRunner().run(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
