"""nsenum - compilation-free discovery of PHP classes beneath a namespace."""

from __future__ import annotations

__version__ = "0.1.0"

from nsenum.core.exceptions import (  # noqa: E402
    ConfigError,
    IntrospectionError,
    InvalidQueryError,
    ManifestError,
    NsenumError,
    ProjectRootError,
)
from nsenum.enumerator import Enumerator, get_classes, get_owning_module  # noqa: E402

__all__ = [
    "__version__",
    "ConfigError",
    "Enumerator",
    "IntrospectionError",
    "InvalidQueryError",
    "ManifestError",
    "NsenumError",
    "ProjectRootError",
    "get_classes",
    "get_owning_module",
]
