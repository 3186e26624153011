"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.nsenum.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from nsenum.config.models import (
    DEFAULT_EXTENSIONS,
    ConditionsConfig,
    DiscoveryConfig,
    ManifestConfig,
    NsenumConfig,
    ProjectConfig,
)
from nsenum.config.validation import validate_config
from nsenum.core.exceptions import ConfigError
from nsenum.core.logging import get_logger

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".nsenum.yml", ".nsenum.yaml", "nsenum.yml", "nsenum.yaml"]

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

__all__ = [
    "ConfigError",
    "PROJECT_CONFIG_NAMES",
    "load_config",
    "find_project_config",
    "load_yaml_file",
    "expand_env_vars",
    "merge_configs",
    "dict_to_config",
]


def load_config(
    project_root: Optional[Path],
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> NsenumConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.nsenum.yml)
    3. Built-in defaults

    Args:
        project_root: Directory searched for a project config file. May be
            None when the root is not known yet.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged NsenumConfig instance.

    Raises:
        ConfigError: If specified config file doesn't exist or has parse errors.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    if cli_config_path:
        cli_config_path = Path(cli_config_path)
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_layer(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    elif project_root is not None:
        project_path = find_project_config(project_root)
        if project_path is not None:
            merged = merge_configs(merged, _load_layer(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    validate_config(data, source=str(path))
    return data


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Searches for .nsenum.yml, .nsenum.yaml, nsenum.yml, nsenum.yaml
    in the project root directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _normalize_extension(ext: str) -> str:
    ext = ext.strip()
    return ext if ext.startswith(".") else f".{ext}"


def _parse_namespaces(data: Any) -> Dict[str, List[str]]:
    """Parse manifest.namespaces, accepting a single directory string per prefix."""
    namespaces: Dict[str, List[str]] = {}
    if not isinstance(data, dict):
        return namespaces
    for prefix, dirs in data.items():
        if isinstance(dirs, str):
            dirs = [dirs]
        if not isinstance(dirs, list):
            raise ConfigError(f"'manifest.namespaces.{prefix}' must be a string or list")
        namespaces[str(prefix)] = [str(d) for d in dirs]
    return namespaces


def dict_to_config(data: Dict[str, Any]) -> NsenumConfig:
    """Convert validated dict to typed NsenumConfig."""
    project_data = data.get("project") or {}
    project = ProjectConfig(
        root=project_data.get("root"),
        vendor_dir=project_data.get("vendor_dir", "vendor"),
    )

    discovery_data = data.get("discovery") or {}
    extensions = discovery_data.get("extensions") or DEFAULT_EXTENSIONS
    if isinstance(extensions, str):
        extensions = [extensions]
    ignore = discovery_data.get("ignore") or []
    if isinstance(ignore, str):
        ignore = [ignore]
    discovery = DiscoveryConfig(
        extensions=[_normalize_extension(ext) for ext in extensions],
        ignore=list(ignore),
    )

    conditions_data = data.get("conditions") or {}
    conditions = ConditionsConfig(
        unknown=str(conditions_data.get("unknown", ConditionsConfig.unknown)).lower(),
    )

    manifest_data = data.get("manifest") or {}
    manifest = ManifestConfig(
        namespaces=_parse_namespaces(manifest_data.get("namespaces")),
    )

    return NsenumConfig(
        project=project,
        discovery=discovery,
        conditions=conditions,
        manifest=manifest,
    )
