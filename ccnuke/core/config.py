"""YAML configuration and nuke plan loaders."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Optional, Any

import yaml

from ccnuke.core.errors import ConfigError

NUKE_PLAN_FILENAME = "nuke-plan.yml"


@dataclass
class Config:
    """ccnuke run configuration."""
    regions: List[str] = field(default_factory=list)
    exclude_regions: List[str] = field(default_factory=list)
    resource_types: List[str] = field(default_factory=list)
    exclude_resource_types: List[str] = field(default_factory=list)
    older_than: Optional[str] = None
    profile: Optional[str] = None
    dry_run: bool = False
    force: bool = False
    json_logs: bool = False
    verbosity: int = 0


@dataclass
class NukePlan:
    """Resource types listed under ResourcesToNuke in nuke-plan.yml."""
    targets: List[str] = field(default_factory=list)


def load_config(path: Optional[str] = None) -> Config:
    """Load config from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, returns default config.

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If specified path doesn't exist
        yaml.YAMLError: If YAML is invalid
        ConfigError: If a key holds a value of the wrong type
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return _parse_config(data)


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key) or []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _parse_config(data: Dict[str, Any]) -> Config:
    """Parse config dict into Config dataclass."""
    older_than = data.get("older_than")
    return Config(
        regions=_string_list(data, "regions"),
        exclude_regions=_string_list(data, "exclude_regions"),
        resource_types=_string_list(data, "resource_types"),
        exclude_resource_types=_string_list(data, "exclude_resource_types"),
        older_than=str(older_than) if older_than is not None else None,
        profile=data.get("profile"),
        dry_run=bool(data.get("dry_run", False)),
        force=bool(data.get("force", False)),
        json_logs=bool(data.get("json_logs", False)),
        verbosity=int(data.get("verbosity", 0)),
    )


def load_nuke_plan(directory: Optional[str] = None) -> NukePlan:
    """Read nuke-plan.yml from the working directory.

    Read and parse failures propagate to the caller unchanged.
    """
    plan_path = Path(directory or os.getcwd()) / NUKE_PLAN_FILENAME
    with open(plan_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{plan_path} must contain a mapping")
    return NukePlan(targets=_string_list(data, "ResourcesToNuke"))
