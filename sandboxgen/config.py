"""Configuration loading for sandboxgen (.sandboxgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".sandboxgen.yml"

ENV_REGISTRY_URL = "SANDBOXGEN_REGISTRY_URL"
ENV_REGISTRY_TIMEOUT = "SANDBOXGEN_REGISTRY_TIMEOUT"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RegistryConfig:
    """Settings for the version-resolution registry client."""

    base_url: str = "https://unpkg.com"
    timeout: float = 30.0
    max_workers: int = 8


@dataclass
class DependencyConfig:
    """Additional dependency exclusions and aliases layered over the defaults."""

    exclude: List[str] = field(default_factory=list)
    exclude_prefixes: List[str] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)


@dataclass
class SandboxGenConfig:
    """Represents the settings defined in .sandboxgen.yml."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    dependencies: DependencyConfig = field(default_factory=DependencyConfig)


def load_config(
    config_path: Path, *, environ: Optional[Mapping[str, str]] = None
) -> SandboxGenConfig:
    """Load configuration from disk, applying environment overrides."""
    config_file = _resolve_config_path(config_path)
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    registry = RegistryConfig()
    registry_data = _as_dict(data.get("registry"))
    if registry_data:
        registry.base_url = _as_str(registry_data.get("base_url")) or registry.base_url
        timeout = _as_float(registry_data.get("timeout"))
        if timeout is not None and timeout > 0:
            registry.timeout = timeout
        max_workers = _as_int(registry_data.get("max_workers"))
        if max_workers is not None and max_workers > 0:
            registry.max_workers = max_workers

    env_url = env.get(ENV_REGISTRY_URL)
    if env_url:
        registry.base_url = env_url
    env_timeout = _as_float(env.get(ENV_REGISTRY_TIMEOUT))
    if env_timeout is not None and env_timeout > 0:
        registry.timeout = env_timeout
    registry.base_url = registry.base_url.rstrip("/")

    dependencies = DependencyConfig()
    dependency_data = _as_dict(data.get("dependencies"))
    if dependency_data:
        dependencies.exclude = _as_str_list(dependency_data.get("exclude"))
        dependencies.exclude_prefixes = _as_str_list(dependency_data.get("exclude_prefixes"))
        dependencies.aliases = _as_str_map(dependency_data.get("aliases"))

    return SandboxGenConfig(registry=registry, dependencies=dependencies)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {
        str(key): str(target)
        for key, target in value.items()
        if isinstance(target, (str, int, float)) and not isinstance(target, bool)
    }


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DependencyConfig",
    "RegistryConfig",
    "SandboxGenConfig",
    "load_config",
]
