"""Configuration loading for gtml projects (.gtml.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .compiler.context import DEFAULT_MAX_DEPTH

CONFIG_FILENAME = ".gtml.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PathsConfig:
    """Project directory names, relative to the project root."""

    components: str = "components"
    routes: str = "routes"
    dist: str = "dist"
    static: str = "static"


@dataclass
class CompilerConfig:
    """Compile-time switches."""

    strict_props: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    inject_assets: bool = True
    stylesheet: str = "styles.css"
    templates_dir: Optional[Path] = None


@dataclass
class WatchConfig:
    """Polling settings for watch mode."""

    interval: float = 1.0


@dataclass
class GtmlConfig:
    """Represents the settings defined in .gtml.yml."""

    root: Path
    paths: PathsConfig = field(default_factory=PathsConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    @property
    def components_dir(self) -> Path:
        return self.root / self.paths.components

    @property
    def routes_dir(self) -> Path:
        return self.root / self.paths.routes

    @property
    def dist_dir(self) -> Path:
        return self.root / self.paths.dist

    @property
    def static_dir(self) -> Path:
        return self.root / self.paths.static


def load_config(config_path: Path) -> GtmlConfig:
    """Load configuration for the project at (or containing) ``config_path``."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GtmlConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults_paths = PathsConfig()
    paths_data = _as_dict(data.get("paths"))
    paths = PathsConfig(
        components=_as_str(paths_data.get("components")) or defaults_paths.components,
        routes=_as_str(paths_data.get("routes")) or defaults_paths.routes,
        dist=_as_str(paths_data.get("dist")) or defaults_paths.dist,
        static=_as_str(paths_data.get("static")) or defaults_paths.static,
    )

    defaults_compiler = CompilerConfig()
    compiler_data = _as_dict(data.get("compiler"))
    strict_props = _as_bool(compiler_data.get("strict_props"))
    inject_assets = _as_bool(compiler_data.get("inject_assets"))
    max_depth = _as_int(compiler_data.get("max_depth"))
    if max_depth is not None and max_depth < 1:
        raise ConfigError("compiler.max_depth must be a positive integer")
    templates_dir_str = _as_str(compiler_data.get("templates_dir"))
    compiler = CompilerConfig(
        strict_props=defaults_compiler.strict_props if strict_props is None else strict_props,
        max_depth=max_depth or defaults_compiler.max_depth,
        inject_assets=defaults_compiler.inject_assets if inject_assets is None else inject_assets,
        stylesheet=_as_str(compiler_data.get("stylesheet")) or defaults_compiler.stylesheet,
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )

    watch_data = _as_dict(data.get("watch"))
    interval = _as_float(watch_data.get("interval"))
    if interval is not None and interval <= 0:
        raise ConfigError("watch.interval must be greater than zero")
    watch = WatchConfig(interval=interval or WatchConfig().interval)

    return GtmlConfig(root=root, paths=paths, compiler=compiler, watch=watch)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "CompilerConfig",
    "ConfigError",
    "GtmlConfig",
    "PathsConfig",
    "WatchConfig",
    "load_config",
]
