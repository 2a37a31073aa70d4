"""Project scanning and manifest building utilities."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Iterator, List

from .config import GtmlConfig, load_config
from .errors import InvalidNameError, MissingDirectoryError
from .compiler.styles import is_kebab_case
from .models import ProjectManifest, SourceFile

_TEMPLATE_SUFFIX = ".html"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}


def _iter_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            yield Path(dirpath) / filename


def _hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _source_file(path: Path, base: Path) -> SourceFile:
    return SourceFile(
        path=str(path),
        relative=path.relative_to(base).as_posix(),
        name=path.stem,
        hash=_hash_file(path),
    )


def _require_directory(path: Path) -> Path:
    if not path.is_dir():
        raise MissingDirectoryError(f"missing required directory: {path}", str(path))
    return path


class ProjectScanner:
    """Walks a gtml project to collect components, routes and static files."""

    def scan(self, root: str, config: GtmlConfig | None = None) -> ProjectManifest:
        """Return a manifest of the project rooted at ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        config = config or load_config(root_path)

        components_dir = _require_directory(config.components_dir)
        routes_dir = _require_directory(config.routes_dir)

        components = [
            _source_file(path, components_dir)
            for path in _iter_files(components_dir)
            if path.suffix == _TEMPLATE_SUFFIX
        ]

        routes: List[SourceFile] = []
        for path in _iter_files(routes_dir):
            if path.suffix != _TEMPLATE_SUFFIX:
                continue
            if not is_kebab_case(path.stem):
                raise InvalidNameError(
                    f"route '{path.relative_to(routes_dir).as_posix()}' must be kebab-case",
                    path.stem,
                )
            routes.append(_source_file(path, routes_dir))

        static_files: List[SourceFile] = []
        if config.static_dir.is_dir():
            static_files = [_source_file(path, config.static_dir) for path in _iter_files(config.static_dir)]

        return ProjectManifest(
            root=str(root_path),
            components=components,
            routes=routes,
            static_files=static_files,
        )


__all__ = ["ProjectScanner"]
