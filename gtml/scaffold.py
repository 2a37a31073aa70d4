"""Starter files written by ``gtml init``."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .config import CONFIG_FILENAME, PathsConfig

BASIC_BUTTON = """\
<button props='text string'>{text}</button>
"""

GUEST_LAYOUT = """\
<html props='title string'>
  <head>
    <title>{title}</title>
  </head>
  <body>
    <BasicButton text={title} />
    <slot name='content' />
  </body>
</html>
"""

INDEX_ROUTE = """\
<GuestLayout title='Some Title'>
  <slot name='content'>
    <p>Some Content</p>
  </slot>
</GuestLayout>
"""

DEFAULT_CONFIG = """\
paths:
  components: components
  routes: routes
  dist: dist
  static: static
compiler:
  strict_props: false
  max_depth: 64
  inject_assets: true
  stylesheet: styles.css
watch:
  interval: 1.0
"""


def scaffold_files(paths: PathsConfig | None = None) -> Dict[str, str]:
    """Return ``relative path -> contents`` for a fresh project."""
    paths = paths or PathsConfig()
    return {
        f"{paths.components}/BasicButton.html": BASIC_BUTTON,
        f"{paths.components}/GuestLayout.html": GUEST_LAYOUT,
        f"{paths.routes}/index.html": INDEX_ROUTE,
        CONFIG_FILENAME: DEFAULT_CONFIG,
    }


def write_scaffold(root: Path, paths: PathsConfig | None = None) -> List[Path]:
    """Create the project directories under ``root`` and write the starter files."""
    paths = paths or PathsConfig()
    for directory in (paths.components, paths.routes, paths.static, f"{paths.dist}/{paths.static}"):
        (root / directory).mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for relative, content in scaffold_files(paths).items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        written.append(target)
    return written


__all__ = ["scaffold_files", "write_scaffold"]
