"""Tests for gtml.scaffold."""

from __future__ import annotations

from pathlib import Path

from gtml.compiler.registry import ComponentRegistry
from gtml.compiler.resolver import compile_html
from gtml.config import PathsConfig, load_config
from gtml.scaffold import scaffold_files, write_scaffold


def test_write_scaffold_creates_layout(tmp_path: Path) -> None:
    written = write_scaffold(tmp_path)

    for directory in ("components", "routes", "static", "dist/static"):
        assert (tmp_path / directory).is_dir()
    assert sorted(path.relative_to(tmp_path).as_posix() for path in written) == [
        ".gtml.yml",
        "components/BasicButton.html",
        "components/GuestLayout.html",
        "routes/index.html",
    ]
    assert load_config(tmp_path).compiler.stylesheet == "styles.css"


def test_scaffold_respects_custom_paths() -> None:
    files = scaffold_files(PathsConfig(components="ui", routes="pages"))

    assert "ui/BasicButton.html" in files
    assert "pages/index.html" in files


def test_scaffold_templates_compile() -> None:
    files = scaffold_files()
    registry = ComponentRegistry.from_sources(
        {
            "BasicButton": files["components/BasicButton.html"],
            "GuestLayout": files["components/GuestLayout.html"],
        },
        inject_scope=False,
    )

    html = compile_html(files["routes/index.html"], registry)

    assert "<title>Some Title</title>" in html
    assert "<button>Some Title</button>" in html
    assert "<p>Some Content</p>" in html
    assert "<slot" not in html
