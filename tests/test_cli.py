"""CLI parser and entrypoint tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest

from gtml.cli import _build_parser, main
from gtml.orchestrator import Orchestrator
from tests._fixtures.project_builder import ProjectBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "compile"])
    assert args.verbose is True
    assert args.command == "compile"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["compile", "site", "--verbose"])
    assert args.verbose is True
    assert args.path == "site"


def test_cli_accepts_watch_and_force_flags() -> None:
    parser = _build_parser()
    assert parser.parse_args(["compile", "--watch"]).watch is True
    assert parser.parse_args(["init", "site", "--force"]).force is True


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_main_init_and_compile(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = tmp_path / "site"

    main(["init", str(root)])
    main(["compile", str(root)])

    out = capsys.readouterr().out
    assert "Project created at" in out
    assert "Compiled 1 route(s) from 2 component(s)" in out
    assert (root / "dist" / "index.html").exists()


def test_main_init_existing_directory_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["init", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "already exists" in capsys.readouterr().err


def test_main_compile_failure_exits_with_source(
    project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    project_builder.route("index.html", "<Missing />")

    with pytest.raises(SystemExit) as excinfo:
        main(["compile", str(project_builder.path())])

    assert excinfo.value.code == 1
    assert "Compilation failed: routes/index.html: " in capsys.readouterr().err


def test_main_watch_dispatches_to_orchestrator(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: List[Any] = []
    monkeypatch.setattr(Orchestrator, "run_watch", lambda self, path: calls.append(path))

    main(["watch", str(tmp_path)])
    main(["compile", str(tmp_path), "--watch"])

    assert calls == [str(tmp_path), str(tmp_path)]


def test_main_compile_reports_dist_for_nested_stylesheet(
    project_builder: ProjectBuilder,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project_builder.write({".gtml.yml": "compiler:\n  stylesheet: css/site.css\n"})
    project_builder.route("index.html", "<p>hi</p>")
    monkeypatch.chdir(project_builder.path())

    main(["compile", "."])

    assert capsys.readouterr().out.strip() == "Compiled 1 route(s) from 0 component(s) into dist"
    assert (project_builder.path() / "dist" / "static" / "css" / "site.css").exists()
