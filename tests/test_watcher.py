"""Tests for gtml.watcher."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from gtml.errors import ComponentNotFoundError
from gtml.watcher import ProjectWatcher


def _touch(path: Path, content: str, mtime_ns: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.utime(path, ns=(mtime_ns, mtime_ns))


def test_poll_once_rebuilds_only_on_change(tmp_path: Path) -> None:
    builds: List[int] = []
    _touch(tmp_path / "routes/index.html", "<p>a</p>", 1_000_000_000)
    watcher = ProjectWatcher(tmp_path, lambda: builds.append(1), ignore=tmp_path / "dist")

    assert watcher.start() is True
    assert watcher.poll_once() is False

    _touch(tmp_path / "routes/index.html", "<p>b</p>", 2_000_000_000)
    assert watcher.poll_once() is True
    assert len(builds) == 2


def test_ignored_directory_does_not_trigger(tmp_path: Path) -> None:
    builds: List[int] = []
    _touch(tmp_path / "routes/index.html", "<p>a</p>", 1_000_000_000)
    watcher = ProjectWatcher(tmp_path, lambda: builds.append(1), ignore=tmp_path / "dist")
    watcher.start()

    _touch(tmp_path / "dist/index.html", "<p>out</p>", 3_000_000_000)

    assert watcher.poll_once() is False
    assert len(builds) == 1


def test_build_errors_are_logged_and_watching_continues(tmp_path: Path) -> None:
    calls: List[int] = []

    def _build() -> None:
        calls.append(1)
        raise ComponentNotFoundError("component 'Nope' not found", "Nope")

    _touch(tmp_path / "routes/index.html", "<Nope />", 1_000_000_000)
    sleeps: List[float] = []
    watcher = ProjectWatcher(tmp_path, _build, interval=0.5, sleep=sleeps.append)

    watcher.run(max_polls=3)

    assert calls == [1]
    assert sleeps == [0.5, 0.5, 0.5]


def test_run_stops_on_keyboard_interrupt(tmp_path: Path) -> None:
    def _sleep(_: float) -> None:
        raise KeyboardInterrupt

    watcher = ProjectWatcher(tmp_path, lambda: None, sleep=_sleep)

    watcher.run()
