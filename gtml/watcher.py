"""Polling file watcher that recompiles a project when its sources change."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from .logging import get_logger

Fingerprint = Dict[str, int]


class ProjectWatcher:
    """Recompiles a project whenever a file's mtime changes.

    ``build`` is called with no arguments; its compile and I/O failures are
    logged so a broken edit does not stop the watch loop.
    """

    def __init__(
        self,
        root: Path,
        build: Callable[[], object],
        *,
        interval: float = 1.0,
        ignore: Optional[Path] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.root = root
        self.build = build
        self.interval = interval
        self.ignore = ignore.resolve() if ignore is not None else None
        self._sleep = sleep
        self._fingerprint: Fingerprint = {}
        self.logger = get_logger("watcher")

    def fingerprint(self) -> Fingerprint:
        """Return ``relative path -> mtime_ns`` for every watched file."""
        snapshot: Fingerprint = {}
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            if self.ignore is not None:
                dirnames[:] = [name for name in dirnames if (current / name).resolve() != self.ignore]
            for filename in filenames:
                path = current / filename
                try:
                    snapshot[path.relative_to(self.root).as_posix()] = path.stat().st_mtime_ns
                except FileNotFoundError:
                    continue
        return snapshot

    def start(self) -> bool:
        """Record the initial fingerprint and build once."""
        self._fingerprint = self.fingerprint()
        return self._rebuild()

    def poll_once(self) -> bool:
        """Rebuild if anything changed since the last poll; return whether it did."""
        current = self.fingerprint()
        if current == self._fingerprint:
            return False
        self._fingerprint = current
        self.logger.info("Change detected in %s, recompiling", self.root)
        self._rebuild()
        return True

    def run(self, max_polls: Optional[int] = None) -> None:
        """Build, then poll every ``interval`` seconds until interrupted."""
        self.logger.info("Watching %s for changes", self.root)
        self.start()
        polls = 0
        try:
            while max_polls is None or polls < max_polls:
                self._sleep(self.interval)
                self.poll_once()
                polls += 1
        except KeyboardInterrupt:
            self.logger.info("Stopped watching %s", self.root)

    def _rebuild(self) -> bool:
        try:
            self.build()
        except (RuntimeError, OSError) as exc:
            self.logger.error("Compilation failed: %s", exc)
            return False
        self.logger.info("Built successfully")
        return True


__all__ = ["ProjectWatcher"]
