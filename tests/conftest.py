from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator, Mapping

import pytest

from gtml.compiler.registry import ComponentRegistry
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture(autouse=True)
def _reset_gtml_logging() -> Iterator[None]:
    """Drop handlers installed by CLI runs so later tests do not write to closed streams."""
    yield
    logger = logging.getLogger("gtml")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def make_registry() -> Callable[[Mapping[str, str]], ComponentRegistry]:
    """Build a registry from `name -> template` sources without scope injection."""

    def _make(sources: Mapping[str, str]) -> ComponentRegistry:
        return ComponentRegistry.from_sources(sources, inject_scope=False)

    return _make
