"""Rendering of generated JavaScript from bundled Jinja2 templates."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable, List

from jinja2 import Environment, FileSystemLoader

from ..models import FetchElement

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


def js_string(text: str) -> str:
    """Escape ``text`` for a single-quoted JavaScript string inside HTML."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("</", "<\\/")
    )


class ScriptRenderer:
    """Renders the signal runtime, fetch scripts and page script block."""

    RUNTIME_TEMPLATE = "signal_runtime.js"
    FETCH_TEMPLATE = "fetch.js.j2"
    PAGE_TEMPLATE = "page_script.html.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories: List[str] = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(DEFAULT_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["js_string"] = js_string

    def runtime(self) -> str:
        """Return the signal runtime library source."""
        return self._render(self.RUNTIME_TEMPLATE)

    def fetch_script(self, element: FetchElement) -> str:
        """Return the ``<script>`` IIFE driving one fetch element."""
        return self._render(self.FETCH_TEMPLATE, element=element)

    def page_script(self, snippets: Iterable[str], *, uses_signals: bool) -> str:
        """Return the page-level ``<script>`` block, or ``""`` when there is nothing to run."""
        snippets = list(snippets)
        if not snippets and not uses_signals:
            return ""
        return self._render(self.PAGE_TEMPLATE, snippets=snippets, uses_signals=uses_signals)

    def _render(self, name: str, **context: object) -> str:
        return self._env.get_template(name).render(**context).strip()


@lru_cache(maxsize=None)
def default_renderer() -> ScriptRenderer:
    """Return a shared renderer over the bundled templates."""
    return ScriptRenderer()


__all__ = ["DEFAULT_TEMPLATES_DIR", "ScriptRenderer", "default_renderer", "js_string"]
