"""Stylesheet link and page script injection for compiled routes."""

from __future__ import annotations

import posixpath
import re

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)


def stylesheet_href(route: str, stylesheet: str) -> str:
    """Return the href from dist-relative ``route`` to dist-relative ``stylesheet``."""
    start = posixpath.dirname(route) or "."
    return posixpath.relpath(stylesheet, start=start)


class PageAssembler:
    """Adds the shared stylesheet and the page script to a compiled route."""

    LINK_FMT = '<link rel="stylesheet" href="{href}">'

    def assemble(self, html: str, *, href: str | None = None, script: str = "") -> str:
        """Insert the link before ``</head>`` and the script before ``</body>``.

        Either is appended to the document when its closing tag is absent.
        """
        if href and href not in html:
            html = self._insert_before(html, _HEAD_CLOSE, self.LINK_FMT.format(href=href))
        if script:
            html = self._insert_before(html, _BODY_CLOSE, script)
        return html

    @staticmethod
    def _insert_before(html: str, pattern: re.Pattern[str], snippet: str) -> str:
        matches = list(pattern.finditer(html))
        if not matches:
            separator = "" if not html or html.endswith("\n") else "\n"
            return f"{html}{separator}{snippet}\n"
        index = matches[-1].start()
        return f"{html[:index]}{snippet}\n{html[index:]}"


__all__ = ["PageAssembler", "stylesheet_href"]
