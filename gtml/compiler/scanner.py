"""Heuristic tag scanning for component references.

This is a restricted grammar, not an HTML parser: a component tag is any
``<Name`` where ``Name`` matches ``[A-Z][a-zA-Z0-9]*``. Attribute values may
contain quoted strings and ``{...}`` expressions, both of which are skipped
when looking for the closing ``>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..errors import MalformedTagError
from ..logging import get_logger

COMPONENT_TAG_PATTERN = re.compile(r"</?([A-Z][a-zA-Z0-9]*)")

_PROTECTED_BLOCK = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_BOUNDARY = frozenset(" \t\r\n/>")

logger = get_logger("compiler.scanner")


@dataclass(frozen=True)
class ComponentTag:
    """Location and parts of one component reference in a document."""

    start: int
    end: int
    name: str
    self_closing: bool
    attrs: str
    inner: str


def find_next_component_tag(html: str, start: int = 0) -> Optional[ComponentTag]:
    """Return the first component tag at or after ``start``, or ``None``.

    Closing tags with no open tag before them are skipped, since the scanner
    runs on fragments. A tag whose ``>`` or matching close is missing raises
    ``MalformedTagError`` instead of silently ending the scan.
    """
    blocks = protected_spans(html)
    search = start
    while True:
        match = COMPONENT_TAG_PATTERN.search(html, search)
        if match is None:
            return None
        search = match.end()
        if _within(match.start(), blocks):
            continue
        name = match.group(1)
        if match.group(0).startswith("</"):
            logger.debug("Skipping dangling closing tag </%s> at offset %d", name, match.start())
            continue
        if match.end() < len(html) and html[match.end()] not in _TAG_BOUNDARY:
            continue

        tag_end = find_tag_end(html, match.end())
        if tag_end == -1:
            raise MalformedTagError(
                f"component tag <{name}> is never closed with '>'",
                html[match.start() : match.start() + 80],
            )
        head = html[match.end() : tag_end].rstrip()
        if head.endswith("/"):
            return ComponentTag(
                start=match.start(),
                end=tag_end + 1,
                name=name,
                self_closing=True,
                attrs=head[:-1].strip(),
                inner="",
            )

        close = find_matching_close(html, name, tag_end + 1)
        if close is None:
            raise MalformedTagError(f"missing closing tag </{name}>", name)
        close_start, close_end = close
        return ComponentTag(
            start=match.start(),
            end=close_end,
            name=name,
            self_closing=False,
            attrs=head.strip(),
            inner=html[tag_end + 1 : close_start],
        )


def find_matching_close(html: str, name: str, pos: int) -> Optional[Tuple[int, int]]:
    """Return the span of the ``</name>`` matching an open tag ending before ``pos``.

    Same-named nested open tags raise the depth; nested self-closing ones do not.
    """
    pattern = re.compile(r"<(/?)" + re.escape(name) + r"(?=[\s/>])")
    blocks = protected_spans(html)
    depth = 1
    for match in pattern.finditer(html, pos):
        if _within(match.start(), blocks):
            continue
        if match.group(1):
            end = html.find(">", match.end())
            if end == -1:
                return None
            depth -= 1
            if depth == 0:
                return match.start(), end + 1
            continue
        tag_end = find_tag_end(html, match.end())
        if tag_end == -1:
            return None
        if html[match.end() : tag_end].rstrip().endswith("/"):
            continue
        depth += 1
    return None


def find_tag_end(html: str, pos: int) -> int:
    """Return the index of the ``>`` ending the tag whose attributes start at ``pos``."""
    quote = ""
    depth = 0
    for index in range(pos, len(html)):
        char = html[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == ">" and depth == 0:
            return index
    return -1


def is_inside_component_tag(html: str, pos: int) -> bool:
    """Return True when ``pos`` lies within an open ``<Pascal ...`` tag."""
    for index in range(pos - 1, -1, -1):
        char = html[index]
        if char == ">":
            return False
        if char == "<":
            return index + 1 < len(html) and html[index + 1].isupper()
    return False


def protected_spans(html: str) -> List[Tuple[int, int]]:
    """Return ``(start, end)`` spans of every ``<script>`` and ``<style>`` block."""
    return [match.span() for match in _PROTECTED_BLOCK.finditer(html)]


def _within(pos: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


__all__ = [
    "COMPONENT_TAG_PATTERN",
    "ComponentTag",
    "find_matching_close",
    "find_next_component_tag",
    "find_tag_end",
    "is_inside_component_tag",
    "protected_spans",
]
