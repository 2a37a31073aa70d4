"""Lowering of declarative ``fetch=``/``for=`` markup to browser scripts."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..errors import MalformedTagError, ScriptSyntaxError
from ..logging import get_logger
from ..models import FetchElement, ForLoop
from .attributes import Attribute, tokenize_attributes
from .codegen import ScriptRenderer, default_renderer
from .context import IdGenerator
from .scanner import find_matching_close, find_tag_end, is_inside_component_tag, protected_spans

LBRACE_MARKER = "\ue000"
RBRACE_MARKER = "\ue001"

FOR_PATTERN = re.compile(
    r"\s*([A-Za-z_$][\w$]*)\s+in\s+([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*"
)

_ELEMENT_TAG = re.compile(r"<([a-z][a-zA-Z0-9-]*)(?=[\s/>])")
_ANY_TAG = re.compile(r"<([A-Za-z][\w-]*)(?=[\s/>])")
_METHOD = re.compile(r"[A-Za-z]+")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")

logger = get_logger("compiler.fetch")


def parse_fetch_attribute(value: str) -> Tuple[str, str]:
    """Split ``'METHOD URL'`` into ``(METHOD, URL)``; a bare URL means GET."""
    parts = value.split(None, 1)
    if not parts:
        raise ScriptSyntaxError("fetch attribute is empty", value)
    if len(parts) == 1:
        return "GET", parts[0]
    method, url = parts[0], parts[1].strip()
    if not _METHOD.fullmatch(method):
        raise ScriptSyntaxError(f"invalid fetch method '{method}'", value)
    return method.upper(), url


def parse_for_attribute(value: str) -> Tuple[str, str]:
    """Split ``'item in source.path'`` into ``(item, source.path)``."""
    match = FOR_PATTERN.fullmatch(value)
    if match is None:
        raise ScriptSyntaxError(
            f"invalid for attribute format '{value}' (expected 'item in source')", value
        )
    return match.group(1), match.group(2)


def protect_fetch_bodies(html: str) -> str:
    """Hide braces inside fetch elements from compile-time evaluation."""
    parts: List[str] = []
    position = 0
    for start, tag_end, close_start in _fetch_elements(html):
        if start < position:
            continue
        body_start = tag_end + 1
        parts.append(html[position:body_start])
        parts.append(_mask_braces(html, body_start, close_start))
        position = close_start
    parts.append(html[position:])
    return "".join(parts)


def restore_fetch_bodies(html: str) -> str:
    """Undo ``protect_fetch_bodies``."""
    return html.replace(LBRACE_MARKER, "{").replace(RBRACE_MARKER, "}")


class FetchCompiler:
    """Generates an element id and a fetch IIFE for every ``fetch=`` element."""

    def __init__(
        self, ids: Optional[IdGenerator] = None, renderer: Optional[ScriptRenderer] = None
    ) -> None:
        self.ids = ids or IdGenerator()
        self.renderer = renderer or default_renderer()

    def process(self, html: str) -> str:
        parts: List[str] = []
        position = 0
        while True:
            found = _next_fetch_element(html, position)
            if found is None:
                break
            match, tag_end, attrs = found
            name = match.group(1)
            head = html[match.end() : tag_end]
            if head.rstrip().endswith("/"):
                body, close_tag, end = "", f"</{name}>", tag_end + 1
            else:
                close = find_matching_close(html, name, tag_end + 1)
                if close is None:
                    raise MalformedTagError(f"missing closing tag </{name}> for fetch element", name)
                body = html[tag_end + 1 : close[0]]
                close_tag = html[close[0] : close[1]]
                end = close[1]
            parts.append(html[position : match.start()])
            parts.append(self._rewrite(name, attrs, self.process(body), close_tag))
            position = end
        parts.append(html[position:])
        return "".join(parts)

    def _rewrite(self, name: str, attrs: List[Attribute], body: str, close_tag: str) -> str:
        fetch_attr = _find(attrs, "fetch")
        as_attr = _find(attrs, "as")
        method, url = parse_fetch_attribute(fetch_attr.value or "")
        binding = (as_attr.value if as_attr is not None and as_attr.value else "data").strip()
        if not _IDENTIFIER.fullmatch(binding):
            raise ScriptSyntaxError(f"invalid fetch binding name '{binding}'", binding)

        id_attr = _find(attrs, "id")
        kept = [attr.raw for attr in attrs if attr.name not in ("fetch", "as")]
        if id_attr is not None and id_attr.value:
            element_id = id_attr.value
        else:
            element_id = self.ids.next("gtml-fetch")
            kept.insert(0, f'id="{element_id}"')

        element = FetchElement(element_id=element_id, method=method, url=url, binding=binding)
        body = self._mark_directives(body, element)
        logger.debug(
            "Fetch element #%s: %s %s as %s (%d loop(s))",
            element_id,
            method,
            url,
            binding,
            len(element.loops),
        )
        open_tag = f"<{name} {' '.join(kept)}>"
        return f"{open_tag}{body}{close_tag}\n{self.renderer.fetch_script(element)}"

    def _mark_directives(self, body: str, element: FetchElement) -> str:
        """Translate ``suspense``, ``fallback`` and ``for`` attributes in a fetch body."""
        blocks = protected_spans(body)
        parts: List[str] = []
        position = 0
        for match in _ANY_TAG.finditer(body):
            if match.start() < position or any(a <= match.start() < b for a, b in blocks):
                continue
            tag_end = find_tag_end(body, match.end())
            if tag_end == -1:
                break
            head = body[match.end() : tag_end]
            attrs = tokenize_attributes(head)
            rewritten = self._directive_attributes(attrs, element)
            if rewritten is None:
                continue
            closing = " /" if head.rstrip().endswith("/") else ""
            parts.append(body[position : match.start()])
            parts.append(f"<{match.group(1)} {' '.join(rewritten)}{closing}>")
            position = tag_end + 1
        parts.append(body[position:])
        return "".join(parts)

    def _directive_attributes(
        self, attrs: List[Attribute], element: FetchElement
    ) -> Optional[List[str]]:
        names = {attr.name for attr in attrs}
        if not names & {"suspense", "fallback", "for"}:
            return None
        hidden = False
        rewritten: List[str] = []
        for attr in attrs:
            if attr.name == "suspense" and attr.value is None:
                element.has_suspense = True
                rewritten.append("data-gtml-suspense")
            elif attr.name == "fallback" and attr.value is None:
                element.has_fallback = True
                rewritten.append("data-gtml-fallback")
                hidden = True
            elif attr.name == "for" and attr.value is not None:
                item, source = parse_for_attribute(attr.value)
                loop = ForLoop(template_id=self.ids.next("gtml-for"), item=item, source=source)
                element.loops.append(loop)
                rewritten.append(
                    f'data-gtml-for="{loop.template_id}" data-gtml-item="{loop.item}" '
                    f'data-gtml-source="{loop.source}"'
                )
                hidden = True
            else:
                rewritten.append(attr.raw)
        if hidden:
            style = _find(attrs, "style")
            if style is None or style.value is None:
                rewritten.append('style="display:none"')
            else:
                index = rewritten.index(style.raw)
                rewritten[index] = f'style="display:none;{style.value}"'
        return rewritten


def _next_fetch_element(
    html: str, start: int
) -> Optional[Tuple[re.Match[str], int, List[Attribute]]]:
    blocks = protected_spans(html)
    for match in _ELEMENT_TAG.finditer(html, start):
        if any(a <= match.start() < b for a, b in blocks):
            continue
        tag_end = find_tag_end(html, match.end())
        if tag_end == -1:
            return None
        attrs = tokenize_attributes(html[match.end() : tag_end])
        fetch_attr = _find(attrs, "fetch")
        if fetch_attr is not None and fetch_attr.value is not None:
            return match, tag_end, attrs
    return None


def _fetch_elements(html: str) -> List[Tuple[int, int, int]]:
    """Return ``(start, tag_end, close_start)`` for each outermost fetch element."""
    spans: List[Tuple[int, int, int]] = []
    position = 0
    while True:
        found = _next_fetch_element(html, position)
        if found is None:
            return spans
        match, tag_end, _ = found
        name = match.group(1)
        if html[match.end() : tag_end].rstrip().endswith("/"):
            position = tag_end + 1
            continue
        close = find_matching_close(html, name, tag_end + 1)
        if close is None:
            raise MalformedTagError(f"missing closing tag </{name}> for fetch element", name)
        spans.append((match.start(), tag_end, close[0]))
        position = close[1]


def _mask_braces(html: str, start: int, end: int) -> str:
    chars: List[str] = []
    for index in range(start, end):
        char = html[index]
        if char in "{}" and not is_inside_component_tag(html, index):
            chars.append(LBRACE_MARKER if char == "{" else RBRACE_MARKER)
        else:
            chars.append(char)
    return "".join(chars)


def _find(attrs: List[Attribute], name: str) -> Optional[Attribute]:
    for attr in attrs:
        if attr.name == name:
            return attr
    return None


__all__ = [
    "FetchCompiler",
    "LBRACE_MARKER",
    "RBRACE_MARKER",
    "parse_fetch_attribute",
    "parse_for_attribute",
    "protect_fetch_bodies",
    "restore_fetch_bodies",
]
