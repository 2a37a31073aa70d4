"""Component loading helpers: scoped CSS, scope ids, root and naming checks."""

from __future__ import annotations

import re
from typing import List, Tuple

from .scanner import find_matching_close, find_tag_end

STYLE_BLOCK_PATTERN = re.compile(r"<style\b[^>]*>(.*?)</style\s*>", re.IGNORECASE | re.DOTALL)
PASCAL_CASE_PATTERN = re.compile(r"[A-Z][a-zA-Z0-9]*")
KEBAB_CASE_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_OPEN_TAG = re.compile(r"<([a-zA-Z][\w-]*)")
_NESTED_AT_RULES = {"media", "supports", "container", "layer", "document"}
_VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}


def scope_id_for(name: str) -> str:
    """Return the attribute name that scopes a component's CSS."""
    return "data-" + name.lower()


def is_pascal_case(name: str) -> bool:
    return bool(PASCAL_CASE_PATTERN.fullmatch(name))


def is_kebab_case(name: str) -> bool:
    return bool(KEBAB_CASE_PATTERN.fullmatch(name))


def process_component_styles(raw: str, scope_id: str) -> Tuple[str, str]:
    """Remove ``<style>`` blocks from ``raw`` and return ``(template, scoped_css)``."""
    blocks: List[str] = []

    def _collect(match: re.Match[str]) -> str:
        blocks.append(match.group(1))
        return ""

    template = STYLE_BLOCK_PATTERN.sub(_collect, raw).strip()
    css = "".join(scope_css(block, scope_id) for block in blocks)
    return template, css


def scope_css(css: str, scope_id: str) -> str:
    """Scope every top-level selector of ``css`` to ``scope_id``.

    Each selector ``s`` becomes ``s[scope], [scope] s`` so it matches the
    component root and its descendants. Rules nested in ``@media``-style
    blocks are scoped the same way; other at-rules pass through unchanged.
    """
    css = _CSS_COMMENT.sub("", css)
    output: List[str] = []
    index = 0
    while True:
        open_brace = css.find("{", index)
        if open_brace == -1:
            break
        close_brace = _matching_brace(css, open_brace)
        prelude = css[index:open_brace].strip()
        body = css[open_brace + 1 : close_brace]
        index = close_brace + 1
        if not prelude:
            continue
        if prelude.startswith("@"):
            keyword = prelude[1:].split(None, 1)[0].lower() if len(prelude) > 1 else ""
            if keyword in _NESTED_AT_RULES and "{" in body:
                output.append(f"{prelude} {{\n{scope_css(body, scope_id)}}}\n")
            else:
                output.append(f"{prelude} {{{body}}}\n")
            continue
        selectors = [selector.strip() for selector in prelude.split(",") if selector.strip()]
        scoped = ", ".join(
            f"{_attach_scope(selector, scope_id)}, [{scope_id}] {selector}" for selector in selectors
        )
        output.append(f"{scoped} {{{body}}}\n")
    return "".join(output)


def inject_scope_id(html: str, scope_id: str) -> str:
    """Add ``scope_id=""`` to the root element's opening tag."""
    for match in _OPEN_TAG.finditer(html):
        if _inside(match.start(), _COMMENT, html):
            continue
        if match.group(1).lower() == "script":
            continue
        insert_at = match.end()
        return f'{html[:insert_at]} {scope_id}=""{html[insert_at:]}'
    return html


def has_single_root(html: str) -> bool:
    """Return True when ``html`` is exactly one element.

    Comments, surrounding whitespace and top-level ``<script>`` blocks are
    ignored.
    """
    text = _SCRIPT_BLOCK.sub("", _COMMENT.sub("", html)).strip()
    match = _OPEN_TAG.match(text)
    if match is None:
        return False
    name = match.group(1)
    tag_end = find_tag_end(text, match.end())
    if tag_end == -1:
        return False
    if text[match.end() : tag_end].rstrip().endswith("/") or name.lower() in _VOID_ELEMENTS:
        root_end = tag_end + 1
    else:
        close = find_matching_close(text, name, tag_end + 1)
        if close is None:
            return False
        root_end = close[1]
    return not text[root_end:].strip()


def _attach_scope(selector: str, scope_id: str) -> str:
    """Append ``[scope_id]`` to the last compound selector, before any pseudo part."""
    depth = 0
    compound_start = 0
    for index, char in enumerate(selector):
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        elif depth == 0 and char in " >+~":
            compound_start = index + 1
    depth = 0
    for index in range(compound_start, len(selector)):
        char = selector[index]
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        elif depth == 0 and char == ":":
            return f"{selector[:index]}[{scope_id}]{selector[index:]}"
    return f"{selector}[{scope_id}]"


def _matching_brace(css: str, start: int) -> int:
    depth = 0
    for index in range(start, len(css)):
        if css[index] == "{":
            depth += 1
        elif css[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(css)


def _inside(pos: int, pattern: re.Pattern[str], html: str) -> bool:
    return any(match.start() <= pos < match.end() for match in pattern.finditer(html))


__all__ = [
    "STYLE_BLOCK_PATTERN",
    "has_single_root",
    "inject_scope_id",
    "is_kebab_case",
    "is_pascal_case",
    "process_component_styles",
    "scope_css",
    "scope_id_for",
]
