"""Lowering of the gtml script dialect and signal placeholders to JavaScript.

Script blocks (``<script type='gtml'>``) and inline ``onEvent={...}`` handlers
use a small dialect on top of JavaScript:

* ``$name`` reads a signal, ``$name = expr`` (or ``+=`` and friends) writes
  it; a write at the top level of a script block declares the signal.
* ``#id`` and ``.class`` select one element, ``.class*`` selects all.
* ``selector.onclick(handler)`` assigns ``handler`` as the event handler.

``{name}`` placeholders naming a signal declared in the same template become
``<span data-signal-value='name'></span>`` elements kept in sync by the
runtime library.
"""

from __future__ import annotations

import re
from typing import List, Mapping, Optional, Set

from ..errors import ScriptSyntaxError
from ..logging import get_logger
from ..models import Value
from .context import CompileContext
from .scanner import is_inside_component_tag, protected_spans

SCRIPT_BLOCK_PATTERN = re.compile(
    r"<script\s+type\s*=\s*['\"]gtml['\"]\s*>(.*?)</script\s*>", re.IGNORECASE | re.DOTALL
)
INLINE_HANDLER_PATTERN = re.compile(r"(?<=\s)(on[a-zA-Z]+)\s*=\s*\{")
SIGNAL_PLACEHOLDER_PATTERN = re.compile(r"\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}")
SIGNAL_SPAN_FMT = "<span data-signal-value='{name}'></span>"

MARKER_OPEN = "\ue002"
MARKER_CLOSE = "\ue003"
_MARKER_PATTERN = re.compile(f"{MARKER_OPEN}([A-Za-z0-9_]+){MARKER_CLOSE}")

_LOOKBEHIND = r"(?<![\w$)\].'\"`])"
_BINDING = re.compile(_LOOKBEHIND + r"([#.][A-Za-z_][\w-]*)(\*?)\.(on[a-zA-Z]+)\s*\(")
_SELECTOR = re.compile(_LOOKBEHIND + r"([#.][A-Za-z_][\w-]*)(?![\w-])(\*?)(?!\s*\()")
_ASSIGNMENT = re.compile(r"(?<![\w$])\$([A-Za-z_][A-Za-z0-9_]*)\s*([-+*/%]?)=(?!=)")
_INCREMENT = re.compile(r"(?<![\w$])\$([A-Za-z_][A-Za-z0-9_]*)\s*(\+\+|--)")
_READ = re.compile(r"(?<![\w$])\$([A-Za-z_][A-Za-z0-9_]*)")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FUNCTION_LIKE = re.compile(r"(?:async\s+)?(?:function\b|\(?[\w$,\s]*\)?\s*=>)")
_QUOTES = "'\"`"

logger = get_logger("compiler.signals")


class ScriptTranslator:
    """Translates dialect source to JavaScript over the ``gtml`` runtime."""

    def __init__(self, scope: Optional[Mapping[str, Value]] = None) -> None:
        self.scope = dict(scope or {})
        self.declared: List[str] = []
        self.uses_runtime = False

    def translate(self, source: str, *, nested: bool = False) -> str:
        """Return JavaScript for ``source``.

        ``nested`` marks handler bodies and right-hand sides, where a signal
        write never declares.
        """
        output: List[str] = []
        depth = 0
        index = 0
        length = len(source)
        while index < length:
            char = source[index]
            if char in _QUOTES:
                end = _skip_string(source, index)
                output.append(source[index:end])
                index = end
                continue
            if source.startswith("//", index) or source.startswith("/*", index):
                end = _skip_comment(source, index)
                output.append(source[index:end])
                index = end
                continue

            binding = _BINDING.match(source, index)
            if binding:
                index = self._binding(source, binding, output)
                continue
            increment = _INCREMENT.match(source, index)
            if increment:
                self.uses_runtime = True
                name = increment.group(1)
                step = "+" if increment.group(2) == "++" else "-"
                output.append(f"gtml.set('{name}', gtml.get('{name}') {step} 1)")
                index = increment.end()
                continue
            assignment = _ASSIGNMENT.match(source, index)
            if assignment:
                top_level = not nested and depth == 0
                index = self._assignment(source, assignment, output, top_level=top_level)
                continue
            read = _READ.match(source, index)
            if read:
                self.uses_runtime = True
                output.append(f"gtml.get('{read.group(1)}')")
                index = read.end()
                continue
            selector = _SELECTOR.match(source, index)
            if selector:
                output.append(_query(selector.group(1), bool(selector.group(2))))
                index = selector.end()
                continue

            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            output.append(char)
            index += 1
        return "".join(output)

    def translate_handler(self, body: str) -> str:
        """Return a function expression for an inline handler body."""
        body = body.strip()
        translated = self.translate(body, nested=True)
        if _FUNCTION_LIKE.match(body):
            return translated
        return f"function(event) {{ {translated} }}"

    def _binding(self, source: str, match: re.Match[str], output: List[str]) -> int:
        open_paren = match.end() - 1
        close_paren = _matching(source, open_paren, "(", ")")
        if close_paren == -1:
            raise ScriptSyntaxError(
                f"unbalanced parentheses in {match.group(3)} binding",
                source[match.start() : match.start() + 60],
            )
        handler = self.translate(source[open_paren + 1 : close_paren], nested=True).strip()
        selector, every, event = match.group(1), bool(match.group(2)), match.group(3).lower()
        if every:
            output.append(
                f"document.querySelectorAll('{selector}').forEach(function(el) "
                f"{{ el.{event} = {handler}; }});"
            )
        else:
            output.append(f"document.querySelector('{selector}').{event} = {handler};")
        end = close_paren + 1
        cursor = end
        while cursor < len(source) and source[cursor] in " \t":
            cursor += 1
        if cursor < len(source) and source[cursor] == ";":
            end = cursor + 1
        return end

    def _assignment(
        self, source: str, match: re.Match[str], output: List[str], *, top_level: bool
    ) -> int:
        name, op = match.group(1), match.group(2)
        end = _expression_end(source, match.end())
        raw = source[match.end() : end].strip()
        if not raw:
            raise ScriptSyntaxError(f"missing value for signal '${name}'", source[match.start() : end])
        self.uses_runtime = True

        if top_level and not op and _IDENTIFIER.fullmatch(raw) and raw in self.scope:
            value = _js_literal(self.scope[raw])
        else:
            value = self.translate(raw, nested=True)
        if op:
            value = f"gtml.get('{name}') {op} ({value})"

        if top_level:
            if name not in self.declared:
                self.declared.append(name)
            output.append(f"gtml.signal('{name}', {value})")
        else:
            output.append(f"gtml.set('{name}', {value})")
        return end


class SignalCompiler:
    """Compiles the interactive parts of one template into the compile context."""

    def __init__(self, context: CompileContext) -> None:
        self.context = context

    def compile(self, html: str, scope: Optional[Mapping[str, Value]] = None) -> str:
        """Strip script blocks and inline handlers, queue their JavaScript, mark signals."""
        translator = ScriptTranslator(scope)

        def _block(match: re.Match[str]) -> str:
            source = match.group(1)
            if source.strip():
                javascript = translator.translate(source).strip()
                self.context.add_script(_wrap(javascript))
            return ""

        html = SCRIPT_BLOCK_PATTERN.sub(_block, html)
        html = self._inline_handlers(html, translator)

        if translator.uses_runtime:
            self.context.uses_signals = True
        declared = set(translator.declared)
        if declared:
            logger.debug("Declared signals: %s", ", ".join(sorted(declared)))
        return mark_signal_placeholders(html, declared)

    def _inline_handlers(self, html: str, translator: ScriptTranslator) -> str:
        parts: List[str] = []
        position = 0
        while True:
            match = INLINE_HANDLER_PATTERN.search(html, position)
            if match is None:
                break
            open_brace = match.end() - 1
            if not _in_element_tag(html, match.start()) or _within_blocks(html, match.start()):
                parts.append(html[position:match.end()])
                position = match.end()
                continue
            close_brace = _matching(html, open_brace, "{", "}")
            if close_brace == -1:
                raise ScriptSyntaxError(
                    f"unbalanced braces in inline {match.group(1)} handler",
                    html[match.start() : match.start() + 60],
                )
            event = match.group(1).lower()
            handler_id = self.context.ids.next("gtml-on")
            handler = translator.translate_handler(html[open_brace + 1 : close_brace])
            self.context.add_script(
                f"document.querySelectorAll(\"[data-gtml-{event}='{handler_id}']\")"
                f".forEach(function(el) {{ el.{event} = {handler}; }});"
            )
            parts.append(html[position : match.start()])
            parts.append(f"data-gtml-{event}='{handler_id}'")
            position = close_brace + 1
        parts.append(html[position:])
        return "".join(parts)


def mark_signal_placeholders(html: str, names: Set[str]) -> str:
    """Swap ``{name}`` for a marker token when ``name`` is a signal."""
    if not names:
        return html
    blocks = protected_spans(html)

    def _replace(match: re.Match[str]) -> str:
        start = match.start()
        if match.group(1) not in names:
            return match.group(0)
        if any(begin <= start < end for begin, end in blocks):
            return match.group(0)
        if is_inside_component_tag(html, start):
            return match.group(0)
        return f"{MARKER_OPEN}{match.group(1)}{MARKER_CLOSE}"

    return SIGNAL_PLACEHOLDER_PATTERN.sub(_replace, html)


def resolve_signal_markers(html: str) -> str:
    """Turn marker tokens into live-bound ``<span>`` elements."""
    return _MARKER_PATTERN.sub(lambda match: SIGNAL_SPAN_FMT.format(name=match.group(1)), html)


def _wrap(javascript: str) -> str:
    return f"(function() {{\n{javascript}\n}})();"


def _query(selector: str, every: bool) -> str:
    if every:
        return f"document.querySelectorAll('{selector}')"
    return f"document.querySelector('{selector}')"


def _js_literal(value: Value) -> str:
    return value.to_json().replace("</", "<\\/")


def _skip_string(source: str, start: int) -> int:
    quote = source[start]
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return len(source)


def _skip_comment(source: str, start: int) -> int:
    if source.startswith("//", start):
        end = source.find("\n", start)
        return len(source) if end == -1 else end
    end = source.find("*/", start + 2)
    return len(source) if end == -1 else end + 2


def _matching(source: str, start: int, opener: str, closer: str) -> int:
    depth = 0
    index = start
    while index < len(source):
        char = source[index]
        if char in _QUOTES:
            index = _skip_string(source, index)
            continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def _expression_end(source: str, start: int) -> int:
    """Return where the right-hand side starting at ``start`` ends."""
    depth = 0
    index = start
    while index < len(source):
        char = source[index]
        if char in _QUOTES:
            index = _skip_string(source, index)
            continue
        if char in "([{":
            depth += 1
        elif char in ")]}":
            if depth == 0:
                return index
            depth -= 1
        elif depth == 0 and char in ";\n,":
            return index
        index += 1
    return len(source)


def _in_element_tag(html: str, pos: int) -> bool:
    for index in range(pos - 1, -1, -1):
        char = html[index]
        if char == ">":
            return False
        if char == "<":
            following = html[index + 1 : index + 2]
            return following.isalpha() and not following.isupper()
    return False


def _within_blocks(html: str, pos: int) -> bool:
    return any(begin <= pos < end for begin, end in protected_spans(html))


__all__ = [
    "INLINE_HANDLER_PATTERN",
    "MARKER_CLOSE",
    "MARKER_OPEN",
    "SCRIPT_BLOCK_PATTERN",
    "ScriptTranslator",
    "SignalCompiler",
    "mark_signal_placeholders",
    "resolve_signal_markers",
]
