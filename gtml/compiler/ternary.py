"""Rewriting of ``{ cond ? (A) : (B) }`` conditionals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..errors import MalformedTernaryError, TypeMismatchError
from ..models import BOOLEAN, Value
from .expressions import evaluate
from .scanner import protected_spans


@dataclass(frozen=True)
class Ternary:
    """Parsed conditional spanning ``html[start:end]``."""

    start: int
    end: int
    condition: str
    truthy: str
    falsy: str


def rewrite_ternaries(html: str, scope: Mapping[str, Value]) -> str:
    """Replace every conditional in ``html`` with its chosen branch.

    The chosen branch is rewritten recursively before it is spliced in, and
    scanning restarts from the beginning of the modified text.
    """
    result = html
    while True:
        start = find_ternary_start(result)
        if start == -1:
            return result
        ternary = parse_ternary(result, start)
        condition = evaluate(ternary.condition, scope)
        if condition.type != BOOLEAN:
            raise TypeMismatchError(
                f"ternary condition '{ternary.condition}' must evaluate to boolean, "
                f"got {condition.type}",
                ternary.condition,
            )
        branch = ternary.truthy if condition.data else ternary.falsy
        replacement = rewrite_ternaries(branch, scope)
        result = result[: ternary.start] + replacement + result[ternary.end :]


def find_ternary_start(html: str) -> int:
    """Return the index of the first ``{`` that opens a conditional, or -1.

    A brace opens a conditional when its own level holds a ``?`` that is
    later followed by ``(``. Braces inside script and style blocks are ignored.
    """
    blocks = protected_spans(html)
    for index, char in enumerate(html):
        if char != "{" or any(begin <= index < end for begin, end in blocks):
            continue
        depth = 1
        seen_question = False
        for cursor in range(index + 1, len(html)):
            current = html[cursor]
            if current == "{":
                depth += 1
            elif current == "}":
                depth -= 1
                if depth == 0:
                    break
            elif depth == 1:
                if current == "?":
                    seen_question = True
                elif current == "(" and seen_question:
                    return index
    return -1


def parse_ternary(html: str, pos: int) -> Ternary:
    """Parse the conditional whose opening brace sits at ``pos``."""
    if html[pos] != "{":
        raise MalformedTernaryError(f"expected '{{' at position {pos}", html[pos : pos + 40])

    question = -1
    depth = 0
    quote = ""
    for index in range(pos + 1, len(html)):
        char = html[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "?" and depth == 0:
            question = index
            break
        elif char == "}" and depth == 0:
            raise MalformedTernaryError("malformed ternary, missing '?'", html[pos : index + 1])
    if question == -1:
        raise MalformedTernaryError("missing '?' in ternary expression", html[pos:])

    condition = html[pos + 1 : question].strip()
    snippet = html[pos : pos + 80]

    truthy_start = _expect(html, question + 1, "(", "expected '(' after '?' in ternary", snippet)
    truthy_end = _matching_paren(html, truthy_start)
    if truthy_end == -1:
        raise MalformedTernaryError("unbalanced parentheses in truthy branch", snippet)

    colon = _expect(html, truthy_end + 1, ":", "expected ':' after truthy branch", snippet)

    falsy_start = _expect(html, colon + 1, "(", "expected '(' after ':' in ternary", snippet)
    falsy_end = _matching_paren(html, falsy_start)
    if falsy_end == -1:
        raise MalformedTernaryError("unbalanced parentheses in falsy branch", snippet)

    closing = _expect(html, falsy_end + 1, "}", "expected '}' after falsy branch", snippet)

    return Ternary(
        start=pos,
        end=closing + 1,
        condition=condition,
        truthy=html[truthy_start + 1 : truthy_end],
        falsy=html[falsy_start + 1 : falsy_end],
    )


def _expect(html: str, pos: int, token: str, message: str, snippet: str) -> int:
    """Return the index of ``token`` at ``pos`` after optional whitespace."""
    for index in range(pos, len(html)):
        char = html[index]
        if char == token:
            return index
        if not char.isspace():
            raise MalformedTernaryError(message, snippet)
    raise MalformedTernaryError(f"missing '{token}' in ternary expression", snippet)


def _matching_paren(html: str, start: int) -> int:
    depth = 0
    for index in range(start, len(html)):
        char = html[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


__all__ = ["Ternary", "find_ternary_start", "parse_ternary", "rewrite_ternaries"]
