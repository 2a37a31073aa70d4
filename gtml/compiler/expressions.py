"""Typed expression evaluation for ``{expr}`` placeholders."""

from __future__ import annotations

import operator
import re
from typing import Callable, Dict, Mapping

from ..errors import (
    DivisionByZeroError,
    MalformedExpressionError,
    ModuloByZeroError,
    TypeMismatchError,
    UndefinedVariableError,
)
from ..models import BOOLEAN, INT, STRING, Value
from .scanner import is_inside_component_tag, protected_spans

EXPRESSION_PATTERN = re.compile(r"\{([^{}]+)\}")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_LITERAL = re.compile(r"(-?)\s*([0-9]+)")
_QUOTES = "'\""
_OPERATOR_CHARS = frozenset("+-*/%<>=!&|")
_COMPARISON_ORDER = ("==", "!=", "<=", ">=", "<", ">")

_COMPARATORS: Dict[str, Callable[[object, object], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<=": operator.le,
    ">=": operator.ge,
    "<": operator.lt,
    ">": operator.gt,
}


def evaluate(expr: str, scope: Mapping[str, Value]) -> Value:
    """Evaluate a single expression against ``scope``.

    Precedence, loosest first: ``||``, ``&&``, comparisons, ``+``/``-``,
    ``*``/``/``/``%``, parentheses, literals and identifiers. Arithmetic
    operators split at their rightmost occurrence so chains associate left.
    """
    text = expr.strip()
    if not text:
        raise MalformedExpressionError("empty expression", expr)

    literal = _parse_literal(text)
    if literal is not None:
        return literal

    for logical in ("||", "&&"):
        index = _find_operator(text, logical)
        if index != -1:
            left = evaluate(text[:index], scope)
            right = evaluate(text[index + 2 :], scope)
            return _logical(logical, left, right, text)

    for comparison in _COMPARISON_ORDER:
        index = _find_operator(text, comparison)
        if index != -1:
            left = evaluate(text[:index], scope)
            right = evaluate(text[index + len(comparison) :], scope)
            return compare(left, right, comparison, text)

    for group in ("+-", "*/%"):
        index = _find_operator_rtl(text, group)
        if index != -1:
            left = evaluate(text[:index], scope)
            right = evaluate(text[index + 1 :], scope)
            return _arithmetic(text[index], left, right, text)

    if text[0] == "(" and _matching_paren(text, 0) == len(text) - 1:
        return evaluate(text[1:-1], scope)

    if _IDENTIFIER.fullmatch(text):
        try:
            return scope[text]
        except KeyError:
            raise UndefinedVariableError(f"undefined variable: {text}", text) from None

    raise MalformedExpressionError(f"invalid expression: {text}", text)


def evaluate_expressions(html: str, scope: Mapping[str, Value]) -> str:
    """Replace every plain ``{expr}`` in ``html`` with its rendered value.

    Braces inside unexpanded component tags, ``<script>``/``<style>`` blocks
    and ternary-shaped expressions are left untouched.
    """
    blocks = protected_spans(html)

    def _replace(match: re.Match[str]) -> str:
        start = match.start()
        if any(begin <= start < end for begin, end in blocks):
            return match.group(0)
        if is_inside_component_tag(html, start):
            return match.group(0)
        inner = match.group(1)
        if "?" in inner and "(" in inner:
            return match.group(0)
        return evaluate(inner, scope).render()

    return EXPRESSION_PATTERN.sub(_replace, html)


def compare(left: Value, right: Value, op: str, text: str = "") -> Value:
    """Apply a comparison operator to two values of the same type."""
    if left.type != right.type:
        raise TypeMismatchError(f"cannot compare {left.type} with {right.type}", text)
    if left.type == BOOLEAN and op not in ("==", "!="):
        raise TypeMismatchError("boolean comparison only supports == and !=", text)
    try:
        comparator = _COMPARATORS[op]
    except KeyError:
        raise MalformedExpressionError(f"unknown comparison operator: {op}", text) from None
    return Value.of_bool(comparator(left.data, right.data))


def _parse_literal(text: str) -> Value | None:
    if text == "true":
        return Value.of_bool(True)
    if text == "false":
        return Value.of_bool(False)
    quote = text[0]
    if len(text) >= 2 and quote in _QUOTES and text[-1] == quote and quote not in text[1:-1]:
        return Value.of_string(text[1:-1])
    match = _INT_LITERAL.fullmatch(text)
    if match:
        return Value.of_int(int(match.group(1) + match.group(2)))
    return None


def _logical(op: str, left: Value, right: Value, text: str) -> Value:
    if left.type != BOOLEAN or right.type != BOOLEAN:
        raise TypeMismatchError(f"{op} operator requires boolean operands", text)
    if op == "&&":
        return Value.of_bool(bool(left.data) and bool(right.data))
    return Value.of_bool(bool(left.data) or bool(right.data))


def _arithmetic(op: str, left: Value, right: Value, text: str) -> Value:
    if op == "+":
        if left.type == STRING and right.type == STRING:
            return Value.of_string(str(left.data) + str(right.data))
        if left.type == INT and right.type == INT:
            return Value.of_int(int(left.data) + int(right.data))
        raise TypeMismatchError(
            "+ operator requires matching types (string + string or int + int)", text
        )

    if left.type != INT or right.type != INT:
        raise TypeMismatchError(f"{op} operator requires int operands", text)
    a = int(left.data)
    b = int(right.data)
    if op == "-":
        return Value.of_int(a - b)
    if op == "*":
        return Value.of_int(a * b)
    if op == "/":
        if b == 0:
            raise DivisionByZeroError("division by zero", text)
        return Value.of_int(_truncated_div(a, b))
    if b == 0:
        raise ModuloByZeroError("modulo by zero", text)
    # Remainder takes the sign of the dividend, matching truncated division.
    return Value.of_int(a - b * _truncated_div(a, b))


def _truncated_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def _find_operator(text: str, op: str) -> int:
    """Return the leftmost ``op`` outside parentheses and string literals."""
    depth = 0
    quote = ""
    index = 0
    while index < len(text):
        char = text[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif depth == 0 and text.startswith(op, index):
            return index
        index += 1
    return -1


def _find_operator_rtl(text: str, ops: str) -> int:
    """Return the rightmost binary operator from ``ops`` at depth zero.

    A candidate with nothing to its left, or whose nearest non-space left
    neighbour is itself an operator character, is a sign and not a split.
    """
    depth = 0
    quote = ""
    for index in range(len(text) - 1, -1, -1):
        char = text[index]
        if quote:
            if char == quote:
                quote = ""
            continue
        if char in _QUOTES:
            quote = char
        elif char == ")":
            depth += 1
        elif char == "(":
            depth -= 1
        elif depth == 0 and char in ops:
            left = text[:index].rstrip()
            if left and left[-1] not in _OPERATOR_CHARS:
                return index
    return -1


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    quote = ""
    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


__all__ = ["EXPRESSION_PATTERN", "compare", "evaluate", "evaluate_expressions"]
