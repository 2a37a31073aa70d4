"""Tests for gtml.compiler.ternary."""

from __future__ import annotations

import pytest

from gtml.compiler.ternary import find_ternary_start, parse_ternary, rewrite_ternaries
from gtml.errors import MalformedTernaryError, TypeMismatchError
from gtml.models import Value

TEMPLATE = "<div>{ age >= 18 ? (<p>Adult</p>) : (<p>Minor</p>) }</div>"


def test_rewrite_picks_truthy_branch() -> None:
    assert rewrite_ternaries(TEMPLATE, {"age": Value.of_int(21)}) == "<div><p>Adult</p></div>"


def test_rewrite_picks_falsy_branch() -> None:
    assert rewrite_ternaries(TEMPLATE, {"age": Value.of_int(15)}) == "<div><p>Minor</p></div>"


def test_rewrite_resolves_nested_ternaries() -> None:
    html = "{a ? ({b ? (<i>both</i>) : (<i>only a</i>)}) : (<i>none</i>)}"
    scope = {"a": Value.of_bool(True), "b": Value.of_bool(False)}

    assert rewrite_ternaries(html, scope) == "<i>only a</i>"


def test_rewrite_handles_consecutive_ternaries() -> None:
    html = "{on ? (A) : (B)}-{on ? (C) : (D)}"

    assert rewrite_ternaries(html, {"on": Value.of_bool(False)}) == "B-D"


def test_rewrite_leaves_plain_expressions() -> None:
    html = "<p>{name}</p>"

    assert rewrite_ternaries(html, {}) == html


def test_rewrite_requires_boolean_condition() -> None:
    with pytest.raises(TypeMismatchError, match="must evaluate to boolean"):
        rewrite_ternaries("{ age ? (a) : (b) }", {"age": Value.of_int(3)})


def test_find_ternary_start_ignores_script_blocks() -> None:
    html = "<script>var t = {x ? (1) : (2)};</script>"

    assert find_ternary_start(html) == -1


def test_parse_ternary_extracts_parts() -> None:
    ternary = parse_ternary("x {ok ? (yes) : (no)} y", 2)

    assert ternary.condition == "ok"
    assert ternary.truthy == "yes"
    assert ternary.falsy == "no"
    assert (ternary.start, ternary.end) == (2, 21)


@pytest.mark.parametrize(
    ("html", "message"),
    [
        ("{ ok ? a : (b) }", "expected '\\(' after '\\?'"),
        ("{ ok ? (a) (b) }", "expected ':' after truthy branch"),
        ("{ ok ? (a) : b }", "expected '\\(' after ':'"),
        ("{ ok ? (a) : (b) x}", "expected '}' after falsy branch"),
        ("{ ok ? (a : (b) }", "unbalanced parentheses in truthy branch"),
    ],
)
def test_parse_ternary_reports_malformed_input(html: str, message: str) -> None:
    with pytest.raises(MalformedTernaryError, match=message):
        parse_ternary(html, 0)
