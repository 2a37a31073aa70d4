"""Tests for gtml.compiler.slots."""

from __future__ import annotations

from gtml.compiler.slots import extract_slot_usages, inject_slots, normalize_slot_markers


def test_extract_wraps_fill_in_requested_tag() -> None:
    children = (
        "<slot name='header' tag='header' class='top'><h1>Hi</h1></slot>\n"
        "<slot name=\"body\">plain text</slot>"
    )

    assert extract_slot_usages(children) == {
        "header": "<header class='top'><h1>Hi</h1></header>",
        "body": "plain text",
    }


def test_extract_ignores_fills_without_name() -> None:
    assert extract_slot_usages("<slot tag='div'>lost</slot>") == {}


def test_extract_ignores_placeholders() -> None:
    assert extract_slot_usages("<slot name='content' />") == {}


def test_inject_replaces_placeholders_and_clears_unfilled() -> None:
    template = "<div><slot name='header' /><main><slot name=\"body\"/></main><slot name='footer' /></div>"

    result = inject_slots(template, {"header": "<h1>T</h1>", "body": "<p>B</p>"})

    assert result == "<div><h1>T</h1><main><p>B</p></main></div>"


def test_legacy_slot_markers_are_normalized() -> None:
    assert normalize_slot_markers("<div>{{ slot: content }}</div>") == "<div><slot name='content' /></div>"
    assert inject_slots("<div>{{slot:content}}</div>", {"content": "x"}) == "<div>x</div>"


def test_extract_keeps_original_attribute_quoting() -> None:
    children = "<slot name='quote' tag='blockquote' title=\"it's\" hidden>Hi</slot>"

    assert extract_slot_usages(children) == {
        "quote": "<blockquote title=\"it's\" hidden>Hi</blockquote>",
    }
