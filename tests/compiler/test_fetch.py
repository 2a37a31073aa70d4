"""Tests for gtml.compiler.fetch."""

from __future__ import annotations

import pytest

from gtml.compiler.context import IdGenerator
from gtml.compiler.fetch import (
    FetchCompiler,
    parse_fetch_attribute,
    parse_for_attribute,
    protect_fetch_bodies,
    restore_fetch_bodies,
)
from gtml.compiler.registry import ComponentRegistry
from gtml.compiler.resolver import compile_html
from gtml.errors import MalformedTagError, ScriptSyntaxError


def _lower(html: str) -> str:
    return FetchCompiler(IdGenerator()).process(html)


USERS = (
    '<div fetch="GET /api/users" as="users">'
    "<p suspense>Loading...</p>"
    "<p fallback>Failed</p>"
    '<ul><li for="user in users">{user.name}</li></ul>'
    "</div>"
)


def test_parse_fetch_attribute() -> None:
    assert parse_fetch_attribute("post /api/items") == ("POST", "/api/items")
    assert parse_fetch_attribute("/api/items") == ("GET", "/api/items")
    with pytest.raises(ScriptSyntaxError, match="fetch attribute is empty"):
        parse_fetch_attribute("  ")
    with pytest.raises(ScriptSyntaxError, match="invalid fetch method"):
        parse_fetch_attribute("GET2 /api")


def test_parse_for_attribute() -> None:
    assert parse_for_attribute("item in data.items") == ("item", "data.items")
    with pytest.raises(ScriptSyntaxError, match="expected 'item in source'"):
        parse_for_attribute("users")


def test_fetch_element_is_rewritten_with_directives() -> None:
    html = _lower(USERS)

    markup, script = html.split("\n", 1)
    assert markup == (
        '<div id="gtml-fetch-1">'
        "<p data-gtml-suspense>Loading...</p>"
        '<p data-gtml-fallback style="display:none">Failed</p>'
        '<ul><li data-gtml-for="gtml-for-1" data-gtml-item="user" '
        'data-gtml-source="users" style="display:none">{user.name}</li></ul>'
        "</div>"
    )
    assert script.startswith("<script>")
    assert script.endswith("</script>")
    assert "document.getElementById('gtml-fetch-1')" in script
    assert "fetch('/api/users', { method: 'GET' })" in script
    assert "if (!response.ok) throw new Error" in script
    assert ".then(users => {" in script
    assert "suspense.remove();" in script
    assert "processForLoops(root, scope);" in script
    assert "fallback.style.display = '';" in script
    assert "console.error('Fetch error:', error);" in script


def test_existing_id_and_default_binding_are_used() -> None:
    html = _lower('<section id="feed" class="x" fetch="POST /api/feed"><p>{data.title}</p></section>')

    assert html.startswith('<section id="feed" class="x"><p>{data.title}</p></section>\n<script>')
    assert "fetch('/api/feed', { method: 'POST' })" in html
    assert ".then(data => {" in html
    assert "processForLoops(root, scope);" not in html


def test_hidden_directives_merge_existing_style() -> None:
    html = _lower('<div fetch="/x"><p fallback style="color:red">oops</p></div>')

    assert '<p data-gtml-fallback style="display:none;color:red">oops</p>' in html


def test_ids_are_unique_within_a_page() -> None:
    compiler = FetchCompiler(IdGenerator())

    html = compiler.process('<div fetch="/a"></div><div fetch="/b"></div>')

    assert 'id="gtml-fetch-1"' in html
    assert 'id="gtml-fetch-2"' in html


def test_invalid_for_attribute_raises() -> None:
    with pytest.raises(ScriptSyntaxError, match="invalid for attribute format"):
        _lower('<div fetch="/x"><li for="users">{u}</li></div>')


def test_unclosed_fetch_element_raises() -> None:
    with pytest.raises(MalformedTagError, match="missing closing tag </div>"):
        _lower('<div fetch="/x"><p>never closed</p>')


def test_protect_masks_only_fetch_bodies() -> None:
    html = '<p>{a}</p><div fetch="/x">{b}<Card t={c} /></div>'

    protected = protect_fetch_bodies(html)

    assert protected.startswith('<p>{a}</p><div fetch="/x">')
    assert "{b}" not in protected
    assert "<Card t={c} />" in protected
    assert restore_fetch_bodies(protected) == html


def test_fetch_bodies_survive_compilation() -> None:
    registry = ComponentRegistry()
    html = '<main><ul fetch="/api/items" as="items"><li for="item in items">{item.title}</li></ul></main>'

    result = compile_html(html, registry)

    assert result.startswith('<main><ul id="gtml-fetch-1"><li data-gtml-for="gtml-for-1"')
    assert "{item.title}</li></ul>\n<script>" in result
    assert result.endswith("</script></main>")
