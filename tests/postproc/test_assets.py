"""Tests for gtml.postproc.assets."""

from __future__ import annotations

from gtml.postproc.assets import PageAssembler, stylesheet_href


def test_stylesheet_href_is_relative_to_route() -> None:
    assert stylesheet_href("index.html", "static/styles.css") == "static/styles.css"
    assert stylesheet_href("blog/post.html", "static/styles.css") == "../static/styles.css"


def test_assemble_inserts_before_closing_tags() -> None:
    html = "<html><head><title>T</title></head><body><p>x</p></body></html>"

    result = PageAssembler().assemble(html, href="static/styles.css", script="<script>go();</script>")

    assert result == (
        '<html><head><title>T</title><link rel="stylesheet" href="static/styles.css">\n</head>'
        "<body><p>x</p><script>go();</script>\n</body></html>"
    )


def test_assemble_appends_to_fragments() -> None:
    result = PageAssembler().assemble("<p>x</p>", href="s.css", script="<script>go();</script>")

    assert result == '<p>x</p>\n<link rel="stylesheet" href="s.css">\n<script>go();</script>\n'


def test_assemble_skips_existing_link_and_empty_script() -> None:
    html = '<head><link rel="stylesheet" href="s.css"></head>'

    assert PageAssembler().assemble(html, href="s.css", script="") == html
