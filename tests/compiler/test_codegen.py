"""Tests for gtml.compiler.codegen."""

from __future__ import annotations

from pathlib import Path

from gtml.compiler.codegen import ScriptRenderer, js_string
from gtml.models import FetchElement, ForLoop


def test_js_string_escapes_quotes_and_script_close() -> None:
    assert js_string("it's\n</script>\\") == "it\\'s\\n<\\/script>\\\\"


def test_page_script_is_empty_without_work() -> None:
    assert ScriptRenderer().page_script([], uses_signals=False) == ""


def test_page_script_orders_runtime_snippets_and_bind() -> None:
    script = ScriptRenderer().page_script(["first();", "second();"], uses_signals=True)

    assert script.startswith("<script>")
    assert script.endswith("</script>")
    runtime = script.index("window.gtml")
    assert runtime < script.index("first();") < script.index("second();")
    assert script.index("second();") < script.index("gtml.bind(document);")


def test_page_script_without_signals_skips_runtime() -> None:
    script = ScriptRenderer().page_script(["first();"], uses_signals=False)

    assert "window.gtml" not in script
    assert "gtml.bind" not in script
    assert "first();" in script


def test_fetch_script_renders_loops() -> None:
    element = FetchElement(
        element_id="feed",
        method="GET",
        url="/api/it's",
        binding="posts",
        loops=[ForLoop(template_id="gtml-for-1", item="post", source="posts")],
    )

    script = ScriptRenderer().fetch_script(element)

    assert "fetch('/api/it\\'s', { method: 'GET' })" in script
    assert "scope['posts'] = posts;" in script
    assert "processForLoops(root, scope);" in script


def test_templates_dir_overrides_bundled_templates(tmp_path: Path) -> None:
    (tmp_path / "page_script.html.j2").write_text(
        "<script>/* custom */{{ snippets | join(' ') }}</script>", encoding="utf-8"
    )

    script = ScriptRenderer(tmp_path).page_script(["a();", "b();"], uses_signals=True)

    assert script == "<script>/* custom */a(); b();</script>"
