"""Recursive component expansion, the entry point of the compiler core."""

from __future__ import annotations

from typing import List, Mapping, Optional

from ..logging import get_logger
from ..models import CompileResult, Component, Value
from .attributes import parse_instantiation_arguments
from .codegen import ScriptRenderer, default_renderer
from .context import DEFAULT_MAX_DEPTH, CompileContext
from .expressions import evaluate_expressions
from .fetch import FetchCompiler, protect_fetch_bodies, restore_fetch_bodies
from .registry import ComponentRegistry
from .scanner import ComponentTag, find_next_component_tag
from .signals import SignalCompiler, resolve_signal_markers
from .slots import extract_slot_usages, inject_slots
from .ternary import rewrite_ternaries

logger = get_logger("compiler.resolver")


class ComponentResolver:
    """Expands component tags against a registry.

    Children of a tag compile in the caller's scope; the component's own
    template compiles in a scope holding only that instantiation's arguments.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        strict_props: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        renderer: Optional[ScriptRenderer] = None,
    ) -> None:
        self.registry = registry
        self.strict_props = strict_props
        self.max_depth = max_depth
        self.renderer = renderer or default_renderer()

    def new_context(self) -> CompileContext:
        """Return fresh per-page state: id counters, script buffer, expansion stack."""
        return CompileContext(
            registry=self.registry,
            strict_props=self.strict_props,
            max_depth=self.max_depth,
        )

    def compile(
        self,
        html: str,
        scope: Optional[Mapping[str, Value]] = None,
        *,
        top_level: bool = True,
        context: Optional[CompileContext] = None,
    ) -> CompileResult:
        """Compile ``html`` into plain markup plus the page's queued scripts.

        At the top level the text's own gtml scripts, inline handlers and
        fetch elements are compiled too, and fetch bodies are restored last.
        """
        context = context or self.new_context()
        bindings = dict(scope or {})
        if top_level:
            html = SignalCompiler(context).compile(html, bindings)
            html = protect_fetch_bodies(html)
        html = self._compile(html, bindings, context)
        if top_level:
            html = resolve_signal_markers(html)
            html = FetchCompiler(context.ids, self.renderer).process(html)
            html = restore_fetch_bodies(html)
        return CompileResult(
            html=html,
            scripts=list(context.scripts),
            uses_signals=context.uses_signals,
        )

    def page_script(self, result: CompileResult) -> str:
        """Render the ``<script>`` block a compiled page needs, if any."""
        return self.renderer.page_script(result.scripts, uses_signals=result.uses_signals)

    def _compile(self, html: str, scope: Mapping[str, Value], context: CompileContext) -> str:
        html = rewrite_ternaries(html, scope)
        parts: List[str] = []
        position = 0
        while True:
            tag = find_next_component_tag(html, position)
            if tag is None:
                break
            parts.append(evaluate_expressions(html[position : tag.start], scope))
            parts.append(self._expand(tag, scope, context))
            position = tag.end
        parts.append(evaluate_expressions(html[position:], scope))
        return "".join(parts)

    def _expand(self, tag: ComponentTag, scope: Mapping[str, Value], context: CompileContext) -> str:
        component = context.registry.require(tag.name)
        arguments = parse_instantiation_arguments(
            tag.attrs, scope, component.prop_defs, strict=context.strict_props
        )
        logger.debug("Expanding <%s> with %d argument(s)", tag.name, len(arguments))
        children = self._compile(tag.inner, scope, context)
        slots = extract_slot_usages(children)
        with context.expanding(component.name):
            template = self._render_template(component, arguments, slots, context)
            return self._compile(template, arguments, context)

    def _render_template(
        self,
        component: Component,
        scope: Mapping[str, Value],
        slots: Mapping[str, str],
        context: CompileContext,
    ) -> str:
        template = SignalCompiler(context).compile(component.template, scope)
        template = inject_slots(template, slots)
        template = protect_fetch_bodies(template)
        # Branches not taken must never reach expression evaluation.
        template = rewrite_ternaries(template, scope)
        template = evaluate_expressions(template, scope)
        template = resolve_signal_markers(template)
        return FetchCompiler(context.ids, self.renderer).process(template)


def compile_html(
    html: str,
    registry: ComponentRegistry,
    scope: Optional[Mapping[str, Value]] = None,
    *,
    top_level: bool = True,
    strict_props: bool = False,
) -> str:
    """Compile ``html`` against ``registry`` and return only the markup."""
    resolver = ComponentResolver(registry, strict_props=strict_props)
    return resolver.compile(html, scope, top_level=top_level).html


__all__ = ["ComponentResolver", "compile_html"]
