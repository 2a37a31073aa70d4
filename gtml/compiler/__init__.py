"""Template compiler: component expansion, expressions, signals and fetch lowering."""

from .codegen import ScriptRenderer
from .context import CompileContext
from .expressions import evaluate, evaluate_expressions
from .registry import ComponentRegistry, load_component
from .resolver import ComponentResolver, compile_html

__all__ = [
    "CompileContext",
    "ComponentRegistry",
    "ComponentResolver",
    "ScriptRenderer",
    "compile_html",
    "evaluate",
    "evaluate_expressions",
    "load_component",
]
