"""Mutable state owned by a single compile pass."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from ..errors import CyclicComponentReferenceError
from .registry import ComponentRegistry

DEFAULT_MAX_DEPTH = 64


class IdGenerator:
    """Deterministic counters for generated element ids, one per prefix."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}

    def next(self, prefix: str) -> str:
        value = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = value
        return f"{prefix}-{value}"


@dataclass
class CompileContext:
    """Per-page accumulators and guards threaded through recursive expansion."""

    registry: ComponentRegistry
    strict_props: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    ids: IdGenerator = field(default_factory=IdGenerator)
    scripts: List[str] = field(default_factory=list)
    uses_signals: bool = False
    stack: List[str] = field(default_factory=list)

    def add_script(self, snippet: str) -> None:
        """Append an interactivity snippet unless an identical one is queued."""
        if snippet not in self.scripts:
            self.scripts.append(snippet)

    @contextmanager
    def expanding(self, name: str) -> Iterator[None]:
        """Track ``name`` on the expansion stack while its template compiles."""
        if name in self.stack:
            chain = " -> ".join([*self.stack, name])
            raise CyclicComponentReferenceError(
                f"component '{name}' references itself: {chain}", name
            )
        if len(self.stack) >= self.max_depth:
            raise CyclicComponentReferenceError(
                f"component nesting deeper than {self.max_depth} levels at '{name}'", name
            )
        self.stack.append(name)
        try:
            yield
        finally:
            self.stack.pop()


__all__ = ["CompileContext", "DEFAULT_MAX_DEPTH", "IdGenerator"]
