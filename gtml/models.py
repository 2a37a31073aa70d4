"""Core data models shared across gtml components."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

STRING = "string"
INT = "int"
BOOLEAN = "boolean"

PROP_TYPES = (STRING, INT, BOOLEAN)


@dataclass(frozen=True)
class Value:
    """Tagged scalar produced by expression evaluation."""

    type: str
    data: str | int | bool

    @classmethod
    def of_string(cls, data: str) -> Value:
        return cls(STRING, data)

    @classmethod
    def of_int(cls, data: int) -> Value:
        return cls(INT, data)

    @classmethod
    def of_bool(cls, data: bool) -> Value:
        return cls(BOOLEAN, data)

    @classmethod
    def from_python(cls, data: object) -> Value:
        """Wrap a plain Python scalar, checking bool before int."""
        if isinstance(data, bool):
            return cls.of_bool(data)
        if isinstance(data, int):
            return cls.of_int(data)
        if isinstance(data, str):
            return cls.of_string(data)
        raise TypeError(f"unsupported value type: {type(data).__name__}")

    @classmethod
    def zero(cls, type_name: str) -> Value:
        """Return the empty value for a declared prop type."""
        if type_name == INT:
            return cls.of_int(0)
        if type_name == BOOLEAN:
            return cls.of_bool(False)
        return cls.of_string("")

    def render(self) -> str:
        """Render the value as template text."""
        if self.type == BOOLEAN:
            return "true" if self.data else "false"
        return str(self.data)

    def to_json(self) -> str:
        """Serialize the value as a JavaScript literal."""
        return json.dumps(self.data)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class PropDef:
    """Typed parameter declared by a component's props attribute."""

    name: str
    type: str


@dataclass
class Component:
    """A loaded component definition ready for instantiation."""

    name: str
    template: str
    prop_defs: Dict[str, PropDef] = field(default_factory=dict)
    scope_id: str = ""
    css: str = ""
    path: Optional[str] = None


@dataclass(frozen=True)
class ForLoop:
    """Client-side iteration descriptor collected from a fetch body."""

    template_id: str
    item: str
    source: str


@dataclass
class FetchElement:
    """Declarative fetch element collected while generating its script."""

    element_id: str
    method: str
    url: str
    binding: str
    has_suspense: bool = False
    has_fallback: bool = False
    loops: List[ForLoop] = field(default_factory=list)


@dataclass
class CompileResult:
    """Output of compiling one page: markup plus its generated script."""

    html: str
    scripts: List[str] = field(default_factory=list)
    uses_signals: bool = False


@dataclass
class SourceFile:
    """Metadata for a component, route or static file in a project."""

    path: str
    relative: str
    name: str
    hash: str


@dataclass
class ProjectManifest:
    """Normalized view of a gtml project on disk."""

    root: str
    components: List[SourceFile]
    routes: List[SourceFile]
    static_files: List[SourceFile] = field(default_factory=list)


@dataclass
class BuildReport:
    """Summary of a completed project compile."""

    root: Path
    dist: Path
    routes: List[Path]
    stylesheet: Path
    components: int = 0
    static_files: int = 0


__all__ = [
    "BOOLEAN",
    "BuildReport",
    "Component",
    "CompileResult",
    "FetchElement",
    "ForLoop",
    "INT",
    "PROP_TYPES",
    "ProjectManifest",
    "PropDef",
    "STRING",
    "SourceFile",
    "Value",
]
