"""Error taxonomy raised by the gtml compiler."""

from __future__ import annotations

from typing import Optional


class CompileError(RuntimeError):
    """Base class for every compile failure.

    ``detail`` is the human readable reason and ``text`` the offending snippet
    (expression, tag name, declaration). The orchestrator attaches ``source``
    so console output names the component or route that failed.
    """

    kind = "CompileError"

    def __init__(self, detail: str, text: str = "", source: Optional[str] = None) -> None:
        self.detail = detail
        self.text = text
        self.source = source
        super().__init__(self._format())

    def with_source(self, source: str) -> CompileError:
        """Attach the failing file unless an inner call already did."""
        if self.source is None:
            self.source = source
            self.args = (self._format(),)
        return self

    def _format(self) -> str:
        if self.source:
            return f"{self.source}: {self.detail}"
        return self.detail


class EvalError(CompileError):
    """Failure while evaluating an expression."""

    kind = "EvalError"


class ComponentNotFoundError(CompileError):
    kind = "ComponentNotFound"


class UndefinedVariableError(EvalError):
    kind = "UndefinedVariable"


class TypeMismatchError(EvalError):
    kind = "TypeMismatch"


class DivisionByZeroError(EvalError):
    kind = "DivisionByZero"


class ModuloByZeroError(EvalError):
    kind = "ModuloByZero"


class MalformedExpressionError(EvalError):
    kind = "MalformedExpression"


class MalformedTernaryError(EvalError):
    kind = "MalformedTernary"


class InvalidPropDeclarationError(CompileError):
    kind = "InvalidPropDeclaration"


class MissingPropError(CompileError):
    kind = "MissingProp"


class UnknownPropError(CompileError):
    kind = "UnknownProp"


class MultipleRootElementsError(CompileError):
    kind = "MultipleRootElements"


class CyclicComponentReferenceError(CompileError):
    kind = "CyclicComponentReference"


class MalformedTagError(CompileError):
    kind = "MalformedTag"


class ScriptSyntaxError(CompileError):
    kind = "ScriptSyntax"


class InvalidNameError(CompileError):
    kind = "InvalidName"


class MissingDirectoryError(CompileError):
    kind = "MissingDirectory"


__all__ = [
    "CompileError",
    "ComponentNotFoundError",
    "CyclicComponentReferenceError",
    "DivisionByZeroError",
    "EvalError",
    "InvalidNameError",
    "InvalidPropDeclarationError",
    "MalformedExpressionError",
    "MalformedTagError",
    "MalformedTernaryError",
    "MissingDirectoryError",
    "MissingPropError",
    "ModuloByZeroError",
    "MultipleRootElementsError",
    "ScriptSyntaxError",
    "TypeMismatchError",
    "UndefinedVariableError",
    "UnknownPropError",
]
