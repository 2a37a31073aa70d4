"""Props declarations, instantiation arguments and generic attribute parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..errors import (
    InvalidPropDeclarationError,
    MissingPropError,
    TypeMismatchError,
    UnknownPropError,
)
from ..logging import get_logger
from ..models import PROP_TYPES, STRING, PropDef, Value
from .expressions import evaluate, evaluate_expressions

PROPS_PATTERN = re.compile(r"\s+props\s*=\s*(['\"])(.*?)\1", re.DOTALL)
LEGACY_PROP_PATTERN = re.compile(r"\{\{\s*prop:\s*([^\s}]+)\s+([^\s}]+)\s*\}\}")
LEGACY_DRILL_PATTERN = re.compile(r"\{\{\s*drill:\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

logger = get_logger("compiler.attributes")


@dataclass(frozen=True)
class Attribute:
    """One attribute from a tag head.

    ``quote`` is ``'``/``"`` for quoted values, ``{`` for expression values,
    and empty for unquoted values. ``value`` is ``None`` for bare attributes.
    """

    name: str
    value: Optional[str]
    quote: str
    raw: str


def tokenize_attributes(text: str) -> List[Attribute]:
    """Split a tag head into attributes, keeping their original spelling."""
    attributes: List[Attribute] = []
    length = len(text)
    index = 0
    while index < length:
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            break
        start = index
        while index < length and not text[index].isspace() and text[index] not in "=/>":
            index += 1
        name = text[start:index]
        if not name:
            index += 1
            continue

        cursor = _skip_spaces(text, index)
        if cursor >= length or text[cursor] != "=":
            attributes.append(Attribute(name, None, "", name))
            continue

        cursor = _skip_spaces(text, cursor + 1)
        if cursor >= length:
            logger.debug("Skipping attribute %r with no value", name)
            index = cursor
            continue

        opener = text[cursor]
        if opener == "{":
            close = _matching_brace(text, cursor)
            if close == -1:
                close = length
            value = text[cursor + 1 : close]
            index = close + 1
            quote = "{"
        elif opener in "'\"":
            close = text.find(opener, cursor + 1)
            if close == -1:
                close = length
            value = text[cursor + 1 : close]
            index = close + 1
            quote = opener
        else:
            end = cursor
            while end < length and not text[end].isspace():
                end += 1
            value = text[cursor:end]
            index = end
            quote = ""
        attributes.append(Attribute(name, value, quote, text[start:index]))
    return attributes


def parse_attributes(text: str) -> Dict[str, str]:
    """Return ``name -> value`` for every valued attribute, in source order."""
    return {attr.name: attr.value for attr in tokenize_attributes(text) if attr.value is not None}


def parse_props_declaration(template: str) -> Tuple[Dict[str, PropDef], str]:
    """Parse ``props='name type, ...'`` and strip it from ``template``.

    Legacy ``{{ prop: name type }}`` markers also declare props and are
    rewritten to ``{name}``; ``{{ drill: name }}`` becomes ``{name}``.
    """
    prop_defs: Dict[str, PropDef] = {}
    match = PROPS_PATTERN.search(template)
    if match is not None:
        for pair in match.group(2).split(","):
            fields = pair.split()
            if not fields:
                continue
            if len(fields) != 2:
                raise InvalidPropDeclarationError(
                    f"invalid prop declaration '{pair.strip()}' (expected 'name type')",
                    pair.strip(),
                )
            name, type_name = fields
            if name in prop_defs:
                raise InvalidPropDeclarationError(f"duplicate prop name: {name}", name)
            prop_defs[name] = _prop_def(name, type_name)
        template = template[: match.start()] + template[match.end() :]

    def _legacy_prop(marker: re.Match[str]) -> str:
        name, type_name = marker.group(1), marker.group(2)
        definition = _prop_def(name, type_name)
        existing = prop_defs.get(name)
        if existing is not None and existing != definition:
            raise InvalidPropDeclarationError(f"duplicate prop name: {name}", name)
        prop_defs[name] = definition
        return "{" + name + "}"

    template = LEGACY_PROP_PATTERN.sub(_legacy_prop, template)
    template = LEGACY_DRILL_PATTERN.sub(lambda marker: "{" + marker.group(1) + "}", template)
    return prop_defs, template


def parse_instantiation_arguments(
    attrs: str,
    caller_scope: Mapping[str, Value],
    prop_defs: Mapping[str, PropDef],
    *,
    strict: bool = False,
) -> Dict[str, Value]:
    """Resolve a component tag's attributes into the scope for its template.

    ``{expr}`` values are evaluated in the caller's scope; quoted values are
    strings with any embedded ``{expr}`` interpolated. Declared props must
    receive a value of their declared type. Without ``strict``, undeclared
    arguments are kept and unfilled props get their type's empty value.
    """
    arguments: Dict[str, Value] = {}
    for attr in tokenize_attributes(attrs):
        if attr.value is None:
            logger.debug("Ignoring attribute %r without a value", attr.name)
            continue
        prop = prop_defs.get(attr.name)
        if attr.quote == "{":
            value = evaluate(attr.value, caller_scope)
        elif attr.quote:
            if prop is not None and prop.type != STRING:
                raise TypeMismatchError(
                    f"prop '{attr.name}' expects type '{prop.type}', but got raw string value. "
                    "Use {expression} syntax for non-string types",
                    attr.raw,
                )
            value = Value.of_string(evaluate_expressions(attr.value, caller_scope))
        else:
            logger.debug("Ignoring unquoted attribute value %r", attr.raw)
            continue

        if prop is not None:
            if value.type != prop.type:
                raise TypeMismatchError(
                    f"prop '{attr.name}' expects type '{prop.type}', but got '{value.type}'",
                    attr.raw,
                )
        elif strict:
            raise UnknownPropError(f"unknown prop '{attr.name}'", attr.raw)
        arguments[attr.name] = value

    for name, prop in prop_defs.items():
        if name in arguments:
            continue
        if strict:
            raise MissingPropError(f"missing required prop '{name}' of type '{prop.type}'", name)
        arguments[name] = Value.zero(prop.type)
    return arguments


def _prop_def(name: str, type_name: str) -> PropDef:
    if not _IDENTIFIER.fullmatch(name):
        raise InvalidPropDeclarationError(f"invalid prop name '{name}'", name)
    if type_name not in PROP_TYPES:
        raise InvalidPropDeclarationError(
            f"invalid prop type '{type_name}' for prop '{name}' (must be string, int, or boolean)",
            type_name,
        )
    return PropDef(name=name, type=type_name)


def _skip_spaces(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _matching_brace(text: str, start: int) -> int:
    depth = 0
    quote = ""
    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


__all__ = [
    "Attribute",
    "PROPS_PATTERN",
    "parse_attributes",
    "parse_instantiation_arguments",
    "parse_props_declaration",
    "tokenize_attributes",
]
