"""Component registry and component loading."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Optional

from ..errors import ComponentNotFoundError, InvalidNameError, MultipleRootElementsError
from ..models import Component
from .attributes import parse_props_declaration
from .slots import normalize_slot_markers
from .styles import (
    has_single_root,
    inject_scope_id,
    is_pascal_case,
    process_component_styles,
    scope_id_for,
)


def load_component(
    name: str,
    raw: str,
    path: Optional[str] = None,
    *,
    inject_scope: bool = True,
) -> Component:
    """Build a ``Component`` from its file stem and raw template text."""
    if not is_pascal_case(name):
        raise InvalidNameError(f"component '{path or name}' must be PascalCase", name)
    scope_id = scope_id_for(name)
    template, css = process_component_styles(raw, scope_id)
    prop_defs, template = parse_props_declaration(template)
    template = normalize_slot_markers(template)
    if not has_single_root(template):
        raise MultipleRootElementsError(
            f"component '{name}' must have a single root element", name
        )
    if inject_scope:
        template = inject_scope_id(template, scope_id)
    return Component(
        name=name,
        template=template,
        prop_defs=prop_defs,
        scope_id=scope_id,
        css=css,
        path=path,
    )


class ComponentRegistry(Mapping[str, Component]):
    """Components available to one compile pass, keyed by name."""

    def __init__(self, components: Iterable[Component] = ()) -> None:
        self._components: Dict[str, Component] = {}
        for component in components:
            self.add(component)

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], *, inject_scope: bool = True
    ) -> ComponentRegistry:
        """Load every ``name -> raw template`` entry into a new registry."""
        return cls(
            load_component(name, raw, inject_scope=inject_scope) for name, raw in sources.items()
        )

    def add(self, component: Component) -> None:
        if component.name in self._components:
            raise InvalidNameError(
                f"duplicate component name found: {component.name}", component.name
            )
        self._components[component.name] = component

    def require(self, name: str) -> Component:
        """Return the named component or raise ``ComponentNotFoundError``."""
        try:
            return self._components[name]
        except KeyError:
            raise ComponentNotFoundError(f"component '{name}' not found", name) from None

    def stylesheet(self) -> str:
        """Concatenate scoped CSS of every component, each under a name header."""
        return "".join(
            f"/* {component.name} */\n{component.css}\n"
            for component in self._components.values()
            if component.css
        )

    def __getitem__(self, name: str) -> Component:
        return self._components[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)


__all__ = ["ComponentRegistry", "load_component"]
