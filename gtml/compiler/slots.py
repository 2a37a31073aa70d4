"""Named slot extraction at call sites and injection into templates."""

from __future__ import annotations

import re
from typing import Dict, Mapping

from ..logging import get_logger
from .attributes import parse_attributes, tokenize_attributes

SLOT_USAGE_PATTERN = re.compile(r"<slot\s+([^>]*?[^/>\s])\s*>(.*?)</slot\s*>", re.DOTALL)
SLOT_PLACEHOLDER_PATTERN = re.compile(r"<slot\s+name\s*=\s*['\"]([\w-]+)['\"]\s*/>")
SLOT_MARKER_PATTERN = re.compile(r"\{\{\s*slot:\s*([\w-]+)\s*\}\}")

logger = get_logger("compiler.slots")


def extract_slot_usages(children: str) -> Dict[str, str]:
    """Map slot names to wrapper markup for every ``<slot>`` fill in ``children``.

    ``<slot name='n' tag='t' k='v'>body</slot>`` becomes ``<t k='v'>body</t>``;
    extra attributes keep their original quoting.
    A fill without ``tag`` contributes its body unwrapped.
    """
    slots: Dict[str, str] = {}
    for match in SLOT_USAGE_PATTERN.finditer(children):
        values = parse_attributes(match.group(1))
        name = values.get("name", "")
        if not name:
            logger.debug("Ignoring slot fill without a name: %s", match.group(0)[:60])
            continue
        tag = values.get("tag", "")
        body = match.group(2)
        if not tag:
            slots[name] = body
            continue
        extra = "".join(
            f" {attr.raw}"
            for attr in tokenize_attributes(match.group(1))
            if attr.name not in ("name", "tag")
        )
        slots[name] = f"<{tag}{extra}>{body}</{tag}>"
    return slots


def normalize_slot_markers(template: str) -> str:
    """Rewrite ``{{ slot: name }}`` markers to ``<slot name='name' />``."""
    return SLOT_MARKER_PATTERN.sub(lambda match: f"<slot name='{match.group(1)}' />", template)


def inject_slots(template: str, slots: Mapping[str, str]) -> str:
    """Replace each placeholder with its fill, or remove it when unfilled."""
    template = normalize_slot_markers(template)
    return SLOT_PLACEHOLDER_PATTERN.sub(lambda match: slots.get(match.group(1), ""), template)


__all__ = [
    "SLOT_PLACEHOLDER_PATTERN",
    "SLOT_USAGE_PATTERN",
    "extract_slot_usages",
    "inject_slots",
    "normalize_slot_markers",
]
