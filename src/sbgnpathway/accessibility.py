"""ARIA attributes and titles for screen readers."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, Optional

from .models import Entity
from .svg import title


def node_aria_label(entity: Optional[Entity]) -> str:
    if entity is None:
        return "Pathway element"
    name = entity.label or entity.id or "Unknown element"
    return f"{name} ({entity.entity_type})" if entity.entity_type else name


def aria_attributes(
    label: Optional[str] = None, description: Optional[str] = None, focusable: bool = True
) -> Dict[str, str]:
    attrs: Dict[str, str] = {}
    if label:
        attrs["aria-label"] = label
    if description:
        attrs["aria-description"] = description
    if focusable:
        attrs["tabindex"] = "0"
        attrs["role"] = "group"
    return attrs


def svg_title(parent: ET.Element, content: Optional[str]) -> Optional[ET.Element]:
    """Append a ``<title>`` child; nothing is added for empty text."""
    if not content:
        return None
    return title(parent, content)
