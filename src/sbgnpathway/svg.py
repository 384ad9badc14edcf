"""ElementTree helpers for building SVG fragments."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Mapping, Optional

from .geometry import fmt

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)


def q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return fmt(value)
    return str(value)


def _attrs(attrs: Mapping[str, Any]) -> dict:
    return {key: attr_value(value) for key, value in attrs.items() if value is not None}


def element(tag: str, attrs: Optional[Mapping[str, Any]] = None) -> ET.Element:
    """New SVG element; ``None`` attribute values are dropped, numbers formatted."""
    return ET.Element(q(tag), _attrs(attrs or {}))


def sub(parent: ET.Element, tag: str, attrs: Optional[Mapping[str, Any]] = None) -> ET.Element:
    return ET.SubElement(parent, q(tag), _attrs(attrs or {}))


def text(
    parent: ET.Element, content: str, attrs: Optional[Mapping[str, Any]] = None
) -> ET.Element:
    node = sub(parent, "text", attrs)
    node.text = content
    return node


def title(parent: ET.Element, content: str) -> ET.Element:
    node = sub(parent, "title")
    node.text = content
    return node


def pretty_xml(root: ET.Element) -> str:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode")
