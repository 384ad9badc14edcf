"""Entity glyphs: SBGN shapes, modification marks and wrapped labels."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

from .accessibility import aria_attributes, node_aria_label, svg_title
from .config import PathwayConfig, style_mapping
from .geometry import Point, fmt
from .glyphs import GLYPH_WIDTH, render_dna, render_rna
from .models import MAX_MARKS, Entity, Marker
from .svg import element, sub, text
from .text import DEFAULT_MEASURER, TextMeasurer, wrap_label

logger = logging.getLogger(__name__)

ELLIPSE_INNER_PADDING = 5.0
MARK_INSET = 10.0
OCTAGON_CUT = 0.15
LABEL_PADDING = 10.0


class ShapeComposer:
    """Turns one positioned entity into an SVG group."""

    def __init__(self, config: PathwayConfig, measurer: Optional[TextMeasurer] = None) -> None:
        self.config = config
        self.measurer = measurer or DEFAULT_MEASURER

    def entity_style(self, entity: Entity) -> Dict[str, Any]:
        """Node defaults, then the SBGN style for the type, then the entity's own overrides."""
        style = style_mapping(self.config.styles.node)
        style.update(self.config.entity_styles.get(entity.entity_type, {}))
        style.update({k: v for k, v in entity.style.items() if k not in ("dna", "rna")})
        return style

    def render(self, entity: Entity, point: Optional[Point]) -> Optional[ET.Element]:
        if point is None:
            logger.debug("entity %s has no position; not drawn", entity.id)
            return None

        style = self.entity_style(entity)
        attrs: Dict[str, Any] = {
            "class": " ".join(filter(None, ["sbgn-node", style.get("className")])),
            "data-node-id": entity.id,
            "data-node-type": entity.entity_type,
        }
        if style.get("dropShadow"):
            attrs["filter"] = "url(#dropShadow)"
        attrs.update(aria_attributes(label=node_aria_label(entity)))
        group = element("g", attrs)
        svg_title(group, entity.label or entity.id)

        if entity.entity_type in ("DNA", "RNA"):
            start = Point(point.x - GLYPH_WIDTH / 2.0, point.y)
            draw = render_dna if entity.entity_type == "DNA" else render_rna
            override = entity.style.get(entity.entity_type.lower())
            group.append(
                draw(
                    start,
                    self.config,
                    label=entity.label or None,
                    node_id=entity.id,
                    style=override if isinstance(override, dict) else None,
                )
            )
            return group

        self._draw_shape(group, entity.entity_type, point, style)
        self._draw_marks(group, entity.marks, point)
        self._draw_label(group, entity.label, point, style)
        return group

    def _draw_shape(
        self, group: ET.Element, entity_type: str, point: Point, style: Dict[str, Any]
    ) -> None:
        paint = {
            "fill": style.get("fill") or "white",
            "stroke": style.get("stroke") or "black",
            "stroke-width": style.get("strokeWidth") or 2,
        }
        width = self.config.layout.node_width
        height = self.config.layout.node_height
        x, y = point.x, point.y

        if entity_type == "macromolecule":
            radius = style.get("cornerRadius") or 15
            sub(
                group,
                "rect",
                {
                    "x": x - width / 2,
                    "y": y - height / 2,
                    "width": width,
                    "height": height,
                    "rx": radius,
                    "ry": radius,
                    **paint,
                },
            )
        elif entity_type == "process":
            size = style.get("size") or 20
            sub(
                group,
                "rect",
                {"x": x - size / 2, "y": y - size / 2, "width": size, "height": size, **paint},
            )
        elif entity_type == "complex":
            sub(group, "polygon", {"points": octagon_points(point, width, height), **paint})
        elif entity_type == "nucleicAcidFeature":
            radius = style.get("cornerRadius") or 15
            sub(group, "path", {"d": bottom_rounded_rect_d(point, width, height, radius), **paint})
        else:
            inner = entity_type == "simpleChemical" or style.get("innerStroke") is not False
            self._double_ellipse(group, point, paint, inner)

    def _double_ellipse(
        self, group: ET.Element, point: Point, paint: Dict[str, Any], inner: bool
    ) -> None:
        rx = self.config.layout.node_width / 2
        ry = self.config.layout.node_height / 2
        sub(group, "ellipse", {"cx": point.x, "cy": point.y, "rx": rx, "ry": ry, **paint})
        if inner:
            sub(
                group,
                "ellipse",
                {
                    "cx": point.x,
                    "cy": point.y,
                    "rx": rx - ELLIPSE_INNER_PADDING,
                    "ry": ry - ELLIPSE_INNER_PADDING,
                    **paint,
                    "fill": "none",
                },
            )

    def mark_corners(self, point: Point) -> List[Point]:
        """Top-left, top-right, bottom-left, bottom-right, each inset from the node box."""
        dx = self.config.layout.node_width / 2 - MARK_INSET
        dy = self.config.layout.node_height / 2 - MARK_INSET
        return [
            Point(point.x - dx, point.y - dy),
            Point(point.x + dx, point.y - dy),
            Point(point.x - dx, point.y + dy),
            Point(point.x + dx, point.y + dy),
        ]

    def _draw_marks(
        self, group: ET.Element, marks: Tuple[Optional[Marker], ...], point: Point
    ) -> None:
        for corner, mark in zip(self.mark_corners(point), marks[:MAX_MARKS]):
            if mark is None:
                continue
            group.append(self.marker_badge(corner, mark, "sbgn-marker"))

    def marker_badge(self, center: Point, mark: Marker, class_name: str) -> ET.Element:
        marker_style = self.config.styles.marker
        badge = element("g", {"class": class_name, "data-marker-type": mark.type or ""})
        sub(
            badge,
            "circle",
            {
                "cx": center.x,
                "cy": center.y,
                "r": self.config.layout.marker_radius,
                "fill": marker_style.color_for(mark.type),
                "stroke": "black",
                "stroke-width": 1,
            },
        )
        if mark.type:
            text(
                badge,
                mark.type,
                {
                    "x": center.x,
                    "y": center.y,
                    "text-anchor": "middle",
                    "dominant-baseline": "middle",
                    "font-weight": marker_style.font_weight,
                    "font-size": marker_style.font_size,
                },
            )
        return badge

    def _draw_label(
        self, group: ET.Element, label: str, point: Point, style: Dict[str, Any]
    ) -> None:
        if not label:
            return
        font_size = float(style.get("labelFontSize") or 12)
        family = style.get("labelFontFamily")
        lines = wrap_label(
            label,
            self.config.layout.node_width - 2 * LABEL_PADDING,
            font_size,
            family,
            self.measurer,
        )
        line_height = self.measurer.line_height(font_size)
        node = text(
            group,
            lines[0],
            {
                "x": point.x,
                "y": point.y - (len(lines) - 1) * line_height / 2,
                "text-anchor": "middle",
                "dominant-baseline": "middle",
                "font-family": family,
                "font-size": font_size,
                "font-weight": style.get("labelFontWeight"),
                "class": "sbgn-node-label",
            },
        )
        if len(lines) > 1:
            node.text = None
            for index, line in enumerate(lines):
                span = sub(node, "tspan", {"x": point.x, "dy": "0" if index == 0 else "1.2em"})
                span.text = line


def octagon_points(point: Point, width: float, height: float) -> str:
    cut = min(width, height) * OCTAGON_CUT
    left, right = point.x - width / 2, point.x + width / 2
    top, bottom = point.y - height / 2, point.y + height / 2
    corners = [
        (left + cut, top),
        (right - cut, top),
        (right, top + cut),
        (right, bottom - cut),
        (right - cut, bottom),
        (left + cut, bottom),
        (left, bottom - cut),
        (left, top + cut),
    ]
    return " ".join(f"{fmt(x)},{fmt(y)}" for x, y in corners)


def bottom_rounded_rect_d(point: Point, width: float, height: float, radius: float) -> str:
    left, right = point.x - width / 2, point.x + width / 2
    top, bottom = point.y - height / 2, point.y + height / 2
    return (
        f"M {fmt(left)} {fmt(top)} H {fmt(right)} V {fmt(bottom - radius)} "
        f"Q {fmt(right)} {fmt(bottom)} {fmt(right - radius)} {fmt(bottom)} "
        f"H {fmt(left + radius)} "
        f"Q {fmt(left)} {fmt(bottom)} {fmt(left)} {fmt(bottom - radius)} Z"
    )
