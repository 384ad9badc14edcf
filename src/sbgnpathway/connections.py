"""Connection fragments: reaction arcs, junction boxes, enzymes and end decorations."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from .accessibility import svg_title
from .config import PathwayConfig, style_mapping
from .geometry import Point, connection_path_d, perpendicular_offset, polyline_d
from .glyphs import GLYPH_WIDTH, render_decoration, render_intermediate
from .layout import BranchEndKey, CoordinateTable, EnzymeSlotKey, junction_key_for
from .models import Connection, Enzyme, Entity
from .shapes import ShapeComposer
from .svg import element, sub, text
from .text import fit_font_size

logger = logging.getLogger(__name__)

MARKERS_BY_CLASS = {
    "consumption": None,
    "production": "arrowhead",
    "catalysis": "catalysis",
    "inhibition": "inhibition",
    "stimulation": "stimulation",
}
DECORATION_GAP = 20.0


def marker_for(connection: Connection) -> Optional[str]:
    """Marker id for the arc end; ``None`` means a bare line."""
    if connection.sbgn_class in MARKERS_BY_CLASS:
        return MARKERS_BY_CLASS[connection.sbgn_class]
    return connection.marker or "arrowhead"


class ConnectionComposer:
    def __init__(self, config: PathwayConfig, shapes: Optional[ShapeComposer] = None) -> None:
        self.config = config
        self.shapes = shapes or ShapeComposer(config)

    def connection_style(self, connection: Connection) -> Dict[str, Any]:
        style = style_mapping(self.config.styles.connection)
        if connection.sbgn_class:
            style.update(self.config.arc_styles.get(connection.sbgn_class, {}))
        style.update(connection.style)
        return style

    def render(self, entity: Entity, table: CoordinateTable) -> Optional[ET.Element]:
        """All outgoing connections of ``entity``, or ``None`` when there is nothing to draw."""
        if not entity.connections:
            return None
        source = table.entity(entity.id)
        if source is None:
            logger.debug("entity %s has no position; connections not drawn", entity.id)
            return None

        group = element("g", {"class": "sbgn-connections", "data-source-node-id": entity.id})
        for connection in entity.connections:
            fragment = self._render_connection(entity, connection, source, table)
            if fragment is not None:
                group.append(fragment)
        for connection in entity.connections:
            for bracket in self._enzyme_brackets(entity, connection, table):
                group.append(bracket)
        for connection in entity.connections:
            decoration = self._end_decoration(connection, table)
            if decoration is not None:
                group.append(decoration)
        return group

    def _render_connection(
        self, entity: Entity, connection: Connection, source: Point, table: CoordinateTable
    ) -> Optional[ET.Element]:
        if connection.kind == "branch":
            end = table.get(BranchEndKey(entity.id, connection.target_id))
        elif connection.kind == "main":
            end = table.entity(connection.target_id)
        else:
            end = None
        if end is None or table.entity(connection.target_id) is None:
            logger.debug(
                "connection %s -> %s has no resolved endpoint; not drawn",
                entity.id,
                connection.target_id,
            )
            return None

        layout = self.config.layout
        style = self.connection_style(connection)
        group = element(
            "g",
            {
                "class": f"sbgn-connection sbgn-{connection.kind}",
                "data-connection-id": f"{entity.id}-{connection.target_id}",
                "data-sbgn-class": connection.sbgn_class,
            },
        )
        start = source.offset(dy=layout.node_height / 2)
        finish = end.offset(dy=-layout.node_height / 2)
        marker = marker_for(connection)
        sub(
            group,
            "path",
            {
                "d": connection_path_d(start, finish, str(style.get("curve") or "linear")),
                "stroke": style.get("stroke"),
                "stroke-width": style.get("strokeWidth"),
                "stroke-dasharray": style.get("dashArray") or None,
                "fill": "none",
                "marker-end": f"url(#{marker})" if marker else None,
                "class": style.get("className") or None,
            },
        )
        if connection.label:
            self._arc_label(group, connection.label, start, finish, style)

        junction = table.get(junction_key_for(entity.id, connection))
        if junction is not None:
            box = layout.intermediate_box_size
            sub(
                group,
                "rect",
                {
                    "x": junction.x - box / 2,
                    "y": junction.y - box / 2,
                    "width": box,
                    "height": box,
                    "fill": "white",
                    "stroke": style.get("stroke"),
                    "stroke-width": style.get("strokeWidth"),
                    "class": "sbgn-junction",
                },
            )
            if connection.kind == "main" and connection.intermediate_element is not None:
                group.append(
                    render_intermediate(junction, connection.intermediate_element, self.config)
                )

        for index, enzyme in enumerate(connection.enzymes):
            slot = table.get(EnzymeSlotKey(entity.id, connection.target_id, index))
            if slot is None:
                continue
            group.append(self._enzyme(enzyme, index, slot))
        return group

    def _arc_label(
        self, group: ET.Element, label: str, start: Point, finish: Point, style: Dict[str, Any]
    ) -> None:
        # negative distance puts the label right of a downward arc
        anchor = perpendicular_offset(start, finish, -float(style.get("labelDistance") or 10))
        text(
            group,
            label,
            {
                "x": anchor.x,
                "y": anchor.y,
                "dominant-baseline": "middle",
                "font-size": style.get("labelFontSize"),
                "class": "sbgn-connection-label",
            },
        )

    def _enzyme(self, enzyme: Enzyme, index: int, slot: Point) -> ET.Element:
        layout = self.config.layout
        style = style_mapping(self.config.styles.enzyme)
        style.update(enzyme.style)
        size = layout.enzyme_box_size
        family = self.config.styles.node.label_font_family
        group = element(
            "g", {"class": "sbgn-enzyme", "data-enzyme-id": enzyme.id or f"enzyme-{index}"}
        )
        svg_title(group, enzyme.label)
        sub(
            group,
            "rect",
            {
                "x": slot.x - size / 2,
                "y": slot.y - size / 2,
                "width": size,
                "height": size,
                "fill": style.get("fill"),
                "stroke": style.get("stroke"),
                "stroke-width": style.get("strokeWidth"),
                "rx": style.get("cornerRadius"),
                "ry": style.get("cornerRadius"),
                "class": style.get("className") or None,
            },
        )
        font_size = fit_font_size(
            enzyme.label,
            size - 4,
            float(style.get("labelFontSize") or 10),
            family,
            self.shapes.measurer,
        )
        text(
            group,
            enzyme.label,
            {
                "x": slot.x,
                "y": slot.y,
                "text-anchor": "middle",
                "dominant-baseline": "middle",
                "font-family": family,
                "font-size": font_size,
                "class": "sbgn-enzyme-label",
            },
        )
        if enzyme.marker is not None:
            corner = Point(slot.x - size / 2, slot.y - size / 2)
            group.append(self.shapes.marker_badge(corner, enzyme.marker, "sbgn-enzyme-marker"))
        return group

    def _enzyme_brackets(
        self, entity: Entity, connection: Connection, table: CoordinateTable
    ) -> List[ET.Element]:
        if len(connection.enzymes) < 2:
            return []
        junction = table.get(junction_key_for(entity.id, connection))
        if junction is None:
            return []
        style = self.connection_style(connection)
        reach = self.config.layout.enzyme_box_size / 2
        notch = self.config.layout.intermediate_box_size / 2 + 1
        brackets: List[ET.Element] = []
        for index in range(0, len(connection.enzymes) - 1, 2):
            first = table.get(EnzymeSlotKey(entity.id, connection.target_id, index))
            second = table.get(EnzymeSlotKey(entity.id, connection.target_id, index + 1))
            if first is None or second is None:
                continue
            sign = -1.0 if first.x >= junction.x else 1.0
            points = [
                first.offset(dx=sign * reach),
                junction.offset(dx=-sign * notch),
                second.offset(dx=sign * reach),
            ]
            brackets.append(
                element(
                    "path",
                    {
                        "d": polyline_d(points),
                        "fill": "none",
                        "stroke": style.get("stroke"),
                        "stroke-width": style.get("strokeWidth"),
                        "stroke-dasharray": style.get("dashArray") or None,
                        "marker-end": "url(#arrowhead)",
                        "class": "sbgn-enzyme-bracket",
                    },
                )
            )
        return brackets

    def _end_decoration(
        self, connection: Connection, table: CoordinateTable
    ) -> Optional[ET.Element]:
        if not connection.end_decoration:
            return None
        target = table.entity(connection.target_id)
        if target is None:
            return None
        start = Point(
            target.x - GLYPH_WIDTH / 2,
            target.y + self.config.layout.node_height / 2 + DECORATION_GAP,
        )
        glyph = render_decoration(
            connection.end_decoration,
            start,
            self.config,
            label=connection.end_decoration_label,
        )
        if glyph is not None:
            glyph.set("data-node-id", f"decoration-{connection.target_id}")
        return glyph
