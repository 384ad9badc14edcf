"""Special glyphs: DNA helices, RNA strands and reaction intermediate elements."""
from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from typing import Any, List, Mapping, Optional

from .config import DNAStyle, PathwayConfig, RNAStyle, patch_dataclass
from .geometry import Point, polyline_d, sine_wave
from .models import AttachedBox, IntermediateElement
from .svg import element, sub, text

GLYPH_WIDTH = 100.0
MAX_HBONDS = 4
STEM_LOOP_RADIUS = 6.0
ATTACHED_MARKER_RADIUS = 8.0
ATTACHED_MARKER_DISTANCE = 60.0
ATTACHED_BOX_SPACING = 20.0


def _dna_style(config: PathwayConfig, override: Optional[Mapping[str, Any]]) -> DNAStyle:
    if not override:
        return config.styles.dna
    return patch_dataclass(config.styles.dna, override)


def _rna_style(config: PathwayConfig, override: Optional[Mapping[str, Any]]) -> RNAStyle:
    if not override:
        return config.styles.rna
    return patch_dataclass(config.styles.rna, override)


def _glyph_label(group: ET.Element, config: PathwayConfig, start: Point, label: str) -> None:
    text(
        group,
        label,
        {
            "x": start.x + GLYPH_WIDTH + 10,
            "y": start.y + 5,
            "fill": "black",
            "class": "sbgn-glyph-label",
            "font-family": config.styles.node.label_font_family,
            "font-size": config.styles.node.label_font_size,
        },
    )


def hbond_indices(sample_count: int) -> List[int]:
    """Sample indices of the dashed cross-links between the two DNA strands."""
    bonds = min(MAX_HBONDS, sample_count // 12)
    step = sample_count // (bonds + 1)
    return [step * (i + 1) for i in range(bonds) if step * (i + 1) < sample_count]


def render_dna(
    start: Point,
    config: PathwayConfig,
    *,
    label: Optional[str] = None,
    node_id: str = "",
    style: Optional[Mapping[str, Any]] = None,
) -> ET.Element:
    """Double helix over a fixed span starting at ``start`` and reading right."""
    dna = _dna_style(config, style)
    strand1 = sine_wave(start, GLYPH_WIDTH, dna.wave_height, dna.wave_count)
    strand2 = sine_wave(start, GLYPH_WIDTH, dna.wave_height, dna.wave_count, phase=math.pi)

    group = element("g", {"class": "sbgn-dna-helix", "data-node-id": node_id})
    for points, color in ((strand1, dna.strand1_color), (strand2, dna.strand2_color)):
        sub(
            group,
            "path",
            {
                "d": polyline_d(points),
                "stroke": color,
                "fill": "none",
                "stroke-width": dna.stroke_width,
                "stroke-linecap": "round",
            },
        )
    for index in hbond_indices(len(strand1)):
        a, b = strand1[index], strand2[index]
        sub(
            group,
            "line",
            {
                "x1": a.x,
                "y1": a.y,
                "x2": b.x,
                "y2": b.y,
                "stroke": "#AAAAAA",
                "stroke-width": 1,
                "stroke-dasharray": "2,2",
                "class": "sbgn-hbond",
            },
        )
    _glyph_label(group, config, start, label or "DNA")
    return group


def render_rna(
    start: Point,
    config: PathwayConfig,
    *,
    label: Optional[str] = None,
    node_id: str = "",
    style: Optional[Mapping[str, Any]] = None,
) -> ET.Element:
    """Single strand; long enough strands get one dashed stem-loop a quarter along."""
    rna = _rna_style(config, style)
    points = sine_wave(start, GLYPH_WIDTH, rna.wave_height, rna.wave_count)

    group = element("g", {"class": "sbgn-rna-strand", "data-node-id": node_id})
    sub(
        group,
        "path",
        {
            "d": polyline_d(points),
            "stroke": rna.strand_color,
            "fill": "none",
            "stroke-width": rna.stroke_width,
            "stroke-linecap": "round",
        },
    )
    if len(points) >= 30:
        loop = points[len(points) // 4]
        sub(
            group,
            "circle",
            {
                "cx": loop.x,
                "cy": loop.y - STEM_LOOP_RADIUS * 1.5,
                "r": STEM_LOOP_RADIUS,
                "fill": "none",
                "stroke": rna.strand_color,
                "stroke-width": rna.stroke_width / 1.5,
                "stroke-dasharray": "2,1",
                "class": "sbgn-stem-loop",
            },
        )
    _glyph_label(group, config, start, label or "RNA")
    return group


def render_decoration(
    kind: str, start: Point, config: PathwayConfig, *, label: Optional[str] = None
) -> Optional[ET.Element]:
    if kind == "DNA":
        return render_dna(start, config, label=label)
    if kind == "RNA":
        return render_rna(start, config, label=label)
    return None


def render_intermediate(
    center: Point, intermediate: IntermediateElement, config: PathwayConfig
) -> ET.Element:
    kind = intermediate.type
    group = element("g", {"class": f"sbgn-intermediate-element sbgn-{kind}", "data-type": kind})
    paint = {
        "fill": intermediate.fill,
        "stroke": intermediate.stroke,
        "stroke-width": intermediate.stroke_width,
    }
    half = intermediate.size / 2.0
    if intermediate.type == "process":
        sub(
            group,
            "rect",
            {
                "x": center.x - half,
                "y": center.y - half,
                "width": intermediate.size,
                "height": intermediate.size,
                **paint,
            },
        )
    elif intermediate.type in ("association", "dissociation"):
        sub(group, "circle", {"cx": center.x, "cy": center.y, "r": half, **paint})
        line_paint = {"stroke": intermediate.stroke, "stroke-width": intermediate.stroke_width}
        sub(
            group,
            "line",
            {
                "x1": center.x - half + 5,
                "y1": center.y,
                "x2": center.x + half - 5,
                "y2": center.y,
                **line_paint,
            },
        )
        if intermediate.type == "dissociation":
            sub(
                group,
                "line",
                {
                    "x1": center.x,
                    "y1": center.y - half + 5,
                    "x2": center.x,
                    "y2": center.y + half - 5,
                    **line_paint,
                },
            )
    else:
        sub(
            group,
            "rect",
            {
                "x": center.x - intermediate.width / 2.0,
                "y": center.y - intermediate.height / 2.0,
                "width": intermediate.width,
                "height": intermediate.height,
                **paint,
            },
        )

    if intermediate.label:
        text(
            group,
            intermediate.label,
            {
                "x": center.x,
                "y": center.y + intermediate.height + 15,
                "text-anchor": "middle",
                "dominant-baseline": "middle",
                "font-family": config.styles.node.label_font_family,
                "font-size": config.styles.node.label_font_size,
                "class": "sbgn-intermediate-label",
            },
        )
    if intermediate.attached_box is not None:
        _render_attached_box(group, center, intermediate.attached_box, config)
    return group


def attached_box_center(center: Point, box: AttachedBox) -> Point:
    sign = 1.0 if box.side == "right" else -1.0
    marker_x = center.x + sign * ATTACHED_MARKER_DISTANCE
    return Point(
        marker_x + sign * (ATTACHED_MARKER_RADIUS + ATTACHED_BOX_SPACING + box.width / 2.0),
        center.y,
    )


def _render_attached_box(
    group: ET.Element, center: Point, box: AttachedBox, config: PathwayConfig
) -> None:
    sign = 1.0 if box.side == "right" else -1.0
    marker_x = center.x + sign * ATTACHED_MARKER_DISTANCE
    box_center = attached_box_center(center, box)
    corner = config.styles.enzyme.corner_radius
    sub(
        group,
        "circle",
        {
            "cx": marker_x,
            "cy": center.y,
            "r": ATTACHED_MARKER_RADIUS,
            "fill": "white",
            "stroke": box.stroke,
            "stroke-width": 1,
            "class": "sbgn-attached-marker",
        },
    )
    sub(
        group,
        "rect",
        {
            "x": box_center.x - box.width / 2.0,
            "y": center.y - box.height / 2.0,
            "width": box.width,
            "height": box.height,
            "rx": corner,
            "ry": corner,
            "fill": box.fill,
            "stroke": box.stroke,
            "stroke-width": box.stroke_width,
            "class": "sbgn-attached-box",
        },
    )
    text(
        group,
        box.label,
        {
            "x": box_center.x,
            "y": center.y,
            "text-anchor": "middle",
            "dominant-baseline": "middle",
            "font-family": config.styles.node.label_font_family,
            "font-size": config.styles.enzyme.label_font_size,
            "class": "sbgn-enzyme-label",
        },
    )
    sub(
        group,
        "line",
        {
            "x1": marker_x,
            "y1": center.y,
            "x2": box_center.x - sign * box.width / 2.0,
            "y2": center.y,
            "stroke": box.stroke,
            "stroke-width": box.stroke_width,
        },
    )
