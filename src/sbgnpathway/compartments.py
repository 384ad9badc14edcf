"""Compartment bands: gradient background, double arc boundary and label."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .config import PathwayConfig
from .geometry import Point, fmt
from .layout import CoordinateTable, locate_compartment
from .models import Compartment
from .svg import element, sub, text

BAND_HALF_HEIGHT = 100.0
LABEL_X = 20.0


@dataclass
class CompartmentFragment:
    """A drawn compartment: its paint servers for ``<defs>`` and the band itself."""

    defs: List[ET.Element] = field(default_factory=list)
    group: Optional[ET.Element] = None


def _slug(value: str, taken: Optional[Set[str]] = None) -> str:
    """Id-safe form of ``value``, suffixed with a counter when already in ``taken``."""
    base = re.sub(r"[^A-Za-z0-9_-]+", "-", value).strip("-") or "compartment"
    if taken is None:
        return base
    slug, count = base, 1
    while slug in taken:
        count += 1
        slug = f"{base}-{count}"
    taken.add(slug)
    return slug


class CompartmentComposer:
    def __init__(self, config: PathwayConfig) -> None:
        self.config = config

    def arc_d(self, y: float) -> str:
        width = self.config.layout.width
        control = self.config.compartments.curve_control
        return f"M 0 {fmt(y)} Q {fmt(width / 2)} {fmt(y - control)} {fmt(width)} {fmt(y)}"

    def render(
        self,
        compartment: Compartment,
        table: CoordinateTable,
        taken: Optional[Set[str]] = None,
    ) -> Optional[CompartmentFragment]:
        """Draw one compartment; pass the same ``taken`` set for every compartment of a document."""
        position = locate_compartment(compartment, table, self.config.layout)
        if position is None:
            return None
        slug = _slug(compartment.id, taken)
        color = compartment.color or self.config.styles.compartment.default_color
        fragment = CompartmentFragment(
            defs=[self._band_gradient(slug, color), *self._fade_mask(slug, position)]
        )
        fragment.group = self._band(compartment, slug, color, position)
        return fragment

    def _band_gradient(self, slug: str, color: str) -> ET.Element:
        gradient = element(
            "linearGradient",
            {"id": f"gradient-{slug}", "x1": 0, "y1": 0, "x2": 0, "y2": 1},
        )
        opacity = self.config.compartments.opacity
        for offset, stop_opacity in (("0%", 0), ("50%", opacity), ("100%", 0)):
            sub(
                gradient,
                "stop",
                {"offset": offset, "stop-color": color, "stop-opacity": stop_opacity},
            )
        return gradient

    def _fade_mask(self, slug: str, position: Point) -> List[ET.Element]:
        """Horizontal fade so the band dissolves towards the canvas edges."""
        fade = element(
            "linearGradient", {"id": f"fade-{slug}", "x1": 0, "y1": 0, "x2": 1, "y2": 0}
        )
        for offset, stop_opacity in (("0%", 0), ("10%", 1), ("90%", 1), ("100%", 0)):
            sub(
                fade,
                "stop",
                {"offset": offset, "stop-color": "white", "stop-opacity": stop_opacity},
            )
        mask = element("mask", {"id": f"mask-{slug}", "maskUnits": "userSpaceOnUse"})
        sub(
            mask,
            "rect",
            {
                "x": 0,
                "y": position.y - BAND_HALF_HEIGHT,
                "width": self.config.layout.width,
                "height": BAND_HALF_HEIGHT * 2,
                "fill": f"url(#fade-{slug})",
            },
        )
        return [fade, mask]

    def _band(
        self, compartment: Compartment, slug: str, color: str, position: Point
    ) -> ET.Element:
        width = self.config.layout.width
        style = self.config.styles.compartment
        y = position.y
        group = element(
            "g",
            {
                "class": "sbgn-compartment",
                "data-compartment-id": compartment.id,
                "data-compartment-type": compartment.type,
            },
        )
        top, bottom = y - BAND_HALF_HEIGHT, y + BAND_HALF_HEIGHT
        sub(
            group,
            "path",
            {
                "d": f"M 0 {fmt(top)} L {fmt(width)} {fmt(top)} "
                f"L {fmt(width)} {fmt(bottom)} L 0 {fmt(bottom)} Z",
                "fill": f"url(#gradient-{slug})",
                "mask": f"url(#mask-{slug})",
                "class": "sbgn-compartment-band",
            },
        )
        for line_y in (y, y + self.config.compartments.line_spacing):
            sub(
                group,
                "path",
                {
                    "d": self.arc_d(line_y),
                    "fill": "none",
                    "stroke": color,
                    "stroke-width": compartment.stroke_width,
                    "stroke-opacity": style.stroke_opacity,
                    "class": "sbgn-compartment-boundary",
                },
            )
        text(
            group,
            compartment.label,
            {
                "x": LABEL_X,
                "y": y - self.config.compartments.label_offset,
                "fill": color,
                "font-weight": style.font_weight,
                "font-family": self.config.styles.node.label_font_family,
                "font-size": style.font_size,
                "class": "sbgn-compartment-label",
            },
        )
        return group
