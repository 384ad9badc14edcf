"""Whole-document assembly and the public rendering entry points."""
from __future__ import annotations

import copy
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from .compartments import CompartmentComposer
from .config import ConfigError, PathwayConfig, build_config
from .connections import ConnectionComposer
from .geometry import fmt
from .layout import CoordinateTable, PositionResolver
from .models import Connection, Entity, IdGenerator, Pathway, parse_pathway
from .shapes import ShapeComposer
from .svg import element, pretty_xml, sub
from .text import TextMeasurer
from .themes import ThemeRegistry

logger = logging.getLogger(__name__)

STYLE_SHEET = """
.sbgn-node { cursor: pointer; }
.sbgn-node:hover { stroke: #3182CE; stroke-width: 3px; }
.sbgn-enzyme { cursor: pointer; }
.sbgn-enzyme:hover { stroke: #3182CE; stroke-width: 2px; }
.sbgn-compartment-label { font-family: Arial, sans-serif; }
"""

ConfigInput = Union[PathwayConfig, Mapping[str, Any], None]


def _as_config(config: ConfigInput) -> PathwayConfig:
    if config is None:
        return PathwayConfig()
    if isinstance(config, PathwayConfig):
        return config
    return build_config(config)


class DocumentComposer:
    """Lays out a parsed pathway and composes the complete ``<svg>`` tree."""

    def __init__(
        self, config: Optional[PathwayConfig] = None, measurer: Optional[TextMeasurer] = None
    ) -> None:
        self.config = config or PathwayConfig()
        self.shapes = ShapeComposer(self.config, measurer)
        self.connections = ConnectionComposer(self.config, self.shapes)
        self.compartments = CompartmentComposer(self.config)

    def resolve(self, pathway: Pathway) -> CoordinateTable:
        return PositionResolver(self.config.layout).resolve(pathway.nodes)

    def canvas_size(self, table: CoordinateTable) -> Tuple[float, float]:
        layout = self.config.layout
        height = layout.height
        max_y = table.max_y()
        if layout.auto_resize and max_y is not None:
            height = max_y + layout.vertical_spacing
        return layout.width, height

    def compose(self, pathway: Pathway, table: Optional[CoordinateTable] = None) -> ET.Element:
        if table is None:
            table = self.resolve(pathway)
        width, height = self.canvas_size(table)
        root = element(
            "svg",
            {
                "width": width,
                "height": height,
                "viewBox": f"0 0 {fmt(width)} {fmt(height)}",
                "class": "sbgn-pathway",
            },
        )
        style = sub(root, "style")
        style.text = STYLE_SHEET
        defs = self._defs(root)

        wrapper = sub(root, "g", {"id": "pathway-content-wrapper"})
        compartment_layer = sub(wrapper, "g", {"class": "sbgn-compartments"})
        slugs: Set[str] = set()
        for compartment in pathway.compartments:
            fragment = self.compartments.render(compartment, table, slugs)
            if fragment is None:
                logger.debug("compartment %s could not be placed; skipped", compartment.id)
                continue
            defs.extend(fragment.defs)
            compartment_layer.append(fragment.group)

        connection_layer = sub(wrapper, "g", {"class": "sbgn-connection-layer"})
        for entity in pathway.nodes:
            group = self.connections.render(entity, table)
            if group is not None:
                connection_layer.append(group)

        node_layer = sub(wrapper, "g", {"class": "sbgn-node-layer"})
        for entity in pathway.nodes:
            group = self.shapes.render(entity, table.entity(entity.id))
            if group is not None:
                node_layer.append(group)
        return root

    def _defs(self, root: ET.Element) -> ET.Element:
        stroke = self.config.styles.connection.stroke
        size = self.config.styles.connection.arrow_size
        defs = sub(root, "defs")

        arrowhead = _marker(defs, "arrowhead", size, size * 0.7, size * 0.9, size * 0.35)
        points = f"0 0, {fmt(size)} {fmt(size * 0.35)}, 0 {fmt(size * 0.7)}"
        sub(arrowhead, "polygon", {"points": points, "fill": stroke})
        inhibition = _marker(defs, "inhibition", 10, 10, 9, 5)
        sub(
            inhibition,
            "line",
            {"x1": 0, "y1": 0, "x2": 0, "y2": 10, "stroke": stroke, "stroke-width": 2},
        )
        catalysis = _marker(defs, "catalysis", 10, 10, 10, 5)
        sub(
            catalysis,
            "circle",
            {"cx": 5, "cy": 5, "r": 4, "fill": "white", "stroke": stroke, "stroke-width": 1},
        )
        stimulation = _marker(defs, "stimulation", 10, 8, 9, 4)
        sub(
            stimulation,
            "polyline",
            {"points": "0 0, 8 4, 0 8", "fill": "none", "stroke": stroke, "stroke-width": 1.5},
        )

        shadow = sub(defs, "filter", {"id": "dropShadow", "height": "130%"})
        sub(shadow, "feGaussianBlur", {"in": "SourceAlpha", "stdDeviation": 3})
        sub(shadow, "feOffset", {"dx": 2, "dy": 2, "result": "offsetblur"})
        transfer = sub(shadow, "feComponentTransfer")
        sub(transfer, "feFuncA", {"type": "linear", "slope": 0.2})
        merge = sub(shadow, "feMerge")
        sub(merge, "feMergeNode")
        sub(merge, "feMergeNode", {"in": "SourceGraphic"})

        # paint servers for styles that set fill to url(#nodeGradient) or url(#enzymeGradient)
        gradients = (("nodeGradient", "#F7FAFC"), ("enzymeGradient", "#EDF2F7"))
        for gradient_id, end_color in gradients:
            gradient = sub(
                defs,
                "linearGradient",
                {"id": gradient_id, "x1": "0%", "y1": "0%", "x2": "0%", "y2": "100%"},
            )
            sub(gradient, "stop", {"offset": "0%", "stop-color": "#FFFFFF", "stop-opacity": 1})
            sub(gradient, "stop", {"offset": "100%", "stop-color": end_color, "stop-opacity": 1})
        return defs


def _marker(
    defs: ET.Element, marker_id: str, width: float, height: float, ref_x: float, ref_y: float
) -> ET.Element:
    return sub(
        defs,
        "marker",
        {
            "id": marker_id,
            "markerWidth": width,
            "markerHeight": height,
            "refX": ref_x,
            "refY": ref_y,
            "orient": "auto",
        },
    )


def _effective_config(base: PathwayConfig, pathway: Pathway) -> PathwayConfig:
    """Per-render overrides from the data's own ``config`` block; ``base`` is left untouched."""
    if pathway.config is None:
        return base
    return base.update(pathway.config)


def compose(
    data: Any, *, config: ConfigInput = None, measurer: Optional[TextMeasurer] = None
) -> ET.Element:
    pathway = parse_pathway(data)
    effective = _effective_config(_as_config(config), pathway)
    return DocumentComposer(effective, measurer).compose(pathway)


def render(
    data: Any, *, config: ConfigInput = None, measurer: Optional[TextMeasurer] = None
) -> str:
    """Render pathway ``data`` to SVG text.

    ``config`` may be a ready :class:`PathwayConfig` or a camelCase patch
    mapping. A ``config`` block inside ``data`` applies to this call only.
    Raises :class:`PathwayDataError` when ``data`` is not pathway-shaped and
    :class:`ConfigError` when a configuration patch is malformed.
    """
    return pretty_xml(compose(data, config=config, measurer=measurer))


class SBGNPathway:
    """Stateful front end: holds a configuration and a theme registry between renders.

    The configuration is rebuilt, never mutated, whenever a theme or patch is
    applied. Instance patches always win over the active theme's styles.
    """

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        theme: Optional[str] = None,
        registry: Optional[ThemeRegistry] = None,
        measurer: Optional[TextMeasurer] = None,
    ) -> None:
        self.registry = registry or ThemeRegistry()
        self.measurer = measurer
        self._ids = IdGenerator()
        self._theme_name = "default"
        self._patches: List[Mapping[str, Any]] = []
        if config is not None:
            self._patches.append(self._checked_patch(config))
        if theme is not None:
            self._theme_name = theme
        self.config = self._build()

    @property
    def theme(self) -> str:
        return self._theme_name

    def _checked_patch(self, patch: Any) -> Mapping[str, Any]:
        if not isinstance(patch, Mapping):
            raise ConfigError(f"config patch must be a mapping, got {type(patch).__name__}")
        return copy.deepcopy(dict(patch))

    def _build(self) -> PathwayConfig:
        theme = self.registry.get_theme(self._theme_name)
        config = build_config(theme_styles=theme.styles)
        for patch in self._patches:
            config = config.update(patch)
        return config

    def apply_theme(self, name: str) -> "SBGNPathway":
        if not self.registry.has_theme(name):
            logger.warning('theme "%s" not found, using default theme', name)
            name = "default"
        self._theme_name = name
        self.config = self._build()
        return self

    def set_config(self, patch: Any) -> "SBGNPathway":
        checked = self._checked_patch(patch)
        config = self.config.update(checked)
        self._patches.append(checked)
        self.config = config
        return self

    def register_theme(
        self, name: str, styles: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> "SBGNPathway":
        self.registry.register_theme(name, styles, **kwargs)
        return self

    def list_themes(self) -> List[Dict[str, Any]]:
        return self.registry.list_themes()

    def create_node(self, data: Optional[Mapping[str, Any]] = None, **fields: Any) -> Entity:
        return Entity.from_dict({**(data or {}), **fields}, self._ids)

    def create_connection(
        self, data: Optional[Mapping[str, Any]] = None, **fields: Any
    ) -> Connection:
        return Connection.from_dict({**(data or {}), **fields}, self._ids)

    def compose(self, data: Any) -> ET.Element:
        return compose(data, config=self.config, measurer=self.measurer)

    def render(self, data: Any) -> str:
        return render(data, config=self.config, measurer=self.measurer)
