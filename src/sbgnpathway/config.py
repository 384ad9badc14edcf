"""Immutable rendering configuration and the pure defaulting/merge functions."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional


class ConfigError(TypeError):
    """Raised when a configuration patch is not shaped like a mapping."""


DEFAULT_MARKER_COLORS: Dict[str, str] = {
    "P": "#FFD700",
    "O": "#FF4444",
    "S": "#33CC33",
    "N": "#6666FF",
}

SBGN_ENTITY_STYLES: Dict[str, Dict[str, Any]] = {
    "process": {"shape": "square", "size": 20, "fill": "#FFFFFF", "stroke": "#000000"},
    "macromolecule": {
        "shape": "roundedRectangle",
        "cornerRadius": 15,
        "fill": "#8FC7E8",
        "stroke": "#0F4C81",
    },
    "simpleChemical": {"shape": "circle", "fill": "#EEEEEE", "stroke": "#666666"},
    "complex": {"shape": "octagon", "fill": "#F1948A", "stroke": "#943126"},
    "nucleicAcidFeature": {
        "shape": "bottomRoundedRectangle",
        "fill": "#C39BD3",
        "stroke": "#7D3C98",
    },
}

SBGN_ARC_STYLES: Dict[str, Dict[str, Any]] = {
    "consumption": {"stroke": "#000000", "strokeWidth": 2, "arrowHead": "none"},
    "production": {"stroke": "#000000", "strokeWidth": 2, "arrowHead": "triangle"},
    "catalysis": {"stroke": "#000000", "strokeWidth": 2, "arrowHead": "circle"},
    "inhibition": {"stroke": "#000000", "strokeWidth": 2, "arrowHead": "bar"},
    "stimulation": {"stroke": "#000000", "strokeWidth": 2, "arrowHead": "arrow"},
}


@dataclass(frozen=True)
class LayoutConfig:
    width: float = 800.0
    height: float = 1600.0
    node_width: float = 180.0
    node_height: float = 70.0
    vertical_spacing: float = 120.0
    horizontal_spacing: float = 140.0
    enzyme_box_size: float = 60.0
    intermediate_box_size: float = 20.0
    marker_radius: float = 8.0
    default_branch_angle: float = 30.0
    default_branch_length: float = 200.0
    padding: float = 20.0
    auto_resize: bool = True


@dataclass(frozen=True)
class CompartmentLayout:
    line_spacing: float = 10.0
    label_offset: float = 30.0
    curve_control: float = 50.0
    opacity: float = 0.3


@dataclass(frozen=True)
class NodeStyle:
    fill: str = "#FFFFFF"
    stroke: str = "#333333"
    stroke_width: float = 2.0
    class_name: str = ""
    label_font_size: float = 12.0
    label_font_family: str = "Arial, sans-serif"
    label_font_weight: str = "normal"
    corner_radius: float = 0.0
    size: float = 20.0
    drop_shadow: bool = False
    inner_stroke: bool = True


@dataclass(frozen=True)
class ConnectionStyle:
    stroke: str = "#333333"
    stroke_width: float = 2.0
    class_name: str = ""
    dash_array: str = ""
    arrow_size: float = 10.0
    curve: str = "linear"
    label_font_size: float = 10.0
    label_distance: float = 10.0


@dataclass(frozen=True)
class EnzymeStyle:
    fill: str = "#FFFFFF"
    stroke: str = "#333333"
    stroke_width: float = 2.0
    class_name: str = ""
    label_font_size: float = 10.0
    corner_radius: float = 0.0


@dataclass(frozen=True)
class MarkerStyle:
    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MARKER_COLORS))
    font_weight: str = "bold"
    font_size: float = 10.0

    def color_for(self, mark_type: Optional[str]) -> str:
        if not mark_type:
            return "white"
        return self.colors.get(mark_type, "white")


@dataclass(frozen=True)
class CompartmentStyle:
    default_color: str = "#CCCCCC"
    stroke_opacity: float = 0.8
    font_weight: str = "bold"
    font_size: float = 14.0


@dataclass(frozen=True)
class DNAStyle:
    strand1_color: str = "#4299E1"
    strand2_color: str = "#805AD5"
    stroke_width: float = 2.0
    wave_height: float = 20.0
    wave_count: int = 3


@dataclass(frozen=True)
class RNAStyle:
    strand_color: str = "#C05621"
    stroke_width: float = 2.0
    wave_height: float = 15.0
    wave_count: int = 4


@dataclass(frozen=True)
class Styles:
    node: NodeStyle = field(default_factory=NodeStyle)
    connection: ConnectionStyle = field(default_factory=ConnectionStyle)
    enzyme: EnzymeStyle = field(default_factory=EnzymeStyle)
    marker: MarkerStyle = field(default_factory=MarkerStyle)
    compartment: CompartmentStyle = field(default_factory=CompartmentStyle)
    dna: DNAStyle = field(default_factory=DNAStyle)
    rna: RNAStyle = field(default_factory=RNAStyle)


@dataclass(frozen=True)
class PathwayConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    compartments: CompartmentLayout = field(default_factory=CompartmentLayout)
    styles: Styles = field(default_factory=Styles)
    entity_styles: Dict[str, Dict[str, Any]] = field(
        default_factory=lambda: {k: dict(v) for k, v in SBGN_ENTITY_STYLES.items()}
    )
    arc_styles: Dict[str, Dict[str, Any]] = field(
        default_factory=lambda: {k: dict(v) for k, v in SBGN_ARC_STYLES.items()}
    )

    def update(self, patch: Mapping[str, Any]) -> "PathwayConfig":
        """Return a new configuration with ``patch`` applied on top of this one."""
        return _apply_config_patch(self, patch)


_SECTION_KEYS = {"layout", "compartments", "styles", "sbgnEntityStyles", "sbgnArcStyles"}


def build_config(
    patch: Optional[Mapping[str, Any]] = None,
    theme_styles: Optional[Mapping[str, Any]] = None,
) -> PathwayConfig:
    """Build a configuration from defaults, a theme and an instance patch.

    Precedence is key-by-key: values in ``patch`` win over ``theme_styles``,
    which win over the built-in defaults. Keys that are not known
    configuration fields are ignored.
    """
    config = PathwayConfig()
    if theme_styles:
        config = replace(config, styles=merge_styles(config.styles, theme_styles))
    if patch is not None:
        config = _apply_config_patch(config, patch)
    return config


def merge_styles(base: Styles, *layers: Optional[Mapping[str, Any]]) -> Styles:
    """Apply style layers in order; later layers take precedence."""
    result = base
    for layer in layers:
        if layer is None:
            continue
        _require_mapping(layer, "styles")
        updates: Dict[str, Any] = {}
        for f in fields(result):
            section = _lookup(layer, f.name)
            if section is None:
                continue
            _require_mapping(section, f"styles.{f.name}")
            updates[f.name] = patch_dataclass(getattr(result, f.name), section)
        if updates:
            result = replace(result, **updates)
    return result


def _apply_config_patch(config: PathwayConfig, patch: Mapping[str, Any]) -> PathwayConfig:
    _require_mapping(patch, "config")
    layout_patch: Dict[str, Any] = {
        key: value for key, value in patch.items() if key not in _SECTION_KEYS
    }
    nested_layout = patch.get("layout")
    if nested_layout is not None:
        _require_mapping(nested_layout, "layout")
        layout_patch.update(nested_layout)

    updates: Dict[str, Any] = {}
    if layout_patch:
        updates["layout"] = patch_dataclass(config.layout, layout_patch)
    compartments = patch.get("compartments")
    if compartments is not None:
        _require_mapping(compartments, "compartments")
        updates["compartments"] = patch_dataclass(config.compartments, compartments)
    styles = patch.get("styles")
    if styles is not None:
        updates["styles"] = merge_styles(config.styles, styles)
    for key, attr in (("sbgnEntityStyles", "entity_styles"), ("sbgnArcStyles", "arc_styles")):
        table = patch.get(key)
        if table is None:
            continue
        _require_mapping(table, key)
        merged = {name: dict(values) for name, values in getattr(config, attr).items()}
        for name, values in table.items():
            _require_mapping(values, f"{key}.{name}")
            merged.setdefault(name, {}).update(values)
        updates[attr] = merged
    if not updates:
        return config
    return replace(config, **updates)


def patch_dataclass(obj: Any, patch: Mapping[str, Any]) -> Any:
    changes: Dict[str, Any] = {}
    for f in fields(obj):
        value = _lookup(patch, f.name)
        if value is None:
            continue
        current = getattr(obj, f.name)
        if isinstance(current, dict):
            _require_mapping(value, f.name)
            merged = dict(current)
            merged.update(value)
            value = merged
        elif isinstance(current, bool):
            if not isinstance(value, bool):
                raise ConfigError(f"{f.name} must be true or false, got {value!r}")
        elif isinstance(current, (int, float)) and not isinstance(value, bool):
            try:
                value = type(current)(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"{f.name} must be numeric, got {value!r}") from exc
        changes[f.name] = value
    if not changes:
        return obj
    return replace(obj, **changes)


def style_mapping(obj: Any) -> Dict[str, Any]:
    """A style dataclass as a camelCase dict, the key shape used by overrides."""
    return {camel_case(f.name): getattr(obj, f.name) for f in fields(obj)}


def _lookup(mapping: Mapping[str, Any], snake_name: str) -> Any:
    if snake_name in mapping:
        return mapping[snake_name]
    camel = camel_case(snake_name)
    if camel in mapping:
        return mapping[camel]
    return None


def _require_mapping(value: Any, where: str) -> None:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where} must be a mapping, got {type(value).__name__}")


def camel_case(snake_name: str) -> str:
    return re.sub(r"_([a-z0-9])", lambda m: m.group(1).upper(), snake_name)
