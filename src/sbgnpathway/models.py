"""Pathway data model: entities, connections, enzymes, markers and compartments."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ENTITY_TYPES = (
    "default",
    "macromolecule",
    "simpleChemical",
    "process",
    "complex",
    "nucleicAcidFeature",
    "DNA",
    "RNA",
)
DECORATION_TYPES = ("DNA", "RNA")
CONNECTION_KINDS = ("main", "branch")
SBGN_CLASSES = ("production", "catalysis", "inhibition", "stimulation", "consumption")
INTERMEDIATE_TYPES = ("default", "process", "association", "dissociation")
MAX_MARKS = 4


class PathwayDataError(TypeError):
    """Raised when pathway input is not shaped like pathway data at all."""


class IdGenerator:
    """Deterministic fallback identifiers: ``node-1``, ``node-2``, ``enzyme-1``..."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}

    def next(self, prefix: str) -> str:
        count = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = count
        return f"{prefix}-{count}"


@dataclass(frozen=True)
class Marker:
    id: str
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, ids: IdGenerator) -> Optional["Marker"]:
        if data is None:
            return None
        if isinstance(data, Marker):
            return data
        if isinstance(data, str):
            return cls(id=ids.next("marker"), type=data or None)
        if not isinstance(data, Mapping):
            logger.debug("ignoring marker of type %s", type(data).__name__)
            return None
        return cls(
            id=data.get("id") or ids.next("marker"), type=_optional_str(data.get("type"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type}


@dataclass(frozen=True)
class Enzyme:
    id: str
    label: str = ""
    marker: Optional[Marker] = None
    style: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, ids: IdGenerator) -> "Enzyme":
        if isinstance(data, Enzyme):
            return data
        if isinstance(data, str):
            return cls(id=ids.next("enzyme"), label=data)
        data = _require_mapping(data, "enzyme")
        return cls(
            id=data.get("id") or ids.next("enzyme"),
            label=str(data.get("label") or ""),
            marker=Marker.from_dict(data.get("marker"), ids),
            style=_style(data.get("style")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "marker": self.marker.to_dict() if self.marker else None,
            "style": dict(self.style),
        }


@dataclass(frozen=True)
class AttachedBox:
    label: str = ""
    width: float = 80.0
    height: float = 40.0
    side: str = "right"
    fill: str = "white"
    stroke: str = "black"
    stroke_width: float = 2.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttachedBox":
        return cls(
            label=str(data.get("label") or ""),
            width=_number(data.get("width"), 80.0),
            height=_number(data.get("height"), 40.0),
            side="left" if data.get("side") == "left" else "right",
            fill=data.get("fill", "white"),
            stroke=data.get("stroke", "black"),
            stroke_width=_number(data.get("strokeWidth"), 2.0),
        )


@dataclass(frozen=True)
class IntermediateElement:
    label: str = ""
    type: str = "default"
    width: float = 120.0
    height: float = 40.0
    size: float = 20.0
    fill: str = "white"
    stroke: str = "black"
    stroke_width: float = 2.0
    attached_box: Optional[AttachedBox] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["IntermediateElement"]:
        if isinstance(data, IntermediateElement):
            return data
        if not isinstance(data, Mapping):
            if data is not None:
                logger.debug("ignoring intermediate element of type %s", type(data).__name__)
            return None
        attached = data.get("attachedBox")
        return cls(
            label=str(data.get("label") or ""),
            type=_optional_str(data.get("type")) or "default",
            width=_number(data.get("width"), 120.0),
            height=_number(data.get("height"), 40.0),
            size=_number(data.get("size"), 20.0),
            fill=data.get("fill", "white"),
            stroke=data.get("stroke", "black"),
            stroke_width=_number(data.get("strokeWidth"), 2.0),
            attached_box=AttachedBox.from_dict(attached) if isinstance(attached, Mapping) else None,
        )


@dataclass(frozen=True)
class Connection:
    target_id: str
    kind: str = "main"
    id: str = ""
    angle: Optional[float] = None
    length: Optional[float] = None
    enzymes: Tuple[Enzyme, ...] = ()
    intermediate_element: Optional[IntermediateElement] = None
    end_decoration: Optional[str] = None
    end_decoration_label: Optional[str] = None
    sbgn_class: Optional[str] = None
    marker: Optional[str] = None
    label: str = ""
    style: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_branch(self) -> bool:
        return self.kind == "branch"

    @classmethod
    def from_dict(cls, data: Any, ids: IdGenerator) -> "Connection":
        if isinstance(data, Connection):
            return data
        if isinstance(data, str):
            return cls(target_id=data, kind="main", id=ids.next("connection"))
        data = _require_mapping(data, "connection")
        raw_enzymes = data.get("enzymes") or []
        if not isinstance(raw_enzymes, list):
            logger.debug("connection to %r has non-list enzymes; ignoring", data.get("targetId"))
            raw_enzymes = []
        decoration = data.get("endDecoration")
        return cls(
            target_id=str(data.get("targetId") or ""),
            kind=_optional_str(data.get("type") or data.get("kind")) or "main",
            id=data.get("id") or ids.next("connection"),
            angle=_optional_float(data.get("angle")),
            length=_optional_float(data.get("length")),
            enzymes=tuple(
                Enzyme.from_dict(e, ids)
                for e in raw_enzymes
                if isinstance(e, (str, Mapping, Enzyme))
            ),
            intermediate_element=IntermediateElement.from_dict(data.get("intermediateElement")),
            end_decoration=decoration if decoration in DECORATION_TYPES else None,
            end_decoration_label=_optional_str(data.get("endDecorationLabel")),
            sbgn_class=_optional_str(data.get("sbgnClass")),
            marker=_optional_str(data.get("marker")),
            label=str(data.get("label") or ""),
            style=_style(data.get("style")),
        )

    def add_enzyme(self, enzyme: Enzyme) -> "Connection":
        return replace(self, enzymes=self.enzymes + (enzyme,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "targetId": self.target_id,
            "type": self.kind,
            "angle": self.angle,
            "length": self.length,
            "sbgnClass": self.sbgn_class,
            "marker": self.marker,
            "label": self.label,
            "enzymes": [e.to_dict() for e in self.enzymes],
            "endDecoration": self.end_decoration,
            "endDecorationLabel": self.end_decoration_label,
            "style": dict(self.style),
        }


@dataclass(frozen=True)
class Entity:
    id: str
    label: str = ""
    entity_type: str = "default"
    marks: Tuple[Optional[Marker], ...] = ()
    connections: Tuple[Connection, ...] = ()
    style: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, ids: IdGenerator) -> "Entity":
        if isinstance(data, Entity):
            return data
        data = _require_mapping(data, "node")
        entity_type = _optional_str(data.get("entityType"))
        if not entity_type and data.get("type") in DECORATION_TYPES:
            entity_type = data.get("type")
        raw_connections = data.get("connections") or []
        if not isinstance(raw_connections, list):
            logger.debug("node %r has non-list connections; ignoring", data.get("id"))
            raw_connections = []
        raw_marks = data.get("marks") or []
        if not isinstance(raw_marks, list):
            raw_marks = []
        return cls(
            id=str(data.get("id") or ids.next("node")),
            label=str(data.get("label") or ""),
            entity_type=entity_type or "default",
            marks=tuple(Marker.from_dict(m, ids) for m in raw_marks[:MAX_MARKS]),
            connections=tuple(
                Connection.from_dict(c, ids)
                for c in raw_connections
                if isinstance(c, (str, Mapping, Connection))
            ),
            style=_style(data.get("style")),
        )

    def add_connection(self, connection: Connection) -> "Entity":
        return replace(self, connections=self.connections + (connection,))

    def add_marker(self, marker: Marker, position: int = 0) -> "Entity":
        if not 0 <= position < MAX_MARKS:
            raise ValueError(f"marker position must be between 0 and {MAX_MARKS - 1}")
        marks: List[Optional[Marker]] = list(self.marks)
        while len(marks) <= position:
            marks.append(None)
        marks[position] = marker
        return replace(self, marks=tuple(marks))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "entityType": self.entity_type,
            "marks": [m.to_dict() if m else None for m in self.marks],
            "connections": [c.to_dict() for c in self.connections],
            "style": dict(self.style),
        }


@dataclass(frozen=True)
class Compartment:
    id: str
    label: str = ""
    y: Optional[float] = None
    intersect_nodes: Tuple[str, ...] = ()
    color: Optional[str] = None
    stroke_width: float = 3.0
    type: str = "default"

    @classmethod
    def from_dict(cls, data: Any, ids: IdGenerator) -> "Compartment":
        if isinstance(data, Compartment):
            return data
        data = _require_mapping(data, "compartment")
        intersect = data.get("intersectNodes") or []
        if not isinstance(intersect, list):
            intersect = []
        return cls(
            id=str(data.get("id") or ids.next("compartment")),
            label=str(data.get("label") or ""),
            y=_optional_float(data.get("y")),
            intersect_nodes=tuple(str(node_id) for node_id in intersect),
            color=_optional_str(data.get("color")),
            stroke_width=_number(data.get("strokeWidth"), 3.0) or 3.0,
            type=_optional_str(data.get("type")) or "default",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "y": self.y,
            "intersectNodes": list(self.intersect_nodes),
            "color": self.color,
            "strokeWidth": self.stroke_width,
            "type": self.type,
        }


@dataclass(frozen=True)
class Pathway:
    nodes: Tuple[Entity, ...]
    compartments: Tuple[Compartment, ...] = ()
    config: Optional[Mapping[str, Any]] = None


def parse_pathway(data: Any, ids: Optional[IdGenerator] = None) -> Pathway:
    """Build the immutable model from caller data.

    Only boundary violations raise (non-mapping data, missing ``nodes``
    list, non-mapping node entries). Structural problems such as dangling
    references are left for the layout to tolerate.
    """
    if not isinstance(data, Mapping):
        raise PathwayDataError("pathway data must be a mapping")
    nodes = data.get("nodes")
    if not isinstance(nodes, list):
        raise PathwayDataError('pathway data must include a "nodes" list')
    ids = ids or IdGenerator()
    entities = tuple(Entity.from_dict(node, ids) for node in nodes)
    raw_compartments = data.get("compartments") or []
    if not isinstance(raw_compartments, list):
        logger.debug("compartments is not a list; ignoring")
        raw_compartments = []
    compartments = tuple(
        Compartment.from_dict(c, ids)
        for c in raw_compartments
        if isinstance(c, (Mapping, Compartment))
    )
    config = data.get("config")
    return Pathway(nodes=entities, compartments=compartments, config=config)


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise PathwayDataError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("ignoring non-numeric value %r", value)
        return None


def _number(value: Any, default: float) -> float:
    number = _optional_float(value)
    return default if number is None else number


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _style(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        logger.debug("ignoring style of type %s", type(value).__name__)
        return {}
    return dict(value)
