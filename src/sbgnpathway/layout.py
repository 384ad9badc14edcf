"""Deterministic coordinate assignment for pathway entities and their connections."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from .config import LayoutConfig
from .geometry import Point, branch_endpoint, centroid, midpoint
from .models import Compartment, Connection, Entity

logger = logging.getLogger(__name__)

ENZYME_PAIR_OFFSET = 40.0
PAIRED_BRANCH_SPREAD = 300.0


@dataclass(frozen=True)
class EntityKey:
    entity_id: str

    def encode(self) -> str:
        return self.entity_id


@dataclass(frozen=True)
class JunctionKey:
    source_id: str
    target_id: str

    def encode(self) -> str:
        return f"junction:{self.source_id}:{self.target_id}"


@dataclass(frozen=True)
class BranchEndKey:
    source_id: str
    target_id: str

    def encode(self) -> str:
        return f"branch-end:{self.source_id}:{self.target_id}"


@dataclass(frozen=True)
class BranchJunctionKey:
    source_id: str
    target_id: str

    def encode(self) -> str:
        return f"branch-junction:{self.source_id}:{self.target_id}"


@dataclass(frozen=True)
class EnzymeSlotKey:
    source_id: str
    target_id: str
    index: int

    def encode(self) -> str:
        return f"enzyme:{self.source_id}:{self.target_id}:{self.index}"


PositionKey = Union[EntityKey, JunctionKey, BranchEndKey, BranchJunctionKey, EnzymeSlotKey]


def junction_key_for(source_id: str, connection: Connection) -> PositionKey:
    if connection.is_branch:
        return BranchJunctionKey(source_id, connection.target_id)
    return JunctionKey(source_id, connection.target_id)


class CoordinateTable:
    """Mapping from typed position keys to points, built fresh per render."""

    def __init__(self) -> None:
        self._points: Dict[PositionKey, Point] = {}

    def set(self, key: PositionKey, point: Point) -> None:
        self._points[key] = point

    def get(self, key: PositionKey) -> Optional[Point]:
        return self._points.get(key)

    def entity(self, entity_id: str) -> Optional[Point]:
        return self._points.get(EntityKey(entity_id))

    def __contains__(self, key: object) -> bool:
        return key in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PositionKey]:
        return iter(self._points)

    def items(self) -> List[Tuple[PositionKey, Point]]:
        return list(self._points.items())

    def max_y(self) -> Optional[float]:
        if not self._points:
            return None
        return max(point.y for point in self._points.values())

    def as_dict(self) -> Dict[str, Tuple[float, float]]:
        return {key.encode(): point.as_tuple() for key, point in self._points.items()}


def allocate_enzyme_slots(
    junction: Point,
    count: int,
    angle: Optional[float],
    horizontal_spacing: float,
) -> List[Point]:
    """One slot per enzyme, paired above/below the junction on one side.

    The side is right unless ``angle`` is negative. Even indices sit
    above the junction, odd indices below, so consecutive enzymes form the
    bracket drawn around the reaction site.
    """
    dx = horizontal_spacing if enzymes_on_right(angle) else -horizontal_spacing
    slots: List[Point] = []
    for index in range(count):
        dy = -ENZYME_PAIR_OFFSET if index % 2 == 0 else ENZYME_PAIR_OFFSET
        slots.append(Point(junction.x + dx, junction.y + dy))
    return slots


def enzymes_on_right(angle: Optional[float]) -> bool:
    return not angle or angle > 0


@dataclass
class _BranchPlan:
    count: int
    vertical_offset: float
    default_length: float


@dataclass
class _Frame:
    entity: Entity
    point: Point
    plan: _BranchPlan
    cursor: int = 0
    branch_ordinal: int = 0

    def next_connection(self) -> Optional[Tuple[int, Connection]]:
        if self.cursor >= len(self.entity.connections):
            return None
        index = self.cursor
        self.cursor += 1
        return index, self.entity.connections[index]


@dataclass
class PositionResolver:
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    def resolve(self, entities: Sequence[Entity]) -> CoordinateTable:
        table = CoordinateTable()
        by_id: Dict[str, Entity] = {}
        for entity in entities:
            by_id.setdefault(entity.id, entity)

        targeted: Set[str] = set()
        for entity in entities:
            for connection in entity.connections:
                if connection.target_id != entity.id:
                    targeted.add(connection.target_id)

        spacing = self.layout.vertical_spacing
        root_index = 0
        for entity in entities:
            if by_id[entity.id] is not entity or entity.id in targeted:
                continue
            seed = Point(self.layout.width / 2.0, spacing + root_index * spacing * 3)
            root_index += 1
            if EntityKey(entity.id) in table:
                continue
            self._walk(entity, seed, by_id, table)
        return table

    def _walk(
        self,
        root: Entity,
        seed: Point,
        by_id: Dict[str, Entity],
        table: CoordinateTable,
    ) -> None:
        table.set(EntityKey(root.id), seed)
        stack: List[_Frame] = [_Frame(root, seed, self._branch_plan(root))]
        while stack:
            frame = stack[-1]
            step = frame.next_connection()
            if step is None:
                stack.pop()
                continue
            index, connection = step
            target = by_id.get(connection.target_id)
            if target is None:
                logger.debug(
                    "skipping connection %s -> %s: unknown target",
                    frame.entity.id,
                    connection.target_id,
                )
                continue
            if connection.kind == "main":
                target_point = self._place_main(table, frame, connection)
            elif connection.kind == "branch":
                target_point = self._place_branch(table, frame, index, connection)
            else:
                logger.debug(
                    "skipping connection %s -> %s: unsupported kind %r",
                    frame.entity.id,
                    connection.target_id,
                    connection.kind,
                )
                continue
            target_key = EntityKey(target.id)
            if target_key in table:
                continue
            table.set(target_key, target_point)
            stack.append(_Frame(target, target_point, self._branch_plan(target)))

    def _branch_plan(self, entity: Entity) -> _BranchPlan:
        count = sum(1 for c in entity.connections if c.is_branch)
        if count >= 2:
            offset = self.layout.vertical_spacing * 2
            return _BranchPlan(count, offset, math.sqrt(PAIRED_BRANCH_SPREAD**2 + offset**2))
        return _BranchPlan(count, 0.0, self.layout.default_branch_length)

    def _place_main(self, table: CoordinateTable, frame: _Frame, connection: Connection) -> Point:
        source = frame.point
        target_point = Point(source.x, source.y + self.layout.vertical_spacing * 2)
        junction = midpoint(source, target_point)
        table.set(JunctionKey(frame.entity.id, connection.target_id), junction)
        self._place_enzymes(table, frame.entity.id, connection, junction, connection.angle)
        return target_point

    def _place_branch(
        self, table: CoordinateTable, frame: _Frame, index: int, connection: Connection
    ) -> Point:
        plan = frame.plan
        ordinal = frame.branch_ordinal
        frame.branch_ordinal += 1
        angle = connection.angle
        if angle is None:
            magnitude = self.layout.default_branch_angle * (1 + ordinal // 2)
            angle = magnitude if index % 2 else -magnitude
        length = connection.length if connection.length is not None else plan.default_length

        end = branch_endpoint(frame.point, angle, length, plan.vertical_offset)
        junction = branch_endpoint(frame.point, angle, length / 2.0, plan.vertical_offset / 2.0)
        table.set(BranchEndKey(frame.entity.id, connection.target_id), end)
        table.set(BranchJunctionKey(frame.entity.id, connection.target_id), junction)
        self._place_enzymes(table, frame.entity.id, connection, junction, angle)
        return end

    def _place_enzymes(
        self,
        table: CoordinateTable,
        source_id: str,
        connection: Connection,
        junction: Point,
        angle: Optional[float],
    ) -> None:
        if not connection.enzymes:
            return
        slots = allocate_enzyme_slots(
            junction, len(connection.enzymes), angle, self.layout.horizontal_spacing
        )
        for index, slot in enumerate(slots):
            table.set(EnzymeSlotKey(source_id, connection.target_id, index), slot)


def resolve_positions(
    entities: Sequence[Entity], layout: Optional[LayoutConfig] = None
) -> CoordinateTable:
    return PositionResolver(layout or LayoutConfig()).resolve(entities)


def locate_compartment(
    compartment: Compartment, table: CoordinateTable, layout: LayoutConfig
) -> Optional[Point]:
    """Band position for a compartment, or None when nothing it references is laid out.

    An explicit ``y`` is an offset from the anchor entity (the first
    intersecting node); with no intersecting nodes the anchor is the top
    edge of the canvas at its horizontal centre. Without ``y`` the band
    passes through the centroid of every intersecting node that resolves.
    """
    if compartment.y is not None:
        if not compartment.intersect_nodes:
            return Point(layout.width / 2.0, compartment.y)
        anchor = table.entity(compartment.intersect_nodes[0])
        if anchor is None:
            logger.debug(
                "compartment %s anchor %s is not laid out",
                compartment.id,
                compartment.intersect_nodes[0],
            )
            return None
        return Point(anchor.x, anchor.y + compartment.y)

    resolved = [table.entity(node_id) for node_id in compartment.intersect_nodes]
    point = centroid(p for p in resolved if p is not None)
    if point is None:
        logger.debug("compartment %s has no laid out intersecting nodes", compartment.id)
    return point
