"""Structural checks for pathway data. The renderer never calls these itself."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

import networkx as nx

from .models import CONNECTION_KINDS


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


def _connection_errors(connections: Any, owner: Optional[str] = None) -> List[str]:
    where = f" for {owner}" if owner else ""
    if not isinstance(connections, list):
        return [f"Connections{where} must be an array"]
    errors: List[str] = []
    for index, connection in enumerate(connections):
        if isinstance(connection, str):
            continue
        if not isinstance(connection, Mapping):
            errors.append(f"Connection at index {index}{where} must be an object")
            continue
        target = connection.get("targetId")
        if not target:
            errors.append(f"Connection at index {index}{where} is missing a targetId")
        elif not isinstance(target, str):
            errors.append(f"Connection at index {index}{where} has a non-string targetId")
        kind = connection.get("type")
        if kind and (not isinstance(kind, str) or kind not in CONNECTION_KINDS):
            errors.append(f"Invalid connection type{where}: {kind}")
    return errors


def validate_node(node: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(node, Mapping):
        result.errors.append("Node must be an object")
        return result
    if not node.get("id"):
        result.errors.append("Node is missing an ID")
    elif not isinstance(node["id"], str):
        result.errors.append("Node has a non-string ID")
    if node.get("connections") is not None:
        result.errors.extend(_connection_errors(node["connections"]))
    return result


def validate_pathway_data(data: Any) -> ValidationResult:
    """Collect every structural problem in ``data`` instead of stopping at the first."""
    result = ValidationResult()
    errors = result.errors
    if not isinstance(data, Mapping) or not isinstance(data.get("nodes"), list):
        errors.append("Pathway data must contain a nodes array")
        return result

    seen: Set[str] = set()
    for index, node in enumerate(data["nodes"]):
        if not isinstance(node, Mapping):
            errors.append(f"Node at index {index} must be an object")
            continue
        node_id = node.get("id")
        if not node_id:
            errors.append(f"Node at index {index} is missing an ID")
        elif not isinstance(node_id, str):
            errors.append(f"Node at index {index} has a non-string ID")
        elif node_id in seen:
            errors.append(f"Duplicate node ID: {node_id}")
        else:
            seen.add(node_id)
        if node.get("connections") is not None:
            errors.extend(_connection_errors(node["connections"], f"node {node_id}"))

    for node in data["nodes"]:
        if not isinstance(node, Mapping) or not isinstance(node.get("connections"), list):
            continue
        for connection in node["connections"]:
            target = connection if isinstance(connection, str) else None
            if isinstance(connection, Mapping):
                target = connection.get("targetId")
            if isinstance(target, str) and target and target not in seen:
                source = node.get("id")
                errors.append(
                    f"Connection from node {source} references non-existent node ID: {target}"
                )

    compartments = data.get("compartments")
    if compartments is not None:
        if not isinstance(compartments, list):
            errors.append("Compartments must be an array")
        else:
            for index, compartment in enumerate(compartments):
                errors.extend(_compartment_errors(compartment, index, seen))

    config = data.get("config")
    if config is not None and not isinstance(config, Mapping):
        errors.append("Config must be an object")
    return result


def _compartment_errors(compartment: Any, index: int, node_ids: Set[str]) -> List[str]:
    if not isinstance(compartment, Mapping):
        return [f"Compartment at index {index} must be an object"]
    errors: List[str] = []
    if not compartment.get("id") and not compartment.get("label"):
        errors.append(f"Compartment at index {index} must have either an ID or a label")
    name = compartment.get("id") or index
    intersect = compartment.get("intersectNodes")
    if intersect is None:
        return errors
    if not isinstance(intersect, list):
        errors.append(f"IntersectNodes for compartment {name} must be an array")
        return errors
    for node_id in intersect:
        if not isinstance(node_id, str):
            errors.append(f"Compartment {name} lists a non-string node ID: {node_id!r}")
        elif node_id not in node_ids:
            errors.append(f"Compartment {name} references non-existent node ID: {node_id}")
    return errors


def connection_graph(nodes: Sequence[Any]) -> nx.DiGraph:
    """Directed graph of node ids; edges follow connections, dangling targets included."""
    graph = nx.DiGraph()
    declared = [n for n in nodes if isinstance(n, Mapping) and _is_id(n.get("id"))]
    graph.add_nodes_from(node["id"] for node in declared)
    for node in declared:
        connections = node.get("connections")
        if not isinstance(connections, list):
            continue
        for connection in connections:
            target = connection if isinstance(connection, str) else None
            if isinstance(connection, Mapping):
                target = connection.get("targetId")
            if _is_id(target):
                graph.add_edge(node["id"], target)
    return graph


def find_circular_connections(nodes: Sequence[Any]) -> List[List[str]]:
    """Every elementary cycle as a closed id path, e.g. ``["a", "b", "a"]``.

    Each cycle starts at its earliest-declared node and cycles are ordered
    by that node, so the result does not depend on traversal internals.
    """
    graph = connection_graph(nodes)
    order = {node_id: position for position, node_id in enumerate(graph.nodes)}
    cycles: List[List[str]] = []
    for cycle in nx.simple_cycles(graph):
        pivot = min(range(len(cycle)), key=lambda i: order[cycle[i]])
        rotated = cycle[pivot:] + cycle[:pivot]
        cycles.append(rotated + [rotated[0]])
    cycles.sort(key=lambda c: [order[node_id] for node_id in c])
    return cycles


def _is_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value)
