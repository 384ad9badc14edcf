"""Planar geometry helpers shared by the layout resolver and the composers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def branch_endpoint(
    origin: Point, angle: float, length: float, vertical_offset: float = 0.0
) -> Point:
    """Endpoint of a branch leaving ``origin`` at ``angle`` degrees from vertical.

    Angles grow clockwise from straight down: positive angles lean right.
    ``vertical_offset`` is added after the trigonometric step so paired
    branches can be pushed down to the depth of a main-path step.
    """
    radians = math.radians(angle)
    return Point(
        origin.x + length * math.sin(radians),
        origin.y + length * math.cos(radians) + vertical_offset,
    )


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def perpendicular_offset(a: Point, b: Point, distance: float) -> Point:
    """Point ``distance`` away from the midpoint of ``a``-``b``, on its left normal."""
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    mid = midpoint(a, b)
    if length == 0:
        return mid
    return Point(mid.x + (-dy / length) * distance, mid.y + (dx / length) * distance)


def bezier_control_points(a: Point, b: Point) -> Tuple[Point, Point]:
    """Cubic control points at the thirds of the chord."""
    dx = b.x - a.x
    dy = b.y - a.y
    return Point(a.x + dx / 3.0, a.y + dy / 3.0), Point(b.x - dx / 3.0, b.y - dy / 3.0)


def quadratic_control_point(a: Point, b: Point, curve_factor: float = 0.5) -> Point:
    mid = midpoint(a, b)
    bend = curve_factor * 100.0
    if abs(b.x - a.x) < 10:
        return Point(mid.x + bend, mid.y)
    if abs(b.y - a.y) < 10:
        return Point(mid.x, mid.y + bend)
    dx = b.x - a.x
    dy = b.y - a.y
    norm = math.hypot(dx, dy)
    return Point(mid.x + bend * (-dy / norm), mid.y + bend * (dx / norm))


def connection_path_d(
    a: Point, b: Point, curve: str = "linear", curvature: float = 0.5
) -> str:
    """SVG path data between two points for the configured curve style."""
    if curve == "curved":
        cp = quadratic_control_point(a, b, curvature)
        return f"M {fmt(a.x)} {fmt(a.y)} Q {fmt(cp.x)} {fmt(cp.y)} {fmt(b.x)} {fmt(b.y)}"
    if curve == "bezier":
        c1, c2 = bezier_control_points(a, b)
        return (
            f"M {fmt(a.x)} {fmt(a.y)} C {fmt(c1.x)} {fmt(c1.y)} "
            f"{fmt(c2.x)} {fmt(c2.y)} {fmt(b.x)} {fmt(b.y)}"
        )
    if curve == "stepped":
        mid_y = (a.y + b.y) / 2.0
        return (
            f"M {fmt(a.x)} {fmt(a.y)} L {fmt(a.x)} {fmt(mid_y)} "
            f"L {fmt(b.x)} {fmt(mid_y)} L {fmt(b.x)} {fmt(b.y)}"
        )
    return f"M {fmt(a.x)} {fmt(a.y)} L {fmt(b.x)} {fmt(b.y)}"


def polyline_d(points: Iterable[Point]) -> str:
    parts: List[str] = []
    for idx, point in enumerate(points):
        parts.append(f"{'M' if idx == 0 else 'L'} {fmt(point.x)} {fmt(point.y)}")
    return " ".join(parts)


def sine_wave(
    start: Point, width: float, amplitude: float, waves: int, phase: float = 0.0
) -> List[Point]:
    """Sampled sine wave, 16 samples per period, spanning ``width`` to the right."""
    samples = max(waves, 1) * 16
    points: List[Point] = []
    for i in range(samples + 1):
        t = (i / samples) * math.pi * 2 * waves
        x = start.x + width * i / samples
        points.append(Point(x, start.y + math.sin(t + phase) * amplitude))
    return points


def centroid(points: Iterable[Point]) -> Optional[Point]:
    xs: List[float] = []
    ys: List[float] = []
    for point in points:
        xs.append(point.x)
        ys.append(point.y)
    if not xs:
        return None
    return Point(sum(xs) / len(xs), sum(ys) / len(ys))


def fmt(value: float) -> str:
    if math.isclose(value, round(value), abs_tol=1e-9):
        return str(int(round(value)))
    return f"{value:.3f}".rstrip("0").rstrip(".")
