from __future__ import annotations

from typing import Sequence

from sparkgraph.geometry import AreaGeometry, Dot, DotsGeometry, LineGeometry, ProjectedCoordinate
from sparkgraph.scales import DrawArea, ValueScale, point_positions
from sparkgraph.thresholds import ColorScale


def project_coordinates(values: Sequence[float], scale: ValueScale, area: DrawArea) -> list[ProjectedCoordinate]:
    if not values:
        return []
    xs = point_positions(len(values), area.left, area.width)
    ys = scale.positions(values)
    base = scale.baseline()
    coords = [
        ProjectedCoordinate(x=float(x), y=float(y), value=float(v), y_baseline=base)
        for x, y, v in zip(xs, ys, values)
    ]
    if len(coords) == 1:
        only = coords[0]
        coords.append(ProjectedCoordinate(x=area.right, y=only.y, value=only.value, y_baseline=base))
    return coords


def _midpoint(a: ProjectedCoordinate, b: ProjectedCoordinate) -> ProjectedCoordinate:
    return ProjectedCoordinate(
        x=(a.x + b.x) / 2.0,
        y=(a.y + b.y) / 2.0,
        value=(a.value + b.value) / 2.0,
        y_baseline=b.y_baseline,
    )


def smooth_coordinates(
    coords: Sequence[ProjectedCoordinate],
) -> tuple[list[ProjectedCoordinate], list[ProjectedCoordinate]]:
    """Replace inner vertices by midpoints with their predecessor.

    Returns (vertices, controls). Segment k runs from vertices[k] to
    vertices[k + 1] as a quadratic curve with control point controls[k].
    """
    if len(coords) < 2:
        return list(coords), list(coords)
    vertices = [coords[0]]
    for prev, cur in zip(coords, coords[1:]):
        vertices.append(_midpoint(prev, cur))
    vertices.append(coords[-1])
    return vertices, list(coords)


def project_line(
    values: Sequence[float],
    scale: ValueScale,
    area: DrawArea,
    *,
    smoothing: bool = False,
) -> LineGeometry:
    coords = project_coordinates(values, scale, area)
    if smoothing:
        vertices, controls = smooth_coordinates(coords)
        return LineGeometry(points=tuple(vertices), controls=tuple(controls), smoothed=True)
    return LineGeometry(points=tuple(coords))


def project_area(
    values: Sequence[float],
    scale: ValueScale,
    area: DrawArea,
    *,
    smoothing: bool = False,
) -> AreaGeometry:
    line = project_line(values, scale, area, smoothing=smoothing)
    base = scale.baseline()
    polygon: list[tuple[float, float]] = [(p.x, p.y) for p in line.points]
    if line.points:
        polygon.append((line.points[-1].x, base))
        polygon.append((line.points[0].x, base))
    return AreaGeometry(
        points=line.points,
        baseline=base,
        polygon=tuple(polygon),
        controls=line.controls,
        smoothed=line.smoothed,
    )


def project_dots(
    values: Sequence[float],
    scale: ValueScale,
    area: DrawArea,
    colors: ColorScale,
    *,
    radius: float = 1.0,
) -> DotsGeometry:
    xs = point_positions(len(values), area.left, area.width)
    ys = scale.positions(values) if values else []
    dots = tuple(
        Dot(x=float(x), y=float(y), value=float(v), radius=radius, color=colors.color_for(float(v)))
        for x, y, v in zip(xs, ys, values)
    )
    return DotsGeometry(dots=dots)
