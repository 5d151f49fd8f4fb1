from __future__ import annotations

import math
from typing import Sequence

from sparkgraph.bounds import Bounds
from sparkgraph.errors import GraphConfigError
from sparkgraph.geometry import BarcodeGeometry, RadialBarcodeGeometry, RadialVariant, Rect, Wedge
from sparkgraph.scales import DrawArea, ValueScale, slot_layout
from sparkgraph.thresholds import ColorScale


def project_barcode(
    values: Sequence[float],
    area: DrawArea,
    colors: ColorScale,
    *,
    gap: float = 0.0,
) -> BarcodeGeometry:
    starts, width = slot_layout(len(values), area.left, area.width, gap)
    cells = tuple(
        Rect(
            x=float(x),
            y=area.top,
            width=width,
            height=area.height,
            value=float(v),
            color=colors.color_for(float(v)),
        )
        for x, v in zip(starts, values)
    )
    return BarcodeGeometry(cells=cells)


def polar_point(cx: float, cy: float, radius: float, angle_deg: float) -> tuple[float, float]:
    """Point on a circle; 0 degrees is 12 o'clock and angles run clockwise."""
    rad = math.radians(angle_deg)
    return (cx + radius * math.sin(rad), cy - radius * math.cos(rad))


def project_radial_barcode(
    values: Sequence[float],
    bounds: Bounds,
    colors: ColorScale,
    *,
    cx: float,
    cy: float,
    radius: float,
    inner_radius: float = 0.0,
    gap_degrees: float = 0.0,
    variant: RadialVariant = RadialVariant.BARCODE,
    logarithmic: bool = False,
) -> RadialBarcodeGeometry:
    if radius <= 0 or not 0 <= inner_radius < radius:
        raise GraphConfigError("radial barcode needs radius > inner_radius >= 0")
    count = len(values)
    wedges: list[Wedge] = []
    if count:
        sweep = 360.0 / count
        if gap_degrees < 0 or gap_degrees >= sweep:
            raise GraphConfigError(f"gap_degrees {gap_degrees} leaves no room for {count} wedges")
        ring = ValueScale(
            vmin=bounds.min,
            vmax=bounds.max,
            origin=inner_radius,
            extent=radius - inner_radius,
            direction=1.0,
            logarithmic=logarithmic,
        )
        outer = ring.positions(values) if variant is RadialVariant.SUNBURST else [radius] * count
        for index, (v, r_out) in enumerate(zip(values, outer)):
            start = index * sweep + gap_degrees / 2.0
            end = (index + 1) * sweep - gap_degrees / 2.0
            r_out = float(r_out)
            corners = (
                polar_point(cx, cy, r_out, start),
                polar_point(cx, cy, r_out, end),
                polar_point(cx, cy, inner_radius, end),
                polar_point(cx, cy, inner_radius, start),
            )
            wedges.append(
                Wedge(
                    index=index,
                    value=float(v),
                    start_angle=start,
                    end_angle=end,
                    inner_radius=inner_radius,
                    outer_radius=r_out,
                    corners=corners,
                    color=colors.color_for(float(v)),
                )
            )
    return RadialBarcodeGeometry(
        wedges=tuple(wedges),
        variant=variant.value,
        cx=cx,
        cy=cy,
        radius=radius,
        inner_radius=inner_radius,
    )
