from __future__ import annotations

import logging
import math
from typing import Sequence

from sparkgraph.errors import GraphConfigError
from sparkgraph.geometry import (
    BarGeometry,
    EqualizerColumn,
    EqualizerGeometry,
    GradedCell,
    GradedColumn,
    GradedGeometry,
    Orientation,
    Rect,
)
from sparkgraph.scales import DrawArea, ValueScale, slot_layout
from sparkgraph.thresholds import ColorScale

LOGGER = logging.getLogger(__name__)

DEFAULT_EQUALIZER_LEVELS = 10


def project_bars(
    values: Sequence[float],
    scale: ValueScale,
    area: DrawArea,
    colors: ColorScale,
    *,
    gap: float = 0.0,
    orientation: Orientation = Orientation.VERTICAL,
) -> BarGeometry:
    """One rectangle per bucket, spanning from the value to the baseline.

    `scale` must run along the value axis: vertical for vertical bars,
    horizontal for horizontal ones.
    """
    base = scale.baseline()
    ends = scale.positions(values) if values else []
    bars: list[Rect] = []
    if orientation is Orientation.VERTICAL:
        starts, width = slot_layout(len(values), area.left, area.width, gap)
        for x, y, v in zip(starts, ends, values):
            bars.append(
                Rect(
                    x=float(x),
                    y=float(min(y, base)),
                    width=width,
                    height=float(abs(y - base)),
                    value=float(v),
                    color=colors.color_for(float(v)),
                )
            )
    else:
        starts, height = slot_layout(len(values), area.top, area.height, gap)
        for y, x, v in zip(starts, ends, values):
            bars.append(
                Rect(
                    x=float(min(x, base)),
                    y=float(y),
                    width=float(abs(x - base)),
                    height=height,
                    value=float(v),
                    color=colors.color_for(float(v)),
                )
            )
    return BarGeometry(bars=tuple(bars), orientation=orientation.value, baseline=base)


def _level_index(value: float, bucket_size: float) -> int:
    return math.trunc(value / bucket_size)


def project_equalizer(
    values: Sequence[float],
    scale: ValueScale,
    area: DrawArea,
    colors: ColorScale,
    *,
    gap: float = 0.0,
    level_gap: float = 0.0,
    bucket_size: float | None = None,
    levels: int = DEFAULT_EQUALIZER_LEVELS,
) -> EqualizerGeometry:
    """Stack `bucket_size`-high levels per bucket, counted up from bounds.min."""
    vmin, vmax = scale.vmin, scale.vmax
    if bucket_size is None:
        if levels < 1:
            raise GraphConfigError("equalizer.levels must be >= 1")
        bucket_size = (vmax - vmin) / levels if vmax > vmin else 1.0
    if bucket_size <= 0:
        raise GraphConfigError("equalizer.bucket_size must be > 0")
    floor_level = _level_index(vmin, bucket_size)
    level_count = max(1, _level_index(vmax, bucket_size) - floor_level)
    level_h = (area.height - level_gap * (level_count - 1)) / level_count
    if level_h <= 0:
        raise GraphConfigError(f"level_gap {level_gap} leaves no room for {level_count} levels")
    starts, width = slot_layout(len(values), area.left, area.width, gap)
    columns: list[EqualizerColumn] = []
    for index, (x, v) in enumerate(zip(starts, values)):
        steps = _level_index(v, bucket_size) - floor_level if math.isfinite(v) else 0
        steps = max(0, min(level_count, steps))
        rects: list[Rect] = []
        for j in range(steps):
            level_value = min(vmax, (floor_level + j + 1) * bucket_size)
            rects.append(
                Rect(
                    x=float(x),
                    y=area.bottom - (j + 1) * level_h - j * level_gap,
                    width=width,
                    height=level_h,
                    value=level_value,
                    color=colors.color_for(level_value),
                )
            )
        columns.append(EqualizerColumn(index=index, value=float(v), levels=tuple(rects)))
    return EqualizerGeometry(columns=tuple(columns), bucket_size=float(bucket_size), level_count=level_count)


def project_graded(
    values: Sequence[float],
    area: DrawArea,
    colors: ColorScale,
    *,
    gap: float = 0.0,
    level_gap: float = 0.0,
    values_are_ranks: bool = False,
) -> GradedGeometry:
    """Traffic-light columns: every rank at or below the bucket's rank is filled.

    With `values_are_ranks` the bucket values already hold rank indices
    (state bin mode) and are used as-is.
    """
    rank_count = len(colors.ranks)
    if rank_count == 0:
        LOGGER.error("graded chart has no ranks; configure color_stops or ranks")
        return GradedGeometry(columns=(), rank_count=0)
    cell_h = (area.height - level_gap * (rank_count - 1)) / rank_count
    if cell_h <= 0:
        raise GraphConfigError(f"level_gap {level_gap} leaves no room for {rank_count} ranks")
    starts, width = slot_layout(len(values), area.left, area.width, gap)
    columns: list[GradedColumn] = []
    for index, (x, v) in enumerate(zip(starts, values)):
        rank = _rank_of(v, colors, rank_count, values_are_ranks)
        cells: list[GradedCell] = []
        for k in range(rank_count):
            filled = rank is not None and k <= rank
            cells.append(
                GradedCell(
                    x=float(x),
                    y=area.bottom - (k + 1) * cell_h - k * level_gap,
                    width=width,
                    height=cell_h,
                    rank=k,
                    filled=filled,
                    color=colors.rank_color(k) if filled else None,
                )
            )
        columns.append(GradedColumn(index=index, value=float(v), rank=rank, cells=tuple(cells)))
    return GradedGeometry(columns=tuple(columns), rank_count=rank_count)


def _rank_of(value: float, colors: ColorScale, rank_count: int, values_are_ranks: bool) -> int | None:
    if not math.isfinite(value):
        return None
    if values_are_ranks:
        rank = int(round(value))
        return rank if 0 <= rank < rank_count else None
    return colors.rank_for(value)
