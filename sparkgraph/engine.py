from __future__ import annotations

import datetime as dt
import logging
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from sparkgraph.adapters.normalize import coerce_timestamp, normalize_history
from sparkgraph.aggregate import AggregatedPoint, aggregate_buckets
from sparkgraph.bounds import Bounds, compute_bounds
from sparkgraph.bucketize import bucketize
from sparkgraph.colors import ColorCache
from sparkgraph.config import GraphConfig
from sparkgraph.errors import SparkgraphError
from sparkgraph.geometry import (
    AreaGeometry,
    BarcodeGeometry,
    BarGeometry,
    ChartGeometry,
    ChartType,
    DotsGeometry,
    EqualizerGeometry,
    GradedGeometry,
    LineGeometry,
    Orientation,
    ProjectedCoordinate,
    RadialBarcodeGeometry,
    geometry_to_dict,
)
from sparkgraph.project import (
    project_area,
    project_barcode,
    project_bars,
    project_dots,
    project_equalizer,
    project_graded,
    project_line,
    project_radial_barcode,
)
from sparkgraph.scales import build_value_scale
from sparkgraph.state_map import StateMapper
from sparkgraph.thresholds import ColorScale, GradientStop
from sparkgraph.window import ResolvedWindow


LOGGER = logging.getLogger(__name__)


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


@dataclass(frozen=True)
class SeriesSummary:
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    first: float = 0.0
    last: float = 0.0


@dataclass(frozen=True)
class GraphSnapshot:
    """Everything one recomputation produced; swapped in as a single reference."""

    window: ResolvedWindow
    points: tuple[AggregatedPoint, ...]
    bounds: Bounds
    geometry: ChartGeometry
    colors: tuple[str | None, ...]
    gradient: tuple[GradientStop, ...]
    errors: tuple[str, ...]

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(p.value for p in self.points)

    @property
    def coordinates(self) -> tuple[ProjectedCoordinate, ...]:
        if isinstance(self.geometry, (LineGeometry, AreaGeometry)):
            return self.geometry.points
        return ()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view; nan and infinite values become None."""
        return _finite_or_none({
            "window": {
                "start_time": self.window.start_time.isoformat(),
                "end_time": self.window.end_time.isoformat(),
                "hours": self.window.hours,
                "buckets_per_hour": self.window.buckets_per_hour,
                "bucket_count": self.window.bucket_count,
            },
            "bounds": {"min": self.bounds.min, "max": self.bounds.max},
            "points": [{"index": p.index, "value": p.value, "filled": p.filled} for p in self.points],
            "geometry": geometry_to_dict(self.geometry),
            "colors": list(self.colors),
            "gradient": [{"offset": g.offset, "color": g.color} for g in self.gradient],
            "errors": list(self.errors),
        })


def _finite_or_none(value: Any) -> Any:
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _finite_or_none(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite_or_none(item) for item in value]
    return value


def empty_geometry(chart_type: ChartType, orientation: Orientation = Orientation.VERTICAL) -> ChartGeometry:
    if chart_type is ChartType.LINE:
        return LineGeometry(points=())
    if chart_type is ChartType.AREA:
        return AreaGeometry(points=(), baseline=0.0, polygon=())
    if chart_type is ChartType.DOTS:
        return DotsGeometry(dots=())
    if chart_type is ChartType.BAR:
        return BarGeometry(bars=(), orientation=orientation.value, baseline=0.0)
    if chart_type is ChartType.EQUALIZER:
        return EqualizerGeometry(columns=(), bucket_size=1.0, level_count=0)
    if chart_type is ChartType.GRADED:
        return GradedGeometry(columns=(), rank_count=0)
    if chart_type is ChartType.BARCODE:
        return BarcodeGeometry(cells=())
    return RadialBarcodeGeometry(wedges=(), variant="barcode", cx=0.0, cy=0.0, radius=0.0, inner_radius=0.0)


class GraphEngine:
    """Turns raw entity history into chart-ready numbers for one series.

    `update()` is the only call that recomputes. Readers always see either the
    previous snapshot or the new one, never a mix of both.
    """

    def __init__(self, config: GraphConfig | None = None) -> None:
        self.config = config if config is not None else GraphConfig()
        self._lock = threading.Lock()
        self._snapshot: GraphSnapshot | None = None
        self._current: Any = None
        self._config_errors: list[str] = []
        self._cache = ColorCache(self.config.color_variables)
        self._colors = self._build_color_scale()
        bins = None
        if self.config.state_bins:
            bins = list(self._colors.ranks)
        self._mapper = StateMapper(
            table=self.config.state_map,
            bins=bins,
            value_factor=self.config.value_factor,
        )

    def _build_color_scale(self) -> ColorScale:
        cfg = self.config
        try:
            return ColorScale.build(
                cfg.color_stops,
                transition=cfg.transition,
                ranks=cfg.ranks,
                fixed_color=cfg.color,
                cache=self._cache,
            )
        except SparkgraphError as exc:
            LOGGER.error("invalid color thresholds: %s", exc)
            self._config_errors.append(str(exc))
            return ColorScale(fixed_color=cfg.color, cache=self._cache)

    @property
    def state(self) -> EngineState:
        return EngineState.READY if self._snapshot is not None else EngineState.UNINITIALIZED

    @property
    def current_value(self) -> Any:
        return self._current

    def set_current(self, value: Any) -> None:
        """Current entity state; appended as the newest sample on the next update."""
        with self._lock:
            self._current = value

    def update(self, history: Any, now: dt.datetime | None = None) -> GraphSnapshot:
        with self._lock:
            moment = coerce_timestamp(now) if now is not None else dt.datetime.now(dt.timezone.utc)
            snapshot = self._recompute(history, moment)
            self._snapshot = snapshot
        return snapshot

    def _recompute(self, history: Any, now: dt.datetime) -> GraphSnapshot:
        cfg = self.config
        errors = list(self._config_errors)
        self._mapper.reset_errors()

        try:
            samples = normalize_history(history)
        except SparkgraphError as exc:
            LOGGER.error("rejected history input: %s", exc)
            errors.append(str(exc))
            samples = []
        window = cfg.window.resolve(now)
        if self._current is not None and window.start_time <= now <= window.end_time:
            # The newest slot ends at end_time, exclusive.
            stamp = min(now, window.end_time - dt.timedelta(microseconds=1))
            try:
                samples.extend(normalize_history([(stamp, self._current)]))
            except SparkgraphError as exc:
                LOGGER.error("rejected current value: %s", exc)
                errors.append(str(exc))

        mapped = self._mapper.map_all(samples)
        try:
            buckets = bucketize(mapped, window, now)
        except SparkgraphError as exc:
            LOGGER.error("could not bucket history: %s", exc)
            errors.append(str(exc))
            buckets = bucketize([], window, now)
        errors.extend(self._mapper.errors)

        points = aggregate_buckets(buckets, cfg.aggregate)
        values = [p.value for p in points]
        bounds = compute_bounds(values, cfg.axis_bounds)

        try:
            geometry = self._project(values, bounds)
            colors = tuple(self._colors.color_for(v) for v in values)
            gradient = tuple(self._colors.gradient(bounds, logarithmic=cfg.logarithmic))
        except SparkgraphError as exc:
            LOGGER.error("could not project %s chart: %s", cfg.chart_type.value, exc)
            errors.append(str(exc))
            geometry = empty_geometry(cfg.chart_type, cfg.orientation)
            colors = tuple(None for _ in values)
            gradient = ()

        LOGGER.debug(
            "recomputed %s chart: %d buckets, bounds=(%s, %s), %d error(s)",
            cfg.chart_type.value,
            len(points),
            bounds.min,
            bounds.max,
            len(errors),
        )
        return GraphSnapshot(
            window=window,
            points=tuple(points),
            bounds=bounds,
            geometry=geometry,
            colors=colors,
            gradient=gradient,
            errors=tuple(errors),
        )

    def _project(self, values: list[float], bounds: Bounds) -> ChartGeometry:
        cfg = self.config
        area = cfg.area
        chart = cfg.chart_type
        if chart is ChartType.LINE:
            scale = build_value_scale(bounds, area, logarithmic=cfg.logarithmic)
            return project_line(values, scale, area, smoothing=cfg.smoothing)
        if chart is ChartType.AREA:
            scale = build_value_scale(bounds, area, logarithmic=cfg.logarithmic)
            return project_area(values, scale, area, smoothing=cfg.smoothing)
        if chart is ChartType.DOTS:
            scale = build_value_scale(bounds, area, logarithmic=cfg.logarithmic)
            return project_dots(values, scale, area, self._colors, radius=cfg.dot_radius)
        if chart is ChartType.BAR:
            axis = "horizontal" if cfg.orientation is Orientation.HORIZONTAL else "vertical"
            scale = build_value_scale(bounds, area, axis=axis, logarithmic=cfg.logarithmic)
            return project_bars(values, scale, area, self._colors, gap=cfg.gap, orientation=cfg.orientation)
        if chart is ChartType.EQUALIZER:
            scale = build_value_scale(bounds, area, logarithmic=cfg.logarithmic)
            return project_equalizer(
                values,
                scale,
                area,
                self._colors,
                gap=cfg.gap,
                level_gap=cfg.level_gap,
                bucket_size=cfg.equalizer_bucket_size,
                levels=cfg.equalizer_levels,
            )
        if chart is ChartType.GRADED:
            return project_graded(
                values,
                area,
                self._colors,
                gap=cfg.gap,
                level_gap=cfg.level_gap,
                values_are_ranks=cfg.state_bins,
            )
        if chart is ChartType.BARCODE:
            return project_barcode(values, area, self._colors, gap=cfg.gap)
        if chart is ChartType.RADIAL_BARCODE:
            cx, cy, radius = cfg.radial.resolve(area)
            return project_radial_barcode(
                values,
                bounds,
                self._colors,
                cx=cx,
                cy=cy,
                radius=radius,
                inner_radius=cfg.radial.inner_radius,
                gap_degrees=cfg.radial.gap_degrees,
                variant=cfg.radial.variant,
                logarithmic=cfg.logarithmic,
            )
        raise ValueError(f"unsupported chart type: {chart}")

    @property
    def snapshot(self) -> GraphSnapshot | None:
        return self._snapshot

    @property
    def bounds(self) -> Bounds:
        snap = self._snapshot
        return snap.bounds if snap is not None else Bounds(0.0, 0.0)

    @property
    def min(self) -> float:
        return self.bounds.min

    @property
    def max(self) -> float:
        return self.bounds.max

    @property
    def points(self) -> tuple[AggregatedPoint, ...]:
        snap = self._snapshot
        return snap.points if snap is not None else ()

    @property
    def coordinates(self) -> tuple[ProjectedCoordinate, ...]:
        snap = self._snapshot
        return snap.coordinates if snap is not None else ()

    @property
    def geometry(self) -> ChartGeometry:
        snap = self._snapshot
        if snap is None:
            return empty_geometry(self.config.chart_type, self.config.orientation)
        return snap.geometry

    @property
    def colors(self) -> tuple[str | None, ...]:
        snap = self._snapshot
        return snap.colors if snap is not None else ()

    @property
    def gradient(self) -> tuple[GradientStop, ...]:
        snap = self._snapshot
        return snap.gradient if snap is not None else ()

    @property
    def errors(self) -> tuple[str, ...]:
        snap = self._snapshot
        return snap.errors if snap is not None else tuple(self._config_errors)

    def label_for(self, state: Any) -> str | None:
        return self._mapper.label_for(state)

    def summary(self) -> SeriesSummary:
        """min/max/avg/first/last of the aggregated series, for labels and tooltips."""
        arr = np.asarray([p.value for p in self.points], dtype=np.float64)
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            return SeriesSummary()
        return SeriesSummary(
            min=float(np.min(arr)),
            max=float(np.max(arr)),
            avg=float(np.mean(arr)),
            first=float(arr[0]),
            last=float(arr[-1]),
        )
