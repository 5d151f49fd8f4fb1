from __future__ import annotations

import json
import math
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping

from sparkgraph.aggregate import AggregateFunction, parse_aggregate
from sparkgraph.bounds import BoundsConfig
from sparkgraph.colors import ColorCache
from sparkgraph.errors import GraphConfigError
from sparkgraph.geometry import ChartType, Orientation, RadialVariant, parse_enum
from sparkgraph.scales import DrawArea
from sparkgraph.state_map import StateMapEntry, build_state_table
from sparkgraph.thresholds import ColorStop, RankedBin, Transition, interpolate_stops
from sparkgraph.window import RollingWindow, WindowSpec, window_from_dict

YAxis = Literal["primary", "secondary"]

_TOP_LEVEL_KEYS = frozenset(
    {
        "period",
        "aggregate",
        "chart_type",
        "orientation",
        "logarithmic",
        "smoothing",
        "value_factor",
        "state_map",
        "state_bins",
        "color",
        "color_stops",
        "transition",
        "ranks",
        "bounds",
        "bounds_secondary",
        "y_axis",
        "position",
        "gap",
        "level_gap",
        "equalizer",
        "radial",
        "dot_radius",
        "color_variables",
    }
)


@dataclass(frozen=True)
class RadialOptions:
    """Radial barcode layout; unset center/radius follow the draw area."""

    cx: float | None = None
    cy: float | None = None
    radius: float | None = None
    inner_radius: float = 0.0
    gap_degrees: float = 0.0
    variant: RadialVariant = RadialVariant.BARCODE

    def resolve(self, area: DrawArea) -> tuple[float, float, float]:
        cx = self.cx if self.cx is not None else area.left + area.width / 2.0
        cy = self.cy if self.cy is not None else area.top + area.height / 2.0
        radius = self.radius if self.radius is not None else min(area.width, area.height) / 2.0
        return cx, cy, radius


@dataclass(frozen=True)
class GraphConfig:
    window: WindowSpec = RollingWindow()
    aggregate: AggregateFunction = AggregateFunction.AVG
    chart_type: ChartType = ChartType.LINE
    orientation: Orientation = Orientation.VERTICAL
    logarithmic: bool = False
    smoothing: bool = False
    value_factor: float | None = None
    state_map: tuple[StateMapEntry, ...] = ()
    state_bins: bool = False
    color: str | None = None
    color_stops: tuple[ColorStop, ...] = ()
    transition: Transition = Transition.SMOOTH
    ranks: tuple[RankedBin, ...] = ()
    bounds: BoundsConfig = BoundsConfig()
    bounds_secondary: BoundsConfig = BoundsConfig()
    y_axis: YAxis = "primary"
    area: DrawArea = DrawArea(left=0.0, top=0.0, width=100.0, height=50.0)
    gap: float = 0.0
    level_gap: float = 0.0
    equalizer_bucket_size: float | None = None
    equalizer_levels: int = 10
    radial: RadialOptions = RadialOptions()
    dot_radius: float = 1.0
    color_variables: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.y_axis not in ("primary", "secondary"):
            raise GraphConfigError(f"invalid y_axis `{self.y_axis}` (expected primary or secondary)")
        if self.state_bins and not (self.ranks or self.color_stops):
            raise GraphConfigError("state_bins requires ranks or color_stops")
        if self.state_map and self.state_bins:
            raise GraphConfigError("state_map and state_bins are mutually exclusive")
        if self.orientation is Orientation.HORIZONTAL and self.chart_type is not ChartType.BAR:
            raise GraphConfigError(f"horizontal orientation is only supported for bar charts, not {self.chart_type.value}")
        ranks = sorted(r.rank for r in self.ranks)
        if ranks != list(range(len(ranks))):
            raise GraphConfigError("ranks must be numbered 0..n-1 without gaps")

    @property
    def axis_bounds(self) -> BoundsConfig:
        return self.bounds_secondary if self.y_axis == "secondary" else self.bounds


def _bool(raw: Any, name: str) -> bool:
    if not isinstance(raw, bool):
        raise GraphConfigError(f"`{name}` must be true or false")
    return raw


def _number(raw: Any, name: str, *, minimum: float | None = None, allow_none: bool = False) -> float | None:
    if raw is None and allow_none:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        raise GraphConfigError(f"`{name}` must be a finite number")
    if minimum is not None and raw < minimum:
        raise GraphConfigError(f"`{name}` must be >= {minimum}")
    return float(raw)


def _require_number(raw: Any, name: str, *, minimum: float | None = None) -> float:
    out = _number(raw, name, minimum=minimum)
    assert out is not None
    return out


def _section(raw: Mapping[str, Any], key: str, allowed: frozenset[str]) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, Mapping):
        raise GraphConfigError(f"`{key}` must be a table/mapping")
    unknown = sorted(set(value) - allowed)
    if unknown:
        raise GraphConfigError(f"unknown `{key}` option(s): {', '.join(unknown)}")
    return dict(value)


def parse_color_stops(raw: Any) -> tuple[ColorStop, ...]:
    """Accept `[{value?, color}]` or a `{value: color}` mapping."""
    if not raw:
        return ()
    stops: list[ColorStop] = []
    if isinstance(raw, Mapping):
        for key, color in raw.items():
            try:
                value = float(key)
            except (TypeError, ValueError):
                raise GraphConfigError(f"color stop key `{key}` is not a number") from None
            stops.append(ColorStop(value=value, color=str(color)))
    else:
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping) or "color" not in item:
                raise GraphConfigError(f"color stop {index} must be a mapping with a `color` key")
            value = _number(item.get("value"), f"color_stops[{index}].value", allow_none=True)
            stops.append(ColorStop(value=value, color=str(item["color"])))
    interpolate_stops(stops)
    return tuple(stops)


def parse_ranks(raw: Any) -> tuple[RankedBin, ...]:
    if not raw:
        return ()
    ranks: list[RankedBin] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping) or "color" not in item or "ranges" not in item:
            raise GraphConfigError(f"rank {index} must be a mapping with `color` and `ranges`")
        ranges: list[tuple[float, float]] = []
        for pair in item["ranges"]:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise GraphConfigError(f"rank {index} ranges must be [min, max] pairs")
            lo = _require_number(pair[0], f"ranks[{index}].range min")
            hi = _number(pair[1], f"ranks[{index}].range max", allow_none=True)
            ranges.append((lo, math.inf if hi is None else hi))
        ranks.append(RankedBin(rank=index, color=str(item["color"]), ranges=tuple(ranges)))
    return tuple(ranks)


def _parse_transition(raw: Any) -> Transition:
    if isinstance(raw, str) and raw.strip().lower() == "stepped":
        return Transition.HARD
    return parse_enum(Transition, raw, "transition")


def _parse_bounds(raw: Mapping[str, Any], key: str) -> BoundsConfig:
    data = _section(raw, key, frozenset({"min", "max", "min_range"}))
    return BoundsConfig(
        min=data.get("min"),
        max=data.get("max"),
        min_range=_number(data.get("min_range"), f"{key}.min_range", minimum=0.0, allow_none=True),
    )


def _parse_area(raw: Mapping[str, Any]) -> DrawArea:
    data = _section(raw, "position", frozenset({"left", "top", "width", "height", "margin"}))
    return DrawArea.from_position(
        left=_require_number(data.get("left", 0.0), "position.left"),
        top=_require_number(data.get("top", 0.0), "position.top"),
        width=_require_number(data.get("width", 100.0), "position.width"),
        height=_require_number(data.get("height", 50.0), "position.height"),
        margin=_require_number(data.get("margin", 0.0), "position.margin", minimum=0.0),
    )


def _parse_radial(raw: Mapping[str, Any]) -> RadialOptions:
    data = _section(raw, "radial", frozenset({"cx", "cy", "radius", "inner_radius", "gap_degrees", "variant"}))
    return RadialOptions(
        cx=_number(data.get("cx"), "radial.cx", allow_none=True),
        cy=_number(data.get("cy"), "radial.cy", allow_none=True),
        radius=_number(data.get("radius"), "radial.radius", minimum=0.0, allow_none=True),
        inner_radius=_require_number(data.get("inner_radius", 0.0), "radial.inner_radius", minimum=0.0),
        gap_degrees=_require_number(data.get("gap_degrees", 0.0), "radial.gap_degrees", minimum=0.0),
        variant=parse_enum(RadialVariant, data.get("variant", "barcode"), "radial.variant"),
    )


def graph_config_from_dict(raw: Mapping[str, Any] | None) -> GraphConfig:
    """Validate a plain config mapping (from TOML, JSON or a host) into a GraphConfig."""
    data: Mapping[str, Any] = raw or {}
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise GraphConfigError(f"unknown graph option(s): {', '.join(unknown)}")

    variables = data.get("color_variables") or {}
    if not isinstance(variables, Mapping):
        raise GraphConfigError("`color_variables` must be a mapping")
    variables = {str(k): str(v) for k, v in variables.items()}
    cache = ColorCache(variables)

    color = data.get("color")
    if color is not None:
        color = str(color)
        cache.rgba(color)
    color_stops = parse_color_stops(data.get("color_stops"))
    ranks = parse_ranks(data.get("ranks"))
    for stop in color_stops:
        cache.rgba(stop.color)
    for rank in ranks:
        cache.rgba(rank.color)

    equalizer = _section(data, "equalizer", frozenset({"bucket_size", "levels"}))
    levels = equalizer.get("levels", 10)
    if isinstance(levels, bool) or not isinstance(levels, int) or levels < 1:
        raise GraphConfigError("`equalizer.levels` must be an integer >= 1")
    bucket_size = _number(equalizer.get("bucket_size"), "equalizer.bucket_size", allow_none=True)
    if bucket_size is not None and bucket_size <= 0:
        raise GraphConfigError("`equalizer.bucket_size` must be > 0")

    value_factor = _number(data.get("value_factor"), "value_factor", allow_none=True)
    state_map_raw = data.get("state_map")
    if state_map_raw is not None and isinstance(state_map_raw, (str, bytes)):
        raise GraphConfigError("`state_map` must be a mapping or a list of entries")

    return GraphConfig(
        window=window_from_dict(data.get("period")),
        aggregate=parse_aggregate(data.get("aggregate", "avg")),
        chart_type=parse_enum(ChartType, data.get("chart_type", "line"), "chart_type"),
        orientation=parse_enum(Orientation, data.get("orientation", "vertical"), "orientation"),
        logarithmic=_bool(data.get("logarithmic", False), "logarithmic"),
        smoothing=_bool(data.get("smoothing", False), "smoothing"),
        value_factor=value_factor,
        state_map=build_state_table(state_map_raw),
        state_bins=_bool(data.get("state_bins", False), "state_bins"),
        color=color,
        color_stops=color_stops,
        transition=_parse_transition(data.get("transition", "smooth")),
        ranks=ranks,
        bounds=_parse_bounds(data, "bounds"),
        bounds_secondary=_parse_bounds(data, "bounds_secondary"),
        y_axis=str(data.get("y_axis", "primary")),
        area=_parse_area(data),
        gap=_require_number(data.get("gap", 0.0), "gap", minimum=0.0),
        level_gap=_require_number(data.get("level_gap", 0.0), "level_gap", minimum=0.0),
        equalizer_bucket_size=bucket_size,
        equalizer_levels=levels,
        radial=_parse_radial(data),
        dot_radius=_require_number(data.get("dot_radius", 1.0), "dot_radius", minimum=0.0),
        color_variables=variables,
    )


def load_graph_config(path: str | Path) -> GraphConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"graph config not found: {config_path}")
    suffix = config_path.suffix.lower()
    if suffix == ".toml":
        with config_path.open("rb") as f:
            raw = tomllib.load(f)
    elif suffix == ".json":
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        raise GraphConfigError(f"unsupported config format `{suffix}` (expected .toml or .json)")
    if not isinstance(raw, Mapping):
        raise GraphConfigError("graph config root must be a table/object")
    return graph_config_from_dict(raw)
