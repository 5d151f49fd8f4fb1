from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Sequence

from sparkgraph.errors import GraphConfigError

BoundKind = Literal["min", "max"]
BoundValue = float | str | None


@dataclass(frozen=True)
class Bounds:
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min


@dataclass(frozen=True)
class BoundsConfig:
    """Per-axis bound overrides.

    `min`/`max` are either unset (follow the data), a number (fixed), or a
    string `~N` (at least N, widened when the data goes beyond it).
    """

    min: BoundValue = None
    max: BoundValue = None
    min_range: float | None = None

    def __post_init__(self) -> None:
        parse_bound(self.min)
        parse_bound(self.max)
        if self.min_range is not None and (not math.isfinite(self.min_range) or self.min_range < 0):
            raise GraphConfigError("bounds.min_range must be a finite number >= 0")


def parse_bound(value: BoundValue) -> tuple[float | None, bool]:
    """Return (number, elastic) for a bound setting; (None, False) when unset."""
    if value is None:
        return (None, False)
    if isinstance(value, bool):
        raise GraphConfigError(f"invalid bound: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise GraphConfigError(f"bound must be finite: {value!r}")
        return (float(value), False)
    if isinstance(value, str):
        raw = value.strip()
        elastic = raw.startswith("~")
        if elastic:
            raw = raw[1:].strip()
        try:
            number = float(raw)
        except ValueError:
            raise GraphConfigError(f"invalid bound: {value!r} (expected a number or `~N`)") from None
        if not math.isfinite(number):
            raise GraphConfigError(f"bound must be finite: {value!r}")
        return (number, elastic)
    raise GraphConfigError(f"invalid bound type: {type(value)!r}")


def boundary(kind: BoundKind, values: Sequence[float], config_value: BoundValue, fallback: float) -> float:
    extremum = min if kind == "min" else max
    finite = [float(v) for v in values if math.isfinite(v)]
    number, elastic = parse_bound(config_value)
    if number is None:
        return extremum(finite) if finite else float(fallback)
    if elastic:
        return extremum([number, *finite])
    return number


def apply_min_range(bounds: Bounds, min_range: float | None) -> Bounds:
    if not min_range or bounds.span >= min_range:
        return bounds
    half = (min_range - bounds.span) / 2.0
    return Bounds(min=bounds.min - half, max=bounds.max + half)


def compute_bounds(values: Sequence[float], config: BoundsConfig | None = None, *, fallback: float = 0.0) -> Bounds:
    cfg = config or BoundsConfig()
    lo = boundary("min", values, cfg.min, fallback)
    hi = boundary("max", values, cfg.max, fallback)
    return apply_min_range(Bounds(min=lo, max=hi), cfg.min_range)
