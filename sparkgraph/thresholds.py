from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from sparkgraph.bounds import Bounds
from sparkgraph.colors import ColorCache, blend
from sparkgraph.errors import ThresholdError

STEP_EPSILON = 1e-6


class Transition(str, Enum):
    SMOOTH = "smooth"
    HARD = "hard"


@dataclass(frozen=True)
class ColorStop:
    value: float | None
    color: str


@dataclass(frozen=True)
class GradientStop:
    offset: float
    color: str


@dataclass(frozen=True)
class RankedBin:
    rank: int
    color: str
    ranges: tuple[tuple[float, float], ...]

    def __post_init__(self) -> None:
        if self.rank < 0:
            raise ThresholdError("RankedBin.rank must be >= 0")
        if not self.ranges:
            raise ThresholdError(f"rank {self.rank} has no ranges")
        for lo, hi in self.ranges:
            if not lo < hi:
                raise ThresholdError(f"rank {self.rank} range [{lo}, {hi}) is empty")

    def contains(self, value: float) -> bool:
        return any(lo <= value < hi for lo, hi in self.ranges)


def _value(stop: ColorStop) -> float:
    if stop.value is None:
        raise ThresholdError(f"color stop `{stop.color}` has no value")
    return float(stop.value)


def interpolate_stops(stops: Sequence[ColorStop]) -> list[ColorStop]:
    """Fill in missing stop values by linear interpolation over stop positions.

    Each missing value is placed between the nearest valued neighbours on
    either side, proportionally to its index. The first and last stop must
    carry a value.
    """
    if not stops:
        return []
    if stops[0].value is None or stops[-1].value is None:
        raise ThresholdError("first and last color stop must declare a value")
    out = list(stops)
    left = 0
    for i in range(1, len(stops)):
        if stops[i].value is None:
            continue
        if i - left > 1:
            lo = _value(stops[left])
            hi = _value(stops[i])
            span = i - left
            for j in range(left + 1, i):
                out[j] = ColorStop(value=lo + (hi - lo) * (j - left) / span, color=stops[j].color)
        left = i
    return [ColorStop(value=_value(s), color=s.color) for s in out]


def sort_stops(stops: Sequence[ColorStop]) -> list[ColorStop]:
    return sorted(stops, key=_value, reverse=True)


def expand_stepped(stops: Sequence[ColorStop]) -> list[ColorStop]:
    """Turn descending stops into hard edges for gradient rendering."""
    out: list[ColorStop] = []
    for i, stop in enumerate(stops):
        out.append(stop)
        if i + 1 < len(stops):
            out.append(ColorStop(value=_value(stop) - STEP_EPSILON, color=stops[i + 1].color))
    return out


def _log_scale(value: float) -> float:
    return math.log10(max(1.0, value))


def compute_gradient(
    stops: Sequence[ColorStop],
    bounds: Bounds,
    *,
    logarithmic: bool,
    cache: ColorCache,
) -> list[GradientStop]:
    """Map descending stops onto gradient offsets (0% = bounds.max, 100% = bounds.min)."""
    if logarithmic:
        top = _log_scale(bounds.max)
        scale = top - _log_scale(bounds.min)
    else:
        top = bounds.max
        scale = bounds.max - bounds.min
    out: list[GradientStop] = []
    for i, stop in enumerate(stops):
        value = _value(stop)
        color = stop.color
        if value > bounds.max and i + 1 < len(stops):
            lower = stops[i + 1]
            denom = value - _value(lower)
            if denom > 0:
                color = blend(lower.color, stop.color, (bounds.max - _value(lower)) / denom, cache)
        elif value < bounds.min and i > 0:
            higher = stops[i - 1]
            denom = _value(higher) - value
            if denom > 0:
                color = blend(higher.color, stop.color, (_value(higher) - bounds.min) / denom, cache)
        if scale <= 0:
            offset = 0.0
        elif logarithmic:
            offset = (top - _log_scale(value)) * 100.0 / scale
        else:
            offset = (top - value) * 100.0 / scale
        out.append(GradientStop(offset=max(0.0, min(100.0, offset)), color=color))
    return out


def compute_color(
    value: float,
    stops: Sequence[ColorStop],
    transition: Transition,
    cache: ColorCache,
) -> str | None:
    """Color of `value` on descending stops; values outside the stops clamp to the end colors."""
    if not stops:
        return None
    if transition is Transition.SMOOTH:
        index = next((i for i, s in enumerate(stops) if _value(s) < value), None)
        if index is None:
            return stops[-1].color
        if index == 0:
            return stops[0].color
        lower = stops[index]
        higher = stops[index - 1]
        factor = (_value(higher) - value) / (_value(higher) - _value(lower))
        return blend(higher.color, lower.color, factor, cache)
    match = next((s for s in stops if _value(s) <= value), None)
    if match is None:
        return stops[-1].color
    return match.color


def ranks_from_stops(stops: Sequence[ColorStop]) -> list[RankedBin]:
    """Derive one rank per stop: rank i covers [stop_i, stop_i+1) in ascending order."""
    ascending = sorted(stops, key=_value)
    ranks: list[RankedBin] = []
    for i, stop in enumerate(ascending):
        lo = _value(stop)
        hi = _value(ascending[i + 1]) if i + 1 < len(ascending) else math.inf
        if lo == hi:
            continue
        ranks.append(RankedBin(rank=len(ranks), color=stop.color, ranges=((lo, hi),)))
    return ranks


def find_rank(value: float, ranks: Sequence[RankedBin]) -> int | None:
    for rank in ranks:
        if rank.contains(value):
            return rank.rank
    return None


@dataclass
class ColorScale:
    """Threshold scale of one series: stops, transition mode, ranks and color override."""

    stops: list[ColorStop] = field(default_factory=list)
    transition: Transition = Transition.SMOOTH
    ranks: list[RankedBin] = field(default_factory=list)
    fixed_color: str | None = None
    cache: ColorCache = field(default_factory=ColorCache)

    @classmethod
    def build(
        cls,
        stops: Sequence[ColorStop],
        *,
        transition: Transition = Transition.SMOOTH,
        ranks: Sequence[RankedBin] = (),
        fixed_color: str | None = None,
        cache: ColorCache | None = None,
    ) -> "ColorScale":
        ordered = sort_stops(interpolate_stops(stops))
        ranked = sorted(ranks, key=lambda r: r.rank) if ranks else ranks_from_stops(ordered)
        return cls(
            stops=ordered,
            transition=transition,
            ranks=list(ranked),
            fixed_color=fixed_color,
            cache=cache if cache is not None else ColorCache(),
        )

    @property
    def smooth(self) -> bool:
        return self.transition is Transition.SMOOTH

    def color_for(self, value: float) -> str | None:
        if self.fixed_color is not None:
            return self.fixed_color
        return compute_color(value, self.stops, self.transition, self.cache)

    def gradient(self, bounds: Bounds, *, logarithmic: bool = False) -> list[GradientStop]:
        if self.fixed_color is not None or not self.stops:
            return []
        stops = self.stops if self.smooth else expand_stepped(self.stops)
        return compute_gradient(stops, bounds, logarithmic=logarithmic, cache=self.cache)

    def rank_for(self, value: float) -> int | None:
        return find_rank(value, self.ranks)

    def rank_color(self, rank: int) -> str | None:
        if self.fixed_color is not None:
            return self.fixed_color
        for ranked in self.ranks:
            if ranked.rank == rank:
                return ranked.color
        return None
