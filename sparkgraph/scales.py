from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

from sparkgraph.bounds import Bounds
from sparkgraph.errors import GraphConfigError

Axis = Literal["vertical", "horizontal"]


@dataclass(frozen=True)
class DrawArea:
    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise GraphConfigError("draw area width/height must be > 0")

    @classmethod
    def from_position(
        cls,
        *,
        left: float = 0.0,
        top: float = 0.0,
        width: float = 100.0,
        height: float = 50.0,
        margin: float = 0.0,
    ) -> "DrawArea":
        if margin < 0 or 2 * margin >= min(width, height):
            raise GraphConfigError("position.margin must be >= 0 and leave a drawable area")
        return cls(left=left + margin, top=top + margin, width=width - 2 * margin, height=height - 2 * margin)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


def log_transform(values: np.ndarray) -> np.ndarray:
    # log10 of anything below 1 is pinned to 0.
    return np.log10(np.maximum(1.0, values))


@dataclass(frozen=True)
class ValueScale:
    """Maps series values onto one drawing axis.

    Vertical scales put bounds.min at the bottom edge and higher values at
    smaller y; horizontal scales put bounds.min at the left edge.
    """

    vmin: float
    vmax: float
    origin: float
    extent: float
    direction: float
    logarithmic: bool = False

    @property
    def ratio(self) -> float:
        lo, hi = self._transformed_bounds()
        ratio = (hi - lo) / self.extent
        return ratio if ratio != 0 else 1.0

    def _transformed_bounds(self) -> tuple[float, float]:
        if self.logarithmic:
            lo, hi = log_transform(np.asarray([self.vmin, self.vmax], dtype=np.float64))
            return float(lo), float(hi)
        return self.vmin, self.vmax

    def positions(self, values: np.ndarray | list[float]) -> np.ndarray:
        arr = np.asarray(values, dtype=np.float64)
        lo, _ = self._transformed_bounds()
        t = log_transform(arr) if self.logarithmic else arr
        pos = self.origin + self.direction * (t - lo) / self.ratio
        edge = self.origin + self.direction * self.extent
        lower, upper = min(self.origin, edge), max(self.origin, edge)
        pos = np.clip(pos, lower, upper)
        # Non-finite values sit on the baseline.
        return np.where(np.isfinite(pos), pos, self.baseline())

    def position(self, value: float) -> float:
        return float(self.positions([value])[0])

    def baseline_value(self) -> float:
        return min(max(0.0, self.vmin), self.vmax)

    def baseline(self) -> float:
        lo, _ = self._transformed_bounds()
        base = self.baseline_value()
        t = float(log_transform(np.asarray([base]))[0]) if self.logarithmic else base
        return self.origin + self.direction * (t - lo) / self.ratio


def build_value_scale(
    bounds: Bounds,
    area: DrawArea,
    *,
    axis: Axis = "vertical",
    logarithmic: bool = False,
) -> ValueScale:
    if axis == "vertical":
        return ValueScale(
            vmin=bounds.min,
            vmax=bounds.max,
            origin=area.bottom,
            extent=area.height,
            direction=-1.0,
            logarithmic=logarithmic,
        )
    return ValueScale(
        vmin=bounds.min,
        vmax=bounds.max,
        origin=area.left,
        extent=area.width,
        direction=1.0,
        logarithmic=logarithmic,
    )


def point_positions(count: int, start: float, span: float) -> np.ndarray:
    """Evenly spaced vertex positions; a single point sits at `start`."""
    if count <= 0:
        return np.empty(0, dtype=np.float64)
    step = span / (count - 1) if count > 1 else span
    return start + step * np.arange(count, dtype=np.float64)


def slot_layout(count: int, start: float, span: float, gap: float) -> tuple[np.ndarray, float]:
    """Split `span` into `count` equal slots separated by `gap`; returns (slot starts, slot width)."""
    if count <= 0:
        return np.empty(0, dtype=np.float64), 0.0
    width = (span - gap * (count - 1)) / count
    if width <= 0:
        raise GraphConfigError(f"gap {gap} leaves no room for {count} slots in {span}")
    return start + (width + gap) * np.arange(count, dtype=np.float64), float(width)
