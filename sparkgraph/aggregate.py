from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from sparkgraph.errors import GraphConfigError
from sparkgraph.history import HistorySample


class AggregateFunction(str, Enum):
    AVG = "avg"
    MEDIAN = "median"
    MAX = "max"
    MIN = "min"
    FIRST = "first"
    LAST = "last"
    SUM = "sum"
    DELTA = "delta"
    DIFF = "diff"

    @property
    def is_interval_measure(self) -> bool:
        return self in (AggregateFunction.DELTA, AggregateFunction.DIFF)


def _finite(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    return arr[np.isfinite(arr)]


def _avg(arr: np.ndarray) -> float:
    return float(np.mean(arr))


def _median(arr: np.ndarray) -> float:
    return float(np.median(arr))


def _max(arr: np.ndarray) -> float:
    return float(np.max(arr))


def _min(arr: np.ndarray) -> float:
    return float(np.min(arr))


def _first(arr: np.ndarray) -> float:
    return float(arr[0])


def _last(arr: np.ndarray) -> float:
    return float(arr[-1])


def _sum(arr: np.ndarray) -> float:
    return float(np.sum(arr))


def _delta(arr: np.ndarray) -> float:
    return float(np.max(arr) - np.min(arr))


def _diff(arr: np.ndarray) -> float:
    return float(arr[-1] - arr[0])


_REDUCERS: dict[AggregateFunction, Callable[[np.ndarray], float]] = {
    AggregateFunction.AVG: _avg,
    AggregateFunction.MEDIAN: _median,
    AggregateFunction.MAX: _max,
    AggregateFunction.MIN: _min,
    AggregateFunction.FIRST: _first,
    AggregateFunction.LAST: _last,
    AggregateFunction.SUM: _sum,
    AggregateFunction.DELTA: _delta,
    AggregateFunction.DIFF: _diff,
}


def parse_aggregate(name: str | AggregateFunction) -> AggregateFunction:
    if isinstance(name, AggregateFunction):
        return name
    try:
        return AggregateFunction(str(name).strip().lower())
    except ValueError:
        choices = ", ".join(f.value for f in AggregateFunction)
        raise GraphConfigError(f"unknown aggregate function `{name}` (expected one of: {choices})") from None


def reduce_values(fn: AggregateFunction, values: Sequence[float]) -> float:
    """Apply `fn` to chronologically ordered values, ignoring non-finite entries.

    Returns nan when no finite value is left.
    """
    arr = _finite(values)
    if arr.size == 0:
        return math.nan
    return _REDUCERS[fn](arr)


def aggregate(fn: AggregateFunction, samples: Sequence[HistorySample]) -> float:
    return reduce_values(fn, [s.value for s in samples])


def fallback_value(fn: AggregateFunction, samples: Sequence[HistorySample]) -> float:
    """Level carried into empty buckets that follow `samples`."""
    if fn.is_interval_measure:
        return 0.0
    return reduce_values(AggregateFunction.LAST, [s.value for s in samples])


@dataclass(frozen=True)
class AggregatedPoint:
    index: int
    value: float
    filled: bool = False


def aggregate_buckets(
    buckets: Sequence[Sequence[HistorySample]],
    fn: AggregateFunction,
) -> list[AggregatedPoint]:
    """Reduce each bucket and forward-fill the empty ones.

    An empty bucket receives the fallback level of the nearest preceding
    non-empty bucket; empty buckets before any data are seeded with 0.
    The reducer is never called on an empty bucket.
    """
    carried = (0.0, 0.0)
    points: list[AggregatedPoint] = []
    for index, bucket in enumerate(buckets):
        if bucket:
            carried = (aggregate(fn, bucket), fallback_value(fn, bucket))
            points.append(AggregatedPoint(index=index, value=carried[0]))
        else:
            points.append(AggregatedPoint(index=index, value=carried[1], filled=True))
    return points
