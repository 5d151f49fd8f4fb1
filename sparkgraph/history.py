from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class HistorySample:
    timestamp: dt.datetime
    state: float | str
    mapped_state: float | None = None

    @property
    def value(self) -> float:
        """Working value: the mapped state when one was assigned, else the numeric raw state."""
        if self.mapped_state is not None:
            return float(self.mapped_state)
        return numeric_state(self.state)


def numeric_state(state: object) -> float:
    if isinstance(state, bool):
        return float(state)
    if isinstance(state, (int, float)):
        return float(state)
    if isinstance(state, str):
        try:
            return float(state.strip())
        except ValueError:
            return math.nan
    return math.nan


def sort_samples(samples: Iterable[HistorySample]) -> list[HistorySample]:
    # Stable, so samples sharing a timestamp keep their arrival order.
    return sorted(samples, key=lambda s: s.timestamp)


def sample_values(samples: Iterable[HistorySample]) -> list[float]:
    return [s.value for s in samples]
