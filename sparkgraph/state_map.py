from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from sparkgraph.errors import GraphConfigError
from sparkgraph.history import HistorySample, numeric_state
from sparkgraph.thresholds import RankedBin, find_rank

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateMapEntry:
    value: str
    state: float
    label: str | None = None


def _state_key(raw: object) -> str:
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw).strip()


def build_state_table(raw: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None) -> tuple[StateMapEntry, ...]:
    """Normalize a state map given as `{raw: number}` or `[{value, label?, state?}]`.

    In list form an entry without `state` maps to its position in the list.
    """
    if not raw:
        return ()
    entries: list[StateMapEntry] = []
    if isinstance(raw, Mapping):
        for key, number in raw.items():
            entries.append(StateMapEntry(value=_state_key(key), state=_table_number(key, number)))
        return tuple(entries)
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping) or "value" not in item:
            raise GraphConfigError(f"state_map entry {index} must be a mapping with a `value` key")
        number = item.get("state", index)
        label = item.get("label")
        entries.append(
            StateMapEntry(
                value=_state_key(item["value"]),
                state=_table_number(item["value"], number),
                label=None if label is None else str(label),
            )
        )
    return tuple(entries)


def _table_number(key: object, number: object) -> float:
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise GraphConfigError(f"state_map value for `{key}` must be a number")
    return float(number)


class StateMapper:
    """Turns raw sample states into numeric working values.

    Exactly one transform applies, in this order: the explicit state table,
    ranked-bin lookup, then the value factor. Unmatched states are logged and
    keep their raw numeric value (nan for non-numeric states).
    """

    def __init__(
        self,
        *,
        table: Iterable[StateMapEntry] = (),
        bins: Sequence[RankedBin] | None = None,
        value_factor: float | None = None,
    ) -> None:
        self._table = {entry.value: entry for entry in table}
        self._bins = list(bins) if bins is not None else None
        self._factor = float(value_factor) if value_factor else None
        self._errors: list[str] = []

    @property
    def errors(self) -> tuple[str, ...]:
        return tuple(self._errors)

    def reset_errors(self) -> None:
        self._errors.clear()

    def label_for(self, raw: object) -> str | None:
        entry = self._table.get(_state_key(raw))
        return entry.label if entry is not None else None

    def map_value(self, raw: object) -> float:
        if self._table:
            entry = self._table.get(_state_key(raw))
            if entry is None:
                self._report(f"state `{raw}` has no state_map entry")
                return numeric_state(raw)
            return entry.state
        number = numeric_state(raw)
        if self._bins is not None:
            rank = find_rank(number, self._bins) if math.isfinite(number) else None
            if rank is None:
                self._report(f"state `{raw}` matches no ranked bin")
                return number
            return float(rank)
        if self._factor is not None:
            return number * self._factor
        return number

    def map(self, sample: HistorySample) -> HistorySample:
        return dataclasses.replace(sample, mapped_state=self.map_value(sample.state))

    def map_all(self, samples: Iterable[HistorySample]) -> list[HistorySample]:
        return [self.map(s) for s in samples]

    def _report(self, message: str) -> None:
        if message in self._errors:
            return
        self._errors.append(message)
        LOGGER.error("%s", message)
