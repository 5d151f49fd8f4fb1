from __future__ import annotations

import datetime as dt
import math
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from sparkgraph.errors import HistoryDataError
from sparkgraph.history import HistorySample


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

_TIME_KEYS = ("timestamp", "last_changed", "last_updated", "time")
_STATE_KEYS = ("state", "value")


def normalize_history(data: Any) -> list[HistorySample]:
    """Coerce host-provided history into HistorySamples.

    Accepts HistorySample objects, `{timestamp|last_changed|last_updated, state}`
    mappings, `(timestamp, state)` pairs, or a pandas DataFrame with such
    columns. Order is preserved; the bucketizer sorts.
    """
    if data is None:
        return []
    if pd is not None and isinstance(data, pd.DataFrame):
        return _from_frame(data)
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Sequence):
        raise HistoryDataError(f"unsupported history input type: {type(data)!r}")
    return [_coerce_sample(item, index=i) for i, item in enumerate(data)]


def _from_frame(frame: Any) -> list[HistorySample]:
    time_col = next((c for c in _TIME_KEYS if c in frame.columns), None)
    state_col = next((c for c in _STATE_KEYS if c in frame.columns), None)
    if time_col is None or state_col is None:
        raise HistoryDataError("history DataFrame needs a timestamp column and a state column")
    out: list[HistorySample] = []
    for i, (ts, state) in enumerate(zip(frame[time_col].tolist(), frame[state_col].tolist())):
        out.append(HistorySample(timestamp=coerce_timestamp(ts, index=i), state=_coerce_state(state, index=i)))
    return out


def _coerce_sample(item: Any, *, index: int) -> HistorySample:
    if isinstance(item, HistorySample):
        return item
    if isinstance(item, Mapping):
        ts = next((item[k] for k in _TIME_KEYS if k in item), None)
        if ts is None:
            raise HistoryDataError(f"history entry {index} has no timestamp")
        if not any(k in item for k in _STATE_KEYS):
            raise HistoryDataError(f"history entry {index} has no state")
        state = next(item[k] for k in _STATE_KEYS if k in item)
        return HistorySample(timestamp=coerce_timestamp(ts, index=index), state=_coerce_state(state, index=index))
    if isinstance(item, Sequence) and not isinstance(item, (str, bytes, bytearray)) and len(item) == 2:
        return HistorySample(timestamp=coerce_timestamp(item[0], index=index), state=_coerce_state(item[1], index=index))
    raise HistoryDataError(f"unsupported history entry at index {index}: {item!r}")


def coerce_timestamp(raw: Any, *, index: int = 0) -> dt.datetime:
    if pd is not None and isinstance(raw, pd.Timestamp):
        raw = raw.to_pydatetime()
    if isinstance(raw, dt.datetime):
        return raw if raw.tzinfo is not None else raw.replace(tzinfo=dt.timezone.utc)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if not math.isfinite(raw):
            raise HistoryDataError(f"history entry {index} has a non-finite timestamp")
        return dt.datetime.fromtimestamp(float(raw), tz=dt.timezone.utc)
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError as exc:
            raise HistoryDataError(f"history entry {index} has an invalid timestamp: {raw!r}") from exc
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=dt.timezone.utc)
    raise HistoryDataError(f"history entry {index} has an unsupported timestamp type: {type(raw)!r}")


def _coerce_state(raw: Any, *, index: int) -> float | str:
    if isinstance(raw, Decimal):
        return float(raw)
    if isinstance(raw, bool):
        return "on" if raw else "off"
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        return raw
    if raw is None:
        return "unknown"
    raise HistoryDataError(f"history entry {index} has an unsupported state: {raw!r}")
