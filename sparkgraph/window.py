from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from sparkgraph.errors import GraphConfigError

ONE_HOUR = dt.timedelta(hours=1)


@dataclass(frozen=True)
class ResolvedWindow:
    end_time: dt.datetime
    hours: float
    buckets_per_hour: int

    @property
    def bucket_count(self) -> int:
        return required_bucket_count(self.hours, self.buckets_per_hour)

    @property
    def bucket_width(self) -> dt.timedelta:
        return ONE_HOUR / self.buckets_per_hour

    @property
    def start_time(self) -> dt.datetime:
        return self.end_time - ONE_HOUR * self.hours


def required_bucket_count(hours: float, buckets_per_hour: int) -> int:
    return max(1, math.ceil(round(hours * buckets_per_hour, 9)))


def _check_bph(buckets_per_hour: int) -> None:
    if isinstance(buckets_per_hour, bool) or not isinstance(buckets_per_hour, int) or buckets_per_hour < 1:
        raise GraphConfigError("buckets_per_hour must be an integer >= 1")


def _midnight(moment: dt.datetime) -> dt.datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class RealTimeWindow:
    kind: Literal["real_time"] = "real_time"

    def resolve(self, now: dt.datetime) -> ResolvedWindow:
        return ResolvedWindow(end_time=now, hours=1.0, buckets_per_hour=1)


@dataclass(frozen=True)
class CalendarWindow:
    """Window snapped to a calendar day in `now`'s timezone.

    `offset_days == 0` covers today from local midnight up to now; a negative
    offset covers that whole prior day. Day boundaries are taken in local
    time and the window itself is measured in UTC, so days that gain or lose
    an hour to a DST change get 25 or 23 hours of buckets.
    """

    period: str = "day"
    offset_days: int = 0
    buckets_per_hour: int = 1
    kind: Literal["calendar"] = "calendar"

    def __post_init__(self) -> None:
        if self.period != "day":
            raise GraphConfigError(f"unsupported calendar period: {self.period}")
        if isinstance(self.offset_days, bool) or not isinstance(self.offset_days, int):
            raise GraphConfigError("calendar offset_days must be an integer")
        if self.offset_days > 0:
            raise GraphConfigError(f"calendar offset_days must be <= 0, got {self.offset_days}")
        _check_bph(self.buckets_per_hour)

    def resolve(self, now: dt.datetime) -> ResolvedWindow:
        if now.tzinfo is None:
            now = now.replace(tzinfo=dt.timezone.utc)
        midnight = _midnight(now)
        if self.offset_days == 0:
            start = midnight.astimezone(dt.timezone.utc)
            elapsed_h = (now.astimezone(dt.timezone.utc) - start) / ONE_HOUR
            count = required_bucket_count(elapsed_h, self.buckets_per_hour)
            hours = count / self.buckets_per_hour
            return ResolvedWindow(end_time=start + ONE_HOUR * hours, hours=hours, buckets_per_hour=self.buckets_per_hour)
        start = (midnight + dt.timedelta(days=self.offset_days)).astimezone(dt.timezone.utc)
        end = (midnight + dt.timedelta(days=self.offset_days + 1)).astimezone(dt.timezone.utc)
        return ResolvedWindow(end_time=end, hours=(end - start) / ONE_HOUR, buckets_per_hour=self.buckets_per_hour)


@dataclass(frozen=True)
class RollingWindow:
    hours: float = 24.0
    buckets_per_hour: int = 1
    kind: Literal["rolling_window"] = "rolling_window"

    def __post_init__(self) -> None:
        if isinstance(self.hours, bool) or not isinstance(self.hours, (int, float)):
            raise GraphConfigError("rolling window hours must be a number")
        if not math.isfinite(self.hours) or self.hours <= 0:
            raise GraphConfigError("rolling window hours must be > 0")
        _check_bph(self.buckets_per_hour)

    def resolve(self, now: dt.datetime) -> ResolvedWindow:
        return ResolvedWindow(end_time=now, hours=float(self.hours), buckets_per_hour=self.buckets_per_hour)


WindowSpec = RealTimeWindow | CalendarWindow | RollingWindow


def window_from_dict(raw: Mapping[str, Any] | None) -> WindowSpec:
    if not raw:
        return RollingWindow()
    data = dict(raw)
    kind = str(data.pop("type", "rolling_window")).strip().lower()
    window: WindowSpec
    if kind == "real_time":
        window = RealTimeWindow()
    elif kind == "calendar":
        window = CalendarWindow(
            period=str(data.pop("period", "day")),
            offset_days=data.pop("offset_days", 0),
            buckets_per_hour=data.pop("buckets_per_hour", 1),
        )
    elif kind == "rolling_window":
        window = RollingWindow(
            hours=data.pop("hours", 24.0),
            buckets_per_hour=data.pop("buckets_per_hour", 1),
        )
    else:
        raise GraphConfigError(f"unknown period type: {kind}")
    if data:
        raise GraphConfigError(f"unknown {kind} period option(s): {', '.join(sorted(data))}")
    return window
