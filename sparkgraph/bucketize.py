from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Sequence

from sparkgraph.errors import HistoryDataError
from sparkgraph.history import HistorySample, sort_samples
from sparkgraph.window import ONE_HOUR, ResolvedWindow, WindowSpec

LOGGER = logging.getLogger(__name__)

Bucket = list[HistorySample]


def bucket_key(timestamp: dt.datetime, window: ResolvedWindow) -> int:
    """Slot index of a sample, counted in bucket widths from the window start.

    Samples older than the window start clamp into slot 0; samples stamped at
    or after the end time land on index >= bucket_count.
    """
    age_h = (window.end_time - timestamp) / ONE_HOUR
    interval = age_h * window.buckets_per_hour - window.hours * window.buckets_per_hour
    if interval < 0:
        return int(math.floor(abs(interval)))
    return 0


def bucketize(
    samples: Sequence[HistorySample],
    window: WindowSpec | ResolvedWindow,
    now: dt.datetime,
) -> list[Bucket]:
    resolved = window if isinstance(window, ResolvedWindow) else window.resolve(now)
    count = resolved.bucket_count
    buckets: list[Bucket] = [[] for _ in range(count)]
    dropped = 0
    try:
        for sample in sort_samples(samples):
            key = bucket_key(sample.timestamp, resolved)
            if key >= count:
                dropped += 1
                continue
            buckets[key].append(sample)
    except TypeError as exc:
        raise HistoryDataError(f"sample timestamps are not comparable with the window end time: {exc}") from exc
    if dropped:
        LOGGER.debug("dropped %d sample(s) stamped at or after %s", dropped, resolved.end_time.isoformat())
    if len(buckets[0]) > 1:
        buckets[0] = [buckets[0][-1]]
    return buckets
