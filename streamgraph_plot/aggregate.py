from __future__ import annotations

import logging
from typing import Iterable

from streamgraph_plot.series import Aggregation, Bucket, ListenEvent


LOGGER = logging.getLogger(__name__)

# Average Gregorian month.
MONTH_MS = 2_629_800_000


def aggregate(events: Iterable[ListenEvent], bucket_width_ms: int) -> Aggregation:
    """Sum event weights per key into fixed-width time buckets.

    Buckets are walked from the first event's timestamp in steps of
    `bucket_width_ms`; each collects events with `start <= ts < start + width`.
    A bucket reports the timestamp of its first event, or its window start when
    it holds none. Every bucket carries a score for every key seen in the input.
    """
    if bucket_width_ms <= 0:
        raise ValueError("bucket_width_ms must be > 0")

    ordered = sorted(events, key=lambda event: event.timestamp)
    if not ordered:
        return Aggregation(buckets=(), keys=())

    keys = tuple(dict.fromkeys(event.key for event in ordered))
    end_time = ordered[-1].timestamp
    current = ordered[0].timestamp

    buckets: list[Bucket] = []
    idx = 0
    n = len(ordered)
    while current <= end_time:
        upper = current + bucket_width_ms
        scores = dict.fromkeys(keys, 0.0)
        first = idx
        while idx < n and ordered[idx].timestamp < upper:
            event = ordered[idx]
            scores[event.key] += float(event.weight)
            idx += 1
        stamp = ordered[first].timestamp if idx > first else current
        buckets.append(Bucket(timestamp=stamp, scores=scores))
        current = upper

    LOGGER.debug("aggregated %d events into %d buckets over %d keys", n, len(buckets), len(keys))
    return Aggregation(buckets=tuple(buckets), keys=keys)


def first_seen(events: Iterable[ListenEvent]) -> dict[str, int]:
    out: dict[str, int] = {}
    for event in events:
        prev = out.get(event.key)
        if prev is None or event.timestamp < prev:
            out[event.key] = event.timestamp
    return out
