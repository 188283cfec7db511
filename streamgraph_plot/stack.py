from __future__ import annotations

from collections import deque
from typing import Literal, Sequence

import numpy as np

from streamgraph_plot.errors import LayoutError
from streamgraph_plot.series import Aggregation, Bucket, StackedSeries, StackLayout


StackOffset = Literal["wiggle", "zero"]

PARTITION_RTOL = 1e-9


def order_inside_out(values: np.ndarray) -> list[int]:
    """Column order placing the heaviest series in the middle of the stack.

    Columns are ranked by total descending (ties keep column order); rank 0 is
    the center, odd ranks are placed above it and even ranks below it.
    """
    if values.ndim != 2:
        raise ValueError("values must have shape (buckets, keys)")
    totals = values.sum(axis=0)
    ranked = sorted(range(values.shape[1]), key=lambda col: -totals[col])
    order: deque[int] = deque()
    for rank, col in enumerate(ranked):
        if rank % 2 == 1:
            order.append(col)
        else:
            order.appendleft(col)
    return list(order)


def offset_wiggle(ordered: np.ndarray) -> np.ndarray:
    """Per-bucket baseline offsets minimizing weighted layer slope.

    `ordered` holds bucket values with columns already in stacking order.
    """
    m = ordered.shape[0]
    offsets = np.zeros(m, dtype=np.float64)
    y = 0.0
    for j in range(1, m):
        cur = ordered[j]
        delta = cur - ordered[j - 1]
        # Midpoint shift of each layer: half its own change plus everything below it.
        shift = np.cumsum(delta) - delta / 2.0
        total = float(cur.sum())
        if total:
            y -= float(np.dot(shift, cur)) / total
        offsets[j] = y
    return offsets


def offset_zero(ordered: np.ndarray) -> np.ndarray:
    return np.zeros(ordered.shape[0], dtype=np.float64)


_OFFSETS = {
    "wiggle": offset_wiggle,
    "zero": offset_zero,
}


def layout(
    buckets: Aggregation | Sequence[Bucket],
    keys: Sequence[str] | None = None,
    *,
    offset: StackOffset = "wiggle",
) -> StackLayout:
    if offset not in _OFFSETS:
        raise ValueError(f"unknown stack offset: {offset}")
    if isinstance(buckets, Aggregation):
        agg = buckets
        if keys is not None:
            agg = Aggregation(buckets=agg.buckets, keys=tuple(keys))
    else:
        if keys is None:
            raise ValueError("keys are required when passing raw buckets")
        agg = Aggregation(buckets=tuple(buckets), keys=tuple(keys))

    timestamps = agg.timestamps()
    if not agg.keys or not agg.buckets:
        return StackLayout(series=(), offsets=np.zeros(len(agg.buckets), dtype=np.float64), timestamps=timestamps)

    values = agg.score_matrix()
    order = order_inside_out(values)
    ordered = values[:, order]
    offsets = _OFFSETS[offset](ordered)

    tops = np.cumsum(ordered, axis=1) + offsets[:, None]
    baselines = tops - ordered
    series = tuple(
        StackedSeries(
            key=agg.keys[col],
            z_index=z,
            baselines=baselines[:, z].copy(),
            tops=tops[:, z].copy(),
        )
        for z, col in enumerate(order)
    )
    out = StackLayout(series=series, offsets=offsets, timestamps=timestamps)
    verify_partition(out, ordered.sum(axis=1))
    return out


def verify_partition(stack: StackLayout, bucket_totals: np.ndarray | None = None) -> None:
    if not stack.series:
        return
    baselines = np.stack([s.baselines for s in stack.series], axis=1)
    tops = np.stack([s.tops for s in stack.series], axis=1)
    scale = max(1.0, float(np.max(np.abs(tops))) if tops.size else 1.0)
    atol = scale * PARTITION_RTOL

    if np.any(tops < baselines - atol):
        raise LayoutError("stacked layer has negative height")
    if not np.allclose(tops[:, :-1], baselines[:, 1:], rtol=0.0, atol=atol):
        raise LayoutError("adjacent stacked layers do not touch")
    if not np.allclose(baselines[:, 0], stack.offsets, rtol=0.0, atol=atol):
        raise LayoutError("bottom layer does not start at the bucket offset")
    if bucket_totals is not None:
        span = tops[:, -1] - baselines[:, 0]
        if not np.allclose(span, bucket_totals, rtol=0.0, atol=atol):
            raise LayoutError("stack span does not match bucket totals")
