from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from streamgraph_plot.curves import AxisMap
from streamgraph_plot.series import StackLayout


@dataclass(frozen=True)
class DataLimits:
    xmin: float
    xmax: float
    ymin: float
    ymax: float


@dataclass(frozen=True)
class LinearScale:
    """Affine map from a data domain onto a pixel range (range may be reversed)."""

    d0: float
    d1: float
    r0: float
    r1: float

    @property
    def factor(self) -> float:
        span = self.d1 - self.d0
        if span == 0:
            return 0.0
        return (self.r1 - self.r0) / span

    def __call__(self, value: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(value, dtype=np.float64)
        if self.d1 == self.d0:
            return np.full_like(arr, (self.r0 + self.r1) / 2.0)
        return self.r0 + (arr - self.d0) * self.factor

    def invert(self, value: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(value, dtype=np.float64)
        if self.r1 == self.r0 or self.d1 == self.d0:
            return np.full_like(arr, self.d0)
        return self.d0 + (arr - self.r0) / self.factor


def compute_limits(stack: StackLayout) -> DataLimits:
    if stack.bucket_count == 0:
        return DataLimits(xmin=0.0, xmax=0.0, ymin=0.0, ymax=0.0)
    ymin, ymax = stack.extent()
    return DataLimits(
        xmin=float(stack.timestamps[0]),
        xmax=float(stack.timestamps[-1]),
        ymin=ymin,
        ymax=ymax,
    )


def build_scales(limits: DataLimits, width: int, height: int) -> tuple[LinearScale, LinearScale]:
    """Time onto [0, width] and stacked values onto [height, 0]."""
    if width <= 0 or height <= 0:
        raise ValueError("content width/height must be > 0")
    x = LinearScale(d0=limits.xmin, d1=limits.xmax, r0=0.0, r1=float(width))
    y = LinearScale(d0=limits.ymin, d1=limits.ymax, r0=float(height), r1=0.0)
    return x, y


def bucket_x_map(stack: StackLayout, x_scale: LinearScale) -> AxisMap:
    """Bucket index (fractional allowed) to screen x through the bucket timestamps."""
    stamps = stack.timestamps.astype(np.float64)

    def x_of(index: np.ndarray) -> np.ndarray:
        idx = np.asarray(index, dtype=np.float64)
        return x_scale(np.interp(idx, np.arange(stamps.size, dtype=np.float64), stamps))

    return x_of
