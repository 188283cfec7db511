from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterator

import numpy as np


RGB = tuple[int, int, int]

DEFAULT_MESH_COLOR: RGB = (62, 149, 255)


@dataclass(frozen=True)
class ListenEvent:
    key: str
    weight: float
    timestamp: int

    def __post_init__(self) -> None:
        if not math.isfinite(self.weight):
            raise ValueError(f"event weight must be finite, got {self.weight!r}")
        if self.weight < 0:
            raise ValueError(f"event weight must be >= 0, got {self.weight!r}")


@dataclass(frozen=True)
class Bucket:
    timestamp: int
    scores: dict[str, float]


@dataclass(frozen=True)
class Aggregation:
    buckets: tuple[Bucket, ...] = ()
    keys: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.buckets)

    def timestamps(self) -> np.ndarray:
        return np.asarray([b.timestamp for b in self.buckets], dtype=np.int64)

    def score_matrix(self, keys: tuple[str, ...] | None = None) -> np.ndarray:
        """Scores as a (buckets, keys) float64 array, columns in `keys` order."""
        cols = self.keys if keys is None else keys
        out = np.zeros((len(self.buckets), len(cols)), dtype=np.float64)
        for i, bucket in enumerate(self.buckets):
            for j, key in enumerate(cols):
                out[i, j] = bucket.scores.get(key, 0.0)
        return out

    def totals(self) -> dict[str, float]:
        sums = self.score_matrix().sum(axis=0)
        return {key: float(total) for key, total in zip(self.keys, sums.tolist(), strict=True)}


@dataclass(frozen=True)
class StackedSeries:
    key: str
    z_index: int
    baselines: np.ndarray
    tops: np.ndarray

    def __len__(self) -> int:
        return int(self.baselines.size)

    @property
    def values(self) -> np.ndarray:
        return self.tops - self.baselines

    def points(self) -> Iterator[tuple[int, float, float]]:
        for i, (lo, hi) in enumerate(zip(self.baselines.tolist(), self.tops.tolist(), strict=True)):
            yield (i, float(lo), float(hi))


@dataclass(frozen=True)
class StackLayout:
    series: tuple[StackedSeries, ...] = ()
    offsets: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    timestamps: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))

    @property
    def order(self) -> tuple[str, ...]:
        return tuple(s.key for s in self.series)

    @property
    def bucket_count(self) -> int:
        return int(self.timestamps.size)

    def series_for(self, key: str) -> StackedSeries:
        for s in self.series:
            if s.key == key:
                return s
        raise KeyError(key)

    def extent(self) -> tuple[float, float]:
        if not self.series or self.bucket_count == 0:
            return (0.0, 0.0)
        lo = min(float(np.min(s.baselines)) for s in self.series)
        hi = max(float(np.max(s.tops)) for s in self.series)
        return (lo, hi)


@dataclass(frozen=True)
class CurvePair:
    top: np.ndarray
    bottom: np.ndarray

    def __len__(self) -> int:
        return int(self.top.shape[0])


@dataclass(frozen=True)
class Mesh:
    vertices: np.ndarray
    indices: np.ndarray
    color: RGB = DEFAULT_MESH_COLOR

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    def triangles(self) -> np.ndarray:
        """Triangle corner positions as a (T, 3, 2) array."""
        return self.vertices[self.indices.reshape(-1, 3)]
