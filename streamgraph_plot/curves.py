from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeAlias

import numpy as np

from streamgraph_plot.series import CurvePair, StackedSeries


DEFAULT_SAMPLES_PER_SEGMENT = 10

Point: TypeAlias = tuple[float, float]
AxisMap: TypeAlias = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class LineTo:
    end: Point


@dataclass(frozen=True)
class CurveTo:
    c1: Point
    c2: Point
    end: Point


PathSegment: TypeAlias = LineTo | CurveTo


@dataclass(frozen=True)
class Path:
    start: Point | None
    segments: list[PathSegment] = field(default_factory=list)


def basis_path(points: np.ndarray) -> Path:
    """Uniform cubic B-spline through `points` as line and Bezier segments.

    The path starts and ends on the first and last control points, like
    d3's `curveBasis`.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    n = pts.shape[0]
    if n == 0:
        return Path(start=None)
    start = _pt(pts[0])
    if n == 1:
        return Path(start=start)
    if n == 2:
        return Path(start=start, segments=[LineTo(_pt(pts[1]))])

    segments: list[PathSegment] = [LineTo(_pt((5.0 * pts[0] + pts[1]) / 6.0))]
    for i in range(2, n):
        segments.append(_basis_segment(pts[i - 2], pts[i - 1], pts[i]))
    segments.append(_basis_segment(pts[n - 2], pts[n - 1], pts[n - 1]))
    segments.append(LineTo(_pt(pts[n - 1])))
    return Path(start=start, segments=segments)


def _basis_segment(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray) -> CurveTo:
    return CurveTo(
        c1=_pt((2.0 * p0 + p1) / 3.0),
        c2=_pt((p0 + 2.0 * p1) / 3.0),
        end=_pt((p0 + 4.0 * p1 + p2) / 6.0),
    )


def _pt(value: np.ndarray) -> Point:
    return (float(value[0]), float(value[1]))


def sample_path(path: Path, samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT) -> np.ndarray:
    """Flatten a path into a (k, 2) polyline; lines get half the samples of curves."""
    if samples_per_segment <= 0:
        raise ValueError("samples_per_segment must be > 0")
    if path.start is None:
        return np.zeros((0, 2), dtype=np.float64)

    chunks = [np.asarray([path.start], dtype=np.float64)]
    current = np.asarray(path.start, dtype=np.float64)
    line_samples = max(1, samples_per_segment // 2)
    for seg in path.segments:
        end = np.asarray(seg.end, dtype=np.float64)
        if isinstance(seg, CurveTo):
            t = np.arange(1, samples_per_segment + 1, dtype=np.float64) / samples_per_segment
            chunk = _cubic(current, np.asarray(seg.c1), np.asarray(seg.c2), end, t)
        else:
            t = np.arange(1, line_samples + 1, dtype=np.float64) / line_samples
            chunk = current[None, :] + (end - current)[None, :] * t[:, None]
        chunk[-1] = end
        chunks.append(chunk)
        current = end
    return np.concatenate(chunks, axis=0)


def _cubic(p0: np.ndarray, c1: np.ndarray, c2: np.ndarray, p1: np.ndarray, t: np.ndarray) -> np.ndarray:
    u = 1.0 - t
    return (
        (u**3)[:, None] * p0
        + (3.0 * u * u * t)[:, None] * c1
        + (3.0 * u * t * t)[:, None] * c2
        + (t**3)[:, None] * p1
    )


def build_curves(
    series: StackedSeries,
    x_of: AxisMap,
    y_of: AxisMap,
    *,
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> CurvePair:
    idx = np.arange(len(series), dtype=np.float64)
    xs = np.asarray(x_of(idx), dtype=np.float64).reshape(-1)
    top = np.stack([xs, np.asarray(y_of(series.tops), dtype=np.float64).reshape(-1)], axis=1)
    bottom = np.stack([xs, np.asarray(y_of(series.baselines), dtype=np.float64).reshape(-1)], axis=1)
    return CurvePair(
        top=sample_path(basis_path(top), samples_per_segment),
        bottom=sample_path(basis_path(bottom), samples_per_segment),
    )
