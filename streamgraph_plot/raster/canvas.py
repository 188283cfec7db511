from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 255)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def fill_triangles(dst: np.ndarray, triangles: np.ndarray, color: RGBA) -> int:
    """Solid-fill (T, 3, 2) triangles by pixel-center coverage; returns pixels written.

    No blending or antialiasing: covered pixels take `color` exactly, which
    keeps pick-buffer colors decodable.
    """
    tris = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 2)
    height, width = dst.shape[0], dst.shape[1]
    rgba = np.asarray(color, dtype=np.uint8)
    tris, areas = _drawable(tris, width, height)
    written = 0
    for tri, area2 in zip(tris, areas.tolist()):
        a, b, c = tri[0], tri[1], tri[2]
        x0 = max(0, int(np.floor(tri[:, 0].min())))
        x1 = min(width - 1, int(np.ceil(tri[:, 0].max())))
        y0 = max(0, int(np.floor(tri[:, 1].min())))
        y1 = min(height - 1, int(np.ceil(tri[:, 1].max())))
        if x1 < x0 or y1 < y0:
            continue
        px, py = np.meshgrid(
            np.arange(x0, x1 + 1, dtype=np.float64) + 0.5,
            np.arange(y0, y1 + 1, dtype=np.float64) + 0.5,
        )
        sign = 1.0 if area2 > 0 else -1.0
        w0 = _edge(b, c, px, py) * sign
        w1 = _edge(c, a, px, py) * sign
        w2 = _edge(a, b, px, py) * sign
        inside = (w0 >= 0) & (w1 >= 0) & (w2 >= 0)
        if not np.any(inside):
            continue
        dst[y0 : y1 + 1, x0 : x1 + 1][inside] = rgba
        written += int(np.count_nonzero(inside))
    return written


def _drawable(tris: np.ndarray, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Drop zero-area, non-finite and off-canvas triangles in one pass; returns them with doubled signed areas."""
    if tris.shape[0] == 0:
        return tris, np.zeros(0, dtype=np.float64)
    a, b, c = tris[:, 0], tris[:, 1], tris[:, 2]
    area2 = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    lo = tris.min(axis=1)
    hi = tris.max(axis=1)
    keep = (
        np.isfinite(area2)
        & (np.abs(area2) >= 1e-12)
        & (hi[:, 0] >= 0)
        & (hi[:, 1] >= 0)
        & (lo[:, 0] <= width)
        & (lo[:, 1] <= height)
    )
    return tris[keep], area2[keep]


def _edge(a: np.ndarray, b: np.ndarray, px: np.ndarray | float, py: np.ndarray | float) -> np.ndarray:
    return (b[0] - a[0]) * (py - a[1]) - (b[1] - a[1]) * (px - a[0])
