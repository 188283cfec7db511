from __future__ import annotations

import numpy as np

from streamgraph_plot.curves import DEFAULT_SAMPLES_PER_SEGMENT, AxisMap, build_curves
from streamgraph_plot.errors import MeshContractError
from streamgraph_plot.series import DEFAULT_MESH_COLOR, RGB, Mesh, StackedSeries
from streamgraph_plot.view import IDENTITY, ViewState


def triangulate(top: np.ndarray, bottom: np.ndarray, color: RGB = DEFAULT_MESH_COLOR) -> Mesh:
    """Triangle strip filling the band between two equally sampled boundaries.

    Vertex `2i` is `bottom[i]` and `2i + 1` is `top[i]`. Each step emits
    `(b_i, b_i+1, t_i+1)` and `(b_i, t_i+1, t_i)`.
    """
    top = np.asarray(top, dtype=np.float64)
    bottom = np.asarray(bottom, dtype=np.float64)
    if top.ndim != 2 or top.shape[1] != 2 or bottom.ndim != 2 or bottom.shape[1] != 2:
        raise MeshContractError(f"curves must have shape (k, 2), got {top.shape} and {bottom.shape}")
    if top.shape[0] != bottom.shape[0]:
        raise MeshContractError(f"curve sample counts differ: top={top.shape[0]} bottom={bottom.shape[0]}")

    k = top.shape[0]
    vertices = np.empty((2 * k, 2), dtype=np.float64)
    vertices[0::2] = bottom
    vertices[1::2] = top

    if k < 2:
        return Mesh(vertices=vertices, indices=np.zeros(0, dtype=np.uint32), color=color)

    b0 = 2 * np.arange(k - 1, dtype=np.uint32)
    t0 = b0 + 1
    b1 = b0 + 2
    t1 = b0 + 3
    indices = np.stack([b0, b1, t1, b0, t1, t0], axis=1).reshape(-1)
    return Mesh(vertices=vertices, indices=indices, color=color)


def signed_triangle_areas(mesh: Mesh) -> np.ndarray:
    tris = mesh.triangles()
    if tris.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    a = tris[:, 0]
    b = tris[:, 1]
    c = tris[:, 2]
    cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    return cross / 2.0


def mesh_area(mesh: Mesh) -> float:
    return float(np.abs(signed_triangle_areas(mesh)).sum())


def band_area(top: np.ndarray, bottom: np.ndarray) -> float:
    """Trapezoidal integral of the height between two boundaries sharing x samples."""
    top = np.asarray(top, dtype=np.float64)
    bottom = np.asarray(bottom, dtype=np.float64)
    if top.shape[0] < 2:
        return 0.0
    heights = np.abs(top[:, 1] - bottom[:, 1])
    widths = np.abs(np.diff(top[:, 0]))
    return float(np.sum(widths * (heights[:-1] + heights[1:]) / 2.0))


def build_mesh(
    series: StackedSeries,
    view: ViewState = IDENTITY,
    *,
    x_of: AxisMap,
    y_of: AxisMap,
    color: RGB = DEFAULT_MESH_COLOR,
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> Mesh:
    """Smooth one stacked layer and triangulate it, with vertices mapped through `view`."""
    curves = build_curves(series, x_of, y_of, samples_per_segment=samples_per_segment)
    return transform_mesh(triangulate(curves.top, curves.bottom, color=color), view)


def transform_mesh(mesh: Mesh, view: ViewState) -> Mesh:
    if view.is_identity:
        return mesh
    return Mesh(vertices=view.apply_points(mesh.vertices), indices=mesh.indices, color=mesh.color)
