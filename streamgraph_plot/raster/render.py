from __future__ import annotations

from typing import Protocol, Sequence

from streamgraph_core.surface import Surface
from streamgraph_plot.compile import compile_full_rewrite_batch
from streamgraph_plot.raster.canvas import fill_triangles, new_canvas
from streamgraph_plot.series import RGB, Mesh
from streamgraph_plot.view import ViewState


class MeshRenderer(Protocol):
    """Draws triangle lists with a solid fill color into a target surface."""

    def draw(
        self,
        surface: Surface,
        items: Sequence[tuple[Mesh, RGB]],
        view: ViewState,
        background: RGB,
    ) -> None:
        ...


class RasterMeshRenderer:
    """CPU renderer: rasterizes meshes in order (later items on top) and commits one batch.

    Cost grows with the drawable triangle count: degenerate and off-canvas
    triangles are dropped up front, the rest are filled one bounding box at a
    time. The chart calls this on every transition tick.
    """

    def __init__(self) -> None:
        self.draw_count = 0

    def draw(
        self,
        surface: Surface,
        items: Sequence[tuple[Mesh, RGB]],
        view: ViewState,
        background: RGB,
    ) -> None:
        canvas = new_canvas(surface.width, surface.height, color=(*background, 255))
        for mesh, color in items:
            if mesh.triangle_count == 0:
                continue
            vertices = view.apply_points(mesh.vertices)
            fill_triangles(canvas, vertices[mesh.indices.reshape(-1, 3)], (*color, 255))
        surface.submit_write_batch(compile_full_rewrite_batch(canvas))
        self.draw_count += 1
