from __future__ import annotations

import logging
from typing import Iterable, Mapping

import numpy as np

from streamgraph_core.surface import Surface
from streamgraph_plot.errors import ColorAssignmentError
from streamgraph_plot.raster.colors import pack_rgb, unpack_rgb
from streamgraph_plot.raster.render import MeshRenderer, RasterMeshRenderer
from streamgraph_plot.series import RGB, Mesh
from streamgraph_plot.view import ViewState


LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 64
PICK_BACKGROUND: RGB = (0, 0, 0)
_COLOR_SPACE = 1 << 24


class ColorIdTable:
    """Bijective key <-> random RGB table used to identify layers by pixel color."""

    def __init__(
        self,
        *,
        rng: np.random.Generator | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        reserved: Iterable[RGB] = (PICK_BACKGROUND,),
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be > 0")
        self._rng = rng if rng is not None else np.random.default_rng()
        self._max_attempts = max_attempts
        self._reserved = {pack_rgb(c) for c in reserved}
        self._by_key: dict[str, int] = {}
        self._by_color: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> tuple[str, ...]:
        return tuple(self._by_key)

    def clear(self) -> None:
        self._by_key.clear()
        self._by_color.clear()

    def assign(self, keys: Iterable[str]) -> dict[str, RGB]:
        """Replace the table with fresh colors for `keys`."""
        self.clear()
        retries = 0
        for key in keys:
            if key in self._by_key:
                continue
            if len(self._by_color) + len(self._reserved) >= _COLOR_SPACE:
                raise ColorAssignmentError("color space exhausted")
            for _ in range(self._max_attempts):
                packed = int(self._rng.integers(0, _COLOR_SPACE))
                if packed not in self._by_color and packed not in self._reserved:
                    break
                retries += 1
            else:
                raise ColorAssignmentError(
                    f"could not draw a unique pick color for {key!r} after {self._max_attempts} attempts "
                    f"({len(self._by_key)} keys assigned)"
                )
            self._by_key[key] = packed
            self._by_color[packed] = key
        if retries:
            LOGGER.debug("pick color assignment retried %d collisions for %d keys", retries, len(self._by_key))
        return self.as_dict()

    def color_of(self, key: str) -> RGB:
        return unpack_rgb(self._by_key[key])

    def decode(self, color: Iterable[int]) -> str | None:
        rgb = tuple(int(c) for c in color)[:3]
        if len(rgb) != 3:
            return None
        return self._by_color.get(pack_rgb(rgb))  # type: ignore[arg-type]

    def as_dict(self) -> dict[str, RGB]:
        return {key: unpack_rgb(packed) for key, packed in self._by_key.items()}


class PickBuffer:
    """Hidden render of every layer filled with its color id, decoded per pixel.

    The buffer is only redrawn through `render`, which the chart calls when the
    view settles; picks in between read the last settled render.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        renderer: MeshRenderer | None = None,
        colors: ColorIdTable | None = None,
    ) -> None:
        self.surface = Surface(height=height, width=width, background=(*PICK_BACKGROUND, 255))
        self.renderer: MeshRenderer = renderer if renderer is not None else RasterMeshRenderer()
        self.colors = colors if colors is not None else ColorIdTable()
        self._meshes: dict[str, Mesh] = {}
        self._settled_view: ViewState | None = None
        self.render_count = 0

    @property
    def settled_view(self) -> ViewState | None:
        return self._settled_view

    def assign_colors(self, keys: Iterable[str]) -> dict[str, RGB]:
        return self.colors.assign(keys)

    def set_meshes(self, meshes: Mapping[str, Mesh]) -> None:
        """Meshes in render order (later keys draw on top)."""
        missing = [key for key in meshes if key not in self.colors]
        if missing:
            raise KeyError(f"no pick color assigned for keys: {missing[:5]}")
        self._meshes = dict(meshes)
        self._settled_view = None

    def render(self, view: ViewState) -> None:
        items = [(mesh, self.colors.color_of(key)) for key, mesh in self._meshes.items()]
        self.renderer.draw(self.surface, items, view, PICK_BACKGROUND)
        self._settled_view = view
        self.render_count += 1

    def decode(self, color: Iterable[int]) -> str | None:
        return self.colors.decode(color)

    def decode_at(self, px: float, py: float) -> str | None:
        if self._settled_view is None:
            return None
        if not (np.isfinite(px) and np.isfinite(py)):
            return None
        pixel = self.surface.read_pixel(int(np.floor(px)), int(np.floor(py)))
        if pixel is None:
            return None
        return self.decode(pixel)

    def pick(self, px: float, py: float, view: ViewState) -> str | None:
        """Key under screen point `(px, py)` as displayed with `view`."""
        if self._settled_view is None:
            return None
        if view != self._settled_view:
            cx, cy = view.invert(px, py)
            px, py = self._settled_view.apply(cx, cy)
        return self.decode_at(px, py)

    def visible_keys(self) -> set[str]:
        if self._settled_view is None:
            return set()
        out: set[str] = set()
        for rgb in self.surface.unique_colors().tolist():
            key = self.decode(rgb)
            if key is not None:
                out.add(key)
        return out
