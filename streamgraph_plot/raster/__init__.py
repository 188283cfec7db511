from .canvas import fill_triangles, new_canvas
from .colors import first_seen_colors, from_hex, interpolate_rainbow, mix, pack_rgb, to_hex, unpack_rgb
from .render import MeshRenderer, RasterMeshRenderer

__all__ = [
    "MeshRenderer",
    "RasterMeshRenderer",
    "fill_triangles",
    "first_seen_colors",
    "from_hex",
    "interpolate_rainbow",
    "mix",
    "new_canvas",
    "pack_rgb",
    "to_hex",
    "unpack_rgb",
]
