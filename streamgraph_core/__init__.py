from .events import PointerEvent, PointerEventType
from .surface import FullRewrite, Surface, WriteBatch

__all__ = [
    "FullRewrite",
    "PointerEvent",
    "PointerEventType",
    "Surface",
    "WriteBatch",
]
