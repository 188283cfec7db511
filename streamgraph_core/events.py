from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


PointerEventType = Literal[
    "pointer_down",
    "pointer_move",
    "pointer_up",
    "pointer_leave",
]


@dataclass(frozen=True)
class PointerEvent:
    event_type: PointerEventType
    timestamp: float
    x: float
    y: float
    buttons: int = 0

    @property
    def pressed(self) -> bool:
        return self.buttons > 0
