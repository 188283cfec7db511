from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import math
from typing import Callable

import numpy as np


DEFAULT_MAX_SCALE = 10.0
DEFAULT_TRANSITION_S = 1.0


@dataclass(frozen=True)
class ViewState:
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    @property
    def is_identity(self) -> bool:
        return self.translate_x == 0.0 and self.translate_y == 0.0 and self.scale == 1.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (x * self.scale + self.translate_x, y * self.scale + self.translate_y)

    def invert(self, x: float, y: float) -> tuple[float, float]:
        return ((x - self.translate_x) / self.scale, (y - self.translate_y) / self.scale)

    def apply_points(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64)
        out = pts * self.scale
        out[..., 0] += self.translate_x
        out[..., 1] += self.translate_y
        return out


IDENTITY = ViewState()


@dataclass(frozen=True)
class Transition:
    start: ViewState
    end: ViewState
    started_at: float
    duration: float

    def at(self, now: float) -> tuple[ViewState, bool]:
        if self.duration <= 0:
            return self.end, True
        t = (now - self.started_at) / self.duration
        if t >= 1.0:
            return self.end, True
        e = ease_cubic_in_out(max(0.0, t))
        return (
            ViewState(
                translate_x=_lerp(self.start.translate_x, self.end.translate_x, e),
                translate_y=_lerp(self.start.translate_y, self.end.translate_y, e),
                scale=_lerp(self.start.scale, self.end.scale, e),
            ),
            False,
        )


def ease_cubic_in_out(t: float) -> float:
    t *= 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


def _lerp(a: float, b: float, t: float) -> float:
    return (1.0 - t) * a + t * b


ViewListener = Callable[[ViewState], None]


class ViewTransform:
    """Pan/zoom state shared by the visible render, the pick buffer and pointer mapping.

    Every state is clamped to `scale in [1, max_scale]` with the visible window
    inside the content rectangle. `on_change` listeners run on every update
    (each animation tick); `on_settled` listeners run once when an update
    comes to rest.
    """

    def __init__(
        self,
        content_width: float,
        content_height: float,
        *,
        max_scale: float = DEFAULT_MAX_SCALE,
        transition_duration_s: float = DEFAULT_TRANSITION_S,
    ) -> None:
        if content_width <= 0 or content_height <= 0:
            raise ValueError("content width/height must be > 0")
        if not max_scale >= 1.0:
            raise ValueError("max_scale must be >= 1")
        if transition_duration_s < 0:
            raise ValueError("transition_duration_s must be >= 0")
        self.content_width = float(content_width)
        self.content_height = float(content_height)
        self.max_scale = float(max_scale)
        self.transition_duration_s = float(transition_duration_s)
        self._state = IDENTITY
        self._settled = IDENTITY
        self._transition: Transition | None = None
        self._change_listeners: list[ViewListener] = []
        self._settle_listeners: list[ViewListener] = []

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def settled_state(self) -> ViewState:
        return self._settled

    @property
    def is_animating(self) -> bool:
        return self._transition is not None

    @property
    def transition(self) -> Transition | None:
        return self._transition

    def on_change(self, listener: ViewListener) -> None:
        self._change_listeners.append(listener)

    def on_settled(self, listener: ViewListener) -> None:
        self._settle_listeners.append(listener)

    def get_transform(self) -> ViewState:
        return self._state

    def set_transform(self, state: ViewState) -> ViewState:
        self._transition = None
        return self._update(state, settle=True)

    def reset(self) -> ViewState:
        return self.set_transform(IDENTITY)

    def clamp(self, state: ViewState) -> ViewState:
        k = state.scale if math.isfinite(state.scale) else 1.0
        k = min(self.max_scale, max(1.0, k))
        tx = state.translate_x if math.isfinite(state.translate_x) else 0.0
        ty = state.translate_y if math.isfinite(state.translate_y) else 0.0
        tx = min(0.0, max(self.content_width * (1.0 - k), tx))
        ty = min(0.0, max(self.content_height * (1.0 - k), ty))
        return ViewState(translate_x=tx, translate_y=ty, scale=k)

    def fit_rect(self, x: float, y: float, width: float, height: float) -> ViewState:
        """Transform that zooms the screen-space rectangle to fill the viewport."""
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        cx, cy = self._state.invert(x + width / 2.0, y + height / 2.0)
        ratio = min(width / self.content_width, height / self.content_height)
        k = self.max_scale if ratio <= 0 else self._state.scale / ratio
        return self.clamp(
            ViewState(
                translate_x=self.content_width / 2.0 - k * cx,
                translate_y=self.content_height / 2.0 - k * cy,
                scale=k,
            )
        )

    def pan(self, dx: float, dy: float, *, settle: bool = True) -> ViewState:
        self._transition = None
        s = self._state
        return self._update(dataclasses.replace(s, translate_x=s.translate_x + dx, translate_y=s.translate_y + dy), settle=settle)

    def zoom_at(self, factor: float, x: float, y: float, *, settle: bool = True) -> ViewState:
        if factor <= 0 or not math.isfinite(factor):
            raise ValueError("zoom factor must be a finite value > 0")
        self._transition = None
        s = self._state
        k = min(self.max_scale, max(1.0, s.scale * factor))
        cx, cy = s.invert(x, y)
        return self._update(ViewState(translate_x=x - cx * k, translate_y=y - cy * k, scale=k), settle=settle)

    def settle(self) -> ViewState:
        if self._transition is None and self._state != self._settled:
            self._settled = self._state
            self._emit(self._settle_listeners, self._state)
        return self._state

    def animate_to(self, target: ViewState, now: float) -> Transition:
        """Start a transition from the current state; replaces any running transition."""
        transition = Transition(
            start=self._state,
            end=self.clamp(target),
            started_at=float(now),
            duration=self.transition_duration_s,
        )
        self._transition = transition
        if transition.duration <= 0:
            self.tick(now)
        return transition

    def tick(self, now: float) -> ViewState:
        if self._transition is None:
            return self._state
        state, done = self._transition.at(now)
        if done:
            self._transition = None
        return self._update(state, settle=done)

    def gesture_end(self, rect: tuple[float, float, float, float], now: float) -> Transition:
        """Zoom into a dragged rectangle, or back out when already zoomed."""
        if not self._state.is_identity:
            return self.animate_to(IDENTITY, now)
        return self.animate_to(self.fit_rect(*rect), now)

    def _update(self, state: ViewState, *, settle: bool) -> ViewState:
        clamped = self.clamp(state)
        changed = clamped != self._state
        self._state = clamped
        if changed:
            self._emit(self._change_listeners, clamped)
        if settle:
            self.settle()
        return clamped

    @staticmethod
    def _emit(listeners: list[ViewListener], state: ViewState) -> None:
        for listener in list(listeners):
            listener(state)
