from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any

import numpy as np

from streamgraph_core.events import PointerEvent
from streamgraph_core.surface import Surface
from streamgraph_plot.adapters import normalize_events
from streamgraph_plot.aggregate import aggregate, first_seen
from streamgraph_plot.config import ChartConfig
from streamgraph_plot.pick import ColorIdTable, PickBuffer
from streamgraph_plot.raster import MeshRenderer, RasterMeshRenderer, first_seen_colors, mix
from streamgraph_plot.scales import LinearScale, bucket_x_map, build_scales, compute_limits
from streamgraph_plot.series import RGB, Aggregation, Mesh, StackLayout
from streamgraph_plot.stack import layout
from streamgraph_plot.triangulate import build_mesh, transform_mesh
from streamgraph_plot.view import Transition, ViewState, ViewTransform


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TooltipReading:
    key: str
    timestamp: float
    value: float


@dataclass
class _Drag:
    x0: float
    y0: float
    x1: float
    y1: float

    def rect(self) -> tuple[float, float, float, float]:
        return (min(self.x0, self.x1), min(self.y0, self.y1), abs(self.x1 - self.x0), abs(self.y1 - self.y0))


class StreamgraphChart:
    """One interactive streamgraph: pipeline results, view state, selection and both render targets.

    Owned by the caller; nothing here is process-global, so independent charts
    can coexist.
    """

    def __init__(
        self,
        config: ChartConfig | None = None,
        *,
        renderer: MeshRenderer | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or ChartConfig()
        cfg = self.config
        self.renderer: MeshRenderer = renderer if renderer is not None else RasterMeshRenderer()
        self.surface = Surface(height=cfg.height, width=cfg.width, background=(*cfg.background, 255))
        self.view = ViewTransform(
            cfg.width,
            cfg.height,
            max_scale=cfg.max_scale,
            transition_duration_s=cfg.transition_duration_s,
        )
        self.pick_buffer = PickBuffer(
            cfg.width,
            cfg.height,
            renderer=self.renderer,
            colors=ColorIdTable(rng=rng, max_attempts=cfg.color_id_max_attempts),
        )
        self.aggregation = Aggregation()
        self.stack = StackLayout()
        self.meshes: dict[str, Mesh] = {}
        self.display_colors: dict[str, RGB] = {}
        self.selected_key: str | None = None
        self.visible_render_count = 0
        self._scales: tuple[LinearScale, LinearScale] | None = None
        self._drag: _Drag | None = None
        self._loading = False
        self.view.on_change(self._on_view_change)
        self.view.on_settled(self._on_view_settled)

    def load(self, events: Any) -> StackLayout:
        """Rebuild every layer from a new event set and reset view, selection and pick colors."""
        records = normalize_events(events)
        cfg = self.config
        t0 = time.perf_counter()
        agg = aggregate(records, cfg.bucket_width_ms)
        t1 = time.perf_counter()
        stack = layout(agg, offset=cfg.offset)  # type: ignore[arg-type]
        t2 = time.perf_counter()

        meshes: dict[str, Mesh] = {}
        colors = first_seen_colors(first_seen(records))
        scales: tuple[LinearScale, LinearScale] | None = None
        if stack.series:
            x_scale, y_scale = build_scales(compute_limits(stack), cfg.width, cfg.height)
            x_of = bucket_x_map(stack, x_scale)
            for series in stack.series:
                meshes[series.key] = build_mesh(
                    series,
                    x_of=x_of,
                    y_of=y_scale,
                    color=colors[series.key],
                    samples_per_segment=cfg.samples_per_segment,
                )
            scales = (x_scale, y_scale)
        t3 = time.perf_counter()
        LOGGER.debug(
            "loaded %d events: aggregate %.1f ms, layout %.1f ms, triangulate %.1f ms",
            len(records),
            (t1 - t0) * 1000.0,
            (t2 - t1) * 1000.0,
            (t3 - t2) * 1000.0,
        )

        self._loading = True
        try:
            self.aggregation = agg
            self.stack = stack
            self.meshes = meshes
            self.display_colors = colors
            self._scales = scales
            self.selected_key = None
            self._drag = None
            self.pick_buffer.assign_colors(stack.order)
            self.pick_buffer.set_meshes(meshes)
            self.view.reset()
        finally:
            self._loading = False

        self.pick_buffer.render(self.view.state)
        self.render_visible()
        return stack

    @property
    def keys(self) -> tuple[str, ...]:
        return self.aggregation.keys

    def build_mesh(self, key: str, view: ViewState | None = None) -> Mesh:
        """Layer mesh in screen space for `view` (the current transform by default)."""
        return transform_mesh(self.meshes[key], self.view.state if view is None else view)

    def get_transform(self) -> ViewState:
        return self.view.get_transform()

    def set_transform(self, state: ViewState) -> ViewState:
        return self.view.set_transform(state)

    def tick(self, now: float) -> ViewState:
        return self.view.tick(now)

    def render_visible(self) -> None:
        cfg = self.config
        items: list[tuple[Mesh, RGB]] = []
        for series in self.stack.series:
            color = self.display_colors[series.key]
            if self.selected_key is not None and series.key != self.selected_key:
                color = mix(color, cfg.background, cfg.selection_dim)
            items.append((self.meshes[series.key], color))
        self.renderer.draw(self.surface, items, self.view.state, cfg.background)
        self.visible_render_count += 1

    def pick_at(self, px: float, py: float, view: ViewState | None = None) -> str | None:
        return self.pick_buffer.pick(px, py, self.view.state if view is None else view)

    def visible_keys(self) -> set[str]:
        return self.pick_buffer.visible_keys()

    def select(self, key: str | None) -> str | None:
        if key is not None and key not in self.meshes:
            raise KeyError(key)
        if key != self.selected_key:
            self.selected_key = key
            self.render_visible()
        return self.selected_key

    def value_at(self, px: float, key: str | None = None) -> TooltipReading | None:
        """Score of `key` (the selection by default) interpolated at screen x `px`."""
        target = self.selected_key if key is None else key
        if target is None or self._scales is None or target not in self.meshes:
            return None
        x_scale, _ = self._scales
        cx, _ = self.view.state.invert(px, 0.0)
        ts = float(x_scale.invert(cx))
        stamps = self.stack.timestamps.astype(np.float64)
        if ts < stamps[0] or ts > stamps[-1]:
            return None
        col = self.aggregation.keys.index(target)
        values = self.aggregation.score_matrix()[:, col]
        return TooltipReading(key=target, timestamp=ts, value=float(np.interp(ts, stamps, values)))

    def handle_pointer(self, event: PointerEvent) -> Any:
        if event.event_type == "pointer_down":
            return self.pointer_down(event)
        if event.event_type == "pointer_move":
            return self.pointer_move(event)
        if event.event_type == "pointer_up":
            return self.pointer_up(event)
        if event.event_type == "pointer_leave":
            self._drag = None
            return None
        raise ValueError(f"unsupported pointer event: {event.event_type}")

    def pointer_down(self, event: PointerEvent) -> None:
        self._drag = _Drag(event.x, event.y, event.x, event.y)

    def pointer_move(self, event: PointerEvent) -> TooltipReading | None:
        if self._drag is not None and event.pressed:
            self._drag.x1 = event.x
            self._drag.y1 = event.y
        return self.value_at(event.x)

    def pointer_up(self, event: PointerEvent) -> Transition | str | None:
        """Finish a gesture: a click toggles selection, a drag zooms in or resets the zoom."""
        drag = self._drag or _Drag(event.x, event.y, event.x, event.y)
        self._drag = None
        drag.x1 = event.x
        drag.y1 = event.y
        x, y, w, h = drag.rect()
        if w == 0 or h == 0:
            key = self.pick_at(event.x, event.y)
            if key is None or key == self.selected_key:
                return self.select(None)
            return self.select(key)
        return self.view.gesture_end((x, y, w, h), now=event.timestamp)

    def _on_view_change(self, state: ViewState) -> None:
        if not self._loading:
            self.render_visible()

    def _on_view_settled(self, state: ViewState) -> None:
        if not self._loading:
            self.pick_buffer.render(state)
