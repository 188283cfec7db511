from __future__ import annotations

from pathlib import Path

import numpy as np

from streamgraph_core.events import PointerEvent
from streamgraph_plot import ChartConfig, ListenEvent, chart


DAY_MS = 86_400_000


def _synthetic_listens(seed: int = 4) -> list[ListenEvent]:
    rng = np.random.default_rng(seed)
    artists = [f"artist-{idx:02d}" for idx in range(12)]
    peaks = rng.uniform(0, 720, size=len(artists))
    events: list[ListenEvent] = []
    for day in range(720):
        for artist, peak in zip(artists, peaks, strict=True):
            rate = 6.0 * np.exp(-((day - peak) / 90.0) ** 2)
            for _ in range(int(rng.poisson(rate))):
                ts = day * DAY_MS + int(rng.integers(0, DAY_MS))
                events.append(ListenEvent(artist, float(rng.uniform(30_000, 240_000)), ts))
    return events


def main(out_dir: Path = Path("out")) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    sg = chart(ChartConfig(width=900, height=300, transition_duration_s=0.5), seed=1)
    sg.load(_synthetic_listens())
    sg.surface.to_image().save(out_dir / "streamgraph_full.png")

    sg.handle_pointer(PointerEvent("pointer_down", 0.0, 300.0, 60.0, buttons=1))
    sg.handle_pointer(PointerEvent("pointer_up", 0.0, 600.0, 240.0))
    for step in range(1, 11):
        sg.tick(step * 0.05)
    sg.surface.to_image().save(out_dir / "streamgraph_zoomed.png")

    key = sg.pick_at(450.0, 150.0)
    if key is not None:
        sg.select(key)
        sg.surface.to_image().save(out_dir / "streamgraph_selected.png")
    print(f"visible layers: {sorted(sg.visible_keys())}; selected: {sg.selected_key}")


if __name__ == "__main__":
    main()
