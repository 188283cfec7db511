from __future__ import annotations

from pathlib import Path

import numpy as np

from streamgraph_plot.aggregate import aggregate
from streamgraph_plot.chart import StreamgraphChart
from streamgraph_plot.config import ChartConfig, load_chart_config
from streamgraph_plot.raster import MeshRenderer
from streamgraph_plot.stack import layout
from streamgraph_plot.triangulate import build_mesh


def chart(
    config: ChartConfig | str | Path | None = None,
    *,
    renderer: MeshRenderer | None = None,
    seed: int | None = None,
) -> StreamgraphChart:
    if isinstance(config, (str, Path)):
        config = load_chart_config(config)
    rng = np.random.default_rng(seed) if seed is not None else None
    return StreamgraphChart(config, renderer=renderer, rng=rng)


__all__ = ["aggregate", "build_mesh", "chart", "layout"]
