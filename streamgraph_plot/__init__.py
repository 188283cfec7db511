from streamgraph_plot.aggregate import aggregate
from streamgraph_plot.api import chart
from streamgraph_plot.chart import StreamgraphChart, TooltipReading
from streamgraph_plot.config import ChartConfig, load_chart_config
from streamgraph_plot.curves import build_curves
from streamgraph_plot.errors import (
    ColorAssignmentError,
    ConfigError,
    EventDataError,
    LayoutError,
    MeshContractError,
    StreamgraphError,
)
from streamgraph_plot.pick import ColorIdTable, PickBuffer
from streamgraph_plot.series import Aggregation, Bucket, CurvePair, ListenEvent, Mesh, StackedSeries, StackLayout
from streamgraph_plot.stack import layout
from streamgraph_plot.triangulate import build_mesh, transform_mesh, triangulate
from streamgraph_plot.view import IDENTITY, ViewState, ViewTransform

__all__ = [
    "Aggregation",
    "Bucket",
    "ChartConfig",
    "ColorAssignmentError",
    "ColorIdTable",
    "ConfigError",
    "CurvePair",
    "EventDataError",
    "IDENTITY",
    "LayoutError",
    "ListenEvent",
    "Mesh",
    "MeshContractError",
    "PickBuffer",
    "StackLayout",
    "StackedSeries",
    "StreamgraphChart",
    "StreamgraphError",
    "TooltipReading",
    "ViewState",
    "ViewTransform",
    "aggregate",
    "build_curves",
    "build_mesh",
    "chart",
    "layout",
    "load_chart_config",
    "transform_mesh",
    "triangulate",
]
