from sparkgraph.adapters import normalize_history
from sparkgraph.aggregate import AggregateFunction, AggregatedPoint
from sparkgraph.bounds import Bounds, BoundsConfig
from sparkgraph.config import GraphConfig, graph_config_from_dict, load_graph_config
from sparkgraph.engine import EngineState, GraphEngine, GraphSnapshot, SeriesSummary
from sparkgraph.errors import GraphConfigError, HistoryDataError, SparkgraphError, ThresholdError
from sparkgraph.geometry import ChartType, Orientation, RadialVariant
from sparkgraph.history import HistorySample
from sparkgraph.scales import DrawArea
from sparkgraph.thresholds import ColorScale, ColorStop, RankedBin, Transition
from sparkgraph.window import CalendarWindow, RealTimeWindow, RollingWindow

__all__ = [
    "AggregateFunction",
    "AggregatedPoint",
    "Bounds",
    "BoundsConfig",
    "CalendarWindow",
    "ChartType",
    "ColorScale",
    "ColorStop",
    "DrawArea",
    "EngineState",
    "GraphConfig",
    "GraphConfigError",
    "GraphEngine",
    "GraphSnapshot",
    "HistoryDataError",
    "HistorySample",
    "Orientation",
    "RadialVariant",
    "RankedBin",
    "RealTimeWindow",
    "RollingWindow",
    "SeriesSummary",
    "SparkgraphError",
    "ThresholdError",
    "Transition",
    "graph_config_from_dict",
    "load_graph_config",
    "normalize_history",
]
