from __future__ import annotations


class SparkgraphError(ValueError):
    """Base class for sparkgraph configuration and data errors."""


class GraphConfigError(SparkgraphError):
    pass


class ThresholdError(GraphConfigError):
    pass


class HistoryDataError(SparkgraphError):
    pass
