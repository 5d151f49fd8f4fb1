from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

from sparkgraph.aggregate import AggregateFunction
from sparkgraph.bounds import BoundsConfig
from sparkgraph.config import GraphConfig, graph_config_from_dict, load_graph_config, parse_color_stops
from sparkgraph.errors import GraphConfigError, ThresholdError
from sparkgraph.geometry import ChartType, Orientation, RadialVariant
from sparkgraph.scales import DrawArea
from sparkgraph.thresholds import ColorStop, RankedBin, Transition
from sparkgraph.window import CalendarWindow, RollingWindow


class GraphConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = graph_config_from_dict({})
        self.assertEqual(config.window, RollingWindow())
        self.assertIs(config.aggregate, AggregateFunction.AVG)
        self.assertIs(config.chart_type, ChartType.LINE)
        self.assertIs(config.transition, Transition.SMOOTH)
        self.assertEqual(config.area, DrawArea(0.0, 0.0, 100.0, 50.0))

    def test_full_config(self) -> None:
        config = graph_config_from_dict(
            {
                "period": {"type": "calendar", "offset_days": -1, "buckets_per_hour": 2},
                "aggregate": "max",
                "chart_type": "bar",
                "orientation": "horizontal",
                "color_stops": [{"value": 0, "color": "blue"}, {"color": "yellow"}, {"value": 30, "color": "red"}],
                "transition": "stepped",
                "bounds": {"min": "~0", "max": 40, "min_range": 5},
                "bounds_secondary": {"max": "~10"},
                "y_axis": "secondary",
                "position": {"width": 200, "height": 60, "margin": 2},
                "gap": 1,
                "radial": {"inner_radius": 5, "variant": "sunburst"},
                "color_variables": {"accent": "#ff8800"},
                "color": "var(--accent)",
            }
        )
        self.assertEqual(config.window, CalendarWindow(offset_days=-1, buckets_per_hour=2))
        self.assertIs(config.aggregate, AggregateFunction.MAX)
        self.assertIs(config.orientation, Orientation.HORIZONTAL)
        self.assertIs(config.transition, Transition.HARD)
        self.assertEqual(config.color_stops[1], ColorStop(None, "yellow"))
        self.assertEqual(config.bounds, BoundsConfig(min="~0", max=40, min_range=5.0))
        self.assertEqual(config.axis_bounds, BoundsConfig(max="~10"))
        self.assertEqual(config.area, DrawArea(2.0, 2.0, 196.0, 56.0))
        self.assertIs(config.radial.variant, RadialVariant.SUNBURST)
        self.assertEqual(config.color_variables, {"accent": "#ff8800"})

    def test_color_stops_mapping_form(self) -> None:
        stops = parse_color_stops({"0": "red", "100": "green"})
        self.assertEqual(stops, (ColorStop(0.0, "red"), ColorStop(100.0, "green")))

    def test_rejects_invalid_settings(self) -> None:
        bad_configs = [
            {"unknown": 1},
            {"chart_type": "pie"},
            {"aggregate": "mode"},
            {"color": "not-a-color"},
            {"color": "var(--missing)"},
            {"bounds": {"min": "~abc"}},
            {"bounds": {"floor": 1}},
            {"period": {"type": "rolling_window", "hours": -1}},
            {"state_bins": True},
            {"state_map": "on"},
            {"orientation": "horizontal"},
            {"y_axis": "tertiary"},
            {"smoothing": "yes"},
            {"equalizer": {"levels": 0}},
            {"position": {"width": 0}},
            {"ranks": [{"color": "red", "ranges": [[5, 1]]}]},
        ]
        for raw in bad_configs:
            with self.subTest(raw=raw):
                with self.assertRaises(GraphConfigError):
                    graph_config_from_dict(raw)

    def test_color_stops_need_end_values(self) -> None:
        with self.assertRaises(ThresholdError):
            graph_config_from_dict({"color_stops": [{"color": "red"}, {"value": 5, "color": "blue"}]})

    def test_state_map_and_bins_are_exclusive(self) -> None:
        with self.assertRaises(GraphConfigError):
            graph_config_from_dict(
                {"state_map": {"on": 1}, "state_bins": True, "color_stops": {"0": "red", "1": "green"}}
            )

    def test_ranks_must_be_contiguous(self) -> None:
        with self.assertRaises(GraphConfigError):
            GraphConfig(ranks=(RankedBin(rank=1, color="red", ranges=((0.0, 1.0),)),))

    def test_ranks_parse_open_upper_bound(self) -> None:
        config = graph_config_from_dict({"ranks": [{"color": "red", "ranges": [[0, 10]]}, {"color": "green", "ranges": [[10, None]]}]})
        self.assertEqual(config.ranks[1].ranges, ((10.0, float("inf")),))


class LoadGraphConfigTests(unittest.TestCase):
    def test_load_toml(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "graph.toml"
            path.write_text(
                'chart_type = "area"\n'
                'aggregate = "last"\n'
                "[period]\n"
                'type = "rolling_window"\n'
                "hours = 6\n"
                "buckets_per_hour = 4\n",
                encoding="utf-8",
            )
            config = load_graph_config(path)
        self.assertIs(config.chart_type, ChartType.AREA)
        self.assertEqual(config.window, RollingWindow(hours=6, buckets_per_hour=4))

    def test_load_json(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "graph.json"
            path.write_text(json.dumps({"chart_type": "dots", "dot_radius": 3}), encoding="utf-8")
            config = load_graph_config(path)
        self.assertIs(config.chart_type, ChartType.DOTS)
        self.assertEqual(config.dot_radius, 3.0)

    def test_load_errors(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(FileNotFoundError):
                load_graph_config(Path(td) / "missing.toml")
            yaml_path = Path(td) / "graph.yaml"
            yaml_path.write_text("chart_type: line\n", encoding="utf-8")
            with self.assertRaises(GraphConfigError):
                load_graph_config(yaml_path)
            list_path = Path(td) / "graph.json"
            list_path.write_text("[]", encoding="utf-8")
            with self.assertRaises(GraphConfigError):
                load_graph_config(list_path)


if __name__ == "__main__":
    unittest.main()
