from __future__ import annotations

import datetime as dt
import math
import unittest

from sparkgraph.errors import GraphConfigError
from sparkgraph.history import HistorySample
from sparkgraph.state_map import StateMapper, build_state_table
from sparkgraph.thresholds import RankedBin


class StateMapTests(unittest.TestCase):
    def test_mapping_table(self) -> None:
        mapper = StateMapper(table=build_state_table({"on": 1, "off": 0}))
        self.assertEqual(mapper.map_value("on"), 1.0)
        self.assertEqual(mapper.map_value("off"), 0.0)
        self.assertEqual(mapper.errors, ())

    def test_unmatched_state_is_reported_once(self) -> None:
        mapper = StateMapper(table=build_state_table({"on": 1}))
        with self.assertLogs("sparkgraph.state_map", level="ERROR") as logs:
            self.assertTrue(math.isnan(mapper.map_value("idle")))
            mapper.map_value("idle")
        self.assertEqual(len(logs.output), 1)
        self.assertEqual(len(mapper.errors), 1)
        self.assertIn("idle", mapper.errors[0])
        mapper.reset_errors()
        self.assertEqual(mapper.errors, ())

    def test_unmatched_numeric_state_keeps_raw_value(self) -> None:
        mapper = StateMapper(table=build_state_table({"on": 1}))
        with self.assertLogs("sparkgraph.state_map", level="ERROR"):
            self.assertEqual(mapper.map_value("12.5"), 12.5)

    def test_list_form_defaults_to_position(self) -> None:
        table = build_state_table([{"value": "low"}, {"value": "high", "label": "High", "state": 10}])
        mapper = StateMapper(table=table)
        self.assertEqual(mapper.map_value("low"), 0.0)
        self.assertEqual(mapper.map_value("high"), 10.0)
        self.assertEqual(mapper.label_for("high"), "High")
        self.assertIsNone(mapper.label_for("low"))

    def test_integral_float_state_matches_integer_key(self) -> None:
        mapper = StateMapper(table=build_state_table({"1": 5}))
        self.assertEqual(mapper.map_value(1.0), 5.0)

    def test_invalid_table_entries(self) -> None:
        with self.assertRaises(GraphConfigError):
            build_state_table({"on": "yes"})
        with self.assertRaises(GraphConfigError):
            build_state_table([{"label": "missing value"}])

    def test_ranked_bins(self) -> None:
        bins = [
            RankedBin(rank=0, color="red", ranges=((0.0, 10.0),)),
            RankedBin(rank=1, color="green", ranges=((10.0, math.inf),)),
        ]
        mapper = StateMapper(bins=bins)
        self.assertEqual(mapper.map_value(3), 0.0)
        self.assertEqual(mapper.map_value("12"), 1.0)
        with self.assertLogs("sparkgraph.state_map", level="ERROR"):
            self.assertEqual(mapper.map_value(-3), -3.0)

    def test_value_factor(self) -> None:
        mapper = StateMapper(value_factor=0.5)
        self.assertEqual(mapper.map_value("8"), 4.0)

    def test_table_takes_precedence_over_factor(self) -> None:
        mapper = StateMapper(table=build_state_table({"on": 1}), value_factor=10)
        self.assertEqual(mapper.map_value("on"), 1.0)

    def test_map_sets_mapped_state(self) -> None:
        sample = HistorySample(timestamp=dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc), state="on")
        mapped = StateMapper(table=build_state_table({"on": 1})).map(sample)
        self.assertEqual(mapped.state, "on")
        self.assertEqual(mapped.mapped_state, 1.0)
        self.assertEqual(mapped.value, 1.0)
        self.assertTrue(math.isnan(sample.value))


if __name__ == "__main__":
    unittest.main()
