from __future__ import annotations

import unittest

from sparkgraph.bounds import Bounds
from sparkgraph.errors import GraphConfigError
from sparkgraph.geometry import Orientation, RadialVariant, geometry_to_dict
from sparkgraph.project import (
    polar_point,
    project_area,
    project_barcode,
    project_bars,
    project_dots,
    project_equalizer,
    project_graded,
    project_line,
    project_radial_barcode,
)
from sparkgraph.scales import DrawArea, build_value_scale
from sparkgraph.thresholds import ColorScale, ColorStop, Transition


AREA = DrawArea(left=0.0, top=0.0, width=100.0, height=50.0)
FULL = Bounds(0.0, 100.0)


def _traffic_light() -> ColorScale:
    return ColorScale.build(
        [ColorStop(0, "green"), ColorStop(50, "yellow"), ColorStop(80, "red")],
        transition=Transition.HARD,
    )


class LineProjectionTests(unittest.TestCase):
    def test_line_coordinates(self) -> None:
        line = project_line([0.0, 50.0, 100.0], build_value_scale(FULL, AREA), AREA)
        self.assertEqual([(p.x, p.y) for p in line.points], [(0.0, 50.0), (50.0, 25.0), (100.0, 0.0)])
        self.assertEqual({p.y_baseline for p in line.points}, {50.0})
        self.assertFalse(line.smoothed)

    def test_single_point_spans_the_area(self) -> None:
        line = project_line([10.0], build_value_scale(Bounds(0.0, 10.0), AREA), AREA)
        self.assertEqual([(p.x, p.y) for p in line.points], [(0.0, 0.0), (100.0, 0.0)])

    def test_empty_series(self) -> None:
        self.assertEqual(project_line([], build_value_scale(FULL, AREA), AREA).points, ())

    def test_smoothing_uses_midpoints(self) -> None:
        line = project_line([0.0, 100.0, 0.0], build_value_scale(FULL, AREA), AREA, smoothing=True)
        self.assertTrue(line.smoothed)
        self.assertEqual([(p.x, p.y) for p in line.points], [(0.0, 50.0), (25.0, 25.0), (75.0, 25.0), (100.0, 50.0)])
        self.assertEqual([(p.x, p.y) for p in line.controls], [(0.0, 50.0), (50.0, 0.0), (100.0, 50.0)])

    def test_area_closes_along_baseline(self) -> None:
        area = project_area([20.0, 80.0], build_value_scale(FULL, AREA), AREA)
        self.assertEqual(area.baseline, 50.0)
        self.assertEqual(area.polygon[-2:], ((100.0, 50.0), (0.0, 50.0)))
        self.assertEqual(len(area.polygon), 4)

    def test_dots_carry_colors(self) -> None:
        dots = project_dots([10.0, 90.0], build_value_scale(FULL, AREA), AREA, _traffic_light(), radius=2.0)
        self.assertEqual([d.color for d in dots.dots], ["green", "red"])
        self.assertEqual({d.radius for d in dots.dots}, {2.0})


class BarProjectionTests(unittest.TestCase):
    def test_vertical_bars(self) -> None:
        bars = project_bars([50.0, 100.0], build_value_scale(FULL, AREA), AREA, _traffic_light())
        first, second = bars.bars
        self.assertEqual((first.x, first.y, first.width, first.height), (0.0, 25.0, 50.0, 25.0))
        self.assertEqual((second.x, second.y, second.height), (50.0, 0.0, 50.0))
        self.assertEqual(bars.orientation, "vertical")

    def test_negative_bars_hang_from_zero(self) -> None:
        bars = project_bars([-50.0], build_value_scale(Bounds(-100.0, 100.0), AREA), AREA, _traffic_light())
        self.assertEqual(bars.baseline, 25.0)
        self.assertEqual((bars.bars[0].y, bars.bars[0].height), (25.0, 12.5))

    def test_horizontal_bars(self) -> None:
        scale = build_value_scale(FULL, AREA, axis="horizontal")
        bars = project_bars([50.0], scale, AREA, _traffic_light(), orientation=Orientation.HORIZONTAL)
        bar = bars.bars[0]
        self.assertEqual((bar.x, bar.y, bar.width, bar.height), (0.0, 0.0, 50.0, 50.0))

    def test_equalizer_levels(self) -> None:
        eq = project_equalizer([35.0, 100.0, 0.0], build_value_scale(FULL, AREA), AREA, _traffic_light())
        self.assertEqual((eq.bucket_size, eq.level_count), (10.0, 10))
        first = eq.columns[0]
        self.assertEqual([r.value for r in first.levels], [10.0, 20.0, 30.0])
        self.assertEqual(first.levels[-1].y, 35.0)
        self.assertEqual(len(eq.columns[1].levels), 10)
        self.assertEqual(eq.columns[1].levels[-1].color, "red")
        self.assertEqual(eq.columns[2].levels, ())

    def test_equalizer_rejects_bad_bucket_size(self) -> None:
        with self.assertRaises(GraphConfigError):
            project_equalizer([1.0], build_value_scale(FULL, AREA), AREA, _traffic_light(), bucket_size=0)

    def test_graded_fills_ranks_up_to_value(self) -> None:
        graded = project_graded([60.0, 95.0], AREA, _traffic_light())
        self.assertEqual(graded.rank_count, 3)
        first = graded.columns[0]
        self.assertEqual(first.rank, 1)
        self.assertEqual([c.filled for c in first.cells], [True, True, False])
        self.assertEqual([c.color for c in first.cells], ["green", "yellow", None])
        self.assertTrue(all(c.filled for c in graded.columns[1].cells))

    def test_graded_with_rank_values(self) -> None:
        graded = project_graded([2.0, 7.0], AREA, _traffic_light(), values_are_ranks=True)
        self.assertEqual(graded.columns[0].rank, 2)
        self.assertIsNone(graded.columns[1].rank)
        self.assertFalse(any(c.filled for c in graded.columns[1].cells))

    def test_graded_without_ranks_logs_error(self) -> None:
        with self.assertLogs("sparkgraph.project.bars", level="ERROR"):
            graded = project_graded([1.0], AREA, ColorScale.build([]))
        self.assertEqual(graded.columns, ())


class BarcodeProjectionTests(unittest.TestCase):
    def test_barcode_cells(self) -> None:
        barcode = project_barcode([10.0, 60.0, 90.0, 20.0], AREA, _traffic_light())
        self.assertEqual([c.x for c in barcode.cells], [0.0, 25.0, 50.0, 75.0])
        self.assertEqual({(c.width, c.height) for c in barcode.cells}, {(25.0, 50.0)})
        self.assertEqual([c.color for c in barcode.cells], ["green", "yellow", "red", "green"])

    def test_polar_point_starts_at_twelve_oclock(self) -> None:
        x, y = polar_point(0.0, 0.0, 10.0, 0.0)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, -10.0)
        x, y = polar_point(0.0, 0.0, 10.0, 90.0)
        self.assertAlmostEqual(x, 10.0)
        self.assertAlmostEqual(y, 0.0)

    def test_radial_barcode_wedges(self) -> None:
        radial = project_radial_barcode(
            [10.0, 20.0, 30.0, 40.0], FULL, _traffic_light(), cx=50.0, cy=50.0, radius=40.0, gap_degrees=2.0
        )
        self.assertEqual(len(radial.wedges), 4)
        first = radial.wedges[0]
        self.assertEqual((first.start_angle, first.end_angle), (1.0, 89.0))
        self.assertEqual(first.outer_radius, 40.0)
        self.assertEqual(radial.wedges[3].end_angle, 359.0)
        self.assertAlmostEqual(first.corners[3][0], 50.0)
        self.assertAlmostEqual(first.corners[3][1], 50.0)

    def test_sunburst_scales_outer_radius(self) -> None:
        radial = project_radial_barcode(
            [50.0],
            FULL,
            _traffic_light(),
            cx=0.0,
            cy=0.0,
            radius=40.0,
            inner_radius=10.0,
            variant=RadialVariant.SUNBURST,
        )
        self.assertAlmostEqual(radial.wedges[0].outer_radius, 25.0)
        self.assertEqual(radial.variant, "sunburst")

    def test_radial_rejects_bad_geometry(self) -> None:
        with self.assertRaises(GraphConfigError):
            project_radial_barcode([1.0, 2.0], FULL, _traffic_light(), cx=0, cy=0, radius=10, gap_degrees=180)
        with self.assertRaises(GraphConfigError):
            project_radial_barcode([1.0], FULL, _traffic_light(), cx=0, cy=0, radius=10, inner_radius=10)

    def test_geometry_serializes_to_plain_data(self) -> None:
        data = geometry_to_dict(project_barcode([1.0], AREA, _traffic_light()))
        self.assertEqual(data["kind"], "barcode")
        self.assertEqual(data["cells"][0]["color"], "green")


if __name__ == "__main__":
    unittest.main()
