from __future__ import annotations

import unittest

import numpy as np

from streamgraph_plot.aggregate import aggregate
from streamgraph_plot.scales import LinearScale, bucket_x_map, build_scales, compute_limits
from streamgraph_plot.series import ListenEvent
from streamgraph_plot.stack import layout


class ScalesTests(unittest.TestCase):
    def test_linear_scale_and_invert(self) -> None:
        scale = LinearScale(d0=0.0, d1=10.0, r0=100.0, r1=0.0)
        np.testing.assert_allclose(scale(np.array([0.0, 5.0, 10.0])), [100.0, 50.0, 0.0])
        self.assertEqual(float(scale.invert(25.0)), 7.5)

    def test_degenerate_domain_maps_to_mid_range(self) -> None:
        scale = LinearScale(d0=3.0, d1=3.0, r0=0.0, r1=10.0)
        self.assertEqual(float(scale(3.0)), 5.0)
        self.assertEqual(float(scale.invert(7.0)), 3.0)

    def test_stack_scales_fill_the_canvas(self) -> None:
        events = [ListenEvent("A", 2.0, 0), ListenEvent("B", 1.0, 5), ListenEvent("A", 4.0, 1000), ListenEvent("A", 1.0, 3000)]
        stack = layout(aggregate(events, 1000), offset="zero")
        limits = compute_limits(stack)
        self.assertEqual((limits.xmin, limits.xmax), (0.0, 3000.0))
        self.assertEqual((limits.ymin, limits.ymax), (0.0, 4.0))
        x_scale, y_scale = build_scales(limits, 300, 40)
        self.assertEqual(float(y_scale(0.0)), 40.0)
        self.assertEqual(float(y_scale(4.0)), 0.0)
        x_of = bucket_x_map(stack, x_scale)
        # Buckets at t=0, 1000, 2000 (empty) and 3000.
        np.testing.assert_allclose(x_of(np.arange(4)), [0.0, 100.0, 200.0, 300.0])
        np.testing.assert_allclose(x_of(np.array([0.5])), [50.0])

    def test_build_scales_rejects_empty_canvas(self) -> None:
        with self.assertRaises(ValueError):
            build_scales(compute_limits(layout(aggregate([], 1000))), 0, 10)


if __name__ == "__main__":
    unittest.main()
