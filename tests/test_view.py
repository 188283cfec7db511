from __future__ import annotations

import unittest

import numpy as np

from streamgraph_plot.view import IDENTITY, ViewState, ViewTransform, ease_cubic_in_out


class ViewStateTests(unittest.TestCase):
    def test_apply_and_invert_round_trip(self) -> None:
        state = ViewState(translate_x=-30.0, translate_y=-10.0, scale=2.5)
        x, y = state.apply(12.0, 7.0)
        self.assertEqual((x, y), (0.0, 7.5))
        self.assertEqual(state.invert(x, y), (12.0, 7.0))
        pts = np.array([[12.0, 7.0], [0.0, 0.0]])
        np.testing.assert_allclose(state.apply_points(pts), [[0.0, 7.5], [-30.0, -10.0]])
        self.assertTrue(IDENTITY.is_identity)
        self.assertFalse(state.is_identity)

    def test_easing_endpoints(self) -> None:
        self.assertEqual(ease_cubic_in_out(0.0), 0.0)
        self.assertEqual(ease_cubic_in_out(0.5), 0.5)
        self.assertEqual(ease_cubic_in_out(1.0), 1.0)


class ViewTransformTests(unittest.TestCase):
    def setUp(self) -> None:
        self.view = ViewTransform(200, 100, max_scale=4.0, transition_duration_s=1.0)
        self.changes: list[ViewState] = []
        self.settled: list[ViewState] = []
        self.view.on_change(self.changes.append)
        self.view.on_settled(self.settled.append)

    def _assert_in_bounds(self, state: ViewState) -> None:
        self.assertGreaterEqual(state.scale, 1.0)
        self.assertLessEqual(state.scale, 4.0)
        self.assertLessEqual(state.translate_x, 0.0)
        self.assertLessEqual(state.translate_y, 0.0)
        self.assertGreaterEqual(state.translate_x, 200.0 * (1.0 - state.scale) - 1e-9)
        self.assertGreaterEqual(state.translate_y, 100.0 * (1.0 - state.scale) - 1e-9)

    def test_initial_state_is_identity(self) -> None:
        self.assertEqual(self.view.get_transform(), IDENTITY)
        self.assertEqual(self.view.settled_state, IDENTITY)
        self.assertFalse(self.view.is_animating)

    def test_set_transform_clamps(self) -> None:
        state = self.view.set_transform(ViewState(translate_x=50.0, translate_y=-1000.0, scale=9.0))
        self.assertEqual(state, ViewState(translate_x=0.0, translate_y=-300.0, scale=4.0))
        self.assertEqual(self.view.clamp(ViewState(scale=0.25)), IDENTITY)
        self.assertEqual(self.view.clamp(ViewState(translate_x=float("nan"), scale=float("inf"))), IDENTITY)
        self.assertEqual(self.settled, [state])

    def test_random_gestures_stay_in_bounds(self) -> None:
        rng = np.random.default_rng(11)
        for _ in range(300):
            if rng.uniform() < 0.5:
                state = self.view.pan(float(rng.normal(0, 150)), float(rng.normal(0, 150)))
            else:
                state = self.view.zoom_at(float(rng.uniform(0.2, 3.0)), float(rng.uniform(0, 200)), float(rng.uniform(0, 100)))
            self._assert_in_bounds(state)

    def test_zoom_at_keeps_anchor_fixed(self) -> None:
        state = self.view.zoom_at(2.0, 100.0, 50.0)
        self.assertEqual(state, ViewState(translate_x=-100.0, translate_y=-50.0, scale=2.0))
        self.assertEqual(state.invert(100.0, 50.0), (100.0, 50.0))
        with self.assertRaises(ValueError):
            self.view.zoom_at(0.0, 0.0, 0.0)

    def test_fit_rect_fills_viewport(self) -> None:
        state = self.view.fit_rect(50.0, 25.0, 100.0, 50.0)
        self.assertEqual(state, ViewState(translate_x=-100.0, translate_y=-50.0, scale=2.0))
        tiny = self.view.fit_rect(10.0, 10.0, 0.0, 0.0)
        self.assertEqual(tiny.scale, 4.0)

    def test_animation_ticks_and_settles_once(self) -> None:
        self.view.animate_to(ViewState(translate_x=-100.0, translate_y=-50.0, scale=2.0), now=10.0)
        self.assertTrue(self.view.is_animating)
        mid = self.view.tick(10.5)
        self.assertEqual(mid.scale, 1.5)
        self.assertEqual(self.settled, [])
        self.view.tick(10.75)
        end = self.view.tick(11.0)
        self.assertEqual(end, ViewState(translate_x=-100.0, translate_y=-50.0, scale=2.0))
        self.assertFalse(self.view.is_animating)
        self.assertEqual(len(self.changes), 3)
        self.assertEqual(self.settled, [end])
        self.view.tick(12.0)
        self.assertEqual(len(self.settled), 1)

    def test_new_transition_supersedes_running_one(self) -> None:
        self.view.animate_to(ViewState(translate_x=-100.0, translate_y=-50.0, scale=2.0), now=0.0)
        self.view.tick(0.5)
        self.view.animate_to(IDENTITY, now=0.5)
        self.assertEqual(self.view.transition.start.scale, 1.5)
        self.view.tick(2.0)
        self.assertEqual(self.view.state, IDENTITY)
        # Returning to the last settled state does not settle again.
        self.assertEqual(self.settled, [])
        self.assertEqual(self.view.settled_state, IDENTITY)

    def test_zero_duration_applies_immediately(self) -> None:
        view = ViewTransform(200, 100, transition_duration_s=0.0)
        view.animate_to(ViewState(scale=2.0), now=0.0)
        self.assertEqual(view.state.scale, 2.0)
        self.assertFalse(view.is_animating)

    def test_gesture_end_zooms_then_resets(self) -> None:
        self.view.gesture_end((50.0, 25.0, 100.0, 50.0), now=0.0)
        self.view.tick(1.0)
        self.assertEqual(self.view.state.scale, 2.0)
        self.view.gesture_end((0.0, 0.0, 10.0, 10.0), now=2.0)
        self.view.tick(3.0)
        self.assertEqual(self.view.state, IDENTITY)
        self.assertEqual(len(self.settled), 2)

    def test_unsettled_pan_waits_for_settle(self) -> None:
        self.view.zoom_at(2.0, 0.0, 0.0)
        self.settled.clear()
        self.view.pan(-10.0, 0.0, settle=False)
        self.view.pan(-10.0, 0.0, settle=False)
        self.assertEqual(self.settled, [])
        self.view.settle()
        self.assertEqual(self.settled, [ViewState(translate_x=-20.0, translate_y=0.0, scale=2.0)])
        self.view.settle()
        self.assertEqual(len(self.settled), 1)

    def test_rejects_bad_construction(self) -> None:
        with self.assertRaises(ValueError):
            ViewTransform(0, 100)
        with self.assertRaises(ValueError):
            ViewTransform(10, 10, max_scale=0.5)


if __name__ == "__main__":
    unittest.main()
