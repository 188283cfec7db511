from __future__ import annotations

import unittest

import numpy as np
import torch

from streamgraph_core.surface import FullRewrite, Surface, WriteBatch
from streamgraph_plot.compile import compile_full_rewrite_batch


class SurfaceTests(unittest.TestCase):
    def test_init_uses_canonical_shape_dtype(self) -> None:
        surface = Surface(height=3, width=4)
        snap = surface.read_snapshot()
        self.assertEqual(tuple(snap.shape), (3, 4, 4))
        self.assertEqual(snap.dtype, torch.uint8)
        self.assertTrue(torch.all(snap[:, :, 3] == 255))
        self.assertEqual(surface.revision, 0)

    def test_rejects_empty_dimensions(self) -> None:
        with self.assertRaises(ValueError):
            Surface(height=0, width=4)

    def test_full_rewrite_bumps_revision(self) -> None:
        surface = Surface(height=2, width=2)
        payload = torch.tensor(
            [
                [[1, 2, 3, 4], [10, 11, 12, 13]],
                [[21, 22, 23, 24], [30, 31, 32, 33]],
            ]
        )
        revision = surface.submit_write_batch(WriteBatch([FullRewrite(payload)]))
        self.assertEqual(revision, 1)
        self.assertTrue(torch.equal(surface.read_snapshot(), payload.to(torch.uint8)))
        self.assertEqual(surface.read_pixel(1, 0), (10, 11, 12, 13))

    def test_read_pixel_out_of_bounds_is_none(self) -> None:
        surface = Surface(height=2, width=2)
        self.assertIsNone(surface.read_pixel(-1, 0))
        self.assertIsNone(surface.read_pixel(0, 2))

    def test_invalid_pixels_replaced_and_warned_once_per_batch(self) -> None:
        surface = Surface(height=2, width=2)
        invalid_full = torch.tensor(
            [
                [[300, 0, 0, 255], [1, 2, 3, 4]],
                [[5, 6, 7, 8], [9, 10, -1, 12]],
            ],
            dtype=torch.int32,
        )
        with self.assertLogs("streamgraph_core.surface", level="WARNING") as logs:
            surface.submit_write_batch(WriteBatch([FullRewrite(invalid_full)]))
        self.assertEqual(len(logs.output), 1)
        self.assertIn("offending_pixels=2", logs.output[0])
        self.assertEqual(surface.read_pixel(0, 0), (255, 0, 255, 255))
        self.assertEqual(surface.read_pixel(1, 1), (255, 0, 255, 255))
        self.assertEqual(surface.read_pixel(1, 0), (1, 2, 3, 4))

    def test_unique_colors_after_rewrite(self) -> None:
        surface = Surface(height=2, width=3)
        payload = torch.tensor([7, 8, 9, 255], dtype=torch.uint8).expand(2, 3, 4).clone()
        payload[0, 0] = torch.tensor([1, 2, 3, 255], dtype=torch.uint8)
        surface.submit_write_batch(WriteBatch([FullRewrite(payload)]))
        self.assertEqual(surface.unique_colors().tolist(), [[1, 2, 3], [7, 8, 9]])

    def test_atomic_batch_rejects_invalid_without_mutation(self) -> None:
        surface = Surface(height=2, width=2)
        before = surface.read_snapshot()
        valid = torch.full((2, 2, 4), 9, dtype=torch.uint8)
        with self.assertRaises(ValueError):
            surface.submit_write_batch(WriteBatch([FullRewrite(valid), FullRewrite(torch.zeros((3, 2, 4)))]))
        self.assertTrue(torch.equal(before, surface.read_snapshot()))
        self.assertEqual(surface.revision, 0)

    def test_empty_batch_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Surface(height=1, width=1).submit_write_batch(WriteBatch([]))

    def test_compiled_canvas_batches_commit(self) -> None:
        surface = Surface(height=2, width=3)
        frame = np.zeros((2, 3, 4), dtype=np.uint8)
        frame[:, :, 1] = 200
        frame[:, :, 3] = 255
        surface.submit_write_batch(compile_full_rewrite_batch(frame))
        self.assertEqual(surface.read_pixel(2, 1), (0, 200, 0, 255))

        with self.assertRaises(ValueError):
            compile_full_rewrite_batch(frame.astype(np.float32))

    def test_to_image_matches_surface(self) -> None:
        surface = Surface(height=2, width=3, background=(1, 2, 3, 255))
        image = surface.to_image()
        self.assertEqual(image.size, (3, 2))
        self.assertEqual(image.mode, "RGBA")
        self.assertEqual(image.getpixel((2, 1)), (1, 2, 3, 255))


if __name__ == "__main__":
    unittest.main()
