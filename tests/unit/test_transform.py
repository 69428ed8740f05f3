import sys
import tracemalloc
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "terminal"))

from pit_renderer.errors import BufferSizeError
from pit_renderer.models import PixelBuffer, ViewWindow
from pit_renderer.transform import (
    flip_horizontal,
    flip_vertical,
    resample_bilinear,
    rotate_90_cw,
    rotate_180,
)


def _buffer(width: int, height: int, channels: int = 4) -> PixelBuffer:
    data = bytes(i % 256 for i in range(width * height * channels))
    return PixelBuffer(width=width, height=height, channels=channels, data=data)


def _pixel(buffer: PixelBuffer, x: int, y: int) -> tuple:
    return tuple(buffer.to_array()[y, x].tolist())


class OrientationTests(unittest.TestCase):
    def test_rotate_four_times_is_identity(self):
        src = _buffer(5, 3)
        out = src
        for _ in range(4):
            out = rotate_90_cw(out)
        self.assertEqual((out.width, out.height), (5, 3))
        self.assertEqual(out.data, src.data)

    def test_rotate_90_swaps_and_maps_clockwise(self):
        src = _buffer(3, 2)
        out = rotate_90_cw(src)
        self.assertEqual((out.width, out.height), (2, 3))
        for y in range(out.height):
            for x in range(out.width):
                self.assertEqual(_pixel(out, x, y), _pixel(src, y, src.height - 1 - x))

    def test_rotate_180_matches_two_quarter_turns(self):
        src = _buffer(4, 3, channels=3)
        self.assertEqual(rotate_180(src).data, rotate_90_cw(rotate_90_cw(src)).data)
        out = rotate_180(src)
        self.assertEqual(_pixel(out, 0, 0), _pixel(src, 3, 2))

    def test_double_flips_are_identity(self):
        src = _buffer(4, 3)
        self.assertEqual(flip_horizontal(flip_horizontal(src)).data, src.data)
        self.assertEqual(flip_vertical(flip_vertical(src)).data, src.data)

    def test_flip_mirrors_coordinates(self):
        src = _buffer(4, 3)
        h = flip_horizontal(src)
        v = flip_vertical(src)
        self.assertEqual(_pixel(h, 0, 1), _pixel(src, 3, 1))
        self.assertEqual(_pixel(v, 2, 0), _pixel(src, 2, 2))

    def test_transforms_leave_input_untouched(self):
        src = _buffer(3, 3)
        before = src.data
        rotate_90_cw(src)
        flip_horizontal(src)
        self.assertEqual(src.data, before)


class ResampleTests(unittest.TestCase):
    def test_output_length(self):
        src = _buffer(7, 5)
        for new_w, new_h in ((1, 1), (3, 9), (14, 10), (7, 5)):
            out = resample_bilinear(src, ViewWindow.full(src), new_w, new_h)
            self.assertEqual(len(out.data), new_w * new_h * src.channels)

    def test_same_size_is_copy(self):
        src = _buffer(4, 4, channels=3)
        out = resample_bilinear(src, ViewWindow.full(src), 4, 4)
        self.assertEqual(out.data, src.data)

    def test_interpolates_and_clamps_edge(self):
        src = PixelBuffer(width=2, height=1, channels=3, data=bytes([0, 0, 0, 200, 200, 200]))
        out = resample_bilinear(src, ViewWindow.full(src), 4, 1)
        self.assertEqual(out.to_array()[0, :, 0].tolist(), [0, 100, 200, 200])

    def test_window_offset(self):
        arr = np.zeros((4, 4, 3), dtype=np.uint8)
        arr[2:, 2:] = (10, 20, 30)
        src = PixelBuffer.from_array(arr)
        out = resample_bilinear(src, ViewWindow(x=2, y=2, w=2, h=2), 1, 1)
        self.assertEqual(_pixel(out, 0, 0), (10, 20, 30))

    def test_rejects_degenerate_dimensions(self):
        src = _buffer(2, 2)
        with self.assertRaises(ValueError):
            resample_bilinear(src, ViewWindow.full(src), 0, 2)
        with self.assertRaises(ValueError):
            resample_bilinear(src, ViewWindow(x=0, y=0, w=0, h=2), 2, 2)

    def test_rejects_unaddressable_size(self):
        src = _buffer(2, 2)
        with self.assertRaises(BufferSizeError):
            resample_bilinear(src, ViewWindow.full(src), sys.maxsize, 2)

    def test_rejects_window_outside_buffer(self):
        src = _buffer(4, 4)
        with self.assertRaises(ValueError):
            resample_bilinear(src, ViewWindow(x=3, y=0, w=2, h=4), 2, 2)

    def test_small_target_does_not_widen_whole_source(self):
        src = PixelBuffer(width=1000, height=1000, channels=4, data=bytes(1000 * 1000 * 4))
        tracemalloc.start()
        try:
            out = resample_bilinear(src, ViewWindow.full(src), 10, 10)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        self.assertEqual((out.width, out.height), (10, 10))
        # The source alone is 4 MB; a float64 copy of it would be 32 MB.
        self.assertLess(peak, 1024 * 1024)


class PixelBufferTests(unittest.TestCase):
    def test_length_invariant(self):
        with self.assertRaises(ValueError):
            PixelBuffer(width=2, height=2, channels=3, data=b"\x00" * 11)

    def test_channel_count(self):
        with self.assertRaises(ValueError):
            PixelBuffer(width=1, height=1, channels=2, data=b"\x00\x00")

    def test_window_fits(self):
        self.assertTrue(ViewWindow(1, 1, 2, 2).fits(3, 3))
        self.assertFalse(ViewWindow(2, 0, 2, 1).fits(3, 3))


if __name__ == "__main__":
    unittest.main()
