import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "terminal"))

from pit_renderer.color import (
    MAX_CELL_BYTES,
    ColorEncoder,
    EncoderCache,
    default_cache,
    rgb_to_16,
    rgb_to_256,
)
from pit_terminal.models import ColorDepth


class Rgb256Tests(unittest.TestCase):
    def test_black_and_white(self):
        self.assertEqual(rgb_to_256(0, 0, 0), 16)
        self.assertEqual(rgb_to_256(255, 255, 255), 231)

    def test_gray_ramp_stays_in_range(self):
        for v in range(3, 253):
            with self.subTest(v=v):
                self.assertTrue(232 <= rgb_to_256(v, v, v) <= 255)

    def test_color_cube(self):
        self.assertEqual(rgb_to_256(255, 0, 0), 196)
        self.assertEqual(rgb_to_256(0, 255, 0), 46)
        self.assertEqual(rgb_to_256(0, 0, 255), 21)
        self.assertEqual(rgb_to_256(128, 64, 0), 16 + 3 * 36 + 1 * 6)


class Rgb16Tests(unittest.TestCase):
    def test_range_and_intensity_bit(self):
        for r in (0, 128, 129, 255):
            for g in (0, 128, 129, 255):
                for b in (0, 128, 129, 255):
                    idx = rgb_to_16(r, g, b)
                    self.assertTrue(0 <= idx <= 15)
                    bright = r > 128 or g > 128 or b > 128
                    self.assertEqual(bool(idx & 8), bright)

    def test_channel_bits(self):
        self.assertEqual(rgb_to_16(200, 0, 0), 12)
        self.assertEqual(rgb_to_16(0, 200, 0), 10)
        self.assertEqual(rgb_to_16(0, 0, 200), 9)
        self.assertEqual(rgb_to_16(10, 10, 10), 0)


class EncoderTests(unittest.TestCase):
    def test_truecolor_cell(self):
        enc = ColorEncoder(ColorDepth.TRUECOLOR)
        self.assertEqual(enc.encode(1, 2, 3), b"\x1b[48;2;1;2;3m ")

    def test_256_cell(self):
        enc = ColorEncoder(ColorDepth.INDEXED_256)
        self.assertEqual(enc.encode(255, 0, 0), b"\x1b[48;5;196m ")

    def test_16_cells(self):
        enc = ColorEncoder(ColorDepth.INDEXED_16)
        self.assertEqual(enc.encode(0, 0, 0), b"\x1b[40m ")
        self.assertEqual(enc.encode(255, 0, 0), b"\x1b[104m ")
        self.assertEqual(enc.encode(255, 255, 255), b"\x1b[107m ")

    def test_unknown_depth_is_plain_space(self):
        enc = ColorEncoder(ColorDepth.UNKNOWN)
        self.assertEqual(enc.encode(12, 34, 56), b" ")

    def test_cache_is_built_once(self):
        self.assertIs(default_cache(), default_cache())
        cache = default_cache()
        self.assertEqual(len(cache.palette_16), 16)
        self.assertEqual(len(cache.palette_256), 256)

    def test_cache_miss_formats_directly(self):
        empty = EncoderCache(palette_16=(), palette_256=())
        self.assertEqual(ColorEncoder(ColorDepth.INDEXED_256, empty).encode(0, 0, 0), b"\x1b[48;5;16m ")
        self.assertEqual(ColorEncoder(ColorDepth.INDEXED_16, empty).encode(255, 255, 255), b"\x1b[107m ")

    def test_cells_fit_worst_case(self):
        samples = [(0, 0, 0), (255, 255, 255), (255, 0, 128), (100, 100, 100), (250, 250, 250)]
        for depth, limit in MAX_CELL_BYTES.items():
            enc = ColorEncoder(depth)
            for rgb in samples:
                self.assertLessEqual(len(enc.encode(*rgb)), limit)

    def test_encode_into_advances_position(self):
        enc = ColorEncoder(ColorDepth.TRUECOLOR)
        buf = bytearray(64)
        pos = enc.encode_into(buf, 0, 9, 8, 7)
        pos = enc.encode_into(buf, pos, 0, 0, 0)
        self.assertEqual(bytes(buf[:pos]), b"\x1b[48;2;9;8;7m \x1b[48;2;0;0;0m ")


if __name__ == "__main__":
    unittest.main()
