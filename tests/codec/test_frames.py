"""Tests for per-frame byte layouts (G4 family and G6).

The G6 vectors place single pixels on a 1x1 arena and check the data
bytes of its one panel block, which start after the 4-byte frame header
and the 2-byte block header/command.
"""

import struct

import numpy as np
import pytest

pytestmark = [pytest.mark.unit, pytest.mark.codec]

from arenapat.arena import ArenaGeometry
from arenapat.codec.bitpack import BitDepth
from arenapat.codec.frames import G4FrameLayout, G6FrameLayout, frame_layout_for
from arenapat.contracts import (
    CorruptFrameError,
    CorruptPanelBlockError,
    CorruptRowHeaderError,
    TruncatedDataError,
    UnsupportedGenerationError,
    ValueOutOfRangeError,
)

# Offset of the first pixel byte of the first G6 panel block.
G6_DATA = 4 + 2


@pytest.fixture
def g6_single():
    return G6FrameLayout(ArenaGeometry("G6", 1, 1))


@pytest.fixture
def g4_single():
    return G4FrameLayout(ArenaGeometry("G4", 1, 1))


def g6_pixels(g6_single, bit_depth, *lit):
    frame = np.zeros((20, 20), dtype=np.uint8)
    for row, col, value in lit:
        frame[row, col] = value
    return g6_single.encode(frame, bit_depth)


class TestFrameLayoutFor:
    """Family dispatch."""

    def test_families(self, g4_arena, g41_arena, g6_arena):
        assert isinstance(frame_layout_for(g4_arena), G4FrameLayout)
        assert isinstance(frame_layout_for(g41_arena), G4FrameLayout)
        assert isinstance(frame_layout_for(g6_arena), G6FrameLayout)

    def test_g3_has_no_layout(self):
        with pytest.raises(UnsupportedGenerationError):
            frame_layout_for(ArenaGeometry("G3", 4, 12))


class TestG6PixelOrder:
    """Bottom-left origin, first pixel in the most significant bit."""

    def test_bottom_left_pixel(self, g6_single):
        data = g6_pixels(g6_single, BitDepth.BINARY, (19, 0, 1))
        assert data[G6_DATA] == 128

    def test_second_pixel_of_bottom_row(self, g6_single):
        data = g6_pixels(g6_single, BitDepth.BINARY, (19, 1, 1))
        assert data[G6_DATA] == 64

    def test_two_pixels(self, g6_single):
        data = g6_pixels(g6_single, BitDepth.BINARY, (19, 0, 1), (19, 1, 1))
        assert data[G6_DATA] == 192

    def test_top_left_pixel(self, g6_single):
        # k = 19 * 20 + 0 = 380: byte 47, bit 4 from the top
        data = g6_pixels(g6_single, BitDepth.BINARY, (0, 0, 1))
        assert data[G6_DATA + 47] == 8
        assert sum(data[G6_DATA:G6_DATA + 50]) == 8

    def test_bottom_right_pixel(self, g6_single):
        # k = 19: byte 2, bit 3 from the top
        data = g6_pixels(g6_single, BitDepth.BINARY, (19, 19, 1))
        assert data[G6_DATA + 2] == 16

    def test_bottom_row(self, g6_single):
        frame = np.zeros((20, 20), dtype=np.uint8)
        frame[19, :] = 1
        data = g6_single.encode(frame, BitDepth.BINARY)
        assert list(data[G6_DATA:G6_DATA + 3]) == [255, 255, 240]
        assert not any(data[G6_DATA + 3:G6_DATA + 50])

    def test_all_on(self, g6_single):
        data = g6_single.encode(np.ones((20, 20), dtype=np.uint8), BitDepth.BINARY)
        assert data[G6_DATA:G6_DATA + 50] == b"\xff" * 50

    def test_grayscale_high_nibble_first(self, g6_single):
        data = g6_pixels(g6_single, BitDepth.GRAYSCALE, (19, 0, 15))
        assert data[G6_DATA] == 240

    def test_grayscale_bottom_row(self, g6_single):
        frame = np.zeros((20, 20), dtype=np.uint8)
        frame[19, :] = list(range(16)) + [0, 1, 2, 3]
        data = g6_single.encode(frame, BitDepth.GRAYSCALE)
        assert list(data[G6_DATA:G6_DATA + 3]) == [0x01, 0x23, 0x45]


class TestG6Blocks:
    """Frame header, block structure, parity and stretch."""

    def test_sizes(self, g6_single, g6_arena):
        assert g6_single.block_size(BitDepth.BINARY) == 53
        assert g6_single.block_size(BitDepth.GRAYSCALE) == 203
        assert g6_single.frame_size(BitDepth.BINARY) == 4 + 53
        layout = G6FrameLayout(g6_arena)
        assert layout.frame_size(BitDepth.GRAYSCALE) == 4 + 20 * 203

    def test_partial_arena_writes_installed_panels(self, g6_partial_arena):
        layout = G6FrameLayout(g6_partial_arena)
        assert layout.frame_size(BitDepth.BINARY) == 4 + 2 * 4 * 53

    def test_frame_header(self, g6_single):
        data = g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY, frame_index=258)
        assert data[:4] == b"FR" + struct.pack("<H", 258)

    def test_block_layout(self, g6_single):
        data = g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.GRAYSCALE, stretch=7)
        block = data[4:]
        assert block[1] == 0x30
        assert block[-1] == 7
        assert len(block) == 203

    def test_parity_bit(self, g6_single):
        # command 0x10 holds one set bit, so an empty binary block is odd
        empty = g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY)
        assert empty[4] == 0x81
        data = g6_pixels(g6_single, BitDepth.BINARY, (19, 0, 1))
        assert data[4] == 0x01

    def test_round_trip_with_stretch(self, g6_arena, rng):
        layout = G6FrameLayout(g6_arena)
        frame = rng.integers(0, 16, size=g6_arena.frame_shape, dtype=np.uint8)
        data = layout.encode(frame, BitDepth.GRAYSCALE, stretch=200, frame_index=3)
        pixels, stretch = layout.decode(data, BitDepth.GRAYSCALE, frame_index=3)
        np.testing.assert_array_equal(pixels, frame)
        assert stretch == 200

    def test_bad_block_version(self, g6_single):
        data = bytearray(g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY))
        data[4] = 0x82
        with pytest.raises(CorruptPanelBlockError, match="block version"):
            g6_single.decode(bytes(data), BitDepth.BINARY)

    def test_bad_command(self, g6_single):
        data = bytearray(g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY))
        data[5] = 0x30
        with pytest.raises(CorruptPanelBlockError, match="command"):
            g6_single.decode(bytes(data), BitDepth.BINARY)

    def test_parity_failure(self, g6_single):
        data = bytearray(g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY))
        data[G6_DATA + 10] = 0x01
        with pytest.raises(CorruptPanelBlockError, match="parity"):
            g6_single.decode(bytes(data), BitDepth.BINARY)

    def test_bad_frame_tag(self, g6_single):
        data = bytearray(g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY))
        data[:2] = b"RF"
        with pytest.raises(CorruptFrameError, match="marker"):
            g6_single.decode(bytes(data), BitDepth.BINARY)

    def test_frame_index_mismatch(self, g6_single):
        data = g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY, frame_index=0)
        with pytest.raises(CorruptFrameError, match="frame index 0"):
            g6_single.decode(data, BitDepth.BINARY, frame_index=1)

    def test_stretch_disagreement(self):
        layout = G6FrameLayout(ArenaGeometry("G6", 1, 2))
        block = np.zeros((20, 20), dtype=np.uint8)
        data = (
            b"FR\x00\x00"
            + layout.encode_block(block, BitDepth.BINARY, 5)
            + layout.encode_block(block, BitDepth.BINARY, 6)
        )
        with pytest.raises(CorruptPanelBlockError, match="disagree on stretch"):
            layout.decode(data, BitDepth.BINARY)

    def test_stretch_range(self, g6_single):
        with pytest.raises(ValueOutOfRangeError, match="Stretch"):
            g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY, stretch=256)

    def test_truncated(self, g6_single):
        data = g6_single.encode(np.zeros((20, 20), dtype=np.uint8), BitDepth.BINARY)
        with pytest.raises(TruncatedDataError):
            g6_single.decode(data[:-1], BitDepth.BINARY)


class TestG4Frames:
    """Row-id prefixed subpanel groups, LSB-first pixels."""

    def test_sizes(self, g4_arena, g41_arena):
        layout = G4FrameLayout(g4_arena)
        assert layout.frame_size(BitDepth.GRAYSCALE) == 6352
        assert layout.frame_size(BitDepth.BINARY) == 1744
        assert G4FrameLayout(g41_arena).frame_size(BitDepth.BINARY) == 8 * 109

    def test_row_ids(self, g4_arena):
        layout = G4FrameLayout(g4_arena)
        data = layout.encode(np.zeros(g4_arena.frame_shape, dtype=np.uint8), BitDepth.BINARY)
        group_size = 1 + 12 * (1 + 8)
        row_ids = [data[g * group_size] for g in range(16)]
        assert row_ids == [1] * 4 + [2] * 4 + [3] * 4 + [4] * 4

    def test_command_byte(self, g4_single):
        data = g4_single.encode(np.zeros((16, 16), dtype=np.uint8), BitDepth.GRAYSCALE, stretch=5)
        assert data[1] == (5 << 1) | 1
        data = g4_single.encode(np.zeros((16, 16), dtype=np.uint8), BitDepth.BINARY, stretch=5)
        assert data[1] == 5 << 1

    def test_lsb_first_pixels(self, g4_single):
        frame = np.zeros((16, 16), dtype=np.uint8)
        frame[0, 1] = 1
        frame[4, 0] = 1
        data = g4_single.encode(frame, BitDepth.BINARY)
        assert data[2] == 2
        # second subpanel group starts at 1 + 1 + 8
        assert data[10] == 1
        assert data[12] == 1

    def test_grayscale_low_nibble_first(self, g4_single):
        frame = np.zeros((16, 16), dtype=np.uint8)
        frame[0, 0] = 15
        frame[0, 1] = 3
        data = g4_single.encode(frame, BitDepth.GRAYSCALE)
        assert data[2] == 0x3F

    def test_round_trip(self, g41_arena, rng):
        layout = G4FrameLayout(g41_arena)
        frame = rng.integers(0, 2, size=g41_arena.frame_shape, dtype=np.uint8)
        pixels, stretch = layout.decode(layout.encode(frame, 1, stretch=100), 1)
        np.testing.assert_array_equal(pixels, frame)
        assert stretch == 100

    def test_corrupt_row_id(self, g4_arena):
        layout = G4FrameLayout(g4_arena)
        data = bytearray(layout.encode(np.zeros(g4_arena.frame_shape, dtype=np.uint8), BitDepth.BINARY))
        data[5 * 109] = 9
        with pytest.raises(CorruptRowHeaderError, match="expected 2"):
            layout.decode(bytes(data), BitDepth.BINARY)

    def test_command_depth_mismatch(self, g4_single):
        data = g4_single.encode(np.zeros((16, 16), dtype=np.uint8), BitDepth.BINARY)
        with pytest.raises(TruncatedDataError):
            g4_single.decode(data, BitDepth.GRAYSCALE)
        data = bytearray(data)
        data[1] |= 0x01
        with pytest.raises(CorruptPanelBlockError, match="command"):
            g4_single.decode(bytes(data), BitDepth.BINARY)

    def test_stretch_range(self, g4_single):
        with pytest.raises(ValueOutOfRangeError):
            g4_single.encode(np.zeros((16, 16), dtype=np.uint8), BitDepth.BINARY, stretch=128)

    def test_pixel_range(self, g4_single):
        frame = np.zeros((16, 16), dtype=np.uint8)
        frame[3, 3] = 2
        with pytest.raises(ValueOutOfRangeError):
            g4_single.encode(frame, BitDepth.BINARY)
