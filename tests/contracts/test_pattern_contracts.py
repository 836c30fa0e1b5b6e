"""Tests for codec contracts.

These tests verify that contracts are enforced where patterns and headers
enter the codec. They call the contracts directly.
"""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from arenapat.arena import ArenaGeometry
from arenapat.contracts import (
    CorruptHeaderError,
    GeometryError,
    PatternCodecError,
    ValidationError,
    ValueOutOfRangeError,
    assert_column_mask,
    assert_encodable,
    assert_field_range,
    is_full_arena_mask,
    require,
)
from arenapat.pattern import Pattern


class TestRequire:
    """The single enforcement helper."""

    def test_passes_silently(self):
        """A true condition raises nothing."""
        require(True, "never raised")

    def test_default_error(self):
        """ValidationError is raised by default."""
        with pytest.raises(ValidationError, match="broken"):
            require(False, "broken")

    def test_custom_error(self):
        """The requested subclass is raised."""
        with pytest.raises(GeometryError):
            require(False, "bad arena", GeometryError)

    def test_errors_are_value_errors(self):
        """Every codec failure is catchable as ValueError."""
        with pytest.raises(ValueError):
            require(False, "broken", CorruptHeaderError)
        assert issubclass(ValueOutOfRangeError, ValidationError)
        assert issubclass(CorruptHeaderError, PatternCodecError)


class TestHeaderContracts:
    """Header field and column mask contracts."""

    def test_field_in_range(self):
        """Boundary values pass."""
        assert_field_range("row_count", 1, 1, 255)
        assert_field_range("row_count", 255, 1, 255)

    def test_field_out_of_range(self):
        """Out-of-range fields are corrupt by default."""
        with pytest.raises(CorruptHeaderError, match="row_count=0 out of range 1-255"):
            assert_field_range("row_count", 0, 1, 255)

    def test_field_error_override(self):
        """Encoders raise ValidationError instead."""
        with pytest.raises(ValidationError):
            assert_field_range("arena_id", 64, 0, 63, ValidationError)

    def test_mask_passes(self):
        """A mask inside col_count passes."""
        assert_column_mask(0b1000100110, 10)

    def test_empty_mask(self):
        """A mask with no installed columns fails."""
        with pytest.raises(CorruptHeaderError, match="no installed columns"):
            assert_column_mask(0, 10)

    def test_mask_beyond_columns(self):
        """Bits at or beyond col_count fail."""
        with pytest.raises(CorruptHeaderError, match="beyond col_count=10"):
            assert_column_mask(1 << 10, 10)

    def test_full_mask_accepted(self):
        """The all-ones 48-bit mask means a full arena of any size."""
        assert_column_mask((1 << 48) - 1, 10)

    def test_per_panel_full_mask_accepted(self):
        """One bit per panel of a full 2x10 arena is a full-arena mask."""
        assert_column_mask((1 << 20) - 1, 10, row_count=2)

    def test_per_panel_mask_needs_row_count(self):
        """Without the row count the same bits overflow col_count."""
        with pytest.raises(CorruptHeaderError, match="beyond col_count=10"):
            assert_column_mask((1 << 20) - 1, 10)

    def test_full_arena_spellings(self):
        """Per-column, per-panel and all-ones masks all mean a full arena."""
        assert is_full_arena_mask(0x3FF, 2, 10)
        assert is_full_arena_mask(0xFFFFF, 2, 10)
        assert is_full_arena_mask((1 << 48) - 1, 2, 10)
        assert not is_full_arena_mask(0x1FF, 2, 10)
        assert not is_full_arena_mask(0x7FFFF, 2, 10)

    def test_per_panel_mask_wider_than_header(self):
        """A grid of more than 48 panels has no per-panel spelling."""
        assert not is_full_arena_mask((1 << 50) - 1, 5, 10)

    def test_col_count_beyond_width(self):
        """col_count cannot exceed the mask width."""
        with pytest.raises(CorruptHeaderError, match="Column count 49"):
            assert_column_mask(1, 49)


class TestEncodeContract:
    """Pattern encode contract."""

    def test_valid_pattern_passes(self, make_pattern, g6_arena):
        """A pattern that fits its arena passes."""
        assert_encodable(make_pattern(g6_arena, bit_depth=4), g6_arena, 2)

    def test_boolean_frames_pass(self, g4_arena):
        """Boolean pixel arrays are valid binary patterns."""
        frames = np.ones(g4_arena.frame_shape, dtype=bool)
        assert_encodable(Pattern(frames), g4_arena, 2)

    def test_wrong_frame_shape(self, make_pattern, g4_arena, g41_arena):
        """Frames must match the arena pixel dimensions."""
        with pytest.raises(ValidationError, match="frames are 32x192 px"):
            assert_encodable(make_pattern(g41_arena), g4_arena, 2)

    def test_negative_pixel(self, g6_arena):
        """Negative pixels are out of range."""
        frames = np.zeros(g6_arena.frame_shape, dtype=np.int16)
        frames[0, 3] = -1
        with pytest.raises(ValueOutOfRangeError, match="row 0, col 3"):
            assert_encodable(Pattern(frames), g6_arena, 2)

    def test_g6_single_axis(self, make_pattern, g6_arena):
        """G6 patterns have one frame axis in either header version."""
        with pytest.raises(ValidationError, match="one frame axis"):
            assert_encodable(make_pattern(g6_arena, y_num=2), g6_arena, 1)

    def test_v1_g4_y_num_bit_seven(self, make_pattern):
        """V1 G4 headers cannot hold a y_num with bit 7 set."""
        geometry = ArenaGeometry("G4", 1, 1)
        pattern = make_pattern(geometry, x_num=1, y_num=128)
        with pytest.raises(ValidationError, match="y_num=128"):
            assert_encodable(pattern, geometry, 1)

    def test_v1_g4_two_axis_passes(self, make_pattern, g4_arena):
        """V1 G4 headers store both frame axes."""
        assert_encodable(make_pattern(g4_arena, x_num=2, y_num=3), g4_arena, 1)

    def test_g6_stretch_range(self, make_pattern, g6_arena):
        """G6 stretch is one byte."""
        assert_encodable(make_pattern(g6_arena, stretch=[0, 255]), g6_arena, 2)
        with pytest.raises(ValueOutOfRangeError, match="0-255 for G6"):
            assert_encodable(make_pattern(g6_arena, stretch=[0, 256]), g6_arena, 2)

    def test_observer_id_is_g6_only(self, make_pattern, g4_arena):
        """G4-family headers have no observer id."""
        with pytest.raises(ValidationError, match="observer_id=1"):
            assert_encodable(make_pattern(g4_arena, observer_id=1), g4_arena, 2)

    def test_g4_generation_id_may_be_unspecified(self, make_pattern, g41_arena):
        """generation_id 0 or the arena's own id pass."""
        assert_encodable(make_pattern(g41_arena), g41_arena, 2)
        assert_encodable(make_pattern(g41_arena, generation_id=3), g41_arena, 2)

    def test_g4_two_axis_beyond_u16_frames(self):
        """G4 V1 caps each frame axis, not their product."""
        geometry = ArenaGeometry("G4", 1, 1)
        pattern = Pattern(np.zeros(geometry.frame_shape + (256, 257), dtype=np.uint8))
        assert pattern.num_frames > 0xFFFF
        assert_encodable(pattern, geometry, 1)

    def test_g4_axis_beyond_u16(self):
        """A single G4 frame axis holds at most 65535 frames."""
        geometry = ArenaGeometry("G4", 1, 1)
        pattern = Pattern(np.zeros(geometry.frame_shape + (0x10000, 1), dtype=np.uint8))
        with pytest.raises(ValidationError, match="x_num=65536"):
            assert_encodable(pattern, geometry, 2)

    def test_g6_frame_count_beyond_u16(self):
        """G6 headers store a single u16 frame count."""
        geometry = ArenaGeometry("G6", 1, 1)
        pattern = Pattern(np.zeros(geometry.frame_shape + (0x10000, 1), dtype=np.uint8))
        with pytest.raises(ValidationError, match="65536 frames exceeds 65535"):
            assert_encodable(pattern, geometry, 2)

    def test_g6_column_limit(self, make_pattern):
        """G6 arenas wider than the 48-bit column mask are rejected up front."""
        geometry = ArenaGeometry("G6", 1, 49)
        with pytest.raises(ValidationError, match="at most 48 columns"):
            assert_encodable(make_pattern(geometry, x_num=1), geometry, 2)
