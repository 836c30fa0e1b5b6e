"""Header field contracts.

Shared by the encoders (where a bad field is the caller's mistake and
raises ValidationError) and the decoders (where a bad field means the
bytes are corrupt and raises CorruptHeaderError).
"""

from typing import Type

from arenapat.contracts.base import require
from arenapat.contracts.failure import CorruptHeaderError, PatternCodecError


def assert_field_range(
    name: str,
    value: int,
    low: int,
    high: int,
    error: Type[PatternCodecError] = CorruptHeaderError,
) -> None:
    """Require low <= value <= high for a header field."""
    require(
        low <= value <= high,
        f"Header field {name}={value} out of range {low}-{high}",
        error,
    )


def is_full_arena_mask(mask: int, row_count: int, col_count: int, width: int = 48) -> bool:
    """Whether mask is one of the spellings of a full arena.

    Three spellings are accepted: one bit per column (what the encoder
    writes), all ``width`` bits set, and one bit per panel
    (``row_count * col_count`` low bits set) as written by older G6
    tooling.
    """
    if mask in ((1 << width) - 1, (1 << col_count) - 1):
        return True
    panels = row_count * col_count
    return row_count > 1 and panels <= width and mask == (1 << panels) - 1


def assert_column_mask(
    mask: int,
    col_count: int,
    width: int = 48,
    error: Type[PatternCodecError] = CorruptHeaderError,
    row_count: int = 1,
) -> None:
    """Enforce the column-installed bitmask contract.

    Bit i set means physical column i is installed. The mask must name at
    least one column and no column at or beyond col_count, unless it is
    one of the full-arena spellings accepted by is_full_arena_mask.

    Parameters
    ----------
    mask : int
        Column bitmask as read from (or about to be written to) a header.
    col_count : int
        Declared number of columns in the full panel grid.
    width : int, optional
        Number of bits available for the mask.
    error : type, optional
        Exception raised on violation.
    row_count : int, optional
        Declared number of panel rows, for the per-panel full-arena mask.
    """
    require(
        0 < col_count <= width,
        f"Column count {col_count} out of range 1-{width}",
        error,
    )
    require(mask != 0, "Column mask marks no installed columns", error)
    if is_full_arena_mask(mask, row_count, col_count, width):
        return
    require(
        mask >> col_count == 0,
        f"Column mask {mask:#x} marks columns beyond col_count={col_count}",
        error,
    )
