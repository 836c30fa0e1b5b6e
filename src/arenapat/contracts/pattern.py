"""Pattern encode contract.

Enforces every Pattern / ArenaGeometry invariant before the codec writes
a single byte, so invalid input never produces partial output.
"""

from typing import TYPE_CHECKING

import numpy as np

from arenapat.contracts.base import require
from arenapat.contracts.failure import ValueOutOfRangeError

if TYPE_CHECKING:
    from arenapat.arena.geometry import ArenaGeometry
    from arenapat.pattern import Pattern


# Frame counts and G4 frame axes are u16 header fields.
MAX_FRAMES = 0xFFFF
# G6 headers carry a 48-bit column mask.
MAX_G6_COLUMNS = 48


def assert_encodable(pattern: "Pattern", geometry: "ArenaGeometry", header_version: int) -> None:
    """Enforce the encode contract.

    Called by PatternCodec.encode before any encoding work. Verifies that
    the pattern fits the arena and that every field can be represented in
    the requested header version.

    Parameters
    ----------
    pattern : Pattern
        Pattern about to be encoded.

    geometry : ArenaGeometry
        Arena the pattern targets.

    header_version : int
        1 or 2.

    Raises
    ------
    ValidationError
        If dimensions, frame axes or ids do not fit.
    ValueOutOfRangeError
        If a pixel or stretch value is out of range.
    """
    generation = geometry.generation
    spec = generation.spec
    is_g6 = generation.family == "G6"

    # Dimensions
    frame_shape = pattern.frames.shape[:2]
    require(
        frame_shape == geometry.frame_shape,
        f"Pattern contract violated: frames are {frame_shape[0]}x{frame_shape[1]} px, "
        f"arena {geometry.name} is {geometry.total_pixels_y}x{geometry.total_pixels_x} px",
    )
    if is_g6:
        require(
            geometry.num_panel_cols <= MAX_G6_COLUMNS,
            f"Pattern contract violated: G6 headers hold at most {MAX_G6_COLUMNS} columns, "
            f"arena {geometry.name} has {geometry.num_panel_cols}",
        )
        require(
            pattern.y_num == 1,
            f"Pattern contract violated: G6 patterns have one frame axis, got y_num={pattern.y_num}",
        )
        require(
            pattern.num_frames <= MAX_FRAMES,
            f"Pattern contract violated: {pattern.num_frames} frames exceeds {MAX_FRAMES}",
        )
    else:
        require(
            pattern.x_num <= MAX_FRAMES and pattern.y_num <= MAX_FRAMES,
            f"Pattern contract violated: G4 frame axes hold at most {MAX_FRAMES} frames each, "
            f"got x_num={pattern.x_num}, y_num={pattern.y_num}",
        )
        if header_version == 2:
            require(
                pattern.y_num == 1,
                f"Pattern contract violated: V2 G4 headers require y_num=1, got {pattern.y_num}; "
                f"use header version 1 for two-axis patterns",
            )
        else:
            require(
                not pattern.y_num & 0x80,
                f"Pattern contract violated: y_num={pattern.y_num} cannot be stored in a V1 "
                f"G4 header (bit 7 of the low byte is the version flag)",
            )

    # Pixel values
    frames = pattern.frames
    max_value = pattern.bit_depth.max_value
    if frames.dtype != np.bool_:
        low, high = int(frames.min()), int(frames.max())
        if low < 0 or high > max_value:
            bad = np.argwhere((frames < 0) | (frames > max_value))[0]
            row, col, x, y = (int(i) for i in bad)
            raise ValueOutOfRangeError(
                f"Pixel value {frames[row, col, x, y]} at row {row}, col {col}, "
                f"frame ({x}, {y}) out of range 0-{max_value} for "
                f"{pattern.bit_depth.name.lower()} patterns"
            )

    # Stretch
    stretch = pattern.stretch
    require(
        stretch.size == pattern.num_frames,
        f"Pattern contract violated: stretch has {stretch.size} values, "
        f"expected x_num*y_num={pattern.num_frames}",
    )
    if stretch.size:
        require(
            int(stretch.min()) >= 0 and int(stretch.max()) <= spec.max_stretch,
            f"Stretch values must be in 0-{spec.max_stretch} for {generation.value}, "
            f"got {int(stretch.min())}-{int(stretch.max())}",
            ValueOutOfRangeError,
        )

    # Self-describing ids
    if is_g6:
        require(
            pattern.generation_id == 0,
            f"Pattern contract violated: G6 files identify their generation by magic, "
            f"generation_id must be 0 (got {pattern.generation_id})",
        )
    else:
        require(
            pattern.generation_id in (0, generation.generation_id),
            f"Pattern contract violated: generation_id={pattern.generation_id} does not "
            f"match {generation.value} (id {generation.generation_id})",
        )
    require(
        0 <= pattern.arena_id <= spec.max_arena_id,
        f"Pattern contract violated: arena_id={pattern.arena_id} out of range "
        f"0-{spec.max_arena_id} for {generation.value}",
    )
    max_observer = 0x3F if is_g6 else 0
    require(
        0 <= pattern.observer_id <= max_observer,
        f"Pattern contract violated: observer_id={pattern.observer_id} out of range "
        f"0-{max_observer} for {generation.value}",
    )
