"""Pattern: the in-memory stimulus the codec serializes.

Frames are stored as a 4-D array indexed ``[row, col, x_index, y_index]``.
Frame ``(x, y)`` is the ``f = y * x_num + x``-th frame in a file, and its
stretch value is ``stretch[f]``.

A Pattern only checks its structure (array rank, integer pixels). Value
ranges and the fit against an arena are checked by the codec at encode
time, so an out-of-range pattern can exist but can never be written.
"""

from dataclasses import dataclass, replace
from typing import Iterator, NamedTuple, Optional, Sequence

import numpy as np

from arenapat.codec.bitpack import BitDepth
from arenapat.contracts.base import require
from arenapat.contracts.failure import ValidationError


class FrameView(NamedTuple):
    """One frame of a pattern, in file order."""
    index: int
    x: int
    y: int
    pixels: np.ndarray
    stretch: int


def _integer_array(values, name: str) -> np.ndarray:
    arr = np.asarray(values)
    if arr.dtype == np.bool_:
        return arr.astype(np.uint8)
    if np.issubdtype(arr.dtype, np.integer):
        return arr.copy()
    if np.issubdtype(arr.dtype, np.floating):
        require(
            bool(np.all(np.isfinite(arr))) and bool(np.all(arr == np.round(arr))),
            f"{name} must hold whole numbers",
        )
        return arr.astype(np.int64)
    raise ValidationError(f"{name} must be numeric, got dtype {arr.dtype}")


def _read_only(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Pattern:
    """A sequence of pixel frames for one arena.

    Parameters
    ----------
    frames : array-like
        ``(rows, cols, x_num, y_num)`` pixel array. A 2-D array is a single
        frame; a 3-D array is ``x_num`` frames with ``y_num = 1``.
    bit_depth : BitDepth, int or str
        BINARY (0-1) or GRAYSCALE (0-15).
    stretch : array-like, optional
        One brightness-boost value per frame, in file order. Defaults to 0
        for every frame.
    pattern_id : int
        Controller / SD-card id; 0 means unspecified.
    generation_id, arena_id, observer_id : int
        Self-describing header ids; 0 means unspecified.

    Examples
    --------
    >>> frames = np.zeros((40, 200, 2, 1), dtype=np.uint8)
    >>> pat = Pattern(frames, bit_depth=BitDepth.GRAYSCALE)
    >>> pat.x_num, pat.y_num, pat.num_frames
    (2, 1, 2)
    """

    frames: np.ndarray
    bit_depth: BitDepth = BitDepth.BINARY
    stretch: Optional[np.ndarray] = None
    pattern_id: int = 0
    generation_id: int = 0
    arena_id: int = 0
    observer_id: int = 0

    def __post_init__(self):
        frames = _integer_array(self.frames, "frames")
        if frames.ndim == 2:
            frames = frames[:, :, np.newaxis, np.newaxis]
        elif frames.ndim == 3:
            frames = frames[:, :, :, np.newaxis]
        require(
            frames.ndim == 4,
            f"frames must be 2-D, 3-D or 4-D, got {frames.ndim}-D",
        )
        require(
            all(dim > 0 for dim in frames.shape),
            f"frames must not be empty, got shape {frames.shape}",
        )
        object.__setattr__(self, "frames", _read_only(np.ascontiguousarray(frames)))
        object.__setattr__(self, "bit_depth", BitDepth.coerce(self.bit_depth))

        if self.stretch is None:
            stretch = np.zeros(self.num_frames, dtype=np.uint8)
        else:
            stretch = _integer_array(np.atleast_1d(self.stretch), "stretch").ravel()
        object.__setattr__(self, "stretch", _read_only(stretch))

        for name in ("pattern_id", "generation_id", "arena_id", "observer_id"):
            object.__setattr__(self, name, int(getattr(self, name)))

    @classmethod
    def from_frames(
        cls,
        frames: Sequence[np.ndarray],
        bit_depth: BitDepth = BitDepth.BINARY,
        stretch: Optional[Sequence[int]] = None,
        **ids,
    ) -> "Pattern":
        """Build a single-axis pattern from a list of 2-D frames."""
        require(len(frames) > 0, "from_frames needs at least one frame")
        stacked = np.stack([np.asarray(f) for f in frames], axis=-1)
        return cls(stacked, bit_depth=bit_depth, stretch=stretch, **ids)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def pixel_shape(self):
        """(rows, cols) of one frame."""
        return self.frames.shape[:2]

    @property
    def x_num(self) -> int:
        return self.frames.shape[2]

    @property
    def y_num(self) -> int:
        return self.frames.shape[3]

    @property
    def num_frames(self) -> int:
        return self.x_num * self.y_num

    def frame_index(self, x: int, y: int = 0) -> int:
        """File position of frame (x, y)."""
        return y * self.x_num + x

    def frame(self, x: int, y: int = 0) -> np.ndarray:
        return self.frames[:, :, x, y]

    def frame_stretch(self, x: int, y: int = 0) -> int:
        return int(self.stretch[self.frame_index(x, y)])

    def iter_frames(self) -> Iterator[FrameView]:
        """Yield every frame in file order."""
        for y in range(self.y_num):
            for x in range(self.x_num):
                index = self.frame_index(x, y)
                stretch = int(self.stretch[index]) if index < self.stretch.size else 0
                yield FrameView(index, x, y, self.frames[:, :, x, y], stretch)

    def with_ids(self, **changes) -> "Pattern":
        """Copy with pattern_id / generation_id / arena_id / observer_id changed."""
        unknown = set(changes) - {"pattern_id", "generation_id", "arena_id", "observer_id"}
        require(not unknown, f"with_ids got unknown fields {sorted(unknown)}")
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return (
            self.bit_depth == other.bit_depth
            and self.pattern_id == other.pattern_id
            and self.generation_id == other.generation_id
            and self.arena_id == other.arena_id
            and self.observer_id == other.observer_id
            and self.frames.shape == other.frames.shape
            and np.array_equal(self.frames, other.frames)
            and np.array_equal(self.stretch, other.stretch)
        )

    __hash__ = None

    def __repr__(self) -> str:
        rows, cols = self.pixel_shape
        return (
            f"Pattern({rows}x{cols} px, {self.x_num}x{self.y_num} frames, "
            f"{self.bit_depth.name.lower()}, pattern_id={self.pattern_id}, "
            f"generation_id={self.generation_id}, arena_id={self.arena_id}, "
            f"observer_id={self.observer_id})"
        )
