"""Pixel bit packing for binary (1-bit) and grayscale (4-bit) patterns.

Pure functions over numpy arrays. Binary packs 8 values per byte and
grayscale packs 2 values per byte; the last byte is zero-padded.

Two bit orders are used on the wire:

- LSB_FIRST (G4 family): bit 0 holds the first value, the low nibble holds
  the first grayscale value.
- MSB_FIRST (G6 panel blocks): bit 7 holds the first value, the high
  nibble holds the first grayscale value.
"""

from enum import Enum, IntEnum
from typing import Union

import numpy as np

from arenapat.contracts.failure import (
    TruncatedDataError,
    ValidationError,
    ValueOutOfRangeError,
)


BytesLike = Union[bytes, bytearray, memoryview, np.ndarray]


class BitDepth(IntEnum):
    """Bits per pixel."""
    BINARY = 1
    GRAYSCALE = 4

    @property
    def max_value(self) -> int:
        return (1 << self.value) - 1

    @property
    def levels(self) -> int:
        """Intensity levels, as written to G4 headers (2 or 16)."""
        return 1 << self.value

    @property
    def values_per_byte(self) -> int:
        return 8 // self.value

    @classmethod
    def from_levels(cls, levels: int) -> "BitDepth":
        """BitDepth for a level count (2 -> BINARY, 16 -> GRAYSCALE)."""
        for member in cls:
            if member.levels == levels:
                return member
        raise ValidationError(f"Unsupported grayscale level count {levels} (expected 2 or 16)")

    @classmethod
    def coerce(cls, value: Union["BitDepth", int, str]) -> "BitDepth":
        """Accept a BitDepth, a bit count (1, 4) or a name ("binary", "gs16")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            token = value.strip().lower()
            if token in ("binary", "gs2"):
                return cls.BINARY
            if token in ("grayscale", "greyscale", "gs16"):
                return cls.GRAYSCALE
            raise ValidationError(f"Unknown bit depth '{value}'")
        try:
            return cls(int(value))
        except ValueError:
            raise ValidationError(f"Bit depth must be 1 or 4, got {value!r}") from None


class BitOrder(str, Enum):
    """Position of the first value within a byte."""
    LSB_FIRST = "lsb_first"
    MSB_FIRST = "msb_first"


def _as_byte_array(data: BytesLike) -> np.ndarray:
    if isinstance(data, np.ndarray):
        return np.asarray(data, dtype=np.uint8).ravel()
    return np.frombuffer(data, dtype=np.uint8)


class BitPacker:
    """Packs and unpacks pixel values at a fixed bit depth and bit order.

    Parameters
    ----------
    bit_depth : BitDepth
        BINARY (values 0-1) or GRAYSCALE (values 0-15).
    order : BitOrder, optional
        LSB_FIRST (default) or MSB_FIRST.

    Examples
    --------
    >>> BitPacker(BitDepth.BINARY).pack([1, 0, 0, 0, 0, 0, 0, 0, 1])
    b'\\x01\\x01'
    >>> BitPacker(BitDepth.GRAYSCALE).pack([1, 2, 3])
    b'!\\x03'
    """

    def __init__(self, bit_depth: BitDepth, order: BitOrder = BitOrder.LSB_FIRST):
        self.bit_depth = BitDepth.coerce(bit_depth)
        self.order = BitOrder(order)

    def __repr__(self) -> str:
        return f"BitPacker(bit_depth={self.bit_depth.name}, order={self.order.name})"

    def packed_size(self, count: int) -> int:
        """Number of bytes needed for count values."""
        return -(-count // self.bit_depth.values_per_byte)

    def check_range(self, values: np.ndarray) -> None:
        """Raise ValueOutOfRangeError unless every value fits the bit depth."""
        if values.size == 0:
            return
        if values.dtype != np.bool_ and not np.issubdtype(values.dtype, np.integer):
            raise ValueOutOfRangeError(
                f"Pixel values must be integers, got dtype {values.dtype}"
            )
        max_value = self.bit_depth.max_value
        bad = np.flatnonzero((values < 0) | (values > max_value))
        if bad.size:
            first = int(bad[0])
            raise ValueOutOfRangeError(
                f"Pixel value {values[first]} at index {first} out of range "
                f"0-{max_value} for {self.bit_depth.name.lower()} "
                f"({bad.size} value(s) out of range)"
            )

    def pack(self, values) -> bytes:
        """Pack values into bytes.

        Raises
        ------
        ValueOutOfRangeError
            If any value is negative, above the bit depth maximum, or not an
            integer.
        """
        arr = np.asarray(values).ravel()
        self.check_range(arr)
        arr = arr.astype(np.uint8)

        if self.bit_depth is BitDepth.BINARY:
            bitorder = "little" if self.order is BitOrder.LSB_FIRST else "big"
            return np.packbits(arr, bitorder=bitorder).tobytes()

        if arr.size % 2:
            arr = np.append(arr, np.uint8(0))
        first, second = arr[0::2], arr[1::2]
        if self.order is BitOrder.LSB_FIRST:
            packed = first | (second << 4)
        else:
            packed = (first << 4) | second
        return packed.astype(np.uint8).tobytes()

    def unpack(self, data: BytesLike, count: int) -> np.ndarray:
        """Unpack count values from the start of data.

        Bytes beyond those needed, and padding bits in the last byte, are
        ignored.

        Raises
        ------
        TruncatedDataError
            If data holds fewer bytes than count values need.
        """
        needed = self.packed_size(count)
        buf = _as_byte_array(data)
        if buf.size < needed:
            raise TruncatedDataError(
                f"Need {needed} bytes to unpack {count} values, got {buf.size}"
            )
        buf = buf[:needed]

        if self.bit_depth is BitDepth.BINARY:
            bitorder = "little" if self.order is BitOrder.LSB_FIRST else "big"
            return np.unpackbits(buf, count=count, bitorder=bitorder)

        low = buf & 0x0F
        high = buf >> 4
        out = np.empty(needed * 2, dtype=np.uint8)
        if self.order is BitOrder.LSB_FIRST:
            out[0::2], out[1::2] = low, high
        else:
            out[0::2], out[1::2] = high, low
        return out[:count]


def pack(values, bit_depth: BitDepth, order: BitOrder = BitOrder.LSB_FIRST) -> bytes:
    """Pack values at bit_depth. See BitPacker.pack."""
    return BitPacker(bit_depth, order).pack(values)


def unpack(
    data: BytesLike,
    count: int,
    bit_depth: BitDepth,
    order: BitOrder = BitOrder.LSB_FIRST,
) -> np.ndarray:
    """Unpack count values at bit_depth. See BitPacker.unpack."""
    return BitPacker(bit_depth, order).unpack(data, count)
