"""G4 / G4.1 pattern header (7 bytes, little-endian).

::

    byte   V1                   V2
    0-1    x_num (u16)          x_num (u16)
    2      y_num low byte       1 GGG RRRR  (flag, generation id, reserved)
    3      y_num high byte      arena_id
    4      gs_levels            gs_levels
    5      row_count            row_count
    6      col_count            col_count

The most significant bit of byte 2 is the version discriminant. V2 puts
its ids in the bytes V1 uses for y_num, so V2 files always have one frame
row (y_num = 1) and V1 files cannot use a y_num whose low byte has the top
bit set.
"""

import logging
import struct

from arenapat.arena.generations import HeaderFamily, MAX_GENERATION_ID
from arenapat.codec.headers import HeaderCodec, HeaderVersion, PatternHeader
from arenapat.contracts.base import require
from arenapat.contracts.failure import (
    CorruptHeaderError,
    TruncatedDataError,
    UnsupportedVersionError,
    ValidationError,
)
from arenapat.contracts.header import assert_field_range

logger = logging.getLogger(__name__)

G4_HEADER_SIZE = 7

VERSION_FLAG = 0x80
GENERATION_SHIFT = 4
RESERVED_BITS = 0x0F

GS_LEVELS = (2, 16)

_PREFIX = struct.Struct("<H")
_V1_SUFFIX = struct.Struct("<HBBB")
_V2_SUFFIX = struct.Struct("<BBBBB")


class G4HeaderCodec(HeaderCodec):
    """Header codec for G4 and G4.1 pattern files."""

    family = HeaderFamily.G4

    def header_size(self, version: HeaderVersion) -> int:
        return G4_HEADER_SIZE

    @classmethod
    def matches(cls, data: bytes) -> bool:
        # No magic; anything that is not another family is read as G4.
        return len(data) >= G4_HEADER_SIZE

    def encode(self, header: PatternHeader) -> bytes:
        """Serialize a G4-family header.

        Raises
        ------
        ValidationError
            If a field does not fit its byte range, or the frame axes cannot
            be expressed in the requested version.
        """
        require(
            header.family is HeaderFamily.G4,
            f"G4 header codec cannot encode a {header.family.value} header",
        )
        self._check_fields(header, ValidationError)

        prefix = _PREFIX.pack(header.x_num)
        if header.version is HeaderVersion.V1:
            require(
                not header.y_num & VERSION_FLAG,
                f"y_num={header.y_num} sets bit 7 of byte 2, which marks a V2 "
                f"header; V1 cannot store it",
            )
            suffix = _V1_SUFFIX.pack(
                header.y_num, header.gs_levels, header.row_count, header.col_count
            )
        else:
            require(
                header.y_num == 1,
                f"V2 G4 headers store a single frame row, got y_num={header.y_num}",
            )
            assert_field_range(
                "generation_id", header.generation_id, 0, MAX_GENERATION_ID, ValidationError
            )
            assert_field_range("arena_id", header.arena_id, 0, 0xFF, ValidationError)
            discriminant = VERSION_FLAG | (header.generation_id << GENERATION_SHIFT)
            suffix = _V2_SUFFIX.pack(
                discriminant,
                header.arena_id,
                header.gs_levels,
                header.row_count,
                header.col_count,
            )
        return prefix + suffix

    def decode(self, data: bytes) -> PatternHeader:
        """Parse a G4-family header.

        Raises
        ------
        TruncatedDataError
            If fewer than 7 bytes are given.
        UnsupportedVersionError
            If a V2 header has reserved bits set.
        CorruptHeaderError
            If a field holds a value no encoder writes.
        """
        if len(data) < G4_HEADER_SIZE:
            raise TruncatedDataError(
                f"G4 header needs {G4_HEADER_SIZE} bytes, got {len(data)}"
            )
        buf = bytes(data[:G4_HEADER_SIZE])

        # Shared prefix
        (x_num,) = _PREFIX.unpack_from(buf, 0)

        # Discriminant
        version = self._read_version(buf[2])

        # Version suffix
        if version is HeaderVersion.V1:
            y_num, gs_levels, rows, cols = _V1_SUFFIX.unpack_from(buf, _PREFIX.size)
            generation_id = arena_id = 0
        else:
            discriminant, arena_id, gs_levels, rows, cols = _V2_SUFFIX.unpack_from(
                buf, _PREFIX.size
            )
            generation_id = (discriminant & ~VERSION_FLAG) >> GENERATION_SHIFT
            y_num = 1

        header = PatternHeader(
            family=HeaderFamily.G4,
            version=version,
            x_num=x_num,
            y_num=y_num,
            gs_levels=gs_levels,
            row_count=rows,
            col_count=cols,
            generation_id=generation_id,
            arena_id=arena_id,
        )
        self._check_fields(header, CorruptHeaderError)
        logger.debug(
            "G4 V%d header: %d frames (%dx%d), gs%d, %dx%d panels, gen_id=%d, arena_id=%d",
            version, header.num_frames, x_num, y_num, gs_levels, rows, cols,
            generation_id, arena_id,
        )
        return header

    @staticmethod
    def _read_version(discriminant: int) -> HeaderVersion:
        if not discriminant & VERSION_FLAG:
            return HeaderVersion.V1
        if discriminant & RESERVED_BITS:
            raise UnsupportedVersionError(
                f"G4 header byte 2 = {discriminant:#04x} has reserved bits set; "
                f"written by a newer header version"
            )
        return HeaderVersion.V2

    @staticmethod
    def _check_fields(header: PatternHeader, error) -> None:
        assert_field_range("x_num", header.x_num, 1, 0xFFFF, error)
        assert_field_range("y_num", header.y_num, 1, 0xFFFF, error)
        require(
            header.gs_levels in GS_LEVELS,
            f"gs_levels must be 2 or 16, got {header.gs_levels}",
            error,
        )
        assert_field_range("row_count", header.row_count, 1, 0xFF, error)
        assert_field_range("col_count", header.col_count, 1, 0xFF, error)
