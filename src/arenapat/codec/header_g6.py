"""G6 pattern header (17 bytes V1, 18 bytes V2, little-endian).

::

    byte    V1                  V2
    0-3     "G6PT"              "G6PT"
    4       version (1)         VVVV AAAA  (version 2, arena_id bits 5-2)
    5       gs_val              AA OOOOOO  (arena_id bits 1-0, observer_id)
    6-7     num_frames (u16)    num_frames (u16)
    8       row_count           row_count
    9       col_count           col_count
    10      checksum            gs_val
    11-16   column mask         column mask
    17      -                   checksum

gs_val is 1 for binary and 2 for grayscale. Byte 4 below 16 holds a whole
version number (V1); otherwise its high nibble is the version (V2).
"""

import logging
import struct

from arenapat.arena.generations import HeaderFamily
from arenapat.codec.headers import (
    MASK_WIDTH,
    HeaderCodec,
    HeaderVersion,
    PatternHeader,
)
from arenapat.contracts.base import require
from arenapat.contracts.failure import (
    CorruptHeaderError,
    TruncatedDataError,
    UnsupportedGenerationError,
    UnsupportedVersionError,
    ValidationError,
)
from arenapat.contracts.header import (
    assert_column_mask,
    assert_field_range,
    is_full_arena_mask,
)

logger = logging.getLogger(__name__)

G6_MAGIC = b"G6PT"

MAX_ID = 0x3F
NIBBLE_VERSION_THRESHOLD = 16

# gs_val on the wire <-> grayscale level count
GS_VAL_TO_LEVELS = {1: 2, 2: 16}
LEVELS_TO_GS_VAL = {levels: gs_val for gs_val, levels in GS_VAL_TO_LEVELS.items()}

_MASK_BYTES = MASK_WIDTH // 8
_V1 = struct.Struct(f"<4sBBHBBB{_MASK_BYTES}s")
_V2 = struct.Struct(f"<4sBBHBBB{_MASK_BYTES}sB")

HEADER_SIZES = {HeaderVersion.V1: _V1.size, HeaderVersion.V2: _V2.size}


class G6HeaderCodec(HeaderCodec):
    """Header codec for G6 pattern files."""

    family = HeaderFamily.G6

    def header_size(self, version: HeaderVersion) -> int:
        return HEADER_SIZES[HeaderVersion.coerce(version)]

    @classmethod
    def matches(cls, data: bytes) -> bool:
        return bytes(data[:len(G6_MAGIC)]) == G6_MAGIC

    def encode(self, header: PatternHeader) -> bytes:
        """Serialize a G6 header.

        A missing column_mask means every column of col_count is installed
        and is written as one bit per column.

        Raises
        ------
        ValidationError
            If a field does not fit its range or the mask disagrees with
            col_count.
        """
        require(
            header.family is HeaderFamily.G6,
            f"G6 header codec cannot encode a {header.family.value} header",
        )
        require(
            header.y_num == 1,
            f"G6 patterns have a single frame axis, got y_num={header.y_num}",
        )
        self._check_fields(header, ValidationError)
        mask = header.column_mask
        if mask is None:
            mask = (1 << header.col_count) - 1
        assert_column_mask(
            mask, header.col_count, MASK_WIDTH, ValidationError, header.row_count
        )
        assert_field_range("checksum", header.checksum, 0, 0xFF, ValidationError)
        mask_bytes = mask.to_bytes(_MASK_BYTES, "little")
        gs_val = LEVELS_TO_GS_VAL[header.gs_levels]

        if header.version is HeaderVersion.V1:
            return _V1.pack(
                G6_MAGIC,
                HeaderVersion.V1,
                gs_val,
                header.num_frames,
                header.row_count,
                header.col_count,
                header.checksum,
                mask_bytes,
            )

        assert_field_range("arena_id", header.arena_id, 0, MAX_ID, ValidationError)
        assert_field_range("observer_id", header.observer_id, 0, MAX_ID, ValidationError)
        version_byte = (HeaderVersion.V2 << 4) | (header.arena_id >> 2)
        id_byte = ((header.arena_id & 0x03) << 6) | header.observer_id
        return _V2.pack(
            G6_MAGIC,
            version_byte,
            id_byte,
            header.num_frames,
            header.row_count,
            header.col_count,
            gs_val,
            mask_bytes,
            header.checksum,
        )

    def decode(self, data: bytes) -> PatternHeader:
        """Parse a G6 header.

        Raises
        ------
        UnsupportedGenerationError
            If data does not start with the G6 magic.
        UnsupportedVersionError
            If the version byte is not a known V1 or V2 marker.
        TruncatedDataError
            If fewer bytes are given than the detected version needs.
        CorruptHeaderError
            If a field holds a value no encoder writes.
        """
        magic_end = len(G6_MAGIC)
        if len(data) <= magic_end:
            raise TruncatedDataError(
                f"G6 header needs at least {magic_end + 1} bytes, got {len(data)}"
            )

        # Shared prefix
        if not self.matches(data):
            raise UnsupportedGenerationError(
                f"Missing G6 magic: got {bytes(data[:magic_end])!r}, expected {G6_MAGIC!r}"
            )

        # Discriminant
        version = self._read_version(data[magic_end])
        size = HEADER_SIZES[version]
        if len(data) < size:
            raise TruncatedDataError(
                f"G6 V{version:d} header needs {size} bytes, got {len(data)}"
            )
        buf = bytes(data[:size])

        # Version suffix
        if version is HeaderVersion.V1:
            _, _, gs_val, num_frames, rows, cols, checksum, mask_bytes = _V1.unpack(buf)
            arena_id = observer_id = 0
        else:
            (_, version_byte, id_byte, num_frames, rows, cols, gs_val,
             mask_bytes, checksum) = _V2.unpack(buf)
            arena_id = ((version_byte & 0x0F) << 2) | (id_byte >> 6)
            observer_id = id_byte & MAX_ID

        if gs_val not in GS_VAL_TO_LEVELS:
            raise CorruptHeaderError(f"G6 gs_val must be 1 or 2, got {gs_val}")
        mask = int.from_bytes(mask_bytes, "little")

        header = PatternHeader(
            family=HeaderFamily.G6,
            version=version,
            x_num=num_frames,
            y_num=1,
            gs_levels=GS_VAL_TO_LEVELS[gs_val],
            row_count=rows,
            col_count=cols,
            arena_id=arena_id,
            observer_id=observer_id,
            column_mask=mask,
            checksum=checksum,
        )
        self._check_fields(header, CorruptHeaderError)
        assert_column_mask(mask, cols, MASK_WIDTH, CorruptHeaderError, rows)
        if mask != (1 << cols) - 1 and is_full_arena_mask(mask, rows, cols, MASK_WIDTH):
            logger.debug("G6 header mask %#x read as a full %dx%d arena", mask, rows, cols)
        logger.debug(
            "G6 V%d header: %d frames, gs%d, %dx%d panels, arena_id=%d, observer_id=%d",
            version, num_frames, header.gs_levels, rows, cols, arena_id, observer_id,
        )
        return header

    @staticmethod
    def _read_version(version_byte: int) -> HeaderVersion:
        if version_byte < NIBBLE_VERSION_THRESHOLD:
            version = version_byte
            expected = HeaderVersion.V1
        else:
            version = version_byte >> 4
            expected = HeaderVersion.V2
        if version != expected:
            raise UnsupportedVersionError(
                f"Unsupported G6 header version {version} (byte 4 = {version_byte:#04x})"
            )
        return expected

    @staticmethod
    def _check_fields(header: PatternHeader, error) -> None:
        assert_field_range("num_frames", header.x_num, 1, 0xFFFF, error)
        require(
            header.gs_levels in LEVELS_TO_GS_VAL,
            f"gs_levels must be 2 or 16, got {header.gs_levels}",
            error,
        )
        assert_field_range("row_count", header.row_count, 1, 0xFF, error)
        assert_field_range("col_count", header.col_count, 1, MASK_WIDTH, error)
