"""Top-level pattern codec.

A ``.pat`` file is ``[header][frame 0]...[frame N-1]`` with
``N = x_num * y_num`` and frame ``(x, y)`` stored at position
``y * x_num + x``. PatternCodec picks the header codec, panel tiler and
frame layout for a geometry once, at construction.

Encoding checks every pattern invariant before producing any bytes.
Decoding reads the header, derives the arena from it, then reads exactly
the number of frame bytes the header declares.
"""

import logging
from typing import NamedTuple, Optional, Union

import numpy as np

from arenapat.arena.generations import Generation, HeaderFamily
from arenapat.arena.geometry import ArenaGeometry
from arenapat.codec.bitpack import BitDepth
from arenapat.codec.frames import FrameLayout, frame_layout_for
from arenapat.codec.header_g4 import G4HeaderCodec
from arenapat.codec.header_g6 import G6HeaderCodec
from arenapat.codec.headers import HeaderCodec, HeaderVersion, PatternHeader
from arenapat.contracts.failure import (
    CorruptDataError,
    CorruptHeaderError,
    TruncatedDataError,
    UnsupportedGenerationError,
)
from arenapat.contracts.pattern import assert_encodable
from arenapat.pattern import Pattern

logger = logging.getLogger(__name__)

HEADER_CODECS = {
    HeaderFamily.G4: G4HeaderCodec,
    HeaderFamily.G6: G6HeaderCodec,
}


class DecodedPattern(NamedTuple):
    """Result of decoding a pattern file."""
    pattern: Pattern
    header: PatternHeader
    geometry: ArenaGeometry


def detect_family(data: bytes) -> HeaderFamily:
    """Header family of a pattern buffer, from its leading bytes.

    G6 files start with a magic tag; everything else is read as G4.

    Raises
    ------
    TruncatedDataError
        If data is too short to hold any header.
    """
    if G6HeaderCodec.matches(data):
        return HeaderFamily.G6
    if G4HeaderCodec.matches(data):
        return HeaderFamily.G4
    raise TruncatedDataError(f"{len(data)} bytes is too short for a pattern header")


def xor_checksum(data: bytes) -> int:
    """XOR of every byte in data."""
    if not data:
        return 0
    return int(np.bitwise_xor.reduce(np.frombuffer(data, dtype=np.uint8)))


class PatternCodec:
    """Serializes patterns for one arena geometry.

    Parameters
    ----------
    geometry : ArenaGeometry
        Target arena. G3 arenas have no pattern file format.
    header_version : HeaderVersion or int, optional
        Header layout to write. Defaults to V2.

    Raises
    ------
    UnsupportedGenerationError
        If the geometry's generation has no pattern file format.
    UnsupportedVersionError
        If header_version is not 1 or 2.

    Examples
    --------
    >>> geom = ArenaGeometry("G6", 2, 10)
    >>> codec = PatternCodec(geom)
    >>> data = codec.encode(Pattern(np.zeros((40, 200, 2)), bit_depth=4))
    >>> decoded = PatternCodec.decode(data)
    >>> decoded.header.num_frames
    2
    """

    def __init__(
        self,
        geometry: ArenaGeometry,
        header_version: Union[HeaderVersion, int] = HeaderVersion.V2,
    ):
        family = geometry.generation.family
        if family is None:
            raise UnsupportedGenerationError(
                f"No pattern file format for {geometry.generation.value} arenas"
            )
        self.geometry = geometry
        self.header_version = HeaderVersion.coerce(header_version)
        self.header_codec: HeaderCodec = HEADER_CODECS[family]()
        self.layout: FrameLayout = frame_layout_for(geometry)

    def __repr__(self) -> str:
        return f"PatternCodec({self.geometry.name}, V{self.header_version:d})"

    @property
    def family(self) -> HeaderFamily:
        return self.header_codec.family

    @property
    def header_size(self) -> int:
        return self.header_codec.header_size(self.header_version)

    def frame_size(self, bit_depth: Union[BitDepth, int]) -> int:
        """Bytes per encoded frame at bit_depth."""
        return self.layout.frame_size(BitDepth.coerce(bit_depth))

    def encoded_size(self, pattern: Pattern) -> int:
        """Total file size for pattern."""
        return self.header_size + pattern.num_frames * self.frame_size(pattern.bit_depth)

    def build_header(self, pattern: Pattern, checksum: int = 0) -> PatternHeader:
        """Header describing pattern on this arena.

        V1 headers carry no ids, so they are zeroed here and the header
        equals what a decoder will read back.
        """
        v2 = self.header_version is HeaderVersion.V2
        if self.family is HeaderFamily.G6:
            col_count = self.geometry.num_panel_cols
            column_mask = self.geometry.column_mask()
        else:
            col_count = self.geometry.num_installed_cols
            column_mask = None
        return PatternHeader(
            family=self.family,
            version=self.header_version,
            x_num=pattern.x_num,
            y_num=pattern.y_num,
            gs_levels=pattern.bit_depth.levels,
            row_count=self.geometry.num_panel_rows,
            col_count=col_count,
            generation_id=pattern.generation_id if v2 else 0,
            arena_id=pattern.arena_id if v2 else 0,
            observer_id=pattern.observer_id if v2 else 0,
            column_mask=column_mask,
            checksum=checksum,
        )

    def encode_frame(
        self,
        pixels: np.ndarray,
        bit_depth: Union[BitDepth, int],
        stretch: int = 0,
        frame_index: int = 0,
    ) -> bytes:
        """Encode a single frame, e.g. for streaming to a controller.

        Raises
        ------
        ValidationError
            If pixels do not match the arena.
        ValueOutOfRangeError
            If a pixel or the stretch value is out of range.
        """
        return self.layout.encode(pixels, BitDepth.coerce(bit_depth), stretch, frame_index)

    def encode(self, pattern: Pattern) -> bytes:
        """Encode a whole pattern: header followed by every frame.

        Raises
        ------
        ValidationError
            If the pattern does not fit the arena or the header version.
        ValueOutOfRangeError
            If a pixel or stretch value is out of range.
        """
        assert_encodable(pattern, self.geometry, self.header_version)

        frames = b"".join(
            self.layout.encode(view.pixels, pattern.bit_depth, view.stretch, view.index)
            for view in pattern.iter_frames()
        )
        checksum = xor_checksum(frames) if self.family is HeaderFamily.G6 else 0
        header = self.header_codec.encode(self.build_header(pattern, checksum))
        logger.debug(
            "Encoded %d frames for %s: header V%d (%d bytes), %d frame bytes",
            pattern.num_frames, self.geometry.name, self.header_version,
            len(header), len(frames),
        )
        return header + frames

    @classmethod
    def decode(
        cls,
        data: bytes,
        expected_generation: Optional[Union[Generation, str]] = None,
        pattern_id: int = 0,
        geometry: Optional[ArenaGeometry] = None,
    ) -> DecodedPattern:
        """Decode a pattern buffer.

        Parameters
        ----------
        data : bytes
            Full file contents.
        expected_generation : Generation or str, optional
            Generation the caller expects. It must agree with the file's
            family and, for V2 G4 headers, with the embedded generation id.
            V1 G4 headers name no generation; this value (or G4) is used.
        pattern_id : int, optional
            Id to attach to the decoded pattern (files do not store it).
        geometry : ArenaGeometry, optional
            Arena to decode against. Headers do not record column order or
            angle offset, so pass the original geometry to restore a ccw
            arena exactly. It must agree with the header.

        Returns
        -------
        DecodedPattern
            Pattern, header and the arena geometry the header describes.

        Raises
        ------
        TruncatedDataError
            If data is shorter than the header declares.
        UnsupportedVersionError
            If the header version is not recognized.
        UnsupportedGenerationError
            If the family or generation disagrees with expected_generation
            or geometry, or has no codec.
        CorruptDataError
            If a row id, panel block, frame marker or checksum is invalid,
            or the header describes a different arena than geometry.
        """
        data = bytes(data)
        expected = Generation.parse(expected_generation) if expected_generation else None

        family = detect_family(data)
        if expected is not None and expected.family is not family:
            raise UnsupportedGenerationError(
                f"Expected a {expected.value} pattern, found a {family.value}-family header"
            )

        header = HEADER_CODECS[family]().decode(data)
        named = header.generation
        if expected is not None and named is not None and named is not expected:
            raise UnsupportedGenerationError(
                f"Expected a {expected.value} pattern, header names {named.value}"
            )
        if named is None and family is HeaderFamily.G4 and expected is None and geometry is None:
            logger.warning(
                "V%d G4 header names no generation, decoding as %s",
                header.version, Generation.G4.value,
            )
        if geometry is None:
            geometry = header.to_geometry(expected)
        else:
            _check_header_matches(header, geometry)

        codec = cls(geometry, header.version)
        bit_depth = header.bit_depth
        header_size = codec.header_size
        frame_size = codec.frame_size(bit_depth)
        needed = header_size + header.num_frames * frame_size
        if len(data) < needed:
            raise TruncatedDataError(
                f"Header declares {header.num_frames} frames of {frame_size} bytes "
                f"({needed} bytes total), got {len(data)}"
            )
        if len(data) > needed:
            logger.warning(
                "Ignoring %d trailing bytes after %d declared frames",
                len(data) - needed, header.num_frames,
            )

        body = data[header_size:needed]
        if family is HeaderFamily.G6:
            checksum = xor_checksum(body)
            if checksum != header.checksum:
                raise CorruptDataError(
                    f"G6 checksum mismatch: header {header.checksum:#04x}, "
                    f"frames {checksum:#04x}"
                )

        frames = np.zeros(
            geometry.frame_shape + (header.x_num, header.y_num), dtype=np.uint8
        )
        stretch = np.zeros(header.num_frames, dtype=np.uint8)
        for index in range(header.num_frames):
            y, x = divmod(index, header.x_num)
            start = index * frame_size
            pixels, frame_stretch = codec.layout.decode(
                body[start:start + frame_size], bit_depth, index
            )
            frames[:, :, x, y] = pixels
            stretch[index] = frame_stretch

        pattern = Pattern(
            frames,
            bit_depth=bit_depth,
            stretch=stretch,
            pattern_id=pattern_id,
            generation_id=header.generation_id,
            arena_id=header.arena_id,
            observer_id=header.observer_id,
        )
        logger.debug(
            "Decoded %s: %d frames, %s, header V%d",
            geometry.name, header.num_frames, bit_depth.name.lower(), header.version,
        )
        return DecodedPattern(pattern, header, geometry)


def _check_header_matches(header: PatternHeader, geometry: ArenaGeometry) -> None:
    """Require that header describes geometry."""
    generation = geometry.generation
    named = header.generation
    if generation.family is not header.family or named not in (None, generation):
        raise UnsupportedGenerationError(
            f"Header describes a {(named.value if named else header.family.value)} "
            f"pattern, arena is {generation.value}"
        )

    if header.family is HeaderFamily.G6:
        expected_cols = geometry.num_panel_cols
        if header.has_full_mask:
            mask_matches = not geometry.is_partial
        else:
            mask_matches = header.column_mask == geometry.column_mask()
    else:
        expected_cols = geometry.num_installed_cols
        mask_matches = True
    if (
        header.row_count != geometry.num_panel_rows
        or header.col_count != expected_cols
        or not mask_matches
    ):
        raise CorruptHeaderError(
            f"Header describes {header.row_count}x{header.col_count} panels, "
            f"arena {geometry.name} does not match"
        )


def encode_pattern(
    pattern: Pattern,
    geometry: ArenaGeometry,
    header_version: Union[HeaderVersion, int] = HeaderVersion.V2,
) -> bytes:
    """Encode pattern for geometry. See PatternCodec.encode."""
    return PatternCodec(geometry, header_version).encode(pattern)


def decode_pattern(
    data: bytes,
    expected_generation: Optional[Union[Generation, str]] = None,
    pattern_id: int = 0,
    geometry: Optional[ArenaGeometry] = None,
) -> DecodedPattern:
    """Decode a pattern buffer. See PatternCodec.decode."""
    return PatternCodec.decode(data, expected_generation, pattern_id, geometry)
