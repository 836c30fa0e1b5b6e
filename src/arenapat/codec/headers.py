"""Pattern file header model shared by both header families.

A PatternHeader is the decoded form of any header variant. Each family
implements HeaderCodec; decoding is always the same three steps:

1. read the prefix shared by every version,
2. branch on the version discriminant,
3. read the version-specific suffix.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Union

from arenapat.arena.generations import Generation, HeaderFamily, generation_from_id
from arenapat.arena.geometry import ArenaGeometry, geometry_from_mask
from arenapat.codec.bitpack import BitDepth
from arenapat.contracts.failure import UnsupportedGenerationError, UnsupportedVersionError
from arenapat.contracts.header import is_full_arena_mask

logger = logging.getLogger(__name__)

# G6 column masks are 6 bytes wide.
MASK_WIDTH = 48


class HeaderVersion(IntEnum):
    """Header layout version. V1 is legacy, V2 adds self-describing ids."""
    V1 = 1
    V2 = 2

    @classmethod
    def coerce(cls, value: Union["HeaderVersion", int, str]) -> "HeaderVersion":
        if isinstance(value, cls):
            return value
        try:
            return cls(int(str(value).strip().lstrip("vV")))
        except ValueError:
            raise UnsupportedVersionError(
                f"Unsupported header version {value!r} (expected 1 or 2)"
            ) from None


@dataclass(frozen=True)
class PatternHeader:
    """Decoded header fields, independent of version.

    Attributes
    ----------
    family : HeaderFamily
        G4 (G4 and G4.1 arenas) or G6.
    version : HeaderVersion
        Layout the header was (or will be) written with.
    x_num, y_num : int
        Frame axis sizes; the file holds ``x_num * y_num`` frames.
    gs_levels : int
        2 (binary) or 16 (grayscale).
    row_count : int
        Panel rows.
    col_count : int
        G4: installed panel columns. G6: columns of the full grid, with
        installation recorded in column_mask.
    generation_id, arena_id, observer_id : int
        Self-describing ids; 0 means unspecified. V1 headers always
        decode them as 0.
    column_mask : int, optional
        G6 only. Bit i set when physical column i is installed.
    checksum : int
        G6 only. XOR of every frame byte.
    """

    family: HeaderFamily
    version: HeaderVersion
    x_num: int
    y_num: int
    gs_levels: int
    row_count: int
    col_count: int
    generation_id: int = 0
    arena_id: int = 0
    observer_id: int = 0
    column_mask: Optional[int] = None
    checksum: int = 0

    def __post_init__(self):
        object.__setattr__(self, "family", HeaderFamily(self.family))
        object.__setattr__(self, "version", HeaderVersion.coerce(self.version))

    @property
    def num_frames(self) -> int:
        return self.x_num * self.y_num

    @property
    def bit_depth(self) -> BitDepth:
        return BitDepth.from_levels(self.gs_levels)

    @property
    def generation(self) -> Optional[Generation]:
        """Generation the header names, or None if it does not say."""
        if self.family is HeaderFamily.G6:
            return Generation.G6
        return generation_from_id(self.generation_id)

    @property
    def has_full_mask(self) -> bool:
        """True when no column mask is stored or it describes a full arena."""
        if self.column_mask is None:
            return True
        return is_full_arena_mask(
            self.column_mask, self.row_count, self.col_count, MASK_WIDTH
        )

    def to_geometry(
        self, default_generation: Optional[Union[Generation, str]] = None
    ) -> ArenaGeometry:
        """Rebuild the arena geometry this header describes.

        G4-family headers only record installed columns, so the result is
        a full arena of that many columns. When the header carries no
        generation id, default_generation (or G4) is used.

        Raises
        ------
        UnsupportedGenerationError
            If the resolved generation does not belong to this family.
        """
        generation = self.generation
        if generation is None:
            generation = Generation.parse(default_generation or Generation.G4)
            logger.debug("Header has no generation id, assuming %s", generation.value)
        if generation.family is not self.family:
            raise UnsupportedGenerationError(
                f"{generation.value} arenas cannot use {self.family.value} headers"
            )

        if self.family is HeaderFamily.G6 and not self.has_full_mask:
            return geometry_from_mask(
                generation, self.row_count, self.col_count, self.column_mask
            )
        return ArenaGeometry(
            generation=generation,
            num_panel_rows=self.row_count,
            num_panel_cols=self.col_count,
        )

    def describe(self) -> Dict[str, Any]:
        """Plain dict of every field, for display and logging."""
        info = asdict(self)
        info["family"] = self.family.value
        info["version"] = int(self.version)
        info["num_frames"] = self.num_frames
        generation = self.generation
        info["generation"] = generation.value if generation else "unspecified"
        if self.column_mask is not None:
            info["column_mask"] = f"{self.column_mask:#014x}"
        return info


class HeaderCodec(ABC):
    """Encoder/decoder for one header family."""

    family: HeaderFamily

    @abstractmethod
    def header_size(self, version: HeaderVersion) -> int:
        """Bytes occupied by a header of the given version."""

    @abstractmethod
    def encode(self, header: PatternHeader) -> bytes:
        """Serialize a header using header.version."""

    @abstractmethod
    def decode(self, data: bytes) -> PatternHeader:
        """Parse a header from the start of data. Extra bytes are ignored."""

    @classmethod
    @abstractmethod
    def matches(cls, data: bytes) -> bool:
        """True if data starts like a header of this family."""
