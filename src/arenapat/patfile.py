"""Pattern files on disk.

Patterns are saved as ``<name>_G4.pat`` (G4 and G4.1 arenas) or
``<name>_G6.pat``. Controllers read them from an SD card where they are
renamed ``PAT0001.pat`` ... ``PAT9999.pat``; the number is the pattern id.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from arenapat.arena.generations import Generation
from arenapat.arena.geometry import ArenaGeometry
from arenapat.arena.naming import parse_arena_from_filename
from arenapat.codec.header_g6 import HEADER_SIZES as G6_HEADER_SIZES
from arenapat.codec.headers import HeaderVersion, PatternHeader
from arenapat.codec.pattern_codec import (
    HEADER_CODECS,
    DecodedPattern,
    PatternCodec,
    detect_family,
)
from arenapat.contracts.base import require
from arenapat.contracts.failure import (
    PatternCodecError,
    UnsupportedGenerationError,
    ValidationError,
)
from arenapat.pattern import Pattern

logger = logging.getLogger(__name__)

PATTERN_SUFFIX = ".pat"
MAX_SD_PATTERNS = 9999

_SD_NAME = re.compile(r"^pat(\d{4})\.pat$", re.IGNORECASE)

# Longest header of any family; enough to read any header.
_MAX_HEADER_SIZE = max(G6_HEADER_SIZES.values())

__all__ = [
    "save_pattern",
    "load_pattern",
    "read_pattern_header",
    "pattern_filename",
    "sd_card_filename",
    "pattern_id_from_filename",
    "parse_arena_from_filename",
]


def pattern_filename(name: str, generation: Union[Generation, str]) -> str:
    """File name for a pattern: ``<name>_<family>.pat``.

    >>> pattern_filename("G41_2x12_cw_stripes", "G4.1")
    'G41_2x12_cw_stripes_G4.pat'
    """
    generation = Generation.parse(generation)
    family = generation.family
    require(
        family is not None,
        f"No pattern file format for {generation.value} arenas",
        UnsupportedGenerationError,
    )
    return f"{name}_{family.value}{PATTERN_SUFFIX}"


def sd_card_filename(pattern_id: int) -> str:
    """SD card name for a pattern id, e.g. ``PAT0007.pat``."""
    require(
        1 <= pattern_id <= MAX_SD_PATTERNS,
        f"SD card pattern ids run 1-{MAX_SD_PATTERNS}, got {pattern_id}",
    )
    return f"PAT{pattern_id:04d}{PATTERN_SUFFIX}"


def pattern_id_from_filename(filename: Union[str, Path]) -> int:
    """Pattern id of an SD card file name, or 0 for any other name."""
    match = _SD_NAME.match(Path(filename).name)
    if match is None:
        return 0
    return int(match.group(1))


def save_pattern(
    pattern: Pattern,
    geometry: ArenaGeometry,
    directory: Union[str, Path],
    name: str,
    header_version: Union[HeaderVersion, int] = HeaderVersion.V2,
    overwrite: bool = False,
) -> Path:
    """Encode pattern and write it to ``directory/<name>_<family>.pat``.

    The directory is created if needed. Nothing is written if encoding
    fails.

    Parameters
    ----------
    pattern : Pattern
        Pattern to save.
    geometry : ArenaGeometry
        Arena the pattern is for.
    directory : str or Path
        Output directory.
    name : str
        File name stem, conventionally starting with the arena name.
    header_version : HeaderVersion or int, optional
        Header layout to write. Defaults to V2.
    overwrite : bool, optional
        Replace an existing file instead of raising.

    Returns
    -------
    Path
        Path of the written file.

    Raises
    ------
    FileExistsError
        If the file exists and overwrite is False.
    PatternCodecError
        If the pattern cannot be encoded for geometry.
    """
    require(name.strip() != "", "Pattern name must not be empty", ValidationError)
    path = Path(directory).expanduser() / pattern_filename(name, geometry.generation)
    if path.exists() and not overwrite:
        raise FileExistsError(f"Pattern file already exists: {path}")

    data = PatternCodec(geometry, header_version).encode(pattern)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Saved: %s (%d bytes)", path, len(data))
    return path


def load_pattern(
    path: Union[str, Path],
    expected_generation: Optional[Union[Generation, str]] = None,
    geometry: Optional[ArenaGeometry] = None,
) -> DecodedPattern:
    """Read and decode a pattern file.

    The pattern id is taken from ``PAT####.pat`` file names. When no
    expected generation is given, the generation of an arena name at the
    start of the file name (``G6_2x10_...``) is used instead.

    Raises
    ------
    FileNotFoundError
        If path does not exist.
    PatternCodecError
        If the file does not decode.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pattern file not found: {path}")

    if expected_generation is None and geometry is None:
        expected_generation = _generation_from_filename(path)

    decoded = PatternCodec.decode(
        path.read_bytes(),
        expected_generation=expected_generation,
        pattern_id=pattern_id_from_filename(path),
        geometry=geometry,
    )
    logger.info(
        "Loaded: %s (%s, %d frames)",
        path.name, decoded.geometry.name, decoded.pattern.num_frames,
    )
    return decoded


def read_pattern_header(path: Union[str, Path]) -> PatternHeader:
    """Decode only the header of a pattern file.

    Raises
    ------
    FileNotFoundError
        If path does not exist.
    PatternCodecError
        If the header does not decode.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pattern file not found: {path}")
    with open(path, "rb") as f:
        data = f.read(_MAX_HEADER_SIZE)
    return HEADER_CODECS[detect_family(data)]().decode(data)


def _generation_from_filename(path: Path) -> Optional[Generation]:
    arena_name = parse_arena_from_filename(path)
    if arena_name is None:
        return None
    try:
        return ArenaGeometry.from_name(arena_name).generation
    except PatternCodecError as e:
        logger.warning("Ignoring arena name '%s' in %s: %s", arena_name, path.name, e)
        return None
