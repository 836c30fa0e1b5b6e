"""Hardware generations and their fixed panel specifications.

Generation is a closed set. Every generation-dependent fact (pixels per
panel, panel size, header family, id ranges) lives in GENERATION_SPECS so
call sites never branch on generation name strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from arenapat.contracts.failure import UnsupportedGenerationError


G5_DEPRECATED_MESSAGE = (
    "G5 panels are deprecated and no longer supported. "
    "Use G6 for 20x20 pixel panels."
)


class HeaderFamily(str, Enum):
    """Pattern file header families."""
    G4 = "G4"
    G6 = "G6"


class Generation(str, Enum):
    """Panel hardware generation."""
    G3 = "G3"
    G4 = "G4"
    G4_1 = "G4.1"
    G6 = "G6"

    @classmethod
    def parse(cls, value: Union["Generation", str]) -> "Generation":
        """Parse a generation from its name.

        Accepts the canonical names plus common spellings used in file and
        arena names ("G41", "g4.1", " G6 ").

        Raises
        ------
        UnsupportedGenerationError
            For G5 (deprecated) and any unknown name.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnsupportedGenerationError(f"Generation must be a string, got {value!r}")

        token = value.strip().upper()
        if token in ("G41", "G4_1"):
            token = "G4.1"
        if token == "G5":
            raise UnsupportedGenerationError(G5_DEPRECATED_MESSAGE)

        for member in cls:
            if member.value == token:
                return member
        raise UnsupportedGenerationError(
            f"Unknown generation '{value}'. Supported: G3, G4, G4.1, G6"
        )

    @property
    def spec(self) -> "GenerationSpec":
        return GENERATION_SPECS[self]

    @property
    def generation_id(self) -> int:
        return self.spec.generation_id

    @property
    def family(self) -> Optional[HeaderFamily]:
        return self.spec.header_family

    @property
    def short_name(self) -> str:
        """Name without the dot, as used in arena and file names (G41)."""
        return self.value.replace(".", "")


@dataclass(frozen=True)
class GenerationSpec:
    """Fixed hardware facts for one generation."""
    generation_id: int
    pixels_per_panel: int
    panel_width_mm: float
    panel_depth_mm: float
    led_type: str
    header_family: Optional[HeaderFamily]
    max_stretch: int
    max_arena_id: int


GENERATION_SPECS: Dict[Generation, GenerationSpec] = {
    Generation.G3: GenerationSpec(
        generation_id=1,
        pixels_per_panel=8,
        panel_width_mm=32.0,
        panel_depth_mm=18.0,
        led_type="8x8 LED matrix",
        header_family=None,
        max_stretch=0,
        max_arena_id=0,
    ),
    Generation.G4: GenerationSpec(
        generation_id=2,
        pixels_per_panel=16,
        panel_width_mm=40.45,
        panel_depth_mm=18.0,
        led_type="16x16 LED matrix",
        header_family=HeaderFamily.G4,
        max_stretch=127,
        max_arena_id=255,
    ),
    Generation.G4_1: GenerationSpec(
        generation_id=3,
        pixels_per_panel=16,
        panel_width_mm=40.0,
        panel_depth_mm=6.35,
        led_type="16x16 LED matrix (thin)",
        header_family=HeaderFamily.G4,
        max_stretch=127,
        max_arena_id=255,
    ),
    Generation.G6: GenerationSpec(
        generation_id=4,
        pixels_per_panel=20,
        panel_width_mm=45.4,
        panel_depth_mm=3.45,
        led_type="20x20 LED matrix",
        header_family=HeaderFamily.G6,
        max_stretch=255,
        max_arena_id=63,
    ),
}

# Ids 5-7 fit the 3-bit header field but are not assigned yet.
MAX_GENERATION_ID = 7

_ID_TO_GENERATION = {spec.generation_id: gen for gen, spec in GENERATION_SPECS.items()}


def generation_from_id(generation_id: int) -> Optional[Generation]:
    """Map a header generation id to a Generation.

    Returns None for 0 (unspecified).

    Raises
    ------
    UnsupportedGenerationError
        For reserved ids (5-7) and anything outside the 3-bit field.
    """
    if generation_id == 0:
        return None
    try:
        return _ID_TO_GENERATION[generation_id]
    except KeyError:
        if 0 < generation_id <= MAX_GENERATION_ID:
            raise UnsupportedGenerationError(
                f"Generation id {generation_id} is reserved"
            ) from None
        raise UnsupportedGenerationError(
            f"Generation id {generation_id} out of range 0-{MAX_GENERATION_ID}"
        ) from None
