"""Arena hardware model: generations, geometry and arena names."""

from arenapat.arena.generations import (
    Generation,
    GenerationSpec,
    HeaderFamily,
    GENERATION_SPECS,
    generation_from_id,
)
from arenapat.arena.geometry import ArenaGeometry, ColumnOrder, geometry_from_mask
from arenapat.arena.naming import parse_arena_from_filename

__all__ = [
    "Generation",
    "GenerationSpec",
    "HeaderFamily",
    "GENERATION_SPECS",
    "generation_from_id",
    "ArenaGeometry",
    "ColumnOrder",
    "geometry_from_mask",
    "parse_arena_from_filename",
]
