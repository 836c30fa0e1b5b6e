"""Codec contracts: fail-fast enforcement of pattern and header invariants.

Contracts fail immediately and loudly when a pattern cannot be encoded
for its arena or when decoded bytes break the file format. No bytes are
written for a pattern that violates a contract.

Key principle:
- Pydantic validates config correctness
- Contracts validate pattern and header correctness
- Codecs only move bits
"""

from arenapat.contracts.failure import (
    PatternCodecError,
    GeometryError,
    ValidationError,
    ValueOutOfRangeError,
    UnsupportedVersionError,
    UnsupportedGenerationError,
    TruncatedDataError,
    CorruptDataError,
    CorruptHeaderError,
    CorruptRowHeaderError,
    CorruptPanelBlockError,
    CorruptFrameError,
)
from arenapat.contracts.base import require
from arenapat.contracts.header import (
    assert_column_mask,
    assert_field_range,
    is_full_arena_mask,
)
from arenapat.contracts.pattern import assert_encodable

__all__ = [
    "PatternCodecError",
    "GeometryError",
    "ValidationError",
    "ValueOutOfRangeError",
    "UnsupportedVersionError",
    "UnsupportedGenerationError",
    "TruncatedDataError",
    "CorruptDataError",
    "CorruptHeaderError",
    "CorruptRowHeaderError",
    "CorruptPanelBlockError",
    "CorruptFrameError",
    "require",
    "assert_column_mask",
    "assert_field_range",
    "is_full_arena_mask",
    "assert_encodable",
]
