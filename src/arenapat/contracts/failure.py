"""Centralized failure types for the pattern codec.

Every failure the codec can produce derives from PatternCodecError, so a
caller (file writer, streaming client, experiment runner) can catch the
whole family at one boundary and decide whether it is fatal.

The codec never retries and never returns partial output: encode either
returns a complete buffer or raises, decode either returns a fully
validated pattern or raises.
"""


class PatternCodecError(ValueError):
    """Base class for all pattern codec failures.

    Key distinction:
    - pydantic.ValidationError: bad configuration (handled by schemas)
    - PatternCodecError: bad pattern, bad geometry, or bad bytes
    """
    pass


class GeometryError(PatternCodecError):
    """Arena geometry is internally inconsistent."""
    pass


class ValidationError(PatternCodecError):
    """Pattern does not satisfy its invariants against the arena geometry.

    Raised before any encoding work begins.
    """
    pass


class ValueOutOfRangeError(ValidationError):
    """A pixel or stretch value exceeds the range of its field."""
    pass


class UnsupportedVersionError(PatternCodecError):
    """Header version discriminant is not recognized."""
    pass


class UnsupportedGenerationError(PatternCodecError):
    """Magic tag or generation is not one of the supported families."""
    pass


class TruncatedDataError(PatternCodecError):
    """Fewer bytes are present than the header declares."""
    pass


class CorruptDataError(PatternCodecError):
    """Bytes are present but structurally invalid."""
    pass


class CorruptHeaderError(CorruptDataError):
    """A header field holds a value no encoder would write."""
    pass


class CorruptRowHeaderError(CorruptDataError):
    """A row self-identification byte does not match its 1-based panel row."""
    pass


class CorruptPanelBlockError(CorruptDataError):
    """A panel block has a bad command, parity, or inconsistent stretch."""
    pass


class CorruptFrameError(CorruptDataError):
    """A frame marker or frame index does not match its position."""
    pass
