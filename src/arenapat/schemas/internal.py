"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully
validated and normalized; runtime code reads fields directly and never
falls back to defaults of its own.
"""

from typing import Literal, Optional

from pydantic import ConfigDict

from arenapat.arena.geometry import ArenaGeometry
from arenapat.schemas.arena import ArenaSpecConfig
from arenapat.schemas.base import ArenapatBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalCodecConfig(ArenapatBaseModel):
    """Runtime codec configuration."""
    header_version: Literal[1, 2]
    overwrite: bool


class InternalLoggingConfig(ArenapatBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ArenapatBaseModel):
    """Authoritative runtime configuration.

    ``arena`` is None when no arena was configured; commands then take the
    arena from each pattern file's header.

    Usage
    -----
        def run(config: InternalConfig):
            version = config.codec.header_version  # NOT .get()
            geometry = config.geometry()
    """

    codec: InternalCodecConfig
    logging: InternalLoggingConfig
    arena: Optional[ArenaSpecConfig]

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )

    def geometry(self) -> Optional[ArenaGeometry]:
        """Configured arena geometry, or None."""
        if self.arena is None:
            return None
        return self.arena.to_geometry()
