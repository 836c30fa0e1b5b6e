"""ParamConfig: Expert defaults for arenapat.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig.
"""

from typing import Literal, Optional

from pydantic import Field

from arenapat.schemas.arena import ArenaSpecConfig
from arenapat.schemas.base import ArenapatBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class CodecConfig(ArenapatBaseModel):
    """Pattern writing configuration."""
    header_version: Literal[1, 2] = Field(2, description="Header layout to write")
    overwrite: bool = Field(False, description="Replace existing pattern files")


class LoggingConfig(ArenapatBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ArenapatBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    codec: CodecConfig = Field(default_factory=CodecConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    arena: Optional[ArenaSpecConfig] = None
