"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with upper-case aliases
(e.g., HEADER_VERSION -> header_version, ARENA -> arena).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Unknown keys are ignored so a
shared config file can carry settings for other tools.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator

from arenapat.schemas.arena import ArenaSpecConfig, load_arena_config
from arenapat.schemas.base import ArenapatBaseModel


class UserCodecConfig(ArenapatBaseModel):
    """User-facing codec config."""
    header_version: Optional[int] = None
    overwrite: Optional[bool] = None


class UserConfig(ArenapatBaseModel):
    """User-facing configuration schema.

    ``ARENA`` may be a canonical arena name ("G6_2x10"), the path of a JSON
    arena config, or a dict with the fields of ArenaSpecConfig.

    Usage
    -----
        user_cfg = UserConfig(
            HEADER_VERSION=1,
            ARENA="G41_2x12_ccw",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    header_version: Optional[int] = Field(None, alias="HEADER_VERSION")
    overwrite: Optional[bool] = Field(None, alias="OVERWRITE")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )
    arena: Optional[ArenaSpecConfig] = Field(None, alias="ARENA")

    # Nested overrides (advanced users)
    codec: Optional[UserCodecConfig] = None

    model_config = ArenapatBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("header_version", mode="before")
    @classmethod
    def strip_version_prefix(cls, v):
        """Accept "v2" / "V1" as well as integers."""
        if isinstance(v, str):
            return v.strip().lstrip("vV")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("arena", mode="before")
    @classmethod
    def resolve_arena_reference(cls, v):
        """Expand arena names and JSON file paths into arena specs."""
        if isinstance(v, Path) or (isinstance(v, str) and v.strip().endswith(".json")):
            return load_arena_config(v).arena
        if isinstance(v, str):
            return ArenaSpecConfig.from_name(v)
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Codec section
        codec = {}
        if self.header_version is not None:
            codec["header_version"] = self.header_version
        if self.overwrite is not None:
            codec["overwrite"] = self.overwrite

        # Merge with explicit codec config
        if self.codec is not None:
            codec.update(self.codec.model_dump(exclude_none=True))

        if codec:
            overrides["codec"] = codec

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        if self.arena is not None:
            overrides["arena"] = self.arena.model_dump()

        return overrides
