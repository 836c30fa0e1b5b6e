"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs:
header version, overwrite, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional

from arenapat.schemas.base import ArenapatBaseModel


class CLIConfig(ArenapatBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(header_version=1, log_level="DEBUG")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    header_version: Optional[Literal[1, 2]] = None
    overwrite: Optional[bool] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        codec = {}
        if self.header_version is not None:
            codec["header_version"] = self.header_version
        if self.overwrite is not None:
            codec["overwrite"] = self.overwrite
        if codec:
            overrides["codec"] = codec

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
