"""Pydantic configuration schemas for arenapat.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
ArenaConfig, ArenaSpecConfig : class
    Arena description files
"""

from arenapat.schemas.resolve import resolve_config
from arenapat.schemas.internal import InternalConfig
from arenapat.schemas.param import ParamConfig
from arenapat.schemas.user import UserConfig
from arenapat.schemas.cli import CLIConfig
from arenapat.schemas.arena import ArenaConfig, ArenaSpecConfig, load_arena_config

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'ArenaConfig',
    'ArenaSpecConfig',
    'load_arena_config',
]
