"""arenapat User Configuration.

This is the user-facing configuration file. Modify settings here to
customize how pattern files are written and checked. Defaults are in
arenapat.schemas.param.

Usage:
    python scripts/arenapat_tool.py --config scripts/user_config.py verify PAT0001.pat
    arenapat --config scripts/user_config.py upgrade old_G4.pat new_G4.pat
"""

CONFIG = {
    # ========================================================================
    # ARENA
    # ========================================================================
    # An arena name ("G6_2x10", "G41_2x12_ccw"), a JSON arena config path,
    # or a dict. Leave as None to take the arena from each file's header.
    "ARENA": {
        "generation": "G6",
        "num_rows": 2,
        "num_cols": 10,
        "panels_installed": None,   # None = all columns installed
        "column_order": "cw",
        "angle_offset_deg": 0.0,
    },

    # ========================================================================
    # WRITING
    # ========================================================================
    "HEADER_VERSION": 2,      # 1 = legacy, 2 = self-describing ids
    "OVERWRITE": False,       # Replace existing pattern files

    # ========================================================================
    # LOGGING
    # ========================================================================
    "LOG_LEVEL": "INFO",
}
