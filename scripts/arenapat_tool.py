#!/usr/bin/env python3
"""``arenapat`` pattern file tool.

Usage:
    python scripts/arenapat_tool.py inspect G6_2x10_grating_G6.pat
    python scripts/arenapat_tool.py --config scripts/user_config.py verify PAT0001.pat
    python scripts/arenapat_tool.py upgrade old_G4.pat new_G4.pat --header-version 2

Note: User config in scripts/user_config.py, expert defaults in
arenapat.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from arenapat.cli.main import main


if __name__ == "__main__":
    sys.exit(main())
