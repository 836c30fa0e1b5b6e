"""Arena names embedded in pattern file names.

Pattern files are conventionally saved as ``<arena>_<description>_G6.pat``,
e.g. ``G6_2x10_grating_G6.pat`` or ``G41_2x12_cw_stripes_G4.pat``.
"""

import re
from pathlib import Path
from typing import Optional, Union


_ARENA_PREFIX = re.compile(r"^(G\d+\.?\d*_\d+x\d+(?:of\d+)?(?:_cw|_ccw)?)_")


def parse_arena_from_filename(filename: Union[str, Path]) -> Optional[str]:
    """Extract the arena name a pattern file name starts with.

    Parameters
    ----------
    filename : str or Path
        File name or path. Only the final component is inspected.

    Returns
    -------
    str or None
        Arena name (e.g. "G6_2x8of10"), or None if the name carries none.

    Examples
    --------
    >>> parse_arena_from_filename("G6_2x10_grating_G6.pat")
    'G6_2x10'
    >>> parse_arena_from_filename("PAT0001.pat") is None
    True
    """
    match = _ARENA_PREFIX.match(Path(filename).name)
    if match is None:
        return None
    return match.group(1)
