"""`arenapat` - binary pattern files for cylindrical LED-panel arenas.

Subpackages:
- arena: Hardware generations and arena geometry
- codec: Bit packing, panel tiling, headers and the pattern codec
- schemas: Pydantic configuration models
- contracts: Error taxonomy and encode-time checks
- cli: Command-line tool
"""

__version__ = "0.1.0"
