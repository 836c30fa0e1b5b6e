"""Byte-level building blocks of the pattern file format.

The top-level codec lives in ``arenapat.codec.pattern_codec`` and is not
re-exported here, because ``arenapat.pattern`` depends on this package.
"""

from arenapat.codec.bitpack import BitDepth, BitOrder, BitPacker, pack, unpack
from arenapat.codec.tiler import PanelTiler, RowOrigin, SubpanelGroup
from arenapat.codec.headers import HeaderCodec, HeaderVersion, PatternHeader
from arenapat.codec.header_g4 import G4HeaderCodec
from arenapat.codec.header_g6 import G6HeaderCodec
from arenapat.codec.frames import FrameLayout, G4FrameLayout, G6FrameLayout, frame_layout_for

__all__ = [
    "BitDepth",
    "BitOrder",
    "BitPacker",
    "pack",
    "unpack",
    "PanelTiler",
    "RowOrigin",
    "SubpanelGroup",
    "HeaderCodec",
    "HeaderVersion",
    "PatternHeader",
    "G4HeaderCodec",
    "G6HeaderCodec",
    "FrameLayout",
    "G4FrameLayout",
    "G6FrameLayout",
    "frame_layout_for",
]
