"""Per-frame byte layouts for the two header families.

A frame layout turns one frame of pixels plus its stretch value into bytes
and back, using a PanelTiler for panel order and a BitPacker for pixels.

Stretch is one scalar per frame. It is written into every panel command
(G4) or panel block (G6) of the frame, and decoding requires every copy
to agree.

G4 family frame::

    for each panel row (top first), for each of 4 subpanels:
        [row_id = panel_row + 1]
        for each installed column, physical order:
            [command = stretch << 1 | gs16] [packed subpanel pixels]

G6 frame::

    "FR" [frame index u16]
    for each panel row (top first), for each installed column:
        [header] [command] [pixels] [stretch]

In a G6 panel block the header byte is 0x01 with bit 7 set when the rest
of the block holds an odd number of one bits. The command is 0x10 for
binary (50 data bytes) and 0x30 for grayscale (200 data bytes). Pixels are
numbered from the bottom-left, ``k = row_from_bottom * 20 + col``, with
pixel 0 in the most significant bit (binary) or high nibble (grayscale).
"""

import logging
import struct
from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np

from arenapat.arena.generations import HeaderFamily
from arenapat.arena.geometry import ArenaGeometry
from arenapat.codec.bitpack import BitDepth, BitOrder, BitPacker
from arenapat.codec.tiler import PanelTiler, SubpanelGroup
from arenapat.contracts.base import require
from arenapat.contracts.failure import (
    CorruptFrameError,
    CorruptPanelBlockError,
    TruncatedDataError,
    UnsupportedGenerationError,
    ValueOutOfRangeError,
)

logger = logging.getLogger(__name__)


def _check_stretch(stretch: int, max_stretch: int) -> int:
    require(
        0 <= stretch <= max_stretch,
        f"Stretch value {stretch} out of range 0-{max_stretch}",
        ValueOutOfRangeError,
    )
    return int(stretch)


def _agreed_stretch(values: List[int], frame_index: int) -> int:
    first = values[0]
    if any(value != first for value in values):
        raise CorruptPanelBlockError(
            f"Frame {frame_index}: panels disagree on stretch "
            f"({sorted(set(values))})"
        )
    return first


class FrameLayout(ABC):
    """Byte layout of one frame for a fixed arena geometry."""

    max_stretch: int

    def __init__(self, geometry: ArenaGeometry):
        self.geometry = geometry
        self.tiler = PanelTiler.for_geometry(geometry)

    @abstractmethod
    def frame_size(self, bit_depth: BitDepth) -> int:
        """Bytes per encoded frame."""

    @abstractmethod
    def encode(
        self, pixels: np.ndarray, bit_depth: BitDepth, stretch: int = 0, frame_index: int = 0
    ) -> bytes:
        """Encode one frame.

        Raises
        ------
        ValidationError
            If the pixel array does not match the geometry.
        ValueOutOfRangeError
            If a pixel or the stretch value is out of range.
        """

    @abstractmethod
    def decode(
        self, data: bytes, bit_depth: BitDepth, frame_index: int = 0
    ) -> Tuple[np.ndarray, int]:
        """Decode one frame into (pixels, stretch).

        Raises
        ------
        TruncatedDataError
            If data is shorter than frame_size.
        CorruptDataError
            If the frame structure is invalid.
        """

    def _require_size(self, data: bytes, bit_depth: BitDepth, frame_index: int) -> int:
        size = self.frame_size(bit_depth)
        if len(data) < size:
            raise TruncatedDataError(
                f"Frame {frame_index} needs {size} bytes, got {len(data)}"
            )
        return size


class G4FrameLayout(FrameLayout):
    """G4 / G4.1 frame: row-id prefixed subpanel groups, LSB-first pixels."""

    max_stretch = 0x7F
    GS16_FLAG = 0x01

    def _packer(self, bit_depth: BitDepth) -> BitPacker:
        return BitPacker(bit_depth, BitOrder.LSB_FIRST)

    def frame_size(self, bit_depth: BitDepth) -> int:
        packed = self._packer(bit_depth).packed_size(self.tiler.block_size)
        per_group = 1 + len(self.tiler.columns) * (1 + packed)
        return self.tiler.num_groups * per_group

    def command_byte(self, bit_depth: BitDepth, stretch: int) -> int:
        gs16 = self.GS16_FLAG if bit_depth is BitDepth.GRAYSCALE else 0
        return (stretch << 1) | gs16

    def encode(self, pixels, bit_depth, stretch=0, frame_index=0):
        bit_depth = BitDepth.coerce(bit_depth)
        stretch = _check_stretch(stretch, self.max_stretch)
        packer = self._packer(bit_depth)
        command = self.command_byte(bit_depth, stretch)

        out = bytearray()
        for group in self.tiler.tile(pixels):
            out.append(group.row_id)
            for block in group.blocks:
                out.append(command)
                out += packer.pack(block)
        return bytes(out)

    def decode(self, data, bit_depth, frame_index=0):
        bit_depth = BitDepth.coerce(bit_depth)
        self._require_size(data, bit_depth, frame_index)
        packer = self._packer(bit_depth)
        packed = packer.packed_size(self.tiler.block_size)
        gs16 = self.GS16_FLAG if bit_depth is BitDepth.GRAYSCALE else 0
        buf = memoryview(data)

        groups = []
        stretches = []
        offset = 0
        for index in range(self.tiler.num_groups):
            panel_row, subpanel = divmod(index, self.tiler.subpanel_count)
            row_id = buf[offset]
            offset += 1
            blocks = []
            for col in self.tiler.columns:
                command = buf[offset]
                if command & self.GS16_FLAG != gs16:
                    raise CorruptPanelBlockError(
                        f"Frame {frame_index} panel row {panel_row} column {col}: "
                        f"command {command:#04x} does not match "
                        f"{bit_depth.name.lower()} pixels"
                    )
                stretches.append(command >> 1)
                pixels = packer.unpack(buf[offset + 1:offset + 1 + packed], self.tiler.block_size)
                blocks.append(pixels.reshape(self.tiler.block_shape))
                offset += 1 + packed
            groups.append(SubpanelGroup(
                panel_row=panel_row,
                subpanel=subpanel,
                row_id=row_id,
                columns=self.tiler.columns,
                blocks=tuple(blocks),
            ))
        return self.tiler.untile(groups), _agreed_stretch(stretches, frame_index)


class G6FrameLayout(FrameLayout):
    """G6 frame: "FR" marker, index, then parity-checked panel blocks."""

    max_stretch = 0xFF
    FRAME_TAG = b"FR"
    BLOCK_VERSION = 0x01
    PARITY_BIT = 0x80
    COMMANDS = {BitDepth.BINARY: 0x10, BitDepth.GRAYSCALE: 0x30}

    _FRAME_HEADER = struct.Struct("<2sH")

    def _packer(self, bit_depth: BitDepth) -> BitPacker:
        return BitPacker(bit_depth, BitOrder.MSB_FIRST)

    def block_size(self, bit_depth: BitDepth) -> int:
        """Bytes per panel block: header, command, pixels, stretch."""
        return 3 + self._packer(bit_depth).packed_size(self.tiler.block_size)

    def frame_size(self, bit_depth: BitDepth) -> int:
        blocks = self.tiler.num_groups * len(self.tiler.columns)
        return self._FRAME_HEADER.size + blocks * self.block_size(bit_depth)

    @classmethod
    def parity(cls, body: bytes) -> int:
        """1 if body holds an odd number of one bits."""
        bits = np.unpackbits(np.frombuffer(body, dtype=np.uint8))
        return int(bits.sum()) & 1

    def encode_block(self, block: np.ndarray, bit_depth: BitDepth, stretch: int) -> bytes:
        """Encode one panel block from bottom-origin panel pixels."""
        body = bytearray([self.COMMANDS[bit_depth]])
        body += self._packer(bit_depth).pack(block)
        body.append(stretch)
        header = self.BLOCK_VERSION
        if self.parity(body):
            header |= self.PARITY_BIT
        return bytes([header]) + bytes(body)

    def decode_block(
        self, block: bytes, bit_depth: BitDepth, where: str
    ) -> Tuple[np.ndarray, int]:
        header, command = block[0], block[1]
        body = bytes(block[1:])
        if header & ~self.PARITY_BIT != self.BLOCK_VERSION:
            raise CorruptPanelBlockError(
                f"{where}: unsupported panel block version {header & ~self.PARITY_BIT}"
            )
        if command != self.COMMANDS[bit_depth]:
            raise CorruptPanelBlockError(
                f"{where}: command {command:#04x} does not match "
                f"{bit_depth.name.lower()} pixels"
            )
        if bool(header & self.PARITY_BIT) != bool(self.parity(body)):
            raise CorruptPanelBlockError(f"{where}: parity check failed")
        pixels = self._packer(bit_depth).unpack(block[2:-1], self.tiler.block_size)
        return pixels.reshape(self.tiler.block_shape), block[-1]

    def encode(self, pixels, bit_depth, stretch=0, frame_index=0):
        bit_depth = BitDepth.coerce(bit_depth)
        stretch = _check_stretch(stretch, self.max_stretch)
        require(
            0 <= frame_index <= 0xFFFF,
            f"G6 frame index {frame_index} out of range 0-65535",
            ValueOutOfRangeError,
        )
        out = bytearray(self._FRAME_HEADER.pack(self.FRAME_TAG, frame_index))
        for group in self.tiler.tile(pixels):
            for block in group.blocks:
                out += self.encode_block(block, bit_depth, stretch)
        return bytes(out)

    def decode(self, data, bit_depth, frame_index=0):
        bit_depth = BitDepth.coerce(bit_depth)
        self._require_size(data, bit_depth, frame_index)
        buf = memoryview(data)

        tag, index = self._FRAME_HEADER.unpack_from(buf, 0)
        if tag != self.FRAME_TAG:
            raise CorruptFrameError(
                f"Frame {frame_index}: expected marker {self.FRAME_TAG!r}, got {tag!r}"
            )
        if index != frame_index:
            raise CorruptFrameError(
                f"Frame {frame_index}: header carries frame index {index}"
            )

        size = self.block_size(bit_depth)
        offset = self._FRAME_HEADER.size
        groups = []
        stretches = []
        for group_index in range(self.tiler.num_groups):
            panel_row, subpanel = divmod(group_index, self.tiler.subpanel_count)
            blocks = []
            for col in self.tiler.columns:
                where = f"Frame {frame_index} panel ({panel_row}, {col})"
                pixels, stretch = self.decode_block(buf[offset:offset + size], bit_depth, where)
                blocks.append(pixels)
                stretches.append(stretch)
                offset += size
            # G6 blocks carry no row id; position is the identity.
            groups.append(SubpanelGroup(
                panel_row=panel_row,
                subpanel=subpanel,
                row_id=panel_row + 1,
                columns=self.tiler.columns,
                blocks=tuple(blocks),
            ))
        return self.tiler.untile(groups), _agreed_stretch(stretches, frame_index)


FRAME_LAYOUTS = {
    HeaderFamily.G4: G4FrameLayout,
    HeaderFamily.G6: G6FrameLayout,
}


def frame_layout_for(geometry: ArenaGeometry) -> FrameLayout:
    """Frame layout for the geometry's generation family."""
    family = geometry.generation.family
    if family not in FRAME_LAYOUTS:
        raise UnsupportedGenerationError(
            f"No pattern file format for {geometry.generation.value} arenas"
        )
    return FRAME_LAYOUTS[family](geometry)
