"""Panel tiling: full arena frame <-> ordered per-panel pixel blocks.

A frame is split panel row by panel row, top to bottom. Each panel row is
divided into ``subpanel_count`` groups of contiguous pixel rows, and every
group holds one block per installed column in physical column order.
Every group carries a self-identifying row id equal to the 1-based
physical panel row.

``row_origin`` states where panel-local row 0 lives. With BOTTOM (G6) the
rows of each panel are flipped on tile and flipped back on untile, so
``untile(tile(frame))`` always returns the frame unchanged.
"""

from enum import Enum
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

from arenapat.arena.generations import HeaderFamily
from arenapat.arena.geometry import ArenaGeometry
from arenapat.contracts.base import require
from arenapat.contracts.failure import (
    CorruptDataError,
    CorruptRowHeaderError,
    GeometryError,
    UnsupportedGenerationError,
    ValidationError,
)


class RowOrigin(str, Enum):
    """Where panel-local pixel row 0 is on the physical display."""
    TOP = "top"
    BOTTOM = "bottom"


class SubpanelGroup(NamedTuple):
    """One addressable slice of a panel row.

    Attributes
    ----------
    panel_row : int
        0-based panel row, counted from the top of the arena.
    subpanel : int
        Index of this slice within the panel row.
    row_id : int
        Self-identification byte; equals ``panel_row + 1``.
    columns : tuple of int
        Physical column of each block, ascending.
    blocks : tuple of np.ndarray
        One (rows_per_subpanel, pixels_per_panel) array per column.
    """
    panel_row: int
    subpanel: int
    row_id: int
    columns: Tuple[int, ...]
    blocks: Tuple[np.ndarray, ...]


class PanelTiler:
    """Maps frames to subpanel groups and back for one arena geometry.

    Parameters
    ----------
    geometry : ArenaGeometry
        Arena the frames belong to.
    subpanel_count : int
        Number of row slices per panel row. Must divide pixels_per_panel.
    row_origin : RowOrigin
        TOP keeps panel rows as displayed. BOTTOM flips them so block row 0
        is the bottom pixel row of the panel.
    """

    def __init__(
        self,
        geometry: ArenaGeometry,
        subpanel_count: int = 1,
        row_origin: RowOrigin = RowOrigin.TOP,
    ):
        ppp = geometry.pixels_per_panel
        require(
            subpanel_count > 0 and ppp % subpanel_count == 0,
            f"subpanel_count={subpanel_count} must divide pixels_per_panel={ppp}",
            GeometryError,
        )
        self.geometry = geometry
        self.subpanel_count = subpanel_count
        self.row_origin = RowOrigin(row_origin)
        self.rows_per_subpanel = ppp // subpanel_count

        # Frame column slice of each installed panel, in physical order.
        self._physical_columns = geometry.installed_columns
        self._logical_columns = tuple(
            geometry.logical_column_index(col) for col in self._physical_columns
        )

    @classmethod
    def for_geometry(cls, geometry: ArenaGeometry) -> "PanelTiler":
        """Tiler with the conventions of the geometry's generation family.

        G4 and G4.1 address four subpanels per panel row with top-origin
        rows. G6 addresses whole panels with bottom-origin rows.
        """
        family = geometry.generation.family
        if family is HeaderFamily.G4:
            return cls(geometry, subpanel_count=4, row_origin=RowOrigin.TOP)
        if family is HeaderFamily.G6:
            return cls(geometry, subpanel_count=1, row_origin=RowOrigin.BOTTOM)
        raise UnsupportedGenerationError(
            f"No panel tiling defined for {geometry.generation.value}"
        )

    @property
    def block_shape(self) -> Tuple[int, int]:
        return (self.rows_per_subpanel, self.geometry.pixels_per_panel)

    @property
    def block_size(self) -> int:
        """Pixels per block."""
        return self.rows_per_subpanel * self.geometry.pixels_per_panel

    @property
    def num_groups(self) -> int:
        return self.geometry.num_panel_rows * self.subpanel_count

    @property
    def columns(self) -> Tuple[int, ...]:
        """Physical columns in the order blocks appear within a group."""
        return self._physical_columns

    def tile(self, frame: np.ndarray) -> List[SubpanelGroup]:
        """Split one frame into subpanel groups.

        Parameters
        ----------
        frame : np.ndarray
            (total_pixels_y, total_pixels_x) pixel array.

        Returns
        -------
        list of SubpanelGroup
            ``num_panel_rows * subpanel_count`` groups, top panel row first.

        Raises
        ------
        ValidationError
            If the frame shape does not match the geometry.
        """
        frame = np.asarray(frame)
        require(
            frame.shape == self.geometry.frame_shape,
            f"Frame shape {frame.shape} does not match arena "
            f"{self.geometry.name} {self.geometry.frame_shape}",
            ValidationError,
        )

        ppp = self.geometry.pixels_per_panel
        rps = self.rows_per_subpanel
        groups = []
        for panel_row in range(self.geometry.num_panel_rows):
            panel_rows = frame[panel_row * ppp:(panel_row + 1) * ppp, :]
            if self.row_origin is RowOrigin.BOTTOM:
                panel_rows = panel_rows[::-1, :]
            for subpanel in range(self.subpanel_count):
                rows = panel_rows[subpanel * rps:(subpanel + 1) * rps, :]
                blocks = tuple(
                    rows[:, logical * ppp:(logical + 1) * ppp]
                    for logical in self._logical_columns
                )
                groups.append(SubpanelGroup(
                    panel_row=panel_row,
                    subpanel=subpanel,
                    row_id=panel_row + 1,
                    columns=self._physical_columns,
                    blocks=blocks,
                ))
        return groups

    def untile(self, groups: Sequence[SubpanelGroup]) -> np.ndarray:
        """Reassemble a frame from subpanel groups.

        Groups must arrive in the order tile() produces them. Positions are
        taken from that order; the row id carried by each group is checked
        against it.

        Raises
        ------
        CorruptRowHeaderError
            If a group's row_id is not its 1-based panel row.
        CorruptDataError
            If the group count, block count or a block shape is wrong.
        """
        require(
            len(groups) == self.num_groups,
            f"Expected {self.num_groups} subpanel groups, got {len(groups)}",
            CorruptDataError,
        )

        ppp = self.geometry.pixels_per_panel
        rps = self.rows_per_subpanel
        frame = np.zeros(self.geometry.frame_shape, dtype=np.uint8)
        for index, group in enumerate(groups):
            panel_row, subpanel = divmod(index, self.subpanel_count)
            if group.row_id != panel_row + 1:
                raise CorruptRowHeaderError(
                    f"Row header byte {group.row_id} at panel row {panel_row} "
                    f"subpanel {subpanel}, expected {panel_row + 1}"
                )
            require(
                len(group.blocks) == len(self._logical_columns),
                f"Panel row {panel_row} subpanel {subpanel}: expected "
                f"{len(self._logical_columns)} blocks, got {len(group.blocks)}",
                CorruptDataError,
            )

            # Row range in displayed orientation.
            if self.row_origin is RowOrigin.BOTTOM:
                top = (panel_row + 1) * ppp - (subpanel + 1) * rps
            else:
                top = panel_row * ppp + subpanel * rps
            for logical, block in zip(self._logical_columns, group.blocks):
                block = np.asarray(block)
                require(
                    block.shape == self.block_shape,
                    f"Block shape {block.shape}, expected {self.block_shape}",
                    CorruptDataError,
                )
                if self.row_origin is RowOrigin.BOTTOM:
                    block = block[::-1, :]
                frame[top:top + rps, logical * ppp:(logical + 1) * ppp] = block
        return frame
