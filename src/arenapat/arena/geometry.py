"""Arena geometry: panel grid, installed columns and derived pixel layout.

An ArenaGeometry is built once from a resolved arena configuration and is
immutable. All derived values (pixel totals, installed panel count, inner
radius) are computed in derive() at construction, so an invalid geometry
never exists.
"""

import math
import operator
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from arenapat.arena.generations import Generation, GenerationSpec
from arenapat.contracts.base import require
from arenapat.contracts.failure import GeometryError


_ARENA_NAME = re.compile(
    r"^(?P<gen>G\d+(?:\.\d+)?)_(?P<rows>\d+)x(?P<cols>\d+)"
    r"(?:of(?P<total>\d+))?(?:_(?P<order>cw|ccw))?$",
    re.IGNORECASE,
)


class ColumnOrder(str, Enum):
    """Direction in which logical columns walk around the arena."""
    CW = "cw"
    CCW = "ccw"


@dataclass(frozen=True)
class DerivedGeometry:
    """Values derived from an ArenaGeometry. Never stored independently."""
    pixels_per_panel: int
    installed_columns: Tuple[int, ...]
    total_pixels_x: int
    total_pixels_y: int
    num_panels_installed: int
    inner_radius_mm: float


@dataclass(frozen=True)
class ArenaGeometry:
    """One physical arena: generation, panel grid and installed columns.

    Parameters
    ----------
    generation : Generation or str
        Hardware generation (G3, G4, G4.1, G6). G5 is rejected.
    num_panel_rows, num_panel_cols : int
        Full panel grid dimensions.
    columns_installed : sequence of int, optional
        Strictly increasing physical column indices that are populated.
        None means every column is installed. A list naming every column is
        normalized to None.
    column_order : ColumnOrder or str
        "cw" (default) or "ccw". ccw reverses logical column traversal.
    angle_offset_deg : float
        Rotational offset of column 0.
    pixels_per_panel : int, optional
        Accepted only for cross-checking. It is always set from the
        generation; a conflicting value raises GeometryError.

    Examples
    --------
    >>> geom = ArenaGeometry("G6", 2, 10)
    >>> geom.total_pixels_y, geom.total_pixels_x
    (40, 200)
    >>> ArenaGeometry("G6", 2, 10, columns_installed=[0, 1, 2, 3]).name
    'G6_2x4of10'
    """

    generation: Generation
    num_panel_rows: int
    num_panel_cols: int
    columns_installed: Optional[Tuple[int, ...]] = None
    column_order: ColumnOrder = ColumnOrder.CW
    angle_offset_deg: float = 0.0
    pixels_per_panel: Optional[int] = None
    _derived: DerivedGeometry = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "generation", Generation.parse(self.generation))
        try:
            object.__setattr__(self, "column_order", ColumnOrder(self.column_order))
        except ValueError:
            raise GeometryError(
                f"column_order must be 'cw' or 'ccw', got {self.column_order!r}"
            ) from None
        object.__setattr__(self, "angle_offset_deg", float(self.angle_offset_deg))
        for name in ("num_panel_rows", "num_panel_cols"):
            try:
                object.__setattr__(self, name, operator.index(getattr(self, name)))
            except TypeError:
                raise GeometryError(
                    f"{name} must be an integer, got {getattr(self, name)!r}"
                ) from None

        if self.columns_installed is not None:
            try:
                installed = tuple(operator.index(c) for c in self.columns_installed)
            except TypeError:
                raise GeometryError(
                    f"columns_installed must hold integers, got {list(self.columns_installed)!r}"
                ) from None
            object.__setattr__(self, "columns_installed", installed)

        derived = self.derive()
        object.__setattr__(self, "_derived", derived)
        object.__setattr__(self, "pixels_per_panel", derived.pixels_per_panel)
        if self.columns_installed is not None and derived.installed_columns == tuple(
            range(self.num_panel_cols)
        ):
            object.__setattr__(self, "columns_installed", None)

    def derive(self) -> DerivedGeometry:
        """Compute every derived value, validating the geometry on the way.

        Raises
        ------
        GeometryError
            If the grid is empty, pixels_per_panel disagrees with the
            generation, or columns_installed is out of range or unsorted.
        """
        spec = self.generation.spec
        require(
            self.num_panel_rows > 0,
            f"num_panel_rows must be a positive integer, got {self.num_panel_rows!r}",
            GeometryError,
        )
        require(
            self.num_panel_cols > 0,
            f"num_panel_cols must be a positive integer, got {self.num_panel_cols!r}",
            GeometryError,
        )
        require(
            self.pixels_per_panel is None or self.pixels_per_panel == spec.pixels_per_panel,
            f"pixels_per_panel={self.pixels_per_panel} is inconsistent with "
            f"{self.generation.value} ({spec.pixels_per_panel} pixels per panel)",
            GeometryError,
        )

        if self.columns_installed is None:
            installed = tuple(range(self.num_panel_cols))
        else:
            installed = self.columns_installed
            require(
                len(installed) > 0,
                "columns_installed must name at least one column",
                GeometryError,
            )
            for col in installed:
                require(
                    0 <= col < self.num_panel_cols,
                    f"Installed column {col} out of range 0-{self.num_panel_cols - 1}",
                    GeometryError,
                )
            require(
                all(a < b for a, b in zip(installed, installed[1:])),
                f"columns_installed must be strictly increasing, got {list(installed)}",
                GeometryError,
            )

        ppp = spec.pixels_per_panel
        # One or two columns do not close a polygon.
        if self.num_panel_cols > 2:
            inner_radius = spec.panel_width_mm / (2 * math.tan(math.pi / self.num_panel_cols))
        else:
            inner_radius = math.inf
        return DerivedGeometry(
            pixels_per_panel=ppp,
            installed_columns=installed,
            total_pixels_x=len(installed) * ppp,
            total_pixels_y=self.num_panel_rows * ppp,
            num_panels_installed=self.num_panel_rows * len(installed),
            inner_radius_mm=inner_radius,
        )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def spec(self) -> GenerationSpec:
        return self.generation.spec

    @property
    def installed_columns(self) -> Tuple[int, ...]:
        """Physical indices of installed columns, ascending."""
        return self._derived.installed_columns

    @property
    def num_installed_cols(self) -> int:
        return len(self._derived.installed_columns)

    @property
    def is_partial(self) -> bool:
        return self.num_installed_cols < self.num_panel_cols

    @property
    def total_pixels_x(self) -> int:
        return self._derived.total_pixels_x

    @property
    def total_pixels_y(self) -> int:
        return self._derived.total_pixels_y

    @property
    def frame_shape(self) -> Tuple[int, int]:
        """(rows, cols) of one frame in pixels."""
        return (self.total_pixels_y, self.total_pixels_x)

    @property
    def num_panels_installed(self) -> int:
        return self._derived.num_panels_installed

    @property
    def panel_width_mm(self) -> float:
        return self.spec.panel_width_mm

    def inner_radius_mm(self) -> float:
        """Radius of the inscribed circle of the panel polygon.

        ``panel_width_mm / (2 * tan(pi / num_panel_cols))``. Used by display
        tooling only; the codec never reads it.
        """
        return self._derived.inner_radius_mm

    # ------------------------------------------------------------------
    # Column mapping
    # ------------------------------------------------------------------

    def physical_column_index(self, logical_index: int) -> int:
        """Map a 0-based logical (installed-column) index to its physical slot.

        Clockwise arenas walk installed columns in ascending physical order;
        counter-clockwise arenas walk them in reverse.

        Raises
        ------
        GeometryError
            If logical_index is not in 0..num_installed_cols-1.
        """
        n = self.num_installed_cols
        require(
            0 <= logical_index < n,
            f"Logical column {logical_index} out of range 0-{n - 1}",
            GeometryError,
        )
        if self.column_order is ColumnOrder.CCW:
            return self.installed_columns[n - 1 - logical_index]
        return self.installed_columns[logical_index]

    def logical_column_index(self, physical_index: int) -> int:
        """Inverse of physical_column_index.

        Raises
        ------
        GeometryError
            If physical_index is not an installed column.
        """
        require(
            physical_index in self.installed_columns,
            f"Physical column {physical_index} is not installed",
            GeometryError,
        )
        position = self.installed_columns.index(physical_index)
        if self.column_order is ColumnOrder.CCW:
            return self.num_installed_cols - 1 - position
        return position

    def column_mask(self) -> int:
        """Bitmask with bit i set when physical column i is installed."""
        mask = 0
        for col in self.installed_columns:
            mask |= 1 << col
        return mask

    def column_angle_deg(self, physical_index: int) -> float:
        """Angular position of a physical column centre, in degrees.

        Column 0 sits just off -90 degrees; clockwise arenas step negative,
        counter-clockwise arenas step positive. angle_offset_deg rotates the
        whole arena.
        """
        require(
            0 <= physical_index < self.num_panel_cols,
            f"Physical column {physical_index} out of range 0-{self.num_panel_cols - 1}",
            GeometryError,
        )
        alpha = 360.0 / self.num_panel_cols
        half = alpha / 2
        if self.column_order is ColumnOrder.CCW:
            angle = -90.0 + half + physical_index * alpha
        else:
            angle = -90.0 - half - physical_index * alpha
        return angle + self.angle_offset_deg

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Canonical arena name, e.g. G6_2x10, G6_2x8of10, G41_2x12_ccw.

        Partial arenas are named by installed column count; the name alone
        only restores them when the installed columns start at 0.
        """
        if self.is_partial:
            grid = f"{self.num_panel_rows}x{self.num_installed_cols}of{self.num_panel_cols}"
        else:
            grid = f"{self.num_panel_rows}x{self.num_panel_cols}"
        suffix = "_ccw" if self.column_order is ColumnOrder.CCW else ""
        return f"{self.generation.short_name}_{grid}{suffix}"

    @classmethod
    def from_name(cls, name: str) -> "ArenaGeometry":
        """Build a geometry from a canonical arena name.

        Raises
        ------
        GeometryError
            If the name does not match ``G<gen>_<rows>x<cols>[of<total>][_cw|_ccw]``.
        UnsupportedGenerationError
            If the generation token is not supported.
        """
        match = _ARENA_NAME.match(name.strip())
        if match is None:
            raise GeometryError(f"Not an arena name: '{name}'")

        rows = int(match.group("rows"))
        cols = int(match.group("cols"))
        total = match.group("total")
        installed: Optional[Sequence[int]] = None
        if total is not None:
            installed = range(cols)
            cols = int(total)
        order = (match.group("order") or "cw").lower()
        return cls(
            generation=match.group("gen"),
            num_panel_rows=rows,
            num_panel_cols=cols,
            columns_installed=installed,
            column_order=order,
        )


def geometry_from_mask(
    generation: Union[Generation, str],
    num_panel_rows: int,
    num_panel_cols: int,
    mask: int,
) -> ArenaGeometry:
    """Build a geometry from a column-installed bitmask."""
    installed = [col for col in range(num_panel_cols) if mask >> col & 1]
    return ArenaGeometry(
        generation=generation,
        num_panel_rows=num_panel_rows,
        num_panel_cols=num_panel_cols,
        columns_installed=installed,
    )
