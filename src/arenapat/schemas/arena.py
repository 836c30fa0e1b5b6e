"""ArenaConfig: arena description files.

An arena config names one physical arena and the panels installed in it.
It is the serialized form of ArenaGeometry:

    {
        "format_version": 1,
        "name": "G6_2x10",
        "description": "Full G6 arena",
        "arena": {
            "generation": "G6",
            "num_rows": 2,
            "num_cols": 10,
            "columns_installed": null,
            "column_order": "cw",
            "angle_offset_deg": 0.0
        }
    }

``panels_installed`` is accepted as an alias of ``columns_installed``.
Every arena is validated by building its geometry, so an ArenaConfig that
validates always converts with to_geometry().
"""

from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import Field, field_validator, model_validator

from arenapat.arena.generations import Generation
from arenapat.arena.geometry import ArenaGeometry
from arenapat.schemas.base import ArenapatBaseModel


class ArenaSpecConfig(ArenapatBaseModel):
    """Panel layout of one arena."""
    generation: str
    num_rows: int = Field(..., ge=1)
    num_cols: int = Field(..., ge=1)
    columns_installed: Optional[list[int]] = Field(None, alias="panels_installed")
    orientation: Literal["normal", "flipped"] = Field(
        "normal", description="Mounting orientation; display tooling only"
    )
    column_order: Literal["cw", "ccw"] = "cw"
    angle_offset_deg: float = 0.0

    model_config = ArenapatBaseModel.model_config.copy()
    model_config.update({"populate_by_name": True})

    @field_validator("generation", mode="before")
    @classmethod
    def normalize_generation(cls, v):
        """Accept G41 / g4.1 spellings, reject G5 and unknown names."""
        if isinstance(v, str):
            return Generation.parse(v).value
        return v

    @field_validator("column_order", mode="before")
    @classmethod
    def normalize_column_order(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("columns_installed", mode="before")
    @classmethod
    def empty_means_all(cls, v):
        """An empty list means every column is installed."""
        if v is not None and len(v) == 0:
            return None
        return v

    @model_validator(mode="after")
    def check_geometry(self):
        """Build the geometry once so inconsistent layouts fail here."""
        self.to_geometry()
        return self

    def to_geometry(self) -> ArenaGeometry:
        """Build the ArenaGeometry this config describes.

        Raises
        ------
        GeometryError
            If the installed columns do not fit the grid.
        """
        return ArenaGeometry(
            generation=self.generation,
            num_panel_rows=self.num_rows,
            num_panel_cols=self.num_cols,
            columns_installed=self.columns_installed,
            column_order=self.column_order,
            angle_offset_deg=self.angle_offset_deg,
        )

    @classmethod
    def from_geometry(cls, geometry: ArenaGeometry) -> "ArenaSpecConfig":
        return cls(
            generation=geometry.generation.value,
            num_rows=geometry.num_panel_rows,
            num_cols=geometry.num_panel_cols,
            columns_installed=(
                list(geometry.installed_columns) if geometry.is_partial else None
            ),
            column_order=geometry.column_order.value,
            angle_offset_deg=geometry.angle_offset_deg,
        )

    @classmethod
    def from_name(cls, name: str) -> "ArenaSpecConfig":
        """Spec for a canonical arena name such as G6_2x10 or G41_2x12_ccw."""
        return cls.from_geometry(ArenaGeometry.from_name(name))


class ArenaConfig(ArenapatBaseModel):
    """Arena description file."""
    format_version: int = Field(1, ge=1)
    name: str = ""
    description: str = ""
    arena: ArenaSpecConfig

    def to_geometry(self) -> ArenaGeometry:
        return self.arena.to_geometry()


def load_arena_config(path: Union[str, Path]) -> ArenaConfig:
    """Load and validate a JSON arena config.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    pydantic.ValidationError
        If the file is not a valid arena config.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Arena config file not found: {path}")
    return ArenaConfig.model_validate_json(path.read_text())
