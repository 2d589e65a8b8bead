"""
Diagram domain models and schemas.

Request/response schemas for diagram and map artifacts and for the
structural modification endpoints.

Dependencies: pydantic, gridviz.boundary.db.models
System role: Diagram API contracts
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from gridviz.boundary.db.models.diagram_model import DiagramType
from gridviz.models.common import CamelModel


class DiagramArtifact(CamelModel):
    """Persisted single diagram (NAD or SLD)."""

    id: UUID = Field(description="Stable artifact id")
    name: str = Field(description="Unique logical name")
    svg_content: str = Field(description="Diagram markup")
    metadata: dict[str, Any] = Field(description="Layout and rendering metadata")
    diagram_type: DiagramType = Field(description="NAD or SLD")
    created_at: datetime
    updated_at: datetime


class UpdateDiagramRequest(CamelModel):
    """Full replacement body for PUT /diagrams/{id}."""

    name: str = Field(min_length=1, max_length=255, description="New logical name")
    svg_content: str = Field(min_length=1, description="Diagram markup")
    metadata: dict[str, Any] = Field(description="Layout and rendering metadata")
    diagram_type: DiagramType = Field(default=DiagramType.NAD)

    @field_validator("name")
    @classmethod
    def name_has_no_separator(cls, value: str) -> str:
        """Names double as snapshot file names."""
        value = value.strip()
        if not value or "/" in value or "\\" in value:
            raise ValueError("name must be non-empty and contain no path separator")
        return value


class MapDiagramArtifact(CamelModel):
    """Persisted map diagram: area SVG plus four map side-channels."""

    id: UUID
    name: str
    svg: str
    metadata: dict[str, Any]
    substation_locations: Any
    substation_positions: Any
    line_locations: Any
    line_positions: Any
    created_at: datetime
    updated_at: datetime


class CreateLoadRequest(CamelModel):
    """Add a load to a stored diagram's network."""

    id: UUID = Field(description="Target diagram id")
    load_id: str = Field(min_length=1)
    voltage_level_id: str = Field(min_length=1)
    bus_or_busbar_section_id: str = Field(min_length=1)
    p0: float = Field(description="Active power setpoint (MW)")
    q0: float = Field(default=0.0, description="Reactive power setpoint (MVar)")
    position_order: int | None = None


class CreateGeneratorRequest(CamelModel):
    """Add a voltage-regulating generator."""

    id: UUID
    generator_id: str = Field(min_length=1)
    voltage_level_id: str = Field(min_length=1)
    bus_or_busbar_section_id: str = Field(min_length=1)
    target_p: float
    target_v: float
    min_p: float = 0.0
    max_p: float
    position_order: int | None = None


class CreateLineRequest(CamelModel):
    """Connect two voltage levels with a new line."""

    id: UUID
    line_id: str = Field(min_length=1)
    voltage_level_id1: str = Field(min_length=1)
    voltage_level_id2: str = Field(min_length=1)
    bus_or_busbar_section_id1: str = Field(min_length=1)
    bus_or_busbar_section_id2: str = Field(min_length=1)
    r: float
    x: float
    g1: float = 0.0
    b1: float = 0.0
    g2: float = 0.0
    b2: float = 0.0


class CreateSubstationRequest(CamelModel):
    """Add a substation."""

    id: UUID
    substation_id: str = Field(min_length=1)
    name: str = ""
    country: str | None = None


class CreateVoltageLevelRequest(CamelModel):
    """Add a voltage level inside a substation."""

    id: UUID
    substation_id: str = Field(min_length=1)
    voltage_level_id: str = Field(min_length=1)
    name: str = ""
    nominal_v: float = Field(gt=0)
    topology_kind: str = "BUS_BREAKER"


class SetPhaseTapPositionRequest(CamelModel):
    """Move a phase tap changer."""

    id: UUID
    transformer_id: str = Field(min_length=1)
    tap_position: int
    relative: bool = False
