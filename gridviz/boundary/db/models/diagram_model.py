"""
Diagram ORM model.

Persists one rendered diagram (SVG plus metadata document) under a
unique logical name. The same name always maps to the same row; a
re-render overwrites content in place.

Dependencies: sqlalchemy, gridviz.boundary.db.base
System role: Storage of area and single-line diagram artifacts
"""

import enum

from sqlalchemy import JSON, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gridviz.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DiagramType(str, enum.Enum):
    """
    Diagram kinds.

    NAD: Network-area diagram of the whole grid
    SLD: Single-line diagram of one substation, voltage level or all substations
    """

    NAD = "nad"
    SLD = "sld"


class DiagramModel(Base, UUIDMixin, TimestampMixin):
    """
    Diagram ORM model.

    Attributes:
        id: UUID primary key, stable across overwrites
        name: Logical name (unique), e.g. nad_<uuid>
        svg_content: Full SVG document
        diagram_metadata: Render metadata including layout and SVG parameters
        diagram_type: NAD or SLD
        created_at: First save (UTC, immutable)
        updated_at: Last save (UTC, strictly increasing)

    Constraints:
        name: UNIQUE constraint backing upsert-by-name
    """

    __tablename__ = "diagrams"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        doc="Logical diagram name",
    )

    svg_content: Mapped[str] = mapped_column(Text, nullable=False)

    diagram_metadata: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        doc="Diagram metadata document",
    )

    diagram_type: Mapped[DiagramType] = mapped_column(
        Enum(DiagramType, native_enum=False),
        nullable=False,
        default=DiagramType.NAD,
    )
