"""
Map diagram ORM model.

Persists an area diagram together with the four map side-channels
(topology tree, substation positions, line snapshot, line paths).

Dependencies: sqlalchemy, gridviz.boundary.db.base
System role: Storage of geo-enabled map artifacts
"""

from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gridviz.boundary.db.base import Base, TimestampMixin, UUIDMixin


class MapDiagramModel(Base, UUIDMixin, TimestampMixin):
    """
    Map diagram ORM model.

    Attributes:
        name: Logical name (unique)
        svg_content: Area diagram SVG
        diagram_metadata: Area diagram metadata document
        substation_locations: Substations with their voltage levels
        substation_positions: Substation coordinates
        line_locations: Per-line electrical snapshot
        line_positions: Per-line ordered waypoints
    """

    __tablename__ = "map_diagrams"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    svg_content: Mapped[str] = mapped_column(Text, nullable=False)
    diagram_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    substation_locations: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
    substation_positions: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
    line_locations: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
    line_positions: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
