"""
Database models package.

Exports:
  - DiagramModel, DiagramType: Diagram ORM model and kind enum
  - MapDiagramModel: Map diagram ORM model with side-channels

Dependencies: sqlalchemy, gridviz.boundary.db.base
System role: Database model definitions for diagram artifacts
"""

from gridviz.boundary.db.models.diagram_model import DiagramModel, DiagramType
from gridviz.boundary.db.models.map_diagram_model import MapDiagramModel

__all__ = [
    "DiagramModel",
    "DiagramType",
    "MapDiagramModel",
]
