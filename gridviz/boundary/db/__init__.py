"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - DiagramModel, MapDiagramModel: Artifact entities
  - DiagramType: Diagram kind enum
  - diagram_crud, map_diagram_crud: CRUD operation singletons

Dependencies: sqlalchemy, gridviz.configs
System role: Database adapter providing persistent storage for rendered
diagrams and map bundles, addressed by id or unique name.
"""

from gridviz.boundary.db.base import Base, TimestampMixin, UUIDMixin
from gridviz.boundary.db.connection import (
    dispose_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from gridviz.boundary.db.models.diagram_model import DiagramModel, DiagramType
from gridviz.boundary.db.models.map_diagram_model import MapDiagramModel
from gridviz.boundary.db.CRUD import (
    BaseCRUD,
    NamedArtifactCRUD,
    diagram_crud,
    map_diagram_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "dispose_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DiagramModel",
    "DiagramType",
    "MapDiagramModel",
    # CRUD
    "BaseCRUD",
    "NamedArtifactCRUD",
    "diagram_crud",
    "map_diagram_crud",
]
