"""
CRUD operations for database models.

Exports base CRUD classes with pre-instantiated singletons for direct use.

Usage:
    from gridviz.boundary.db.CRUD import diagram_crud

    diagram = await diagram_crud.get_by_name(db, "nad_...")
"""

from gridviz.boundary.db.CRUD.base_crud import BaseCRUD
from gridviz.boundary.db.CRUD.named_artifact_crud import (
    NamedArtifactCRUD,
    diagram_crud,
    map_diagram_crud,
    next_timestamp,
)

__all__ = [
    "BaseCRUD",
    "NamedArtifactCRUD",
    "diagram_crud",
    "map_diagram_crud",
    "next_timestamp",
]
