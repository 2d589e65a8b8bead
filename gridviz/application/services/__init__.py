"""Service orchestrators."""

from .diagram_generation_service import DiagramGenerationService
from .diagram_storage_service import DiagramStorageService
from .map_diagram_storage_service import MapDiagramStorageService
from .modification_service import ModificationService

__all__ = [
    "DiagramGenerationService",
    "DiagramStorageService",
    "MapDiagramStorageService",
    "ModificationService",
]
