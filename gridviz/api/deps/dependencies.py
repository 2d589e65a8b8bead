"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: gridviz.configs, gridviz.application, gridviz.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.application.services import (
    DiagramGenerationService,
    DiagramStorageService,
    MapDiagramStorageService,
    ModificationService,
)
from gridviz.boundary.db import get_async_db
from gridviz.boundary.grid.toolkit import GridToolkit
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.configs import Settings, get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._grid_toolkit = None
        self._content_store = None

    @property
    def grid_toolkit(self) -> GridToolkit:
        """Get cached grid toolkit (loads the native library on first use)."""
        if self._grid_toolkit is None:
            from gridviz.boundary.grid.powsybl_toolkit import PowsyblToolkit
            self._grid_toolkit = PowsyblToolkit()
        return self._grid_toolkit

    @property
    def content_store(self) -> ContentStore:
        """Get cached content store."""
        if self._content_store is None:
            storage = get_settings().storage
            self._content_store = ContentStore(
                ingest_dir=storage.ingest_dir,
                output_dir=storage.output_dir,
            )
        return self._content_store

    def clear(self) -> None:
        """Clear all cached instances."""
        self._grid_toolkit = None
        self._content_store = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_grid_toolkit() -> GridToolkit:
    """Get the grid toolkit."""
    return get_service_cache().grid_toolkit


def get_content_store() -> ContentStore:
    """Get the content store."""
    return get_service_cache().content_store


def get_diagram_storage_service(
    db: AsyncSession = Depends(get_async_db),
    store: ContentStore = Depends(get_content_store),
) -> DiagramStorageService:
    """
    Get diagram storage service instance.

    Args:
        db: Async database session (injected via Depends)
        store: Content store (injected via Depends)

    Returns:
        DiagramStorageService: Diagram persistence gateway
    """
    return DiagramStorageService(db=db, store=store)


def get_map_diagram_storage_service(
    db: AsyncSession = Depends(get_async_db),
    store: ContentStore = Depends(get_content_store),
) -> MapDiagramStorageService:
    """Get map diagram storage service instance."""
    return MapDiagramStorageService(db=db, store=store)


def get_diagram_generation_service(
    db: AsyncSession = Depends(get_async_db),
    toolkit: GridToolkit = Depends(get_grid_toolkit),
    store: ContentStore = Depends(get_content_store),
    settings: Settings = Depends(get_settings_dependency),
) -> DiagramGenerationService:
    """
    Get diagram generation service instance.

    Args:
        db: Async database session (injected via Depends)
        toolkit: Grid toolkit (injected via Depends)
        store: Content store (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        DiagramGenerationService: NAD, map and SLD generation pipelines
    """
    return DiagramGenerationService(db=db, toolkit=toolkit, store=store, settings=settings.grid)


def get_modification_service(
    db: AsyncSession = Depends(get_async_db),
    toolkit: GridToolkit = Depends(get_grid_toolkit),
    store: ContentStore = Depends(get_content_store),
    settings: Settings = Depends(get_settings_dependency),
) -> ModificationService:
    """
    Get modification service instance.

    Returns:
        ModificationService: Structural change and redraw pipeline
    """
    return ModificationService(db=db, toolkit=toolkit, store=store, settings=settings.grid)
