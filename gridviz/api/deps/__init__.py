"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_content_store,
    get_diagram_generation_service,
    get_diagram_storage_service,
    get_grid_toolkit,
    get_map_diagram_storage_service,
    get_modification_service,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "get_content_store",
    "get_diagram_generation_service",
    "get_diagram_storage_service",
    "get_grid_toolkit",
    "get_map_diagram_storage_service",
    "get_modification_service",
    "get_service_cache",
    "get_settings_dependency",
]
