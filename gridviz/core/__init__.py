"""
Core business logic module.

Contains the exception hierarchy and the render pipeline components:
loading, rendering, map metadata extraction, artifact assembly, and
structural network changes.
"""

from gridviz.core.exceptions import (
    GridVizException,
    MissingGeoDataError,
    NotFoundError,
    PipelineIOError,
    ValidationError,
)

__all__ = [
    "GridVizException",
    "MissingGeoDataError",
    "NotFoundError",
    "PipelineIOError",
    "ValidationError",
]
