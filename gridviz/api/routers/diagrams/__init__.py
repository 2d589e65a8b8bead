"""
Diagrams router package.

Exports the router for diagram generation and management endpoints.
"""

from .diagrams_router import router

__all__ = ["router"]
