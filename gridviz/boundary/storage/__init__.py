"""Filesystem storage boundary."""

from gridviz.boundary.storage.content_store import ContentStore

__all__ = ["ContentStore"]
