"""
Filesystem content store for uploaded network models.

Stores opaque model bytes as {ingest_dir}/{name}.zip, resolves them by
name for later renders and modifications, and hands out isolated render
workspaces that are removed once their bundle has been read.

Dependencies: pathlib, tempfile, shutil
System role: Blob storage for uploads, snapshots and render output
"""

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from gridviz.core.exceptions import NotFoundError, PipelineIOError, ValidationError

logger = logging.getLogger(__name__)

ZIP_EXTENSION = ".zip"


class ContentStore:
    """Name-addressed blob store rooted at an ingest directory."""

    def __init__(self, ingest_dir: Path, output_dir: Path) -> None:
        """
        Initialize content store.

        Args:
            ingest_dir: Directory holding uploaded models and modification redraws
            output_dir: Parent directory for temporary render workspaces
        """
        self._ingest_dir = Path(ingest_dir)
        self._output_dir = Path(output_dir)

    @property
    def ingest_dir(self) -> Path:
        """Directory holding uploaded models."""
        return self._ingest_dir

    def snapshot_path(self, name: str) -> Path:
        """
        Canonical on-disk location of the model stored under ``name``.

        Args:
            name: Artifact name (e.g. ``nad_<uuid>``)

        Returns:
            Path: {ingest_dir}/{name}.zip (may not exist)

        Raises:
            ValidationError: If name is empty or tries to leave the ingest dir
        """
        if not name or not name.strip():
            raise ValidationError("Name cannot be null or empty", field="name")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise ValidationError(f"Invalid name: {name}", field="name")
        return self._ingest_dir / f"{name}{ZIP_EXTENSION}"

    def store(self, data: bytes, name: str) -> Path:
        """
        Write uploaded bytes to the canonical zip path.

        Overwrites silently if the name was already used; callers generate
        a fresh name per upload.

        Args:
            data: Raw uploaded model
            name: Storage name

        Returns:
            Path: Location of the stored file

        Raises:
            ValidationError: If name is empty
            PipelineIOError: If the write fails
        """
        target = self.snapshot_path(name)
        try:
            self._ingest_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise PipelineIOError(
                f"Failed to store uploaded file: {target}", operation="store"
            ) from e

        logger.info(
            "Stored uploaded model",
            extra={"artifact_name": name, "path": str(target), "size": len(data)},
        )
        return target

    def resolve(self, name: str) -> Path:
        """
        Locate the stored model for ``name``.

        Raises:
            NotFoundError: If no zip exists for that name
        """
        target = self.snapshot_path(name)
        if not target.is_file():
            raise NotFoundError("ZIP file", str(target))
        return target

    def rename(self, old_name: str, new_name: str) -> Path | None:
        """
        Move the stored model of ``old_name`` to ``new_name``.

        Args:
            old_name: Current storage name
            new_name: Target storage name

        Returns:
            Path | None: New location, or None if there was nothing to move

        Raises:
            ValidationError: If a model is already stored under ``new_name``
            PipelineIOError: If the move fails
        """
        source = self.snapshot_path(old_name)
        target = self.snapshot_path(new_name)
        if source == target:
            return None
        if target.exists():
            raise ValidationError(
                f"A model is already stored under name: {new_name}", field="name"
            )
        if not source.exists():
            return None
        try:
            source.replace(target)
        except OSError as e:
            raise PipelineIOError(
                f"Failed to rename stored model {source} to {target}", operation="rename"
            ) from e

        logger.info(
            "Renamed stored model",
            extra={"old_name": old_name, "new_name": new_name},
        )
        return target

    def delete(self, name: str) -> bool:
        """
        Remove the stored model and any modification redraws for ``name``.

        Returns:
            bool: True if a stored model was removed
        """
        target = self.snapshot_path(name)
        removed = False
        if target.exists():
            try:
                target.unlink()
            except OSError as e:
                raise PipelineIOError(
                    f"Failed to delete stored model: {target}", operation="delete"
                ) from e
            removed = True
        shutil.rmtree(self._ingest_dir / name, ignore_errors=True)
        logger.info("Deleted stored model", extra={"artifact_name": name, "removed": removed})
        return removed

    def modification_dir(self, name: str) -> Path:
        """
        Directory receiving post-modification redraws for ``name``.

        Created on demand as {ingest_dir}/{name}/.
        """
        self.snapshot_path(name)
        target = self._ingest_dir / name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PipelineIOError(
                f"Failed to create modification directory: {target}", operation="modify"
            ) from e
        return target

    @contextmanager
    def render_workspace(self, prefix: str = "render_") -> Iterator[Path]:
        """
        Allocate an isolated output directory for one render.

        The directory and everything in it is removed on exit, so the
        bundle must be read before the block ends.

        Yields:
            Path: Fresh directory under output_dir
        """
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            workspace = Path(tempfile.mkdtemp(prefix=prefix, dir=self._output_dir))
        except OSError as e:
            raise PipelineIOError(
                f"Failed to allocate render directory under {self._output_dir}",
                operation="render",
            ) from e

        logger.debug("Allocated render workspace", extra={"workspace": str(workspace)})
        try:
            yield workspace
        finally:
            shutil.rmtree(workspace, ignore_errors=True)
            logger.debug("Released render workspace", extra={"workspace": str(workspace)})
