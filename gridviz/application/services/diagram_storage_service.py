"""
Diagram storage service.

Persistence gateway for single diagrams: upsert-by-name, lookups by id
or name, full replacement with snapshot rename, and deletion.

Dependencies: gridviz.boundary.db.CRUD, gridviz.boundary.storage
System role: Diagram artifact use case orchestration
"""

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.boundary.db.base import as_utc
from gridviz.boundary.db.CRUD.named_artifact_crud import diagram_crud
from gridviz.boundary.db.models.diagram_model import DiagramModel, DiagramType
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.core.artifact_assembler import DiagramFiles
from gridviz.core.exceptions import NotFoundError, ValidationError
from gridviz.core.name_locks import NameLocks
from gridviz.models.diagram import DiagramArtifact, UpdateDiagramRequest

logger = logging.getLogger(__name__)


def to_artifact(model: DiagramModel) -> DiagramArtifact:
    """Convert an ORM row into the API representation."""
    return DiagramArtifact(
        id=model.id,
        name=model.name,
        svg_content=model.svg_content,
        metadata=model.diagram_metadata,
        diagram_type=model.diagram_type,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


class DiagramStorageService:
    """Diagram persistence gateway."""

    # Held for a diagram's current name while it is redrawn or renamed.
    redraw_locks = NameLocks()

    def __init__(self, db: AsyncSession, store: ContentStore | None = None) -> None:
        """
        Initialize diagram storage service.

        Args:
            db: Async SQLAlchemy session
            store: Content store holding snapshots (needed for rename and delete)
        """
        self.db = db
        self.store = store

    async def save(
        self,
        name: str,
        svg_content: str,
        metadata: dict[str, Any],
        diagram_type: DiagramType,
        preferred_id: UUID | None = None,
    ) -> DiagramArtifact:
        """
        Upsert a diagram by name.

        Args:
            name: Unique logical name
            svg_content: Diagram markup
            metadata: Metadata document
            diagram_type: NAD or SLD
            preferred_id: Id used if no diagram with this name exists yet

        Returns:
            DiagramArtifact: Stored artifact (existing id kept on overwrite)
        """
        if not name or not name.strip():
            raise ValidationError("Diagram name cannot be null or empty", field="name")

        model = await diagram_crud.upsert(
            self.db,
            name,
            preferred_id=preferred_id,
            svg_content=svg_content,
            diagram_metadata=metadata,
            diagram_type=diagram_type,
        )
        logger.info(
            "Diagram saved",
            extra={
                "diagram_id": str(model.id),
                "artifact_name": name,
                "diagram_type": diagram_type.value,
            },
        )
        return to_artifact(model)

    async def save_files(
        self,
        name: str,
        files: DiagramFiles,
        diagram_type: DiagramType,
        preferred_id: UUID | None = None,
    ) -> DiagramArtifact:
        """Upsert a diagram from an assembled bundle."""
        return await self.save(
            name,
            files.svg_content,
            files.metadata,
            diagram_type,
            preferred_id=preferred_id,
        )

    async def get_by_id(self, diagram_id: UUID) -> DiagramArtifact:
        """
        Load a diagram by id.

        Raises:
            NotFoundError: If no diagram has this id
        """
        return to_artifact(await self._require(diagram_id))

    async def refresh_by_id(self, diagram_id: UUID) -> DiagramArtifact:
        """Load a diagram by id, bypassing instances cached in the session."""
        return to_artifact(await self._require_fresh(diagram_id))

    async def get_by_name(self, name: str) -> DiagramArtifact:
        """
        Load a diagram by name.

        Raises:
            NotFoundError: If no diagram has this name
        """
        model = await diagram_crud.get_by_name(self.db, name)
        if model is None:
            raise NotFoundError("Diagram", name)
        return to_artifact(model)

    async def list_all(self, limit: int | None = None, offset: int = 0) -> list[DiagramArtifact]:
        """List stored diagrams, oldest first."""
        models = await diagram_crud.get_all(self.db, limit=limit, offset=offset)
        return [to_artifact(m) for m in models]

    async def exists_by_name(self, name: str) -> bool:
        return await diagram_crud.exists_by_name(self.db, name)

    async def update(self, diagram_id: UUID, request: UpdateDiagramRequest) -> DiagramArtifact:
        """
        Replace a diagram's content and name, renaming its stored snapshot.

        The snapshot is renamed before the row is committed and moved back
        if the commit fails. Runs under the redraw lock of the current name
        and the write locks of both names, so it never interleaves with a
        modification of the same diagram.

        Args:
            diagram_id: Target diagram id
            request: Full replacement

        Returns:
            DiagramArtifact: Updated artifact

        Raises:
            NotFoundError: If no diagram has this id
            ValidationError: If the new name belongs to another diagram or
                another stored model
            PipelineIOError: If the snapshot cannot be renamed
        """
        while True:
            old_name = (await self._require_fresh(diagram_id)).name
            async with self._rename_locks(old_name, request.name):
                model = await self._require_fresh(diagram_id)
                if model.name == old_name:
                    await self._replace(model, request)
                    break
            logger.debug(
                "Diagram renamed while waiting, retrying update",
                extra={"diagram_id": str(diagram_id), "old_name": old_name},
            )

        logger.info(
            "Diagram updated",
            extra={"diagram_id": str(diagram_id), "old_name": old_name, "new_name": request.name},
        )
        return to_artifact(model)

    async def replace_content(
        self, diagram_id: UUID, name: str, files: DiagramFiles
    ) -> DiagramArtifact:
        """
        Overwrite the markup and metadata of an existing diagram in place.

        The row is reloaded by id under the write lock of ``name``; id,
        name, type and created_at are kept and updated_at advances.

        Args:
            diagram_id: Target diagram id
            name: Name the diagram is expected to carry
            files: Assembled replacement bundle

        Returns:
            DiagramArtifact: Updated artifact

        Raises:
            NotFoundError: If the diagram no longer exists
            ValidationError: If the diagram no longer carries ``name``
        """
        async with diagram_crud.locks.get(name):
            model = await self._require_fresh(diagram_id)
            if model.name != name:
                raise ValidationError(
                    f"Diagram was renamed from {name} to {model.name}", field="name"
                )
            try:
                await diagram_crud.update_instance(
                    self.db,
                    model,
                    svg_content=files.svg_content,
                    diagram_metadata=files.metadata,
                )
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise
            await self.db.refresh(model)

        logger.info(
            "Diagram content replaced",
            extra={"diagram_id": str(diagram_id), "artifact_name": name},
        )
        return to_artifact(model)

    async def _replace(self, model: DiagramModel, request: UpdateDiagramRequest) -> None:
        old_name = model.name
        if request.name != old_name:
            owner = await diagram_crud.get_by_name(self.db, request.name)
            if owner is not None and owner.id != model.id:
                raise ValidationError(
                    f"Diagram name already in use: {request.name}", field="name"
                )

        renamed = None
        if self.store is not None and request.name != old_name:
            renamed = self.store.rename(old_name, request.name)

        try:
            await diagram_crud.update_instance(
                self.db,
                model,
                name=request.name,
                svg_content=request.svg_content,
                diagram_metadata=request.metadata,
                diagram_type=request.diagram_type,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            if renamed is not None:
                self.store.rename(request.name, old_name)
                logger.warning(
                    "Rolled back snapshot rename",
                    extra={"diagram_id": str(model.id), "old_name": old_name},
                )
            raise

        await self.db.refresh(model)

    @asynccontextmanager
    async def _rename_locks(self, old_name: str, new_name: str) -> AsyncIterator[None]:
        # Redraw lock first, then write locks in name order.
        async with self.redraw_locks.get(old_name), AsyncExitStack() as stack:
            for name in sorted({old_name, new_name}):
                await stack.enter_async_context(diagram_crud.locks.get(name))
            yield

    async def delete_by_id(self, diagram_id: UUID) -> None:
        """
        Delete a diagram and its stored snapshot.

        Raises:
            NotFoundError: If no diagram has this id
        """
        model = await self._require(diagram_id)
        name = model.name
        await diagram_crud.delete_by_id(self.db, diagram_id)
        await self.db.commit()
        self._discard_snapshot(name)
        logger.info("Diagram deleted", extra={"diagram_id": str(diagram_id)})

    async def delete_by_name(self, name: str) -> None:
        """
        Delete a diagram by name together with its stored snapshot.

        Raises:
            NotFoundError: If no diagram has this name
        """
        deleted = await diagram_crud.delete_by_name(self.db, name)
        if not deleted:
            raise NotFoundError("Diagram", name)
        await self.db.commit()
        self._discard_snapshot(name)
        logger.info("Diagram deleted", extra={"artifact_name": name})

    async def _require(self, diagram_id: UUID) -> DiagramModel:
        model = await diagram_crud.get_by_id(self.db, diagram_id)
        if model is None:
            raise NotFoundError("Diagram", str(diagram_id))
        return model

    async def _require_fresh(self, diagram_id: UUID) -> DiagramModel:
        self.db.expire_all()
        return await self._require(diagram_id)

    def _discard_snapshot(self, name: str) -> None:
        if self.store is not None:
            self.store.delete(name)
