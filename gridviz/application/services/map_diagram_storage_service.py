"""
Map diagram storage service.

Persistence gateway for map diagrams. A map artifact is only ever saved
as a complete bundle: area diagram plus all four side-channels.

Dependencies: gridviz.boundary.db.CRUD, gridviz.boundary.storage
System role: Map artifact use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.boundary.db.base import as_utc
from gridviz.boundary.db.CRUD.named_artifact_crud import map_diagram_crud
from gridviz.boundary.db.models.map_diagram_model import MapDiagramModel
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.core.artifact_assembler import MapDiagramFiles
from gridviz.core.exceptions import NotFoundError, ValidationError
from gridviz.models.diagram import MapDiagramArtifact

logger = logging.getLogger(__name__)


def to_map_artifact(model: MapDiagramModel) -> MapDiagramArtifact:
    """Convert an ORM row into the API representation."""
    return MapDiagramArtifact(
        id=model.id,
        name=model.name,
        svg=model.svg_content,
        metadata=model.diagram_metadata,
        substation_locations=model.substation_locations,
        substation_positions=model.substation_positions,
        line_locations=model.line_locations,
        line_positions=model.line_positions,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


class MapDiagramStorageService:
    """Map diagram persistence gateway."""

    def __init__(self, db: AsyncSession, store: ContentStore | None = None) -> None:
        self.db = db
        self.store = store

    async def save(
        self,
        name: str,
        files: MapDiagramFiles,
        preferred_id: UUID | None = None,
    ) -> MapDiagramArtifact:
        """
        Upsert a map diagram bundle by name.

        Raises:
            ValidationError: If the name is empty or a channel is missing
        """
        if not name or not name.strip():
            raise ValidationError("Map diagram name cannot be null or empty", field="name")

        channels = {
            "substation_locations": files.substation_locations,
            "substation_positions": files.substation_positions,
            "line_locations": files.line_locations,
            "line_positions": files.line_positions,
        }
        missing = [key for key, value in channels.items() if value is None]
        if missing:
            raise ValidationError(
                f"Map diagram bundle is incomplete: {', '.join(missing)}", field=missing[0]
            )

        model = await map_diagram_crud.upsert(
            self.db,
            name,
            preferred_id=preferred_id,
            svg_content=files.diagram.svg_content,
            diagram_metadata=files.diagram.metadata,
            **channels,
        )
        logger.info(
            "Map diagram saved",
            extra={"diagram_id": str(model.id), "artifact_name": name},
        )
        return to_map_artifact(model)

    async def get_by_id(self, diagram_id: UUID) -> MapDiagramArtifact:
        """
        Load a map diagram by id.

        Raises:
            NotFoundError: If no map diagram has this id
        """
        model = await map_diagram_crud.get_by_id(self.db, diagram_id)
        if model is None:
            raise NotFoundError("Map diagram", str(diagram_id))
        return to_map_artifact(model)

    async def get_by_name(self, name: str) -> MapDiagramArtifact:
        model = await map_diagram_crud.get_by_name(self.db, name)
        if model is None:
            raise NotFoundError("Map diagram", name)
        return to_map_artifact(model)

    async def list_all(
        self, limit: int | None = None, offset: int = 0
    ) -> list[MapDiagramArtifact]:
        models = await map_diagram_crud.get_all(self.db, limit=limit, offset=offset)
        return [to_map_artifact(m) for m in models]

    async def exists_by_name(self, name: str) -> bool:
        return await map_diagram_crud.exists_by_name(self.db, name)

    async def delete_by_id(self, diagram_id: UUID) -> None:
        """
        Delete a map diagram and its stored snapshot.

        Raises:
            NotFoundError: If no map diagram has this id
        """
        model = await map_diagram_crud.get_by_id(self.db, diagram_id)
        if model is None:
            raise NotFoundError("Map diagram", str(diagram_id))
        name = model.name
        await map_diagram_crud.delete_by_id(self.db, diagram_id)
        await self.db.commit()
        if self.store is not None:
            self.store.delete(name)
        logger.info("Map diagram deleted", extra={"diagram_id": str(diagram_id)})
