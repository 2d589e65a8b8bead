"""
Modification service.

Re-enters the render pipeline from a persisted diagram: recover its view
settings, reload its network fresh from the stored snapshot, apply one
structural change, redraw with the recovered settings and overwrite the
same artifact. The artifact is only written after every step succeeded.

Dependencies: fastapi.concurrency, gridviz.core, gridviz.boundary
System role: Network modification use cases
"""

import logging
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.application.services.diagram_storage_service import DiagramStorageService
from gridviz.boundary.db.models.diagram_model import DiagramType
from gridviz.boundary.grid.toolkit import AreaDiagramParameters, GridToolkit
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.configs.grid import GridSettings
from gridviz.core.artifact_assembler import ArtifactAssembler, DiagramFiles
from gridviz.core.diagram_renderer import DiagramRenderer, metadata_file, svg_file
from gridviz.core.exceptions import ValidationError
from gridviz.core.network_changes import NetworkChange, RemoveConnectable
from gridviz.core.network_loader import NetworkLoader
from gridviz.models.diagram import DiagramArtifact

logger = logging.getLogger(__name__)

MODIFIED_LABEL = "Modified"


class ModificationService:
    """Structural modification orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        toolkit: GridToolkit,
        store: ContentStore,
        settings: GridSettings | None = None,
    ) -> None:
        """
        Initialize modification service.

        Args:
            db: Async SQLAlchemy session
            toolkit: Grid toolkit used for loading, editing and drawing
            store: Content store holding the snapshots
            settings: Network import settings
        """
        self.toolkit = toolkit
        self.store = store
        self.loader = NetworkLoader(toolkit, settings)
        self.renderer = DiagramRenderer(toolkit)
        self.assembler = ArtifactAssembler()
        self.diagrams = DiagramStorageService(db, store)

    async def remove_connectable(self, diagram_id: UUID, equipment_id: str) -> DiagramArtifact:
        """
        Remove one connectable equipment and redraw.

        Raises:
            NotFoundError: If the diagram or the equipment does not exist
        """
        return await self.apply(diagram_id, RemoveConnectable(equipment_id=equipment_id))

    async def apply(self, diagram_id: UUID, change: NetworkChange) -> DiagramArtifact:
        """
        Apply one structural change to the network behind a stored diagram.

        Args:
            diagram_id: Target diagram id
            change: Structural edit to apply

        Returns:
            DiagramArtifact: Same id and name, new content, later updated_at

        Raises:
            NotFoundError: If the diagram, its snapshot or a change target is missing
            ValidationError: If the diagram is not an area diagram or was
                renamed before the change could start
            PipelineIOError: If loading, editing, drawing or reading back fails
        """
        name = (await self.diagrams.get_by_id(diagram_id)).name

        async with self.diagrams.redraw_locks.get(name):
            artifact = await self.diagrams.refresh_by_id(diagram_id)
            if artifact.name != name:
                raise ValidationError(
                    f"Diagram was renamed from {name} to {artifact.name}", field="name"
                )
            if artifact.diagram_type is not DiagramType.NAD:
                raise ValidationError(
                    f"Modifications require a NAD diagram, got {artifact.diagram_type.value}",
                    field="id",
                )

            parameters = AreaDiagramParameters.from_metadata(artifact.metadata)
            logger.info(
                "Applying network change",
                extra={"diagram_id": str(diagram_id), **change.describe()},
            )

            try:
                files = await run_in_threadpool(self._redraw, name, change, parameters)
            except Exception as e:
                logger.warning(
                    "Network change failed",
                    extra={"diagram_id": str(diagram_id), "error": str(e)},
                )
                raise

            updated = await self.diagrams.replace_content(diagram_id, name, files)

        logger.info(
            "Network change applied",
            extra={"diagram_id": str(updated.id), "change": change.name},
        )
        return updated

    def _redraw(
        self,
        name: str,
        change: NetworkChange,
        parameters: AreaDiagramParameters,
    ) -> DiagramFiles:
        network = self.loader.load_plain(self.store.resolve(name))
        change.apply(self.toolkit, network)

        output_dir = self.store.modification_dir(name)
        for stale in (svg_file(output_dir, name), metadata_file(output_dir, name)):
            stale.unlink(missing_ok=True)
        self.renderer.redraw(network, output_dir, parameters, base_name=name)
        return self.assembler.assemble(output_dir, name, label=MODIFIED_LABEL)
