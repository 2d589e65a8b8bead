"""
Diagram generation service.

Runs the fresh-upload pipelines: store the upload, load the network,
render into an isolated workspace, assemble the bundle and persist it.
Nothing is persisted unless every upstream step succeeded.

Dependencies: fastapi.concurrency, gridviz.core, gridviz.boundary
System role: NAD, map and SLD generation use cases
"""

import logging
from uuid import UUID, uuid4

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.application.services.diagram_storage_service import DiagramStorageService
from gridviz.application.services.map_diagram_storage_service import MapDiagramStorageService
from gridviz.boundary.db.models.diagram_model import DiagramType
from gridviz.boundary.grid.toolkit import GridToolkit
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.configs.grid import GridSettings
from gridviz.core.artifact_assembler import ArtifactAssembler, DiagramFiles, MapDiagramFiles
from gridviz.core.diagram_renderer import AREA_BASE_NAME, SINGLE_LINE_BASE_NAME, DiagramRenderer
from gridviz.core.exceptions import PipelineIOError, ValidationError
from gridviz.core.metadata_extractor import MetadataExtractor
from gridviz.core.network_loader import NetworkLoader
from gridviz.models.diagram import DiagramArtifact, MapDiagramArtifact
from gridviz.models.network import SldSelectionResponse, SubstationSummary, VoltageLevelSummary

logger = logging.getLogger(__name__)

NAD_PREFIX = "nad_"
SLD_PREFIX = "sld_"


class DiagramGenerationService:
    """Fresh diagram generation orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        toolkit: GridToolkit,
        store: ContentStore,
        settings: GridSettings | None = None,
    ) -> None:
        """
        Initialize generation service.

        Args:
            db: Async SQLAlchemy session
            toolkit: Grid toolkit used for loading and drawing
            store: Content store for uploads and render workspaces
            settings: Network import settings
        """
        self.store = store
        self.toolkit = toolkit
        self.loader = NetworkLoader(toolkit, settings)
        self.renderer = DiagramRenderer(toolkit)
        self.extractor = MetadataExtractor(toolkit)
        self.assembler = ArtifactAssembler()
        self.diagrams = DiagramStorageService(db, store)
        self.map_diagrams = MapDiagramStorageService(db, store)

    async def generate_nad(self, data: bytes) -> DiagramArtifact:
        """
        Store an upload and persist its network-area diagram.

        Args:
            data: Uploaded model bytes

        Returns:
            DiagramArtifact: NAD artifact named ``nad_<id>``
        """
        artifact_id = uuid4()
        name = f"{NAD_PREFIX}{artifact_id}"
        logger.info("Generating NAD", extra={"diagram_id": str(artifact_id)})

        await run_in_threadpool(self.store.store, _require_bytes(data), name)
        try:
            files = await run_in_threadpool(self._render_area, name)
            return await self.diagrams.save_files(
                name, files, DiagramType.NAD, preferred_id=artifact_id
            )
        except Exception:
            self._discard_upload(name)
            raise

    async def generate_map(self, data: bytes) -> MapDiagramArtifact:
        """
        Store an upload and persist its map bundle.

        Raises:
            MissingGeoDataError: If the model carries no positioned substation
        """
        artifact_id = uuid4()
        name = f"{NAD_PREFIX}{artifact_id}"
        logger.info("Generating map diagram", extra={"diagram_id": str(artifact_id)})

        await run_in_threadpool(self.store.store, _require_bytes(data), name)
        try:
            files = await run_in_threadpool(self._render_map, name)
            return await self.map_diagrams.save(name, files, preferred_id=artifact_id)
        except Exception:
            self._discard_upload(name)
            raise

    async def sld_selection_data(self, data: bytes) -> SldSelectionResponse:
        """
        Store an upload for later SLD rendering and list its structure.

        Returns:
            SldSelectionResponse: Upload id plus substations and voltage levels
        """
        artifact_id = uuid4()
        name = f"{SLD_PREFIX}{artifact_id}"

        await run_in_threadpool(self.store.store, _require_bytes(data), name)
        response = await run_in_threadpool(self._list_structure, artifact_id, name)
        logger.info(
            "Listed SLD selection data",
            extra={
                "diagram_id": str(artifact_id),
                "substations": len(response.substations),
                "voltage_levels": len(response.voltage_levels),
            },
        )
        return response

    async def generate_sld(
        self,
        artifact_id: UUID,
        mode: str | None,
        selection_id: str | None = None,
    ) -> DiagramArtifact:
        """
        Render a single-line diagram from a previously listed upload.

        Args:
            artifact_id: Id returned by the selection listing
            mode: substation, voltage, or anything else for all substations
            selection_id: Substation or voltage level id

        Returns:
            DiagramArtifact: SLD artifact named ``sld_<id>``

        Raises:
            NotFoundError: If the upload or the selected element is missing
        """
        name = f"{SLD_PREFIX}{artifact_id}"
        logger.info(
            "Generating SLD",
            extra={"diagram_id": str(artifact_id), "mode": mode, "selection_id": selection_id},
        )
        files = await run_in_threadpool(self._render_single_line, name, mode, selection_id)
        return await self.diagrams.save_files(
            name, files, DiagramType.SLD, preferred_id=artifact_id
        )

    def _discard_upload(self, name: str) -> None:
        self.store.delete(name)
        logger.warning("Discarded upload after failed generation", extra={"artifact_name": name})

    def _render_area(self, name: str) -> DiagramFiles:
        network = self.loader.load_plain(self.store.resolve(name))
        with self.store.render_workspace(prefix=f"{name}_") as workspace:
            self.renderer.draw_area(network, workspace)
            return self.assembler.assemble(workspace, AREA_BASE_NAME)

    def _render_map(self, name: str) -> MapDiagramFiles:
        network = self.loader.load_with_geo_profile(self.store.resolve(name))
        with self.store.render_workspace(prefix=f"{name}_map_") as workspace:
            self.renderer.draw_area(network, workspace)
            self.extractor.write_all(network, workspace)
            return self.assembler.assemble_map(workspace)

    def _render_single_line(
        self, name: str, mode: str | None, selection_id: str | None
    ) -> DiagramFiles:
        network = self.loader.load_plain(self.store.resolve(name))
        with self.store.render_workspace(prefix=f"{name}_") as workspace:
            self.renderer.draw_single_line(network, workspace, mode, selection_id)
            return self.assembler.assemble(workspace, SINGLE_LINE_BASE_NAME)

    def _list_structure(self, artifact_id: UUID, name: str) -> SldSelectionResponse:
        network = self.loader.load_plain(self.store.resolve(name))
        try:
            substations = [
                SubstationSummary(id=s.id, name=s.name, country=s.country)
                for s in self.toolkit.substations(network)
            ]
            voltage_levels = [
                VoltageLevelSummary(
                    id=v.id,
                    name=v.name,
                    nominal_v=v.nominal_v,
                    topology_kind=v.topology_kind,
                )
                for v in self.toolkit.voltage_levels(network)
            ]
        except Exception as e:
            raise PipelineIOError(
                f"Failed to list network structure: {e}", operation="list"
            ) from e

        return SldSelectionResponse(
            id=str(artifact_id), substations=substations, voltage_levels=voltage_levels
        )


def _require_bytes(data: bytes | None) -> bytes:
    if not data:
        raise ValidationError("Uploaded file is empty", field="file")
    return data
