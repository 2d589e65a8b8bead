"""
Diagram API endpoints.

Routes:
- POST /diagrams/nad - Generate a network-area diagram from an upload
- POST /diagrams/map - Generate a map diagram bundle from an upload
- GET /diagrams/map - List map diagrams
- GET /diagrams/map/{id} - Get single map diagram
- DELETE /diagrams/map/{id} - Delete map diagram
- POST /diagrams/sld/selectionData - Store an upload and list its structure
- POST /diagrams/sld - Generate a single-line diagram from a listed upload
- GET /diagrams - List diagrams
- GET /diagrams/name/{name} - Get diagram by name
- GET /diagrams/{id} - Get diagram by id
- PUT /diagrams/{id} - Replace diagram (renames its stored model)
- DELETE /diagrams/name/{name} - Delete diagram by name
- DELETE /diagrams/{id} - Delete diagram by id

Dependencies: gridviz.application.services, gridviz.models
System role: Diagram management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile

from gridviz.api.deps.dependencies import (
    get_diagram_generation_service,
    get_diagram_storage_service,
    get_map_diagram_storage_service,
    get_settings_dependency,
)
from gridviz.application.services import (
    DiagramGenerationService,
    DiagramStorageService,
    MapDiagramStorageService,
)
from gridviz.configs import Settings
from gridviz.models.diagram import DiagramArtifact, MapDiagramArtifact, UpdateDiagramRequest
from gridviz.models.network import SldSelectionResponse

from .diagram_error_handling import handle_diagram_errors
from .diagram_validators import read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diagrams", tags=["diagrams"])


@router.post("/nad", response_model=DiagramArtifact)
@handle_diagram_errors
async def generate_nad(
    file: UploadFile = File(...),
    generation_service: DiagramGenerationService = Depends(get_diagram_generation_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DiagramArtifact:
    """
    Generate and persist a network-area diagram.

    Args:
        file: Uploaded model archive
        generation_service: Injected DiagramGenerationService
        settings: Injected application settings

    Returns:
        DiagramArtifact: Created NAD artifact

    Raises:
        HTTPException(400): Empty or oversized upload
        HTTPException(500): Loading or drawing failed
    """
    data = await read_upload(file, settings.storage.max_upload_bytes)
    logger.info("Generating NAD", extra={"upload_name": file.filename, "size": len(data)})

    artifact = await generation_service.generate_nad(data)

    logger.info("NAD generated successfully", extra={"diagram_id": str(artifact.id)})
    return artifact


@router.post("/map", response_model=MapDiagramArtifact)
@handle_diagram_errors
async def generate_map(
    file: UploadFile = File(...),
    generation_service: DiagramGenerationService = Depends(get_diagram_generation_service),
    settings: Settings = Depends(get_settings_dependency),
) -> MapDiagramArtifact:
    """
    Generate and persist a map diagram with its geographic side-channels.

    Raises:
        HTTPException(400): GL profile missing, or empty upload
        HTTPException(500): Loading, drawing or extraction failed
    """
    data = await read_upload(file, settings.storage.max_upload_bytes)
    logger.info("Generating map diagram", extra={"upload_name": file.filename, "size": len(data)})

    artifact = await generation_service.generate_map(data)

    logger.info("Map diagram generated successfully", extra={"diagram_id": str(artifact.id)})
    return artifact


@router.get("/map", response_model=list[MapDiagramArtifact])
@handle_diagram_errors
async def list_map_diagrams(
    limit: int = 100,
    offset: int = 0,
    map_service: MapDiagramStorageService = Depends(get_map_diagram_storage_service),
) -> list[MapDiagramArtifact]:
    """List map diagrams with pagination."""
    return await map_service.list_all(limit=limit, offset=offset)


@router.get("/map/{diagram_id}", response_model=MapDiagramArtifact)
@handle_diagram_errors
async def get_map_diagram(
    diagram_id: UUID,
    map_service: MapDiagramStorageService = Depends(get_map_diagram_storage_service),
) -> MapDiagramArtifact:
    """
    Get single map diagram by ID.

    Raises:
        HTTPException(404): Map diagram not found
    """
    return await map_service.get_by_id(diagram_id)


@router.delete("/map/{diagram_id}", status_code=204)
@handle_diagram_errors
async def delete_map_diagram(
    diagram_id: UUID,
    map_service: MapDiagramStorageService = Depends(get_map_diagram_storage_service),
) -> None:
    """
    Delete map diagram by ID.

    Raises:
        HTTPException(404): Map diagram not found
    """
    logger.info("Deleting map diagram", extra={"diagram_id": str(diagram_id)})
    await map_service.delete_by_id(diagram_id)


@router.post("/sld/selectionData", response_model=SldSelectionResponse)
@handle_diagram_errors
async def get_sld_selection_data(
    file: UploadFile = File(...),
    generation_service: DiagramGenerationService = Depends(get_diagram_generation_service),
    settings: Settings = Depends(get_settings_dependency),
) -> SldSelectionResponse:
    """
    Store an upload for single-line rendering and list its substations and voltage levels.

    Returns:
        SldSelectionResponse: Upload id and structure listing
    """
    data = await read_upload(file, settings.storage.max_upload_bytes)
    return await generation_service.sld_selection_data(data)


@router.post("/sld", response_model=DiagramArtifact)
@handle_diagram_errors
async def generate_sld(
    diagram_id: UUID = Query(..., alias="id"),
    sld_type: str | None = Query(None, alias="type"),
    selection_id: str | None = Query(None, alias="selectionId"),
    generation_service: DiagramGenerationService = Depends(get_diagram_generation_service),
) -> DiagramArtifact:
    """
    Generate a single-line diagram for a previously listed upload.

    Args:
        diagram_id: Id returned by /sld/selectionData
        sld_type: substation, voltage, or anything else for all substations
        selection_id: Substation or voltage level id
        generation_service: Injected DiagramGenerationService

    Returns:
        DiagramArtifact: Created or overwritten SLD artifact

    Raises:
        HTTPException(404): Upload, substation or voltage level not found
        HTTPException(500): Drawing failed
    """
    return await generation_service.generate_sld(diagram_id, sld_type, selection_id)


@router.get("", response_model=list[DiagramArtifact])
@handle_diagram_errors
async def list_diagrams(
    limit: int = 100,
    offset: int = 0,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> list[DiagramArtifact]:
    """
    List all diagrams with pagination.

    Args:
        limit: Maximum number of diagrams (default 100)
        offset: Number to skip (default 0)
        storage_service: Injected DiagramStorageService

    Returns:
        list[DiagramArtifact]: Stored diagrams
    """
    diagrams = await storage_service.list_all(limit=limit, offset=offset)
    logger.info("Diagrams retrieved", extra={"count": len(diagrams)})
    return diagrams


@router.get("/name/{name}", response_model=DiagramArtifact)
@handle_diagram_errors
async def get_diagram_by_name(
    name: str,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> DiagramArtifact:
    """
    Get single diagram by name.

    Raises:
        HTTPException(404): Diagram not found
    """
    return await storage_service.get_by_name(name)


@router.get("/{diagram_id}", response_model=DiagramArtifact)
@handle_diagram_errors
async def get_diagram(
    diagram_id: UUID,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> DiagramArtifact:
    """
    Get single diagram by ID.

    Raises:
        HTTPException(404): Diagram not found
    """
    return await storage_service.get_by_id(diagram_id)


@router.put("/{diagram_id}", response_model=DiagramArtifact)
@handle_diagram_errors
async def update_diagram(
    diagram_id: UUID,
    request: UpdateDiagramRequest,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> DiagramArtifact:
    """
    Replace a diagram's content and name.

    The stored model archive is renamed to match the new name.

    Raises:
        HTTPException(404): Diagram not found
        HTTPException(400): Name already used by another diagram
        HTTPException(500): Rename or update failed
    """
    logger.info(
        "Updating diagram",
        extra={"diagram_id": str(diagram_id), "new_name": request.name},
    )
    return await storage_service.update(diagram_id, request)


@router.delete("/name/{name}", status_code=204)
@handle_diagram_errors
async def delete_diagram_by_name(
    name: str,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> None:
    """
    Delete diagram by name.

    Raises:
        HTTPException(404): Diagram not found
    """
    logger.info("Deleting diagram", extra={"artifact_name": name})
    await storage_service.delete_by_name(name)


@router.delete("/{diagram_id}", status_code=204)
@handle_diagram_errors
async def delete_diagram(
    diagram_id: UUID,
    storage_service: DiagramStorageService = Depends(get_diagram_storage_service),
) -> None:
    """
    Delete diagram by ID.

    Raises:
        HTTPException(404): Diagram not found
    """
    logger.info("Deleting diagram", extra={"diagram_id": str(diagram_id)})
    await storage_service.delete_by_id(diagram_id)
