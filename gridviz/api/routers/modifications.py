"""
Network modification API endpoints.

Routes:
- POST /modifications/remove-connectable - Remove equipment and redraw
- POST /modifications/create-load - Add a load and redraw
- POST /modifications/create-generator - Add a generator and redraw
- POST /modifications/create-line - Add a line and redraw
- POST /modifications/create-substation - Add a substation and redraw
- POST /modifications/create-voltage-level - Add a voltage level and redraw
- POST /modifications/set-phase-tap-position - Move a phase tap changer and redraw

Every route returns the same diagram (same id and name) with redrawn
content and a later updatedAt.

Dependencies: gridviz.application.services, gridviz.core.network_changes
System role: Network modification HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from gridviz.api.deps.dependencies import get_modification_service
from gridviz.api.routers.diagrams.diagram_error_handling import handle_diagram_errors
from gridviz.application.services import ModificationService
from gridviz.core.network_changes import (
    CreateGenerator,
    CreateLine,
    CreateLoad,
    CreateSubstation,
    CreateVoltageLevel,
    SetPhaseTapPosition,
)
from gridviz.models.diagram import (
    CreateGeneratorRequest,
    CreateLineRequest,
    CreateLoadRequest,
    CreateSubstationRequest,
    CreateVoltageLevelRequest,
    DiagramArtifact,
    SetPhaseTapPositionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modifications", tags=["modifications"])


@router.post("/remove-connectable", response_model=DiagramArtifact)
@handle_diagram_errors
async def remove_connectable(
    equipment_id: str = Query(..., alias="equipmentId", min_length=1),
    diagram_id: UUID = Query(..., alias="id"),
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """
    Remove one connectable equipment from a stored diagram's network.

    Args:
        equipment_id: Equipment to remove
        diagram_id: Target diagram id
        modification_service: Injected ModificationService

    Returns:
        DiagramArtifact: Redrawn diagram

    Raises:
        HTTPException(404): Diagram or equipment not found
        HTTPException(500): Loading, editing or drawing failed
    """
    logger.info(
        "Removing connectable",
        extra={"diagram_id": str(diagram_id), "equipment_id": equipment_id},
    )
    return await modification_service.remove_connectable(diagram_id, equipment_id)


@router.post("/create-load", response_model=DiagramArtifact)
@handle_diagram_errors
async def create_load(
    request: CreateLoadRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Add a load at a bus or busbar section."""
    change = CreateLoad(
        load_id=request.load_id,
        voltage_level_id=request.voltage_level_id,
        bus_or_busbar_section_id=request.bus_or_busbar_section_id,
        p0=request.p0,
        q0=request.q0,
        position_order=request.position_order,
    )
    return await modification_service.apply(request.id, change)


@router.post("/create-generator", response_model=DiagramArtifact)
@handle_diagram_errors
async def create_generator(
    request: CreateGeneratorRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Add a voltage-regulating generator at a bus or busbar section."""
    change = CreateGenerator(
        generator_id=request.generator_id,
        voltage_level_id=request.voltage_level_id,
        bus_or_busbar_section_id=request.bus_or_busbar_section_id,
        target_p=request.target_p,
        target_v=request.target_v,
        min_p=request.min_p,
        max_p=request.max_p,
        position_order=request.position_order,
    )
    return await modification_service.apply(request.id, change)


@router.post("/create-line", response_model=DiagramArtifact)
@handle_diagram_errors
async def create_line(
    request: CreateLineRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Connect two voltage levels with a new line."""
    change = CreateLine(
        line_id=request.line_id,
        voltage_level_id1=request.voltage_level_id1,
        voltage_level_id2=request.voltage_level_id2,
        bus_or_busbar_section_id1=request.bus_or_busbar_section_id1,
        bus_or_busbar_section_id2=request.bus_or_busbar_section_id2,
        r=request.r,
        x=request.x,
        g1=request.g1,
        b1=request.b1,
        g2=request.g2,
        b2=request.b2,
    )
    return await modification_service.apply(request.id, change)


@router.post("/create-substation", response_model=DiagramArtifact)
@handle_diagram_errors
async def create_substation(
    request: CreateSubstationRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Add a substation."""
    change = CreateSubstation(
        substation_id=request.substation_id,
        substation_name=request.name,
        country=request.country,
    )
    return await modification_service.apply(request.id, change)


@router.post("/create-voltage-level", response_model=DiagramArtifact)
@handle_diagram_errors
async def create_voltage_level(
    request: CreateVoltageLevelRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Add a voltage level inside an existing substation."""
    change = CreateVoltageLevel(
        substation_id=request.substation_id,
        voltage_level_id=request.voltage_level_id,
        voltage_level_name=request.name,
        nominal_v=request.nominal_v,
        topology_kind=request.topology_kind,
    )
    return await modification_service.apply(request.id, change)


@router.post("/set-phase-tap-position", response_model=DiagramArtifact)
@handle_diagram_errors
async def set_phase_tap_position(
    request: SetPhaseTapPositionRequest,
    modification_service: ModificationService = Depends(get_modification_service),
) -> DiagramArtifact:
    """Move a transformer's phase tap changer, absolutely or relative to its current tap."""
    change = SetPhaseTapPosition(
        transformer_id=request.transformer_id,
        tap_position=request.tap_position,
        relative=request.relative,
    )
    return await modification_service.apply(request.id, change)
