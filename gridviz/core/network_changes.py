"""
Structural network changes.

Each change resolves its targets in the loaded network (failing with
NotFoundError naming the missing element) and then applies one toolkit
modification with fail-on-error semantics.

Dependencies: gridviz.boundary.grid
System role: Named edits applied by the modification pipeline
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from gridviz.boundary.grid.toolkit import GridToolkit
from gridviz.core.exceptions import NotFoundError, PipelineIOError, ValidationError


class NetworkChange(ABC):
    """One named structural edit."""

    name: str = "change"

    def apply(self, toolkit: GridToolkit, network: Any) -> None:
        """
        Resolve targets, then apply the edit.

        Raises:
            ValidationError: If a required identifier is empty
            NotFoundError: If a target element does not exist
            PipelineIOError: If the toolkit rejects the edit
        """
        self.resolve(toolkit, network)
        try:
            self.execute(toolkit, network)
        except Exception as e:
            raise PipelineIOError(
                f"Failed to apply {self.name}: {e}", operation="modify"
            ) from e

    @abstractmethod
    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        """Check that every referenced element exists."""

    @abstractmethod
    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        """Perform the edit."""

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """Log-friendly summary."""


def _require_id(value: str | None, field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field} cannot be null or empty", field=field)
    return value


def _require_voltage_level(toolkit: GridToolkit, network: Any, voltage_level_id: str) -> None:
    if not toolkit.has_voltage_level(network, voltage_level_id):
        raise NotFoundError("Voltage level", voltage_level_id)


def _require_substation(toolkit: GridToolkit, network: Any, substation_id: str) -> None:
    if not toolkit.has_substation(network, substation_id):
        raise NotFoundError("Substation", substation_id)


@dataclass(frozen=True)
class RemoveConnectable(NetworkChange):
    """Remove one connectable equipment by id."""

    equipment_id: str
    name = "remove-connectable"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.equipment_id, "equipmentId")
        if not toolkit.has_connectable(network, self.equipment_id):
            raise NotFoundError("Connectable", self.equipment_id)

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.remove_connectable(network, self.equipment_id)

    def describe(self) -> dict[str, Any]:
        return {"change": self.name, "equipment_id": self.equipment_id}


@dataclass(frozen=True)
class CreateLoad(NetworkChange):
    """Add a load bay at a bus or busbar section of a voltage level."""

    load_id: str
    voltage_level_id: str
    bus_or_busbar_section_id: str
    p0: float
    q0: float
    position_order: int | None = None
    name = "create-load"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.load_id, "loadId")
        _require_id(self.bus_or_busbar_section_id, "busOrBusbarSectionId")
        _require_voltage_level(toolkit, network, _require_id(self.voltage_level_id, "voltageLevelId"))

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.create_load(
            network,
            self.load_id,
            self.bus_or_busbar_section_id,
            self.p0,
            self.q0,
            self.position_order,
        )

    def describe(self) -> dict[str, Any]:
        return {"change": self.name, "load_id": self.load_id, "voltage_level_id": self.voltage_level_id}


@dataclass(frozen=True)
class CreateGenerator(NetworkChange):
    """Add a voltage-regulating generator bay."""

    generator_id: str
    voltage_level_id: str
    bus_or_busbar_section_id: str
    target_p: float
    target_v: float
    min_p: float
    max_p: float
    position_order: int | None = None
    name = "create-generator"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.generator_id, "generatorId")
        _require_id(self.bus_or_busbar_section_id, "busOrBusbarSectionId")
        _require_voltage_level(toolkit, network, _require_id(self.voltage_level_id, "voltageLevelId"))
        if self.min_p > self.max_p:
            raise ValidationError("minP cannot exceed maxP", field="minP")

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.create_generator(
            network,
            self.generator_id,
            self.bus_or_busbar_section_id,
            self.target_p,
            self.target_v,
            self.min_p,
            self.max_p,
            self.position_order,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "change": self.name,
            "generator_id": self.generator_id,
            "voltage_level_id": self.voltage_level_id,
        }


@dataclass(frozen=True)
class CreateLine(NetworkChange):
    """Connect two voltage levels with a new line."""

    line_id: str
    voltage_level_id1: str
    voltage_level_id2: str
    bus_or_busbar_section_id1: str
    bus_or_busbar_section_id2: str
    r: float
    x: float
    g1: float = 0.0
    b1: float = 0.0
    g2: float = 0.0
    b2: float = 0.0
    name = "create-line"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.line_id, "lineId")
        _require_id(self.bus_or_busbar_section_id1, "busOrBusbarSectionId1")
        _require_id(self.bus_or_busbar_section_id2, "busOrBusbarSectionId2")
        _require_voltage_level(toolkit, network, _require_id(self.voltage_level_id1, "voltageLevelId1"))
        _require_voltage_level(toolkit, network, _require_id(self.voltage_level_id2, "voltageLevelId2"))

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.create_line(
            network,
            self.line_id,
            self.bus_or_busbar_section_id1,
            self.bus_or_busbar_section_id2,
            self.r,
            self.x,
            self.g1,
            self.b1,
            self.g2,
            self.b2,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "change": self.name,
            "line_id": self.line_id,
            "voltage_level_id1": self.voltage_level_id1,
            "voltage_level_id2": self.voltage_level_id2,
        }


@dataclass(frozen=True)
class CreateSubstation(NetworkChange):
    """Add an empty substation."""

    substation_id: str
    substation_name: str
    country: str | None = None
    name = "create-substation"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.substation_id, "substationId")
        if toolkit.has_substation(network, self.substation_id):
            raise ValidationError(
                f"Substation already exists: {self.substation_id}", field="substationId"
            )

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.create_substation(
            network, self.substation_id, self.substation_name or self.substation_id, self.country
        )

    def describe(self) -> dict[str, Any]:
        return {"change": self.name, "substation_id": self.substation_id, "country": self.country}


@dataclass(frozen=True)
class CreateVoltageLevel(NetworkChange):
    """Add a voltage level inside an existing substation."""

    substation_id: str
    voltage_level_id: str
    voltage_level_name: str
    nominal_v: float
    topology_kind: str = "BUS_BREAKER"
    name = "create-voltage-level"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.voltage_level_id, "voltageLevelId")
        _require_substation(toolkit, network, _require_id(self.substation_id, "substationId"))
        if self.nominal_v <= 0:
            raise ValidationError("nominalV must be positive", field="nominalV")

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.create_voltage_level(
            network,
            self.substation_id,
            self.voltage_level_id,
            self.voltage_level_name or self.voltage_level_id,
            self.nominal_v,
            self.topology_kind,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "change": self.name,
            "substation_id": self.substation_id,
            "voltage_level_id": self.voltage_level_id,
        }


@dataclass(frozen=True)
class SetPhaseTapPosition(NetworkChange):
    """Move a transformer's phase tap changer, absolutely or relatively."""

    transformer_id: str
    tap_position: int
    relative: bool = False
    name = "set-phase-tap-position"

    def resolve(self, toolkit: GridToolkit, network: Any) -> None:
        _require_id(self.transformer_id, "transformerId")
        if not toolkit.has_phase_tap_changer(network, self.transformer_id):
            raise NotFoundError("Phase tap changer", self.transformer_id)

    def execute(self, toolkit: GridToolkit, network: Any) -> None:
        toolkit.set_phase_tap_position(
            network, self.transformer_id, self.tap_position, self.relative
        )

    def describe(self) -> dict[str, Any]:
        return {
            "change": self.name,
            "transformer_id": self.transformer_id,
            "tap_position": self.tap_position,
            "relative": self.relative,
        }
