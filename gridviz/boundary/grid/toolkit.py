"""
Grid toolkit capability interface.

Abstract boundary over the network modelling and diagram drawing library.
Everything above this layer works with plain records, so loading policy,
metadata extraction and modification rules stay independent of the
native library binding.

Dependencies: dataclasses, abc
System role: Boundary contract for the external grid modelling library
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class SubstationRecord:
    """Substation identity as exposed by the toolkit."""

    id: str
    name: str
    country: str | None = None


@dataclass(frozen=True)
class VoltageLevelRecord:
    """Voltage level identity and nominal voltage."""

    id: str
    name: str
    substation_id: str | None
    nominal_v: float
    topology_kind: str | None = None


@dataclass(frozen=True)
class LineRecord:
    """
    Electrical snapshot of one line.

    Values at a terminal are whatever the toolkit reports, regardless of
    connectivity; policy for disconnected terminals lives in the extractor.
    """

    id: str
    name: str
    voltage_level1_id: str
    voltage_level2_id: str
    connected1: bool
    connected2: bool
    p1: float
    p2: float
    i1: float
    i2: float


@dataclass(frozen=True)
class AreaDiagramParameters:
    """
    Layout and SVG settings for a network-area diagram.

    Keys follow the camelCase names the diagram library writes into its
    metadata documents (``layoutParameters`` / ``svgParameters``).
    """

    layout: dict[str, Any]
    svg: dict[str, Any]

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any] | None) -> "AreaDiagramParameters":
        """
        Recover the parameters a diagram was drawn with from its metadata.

        Args:
            metadata: Parsed metadata document of a previous render

        Returns:
            AreaDiagramParameters: Stored settings, empty where absent
        """
        metadata = metadata or {}
        return cls(
            layout=dict(metadata.get("layoutParameters") or {}),
            svg=dict(metadata.get("svgParameters") or {}),
        )


class GridToolkit(ABC):
    """
    Capability interface for the external network library.

    A network handle returned by ``load`` is opaque to callers and is only
    ever passed back into the same toolkit instance. Implementations raise
    their own exceptions; callers wrap them into pipeline errors.
    """

    # Loading

    @abstractmethod
    def load(self, path: Path, parameters: dict[str, str] | None = None) -> Any:
        """Parse a stored model file into an in-memory network."""

    # Structure

    @abstractmethod
    def substations(self, network: Any) -> list[SubstationRecord]:
        """List all substations."""

    @abstractmethod
    def voltage_levels(self, network: Any) -> list[VoltageLevelRecord]:
        """List all voltage levels."""

    @abstractmethod
    def lines(self, network: Any) -> list[LineRecord]:
        """List all lines with terminal state and flows."""

    @abstractmethod
    def substation_positions(self, network: Any) -> dict[str, Coordinate]:
        """Map substation id to position, for substations carrying one."""

    @abstractmethod
    def line_positions(self, network: Any) -> dict[str, list[Coordinate]]:
        """Map line id to ordered waypoints, for lines carrying them."""

    @abstractmethod
    def has_substation(self, network: Any, substation_id: str) -> bool:
        """Whether a substation with this id exists."""

    @abstractmethod
    def has_voltage_level(self, network: Any, voltage_level_id: str) -> bool:
        """Whether a voltage level with this id exists."""

    @abstractmethod
    def has_connectable(self, network: Any, equipment_id: str) -> bool:
        """Whether a connectable equipment with this id exists."""

    @abstractmethod
    def has_phase_tap_changer(self, network: Any, transformer_id: str) -> bool:
        """Whether a transformer with a phase tap changer has this id."""

    # Drawing

    @abstractmethod
    def draw_area(
        self,
        network: Any,
        svg_path: Path,
        metadata_path: Path,
        parameters: AreaDiagramParameters | None = None,
    ) -> None:
        """Draw the whole network as an area diagram plus metadata."""

    @abstractmethod
    def draw_substation(
        self, network: Any, substation_id: str, svg_path: Path, metadata_path: Path
    ) -> None:
        """Draw a single-line diagram of one substation."""

    @abstractmethod
    def draw_voltage_level(
        self, network: Any, voltage_level_id: str, svg_path: Path, metadata_path: Path
    ) -> None:
        """Draw a single-line diagram of one voltage level."""

    @abstractmethod
    def draw_substations(
        self, network: Any, substation_ids: list[str], svg_path: Path, metadata_path: Path
    ) -> None:
        """Draw several substations into one multi-substation diagram."""

    # Structural changes

    @abstractmethod
    def remove_connectable(self, network: Any, equipment_id: str) -> None:
        """Remove one connectable equipment."""

    @abstractmethod
    def create_load(
        self,
        network: Any,
        load_id: str,
        bus_or_busbar_section_id: str,
        p0: float,
        q0: float,
        position_order: int | None = None,
    ) -> None:
        """Create a load feeder bay."""

    @abstractmethod
    def create_generator(
        self,
        network: Any,
        generator_id: str,
        bus_or_busbar_section_id: str,
        target_p: float,
        target_v: float,
        min_p: float,
        max_p: float,
        position_order: int | None = None,
    ) -> None:
        """Create a voltage-regulating generator feeder bay."""

    @abstractmethod
    def create_line(
        self,
        network: Any,
        line_id: str,
        bus_or_busbar_section_id1: str,
        bus_or_busbar_section_id2: str,
        r: float,
        x: float,
        g1: float = 0.0,
        b1: float = 0.0,
        g2: float = 0.0,
        b2: float = 0.0,
        position_order1: int | None = None,
        position_order2: int | None = None,
    ) -> None:
        """Create a line with a feeder bay at each end."""

    @abstractmethod
    def create_substation(
        self, network: Any, substation_id: str, name: str, country: str | None = None
    ) -> None:
        """Create an empty substation."""

    @abstractmethod
    def create_voltage_level(
        self,
        network: Any,
        substation_id: str,
        voltage_level_id: str,
        name: str,
        nominal_v: float,
        topology_kind: str,
    ) -> None:
        """Create a voltage level inside a substation."""

    @abstractmethod
    def set_phase_tap_position(
        self, network: Any, transformer_id: str, tap_position: int, relative: bool = False
    ) -> None:
        """Move the phase tap changer of a two-winding transformer."""
