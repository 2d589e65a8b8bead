"""
Network view schemas.

JSON documents derived from a loaded network for map rendering and for
the single-line selection UI.

Dependencies: pydantic
System role: Network metadata contracts
"""

from pydantic import ConfigDict, Field, RootModel

from gridviz.models.common import CamelModel


class CoordinateData(CamelModel):
    """Latitude/longitude pair."""

    lat: float
    lon: float


class VoltageLevelData(CamelModel):
    """Voltage level entry of the topology tree."""

    id: str
    substation_id: str
    nominal_v: float


class SubstationData(CamelModel):
    """Substation with its voltage levels."""

    id: str
    name: str
    voltage_levels: list[VoltageLevelData] = Field(default_factory=list)


class SubstationPositionData(CamelModel):
    """Geographic position of one substation."""

    id: str
    coordinate: CoordinateData


class LineLocation(CamelModel):
    """
    Electrical snapshot of one line.

    Power (MW) and current (A) at a disconnected terminal are NaN rather
    than zero, so "no flow" stays distinguishable from "not measurable".
    """

    id: str
    name: str
    voltage_level_id1: str
    voltage_level_id2: str
    terminal1_connected: bool
    terminal2_connected: bool
    p1: float
    p2: float
    i1: float
    i2: float


class LinePositionData(CamelModel):
    """Ordered geographic waypoints of one line."""

    id: str
    coordinates: list[CoordinateData]


class _Document(RootModel):
    model_config = ConfigDict(ser_json_inf_nan="strings")

    def to_json(self) -> str:
        """Serialize with camelCase keys, indented like the map client expects."""
        return self.model_dump_json(by_alias=True, indent=2)


class TopologyDocument(_Document):
    root: list[SubstationData]


class SubstationPositionsDocument(_Document):
    root: list[SubstationPositionData]


class LineLocationsDocument(_Document):
    root: list[LineLocation]


class LinePositionsDocument(_Document):
    root: list[LinePositionData]


class SubstationSummary(CamelModel):
    """Substation entry of the SLD selection listing."""

    id: str
    name: str
    country: str | None = None


class VoltageLevelSummary(CamelModel):
    """Voltage level entry of the SLD selection listing."""

    id: str
    name: str
    nominal_v: float
    topology_kind: str | None = None


class SldSelectionResponse(CamelModel):
    """Structure listing used to drive single-line selection before rendering."""

    id: str
    substations: list[SubstationSummary]
    voltage_levels: list[VoltageLevelSummary]
