"""
PowSyBl binding of the grid toolkit.

Implements GridToolkit on top of pypowsybl: CGMES/IIDM import, tabular
network access (pandas DataFrames), network-area and single-line SVG
writers, and topology modifications.

Dependencies: pypowsybl, pandas
System role: Production adapter for the external grid modelling library
"""

import inspect
import logging
import math
import re
from pathlib import Path
from typing import Any

import pandas as pd
import pypowsybl as pp
from pypowsybl.network import ElementType, NadParameters

from gridviz.boundary.grid.toolkit import (
    AreaDiagramParameters,
    Coordinate,
    GridToolkit,
    LineRecord,
    SubstationRecord,
    VoltageLevelRecord,
)

logger = logging.getLogger(__name__)

# Element types whose instances can be attached to or removed from a bus
CONNECTABLE_TYPES = (
    ElementType.LOAD,
    ElementType.GENERATOR,
    ElementType.BATTERY,
    ElementType.LINE,
    ElementType.TWO_WINDINGS_TRANSFORMER,
    ElementType.THREE_WINDINGS_TRANSFORMER,
    ElementType.SHUNT_COMPENSATOR,
    ElementType.STATIC_VAR_COMPENSATOR,
    ElementType.DANGLING_LINE,
    ElementType.BUSBAR_SECTION,
    ElementType.LCC_CONVERTER_STATION,
    ElementType.VSC_CONVERTER_STATION,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _float(value: Any) -> float:
    if value is None or pd.isna(value):
        return math.nan
    return float(value)


def _name_or_id(element_id: str, name: Any) -> str:
    if isinstance(name, str) and name:
        return name
    return element_id


class PowsyblToolkit(GridToolkit):
    """GridToolkit backed by pypowsybl."""

    # Loading

    def load(self, path: Path, parameters: dict[str, str] | None = None) -> pp.network.Network:
        logger.debug(
            "Loading network with pypowsybl",
            extra={"path": str(path), "parameters": list((parameters or {}).keys())},
        )
        return pp.network.load(str(path), parameters=parameters or {})

    # Structure

    def substations(self, network: pp.network.Network) -> list[SubstationRecord]:
        frame = network.get_substations()
        return [
            SubstationRecord(
                id=str(substation_id),
                name=_name_or_id(str(substation_id), row.get("name")),
                country=row.get("country") or None,
            )
            for substation_id, row in frame.iterrows()
        ]

    def voltage_levels(self, network: pp.network.Network) -> list[VoltageLevelRecord]:
        frame = network.get_voltage_levels(all_attributes=True)
        return [
            VoltageLevelRecord(
                id=str(voltage_level_id),
                name=_name_or_id(str(voltage_level_id), row.get("name")),
                substation_id=row.get("substation_id") or None,
                nominal_v=_float(row.get("nominal_v")),
                topology_kind=row.get("topology_kind") or None,
            )
            for voltage_level_id, row in frame.iterrows()
        ]

    def lines(self, network: pp.network.Network) -> list[LineRecord]:
        frame = network.get_lines()
        return [
            LineRecord(
                id=str(line_id),
                name=_name_or_id(str(line_id), row.get("name")),
                voltage_level1_id=str(row["voltage_level1_id"]),
                voltage_level2_id=str(row["voltage_level2_id"]),
                connected1=bool(row["connected1"]),
                connected2=bool(row["connected2"]),
                p1=_float(row.get("p1")),
                p2=_float(row.get("p2")),
                i1=_float(row.get("i1")),
                i2=_float(row.get("i2")),
            )
            for line_id, row in frame.iterrows()
        ]

    def substation_positions(self, network: pp.network.Network) -> dict[str, Coordinate]:
        frame = network.get_extensions("substationPosition")
        return {
            str(substation_id): Coordinate(
                latitude=float(row["latitude"]), longitude=float(row["longitude"])
            )
            for substation_id, row in frame.iterrows()
        }

    def line_positions(self, network: pp.network.Network) -> dict[str, list[Coordinate]]:
        frame = network.get_extensions("linePosition")
        if frame.empty:
            return {}
        frame = frame.reset_index()
        if "num" in frame.columns:
            frame = frame.sort_values(["id", "num"])
        positions: dict[str, list[Coordinate]] = {}
        for _, row in frame.iterrows():
            positions.setdefault(str(row["id"]), []).append(
                Coordinate(latitude=float(row["latitude"]), longitude=float(row["longitude"]))
            )
        return positions

    def has_substation(self, network: pp.network.Network, substation_id: str) -> bool:
        return substation_id in network.get_substations().index

    def has_voltage_level(self, network: pp.network.Network, voltage_level_id: str) -> bool:
        return voltage_level_id in network.get_voltage_levels().index

    def has_connectable(self, network: pp.network.Network, equipment_id: str) -> bool:
        for element_type in CONNECTABLE_TYPES:
            ids = network.get_elements_ids(
                element_type,
                main_connected_component=False,
                main_synchronous_component=False,
            )
            if equipment_id in ids:
                return True
        return False

    def has_phase_tap_changer(self, network: pp.network.Network, transformer_id: str) -> bool:
        return transformer_id in network.get_phase_tap_changers().index

    # Drawing

    def draw_area(
        self,
        network: pp.network.Network,
        svg_path: Path,
        metadata_path: Path,
        parameters: AreaDiagramParameters | None = None,
    ) -> None:
        network.write_network_area_diagram(
            str(svg_path),
            nad_parameters=self._nad_parameters(parameters),
            metadata_file=str(metadata_path),
        )

    def draw_substation(
        self,
        network: pp.network.Network,
        substation_id: str,
        svg_path: Path,
        metadata_path: Path,
    ) -> None:
        network.write_single_line_diagram_svg(substation_id, str(svg_path), str(metadata_path))

    def draw_voltage_level(
        self,
        network: pp.network.Network,
        voltage_level_id: str,
        svg_path: Path,
        metadata_path: Path,
    ) -> None:
        network.write_single_line_diagram_svg(voltage_level_id, str(svg_path), str(metadata_path))

    def draw_substations(
        self,
        network: pp.network.Network,
        substation_ids: list[str],
        svg_path: Path,
        metadata_path: Path,
    ) -> None:
        network.write_matrix_multi_substation_single_line_diagram_svg(
            [substation_ids], str(svg_path), str(metadata_path)
        )

    @staticmethod
    def _nad_parameters(parameters: AreaDiagramParameters | None) -> NadParameters | None:
        """
        Translate stored camelCase settings into NadParameters keywords.

        Settings the installed NadParameters does not accept are dropped.
        """
        if parameters is None:
            return None
        accepted = set(inspect.signature(NadParameters.__init__).parameters) - {"self"}
        kwargs = {}
        for source in (parameters.layout, parameters.svg):
            for key, value in source.items():
                name = _to_snake(key)
                if name in accepted and isinstance(value, (bool, int, float, str)):
                    kwargs[name] = value
        return NadParameters(**kwargs)

    # Structural changes

    def remove_connectable(self, network: pp.network.Network, equipment_id: str) -> None:
        network.remove_elements([equipment_id])

    def create_load(
        self,
        network: pp.network.Network,
        load_id: str,
        bus_or_busbar_section_id: str,
        p0: float,
        q0: float,
        position_order: int | None = None,
    ) -> None:
        kwargs = {
            "id": load_id,
            "bus_or_busbar_section_id": bus_or_busbar_section_id,
            "p0": p0,
            "q0": q0,
        }
        if position_order is not None:
            kwargs["position_order"] = position_order
        pp.network.create_load_bay(network, raise_exception=True, **kwargs)

    def create_generator(
        self,
        network: pp.network.Network,
        generator_id: str,
        bus_or_busbar_section_id: str,
        target_p: float,
        target_v: float,
        min_p: float,
        max_p: float,
        position_order: int | None = None,
    ) -> None:
        kwargs = {
            "id": generator_id,
            "bus_or_busbar_section_id": bus_or_busbar_section_id,
            "target_p": target_p,
            "target_q": 0.0,
            "target_v": target_v,
            "min_p": min_p,
            "max_p": max_p,
            "voltage_regulator_on": True,
        }
        if position_order is not None:
            kwargs["position_order"] = position_order
        pp.network.create_generator_bay(network, raise_exception=True, **kwargs)

    def create_line(
        self,
        network: pp.network.Network,
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
        kwargs = {
            "id": line_id,
            "r": r,
            "x": x,
            "g1": g1,
            "b1": b1,
            "g2": g2,
            "b2": b2,
            "bus_or_busbar_section_id_1": bus_or_busbar_section_id1,
            "bus_or_busbar_section_id_2": bus_or_busbar_section_id2,
        }
        if position_order1 is not None:
            kwargs["position_order_1"] = position_order1
        if position_order2 is not None:
            kwargs["position_order_2"] = position_order2
        pp.network.create_line_bays(network, raise_exception=True, **kwargs)

    def create_substation(
        self,
        network: pp.network.Network,
        substation_id: str,
        name: str,
        country: str | None = None,
    ) -> None:
        kwargs = {"id": substation_id, "name": name}
        if country:
            kwargs["country"] = country
        network.create_substations(**kwargs)

    def create_voltage_level(
        self,
        network: pp.network.Network,
        substation_id: str,
        voltage_level_id: str,
        name: str,
        nominal_v: float,
        topology_kind: str,
    ) -> None:
        network.create_voltage_levels(
            id=voltage_level_id,
            substation_id=substation_id,
            name=name,
            nominal_v=nominal_v,
            topology_kind=topology_kind,
        )

    def set_phase_tap_position(
        self,
        network: pp.network.Network,
        transformer_id: str,
        tap_position: int,
        relative: bool = False,
    ) -> None:
        tap = tap_position
        if relative:
            current = network.get_phase_tap_changers().loc[transformer_id, "tap"]
            tap = int(current) + tap_position
        network.update_phase_tap_changers(id=transformer_id, tap=tap)
