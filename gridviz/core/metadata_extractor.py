"""
Map metadata extractor.

Derives four independent JSON views of a network for map rendering:
topology tree, substation positions, line electrical snapshot and line
geo-paths. Position views fail hard when empty because the caller has
already required the GL profile.

Dependencies: gridviz.boundary.grid, gridviz.models.network
System role: Map side-channel generation
"""

import logging
import math
from pathlib import Path
from typing import Any

from gridviz.boundary.grid.toolkit import GridToolkit
from gridviz.core.exceptions import GridVizException, MissingGeoDataError, PipelineIOError
from gridviz.models.network import (
    CoordinateData,
    LineLocation,
    LineLocationsDocument,
    LinePositionData,
    LinePositionsDocument,
    SubstationData,
    SubstationPositionData,
    SubstationPositionsDocument,
    TopologyDocument,
    VoltageLevelData,
)

logger = logging.getLogger(__name__)

SUBSTATION_LOCATIONS_FILE = "substation_locations.json"
SUBSTATION_POSITIONS_FILE = "substation_positions.json"
LINE_LOCATIONS_FILE = "line_locations.json"
LINE_POSITIONS_FILE = "line_positions.json"


class MetadataExtractor:
    """Builds map-oriented JSON views of a network."""

    def __init__(self, toolkit: GridToolkit) -> None:
        self.toolkit = toolkit

    def topology_tree(self, network: Any) -> list[SubstationData]:
        """Every substation with its voltage levels (id, nominal voltage)."""
        levels_by_substation: dict[str, list[VoltageLevelData]] = {}
        for level in self.toolkit.voltage_levels(network):
            if level.substation_id is None:
                continue
            levels_by_substation.setdefault(level.substation_id, []).append(
                VoltageLevelData(
                    id=level.id,
                    substation_id=level.substation_id,
                    nominal_v=level.nominal_v,
                )
            )

        return [
            SubstationData(
                id=substation.id,
                name=substation.name,
                voltage_levels=levels_by_substation.get(substation.id, []),
            )
            for substation in self.toolkit.substations(network)
        ]

    def substation_positions(self, network: Any) -> list[SubstationPositionData]:
        """
        Positions of substations carrying a position extension.

        Raises:
            MissingGeoDataError: If no substation is positioned
        """
        positions = [
            SubstationPositionData(
                id=substation_id,
                coordinate=CoordinateData(lat=coordinate.latitude, lon=coordinate.longitude),
            )
            for substation_id, coordinate in self.toolkit.substation_positions(network).items()
        ]
        if not positions:
            raise MissingGeoDataError("CGMES does not have GL data for substations")
        return positions

    def line_snapshot(self, network: Any) -> list[LineLocation]:
        """Per-line endpoints, connectivity, and flows with NaN for disconnected sides."""
        return [
            LineLocation(
                id=line.id,
                name=line.name,
                voltage_level_id1=line.voltage_level1_id,
                voltage_level_id2=line.voltage_level2_id,
                terminal1_connected=line.connected1,
                terminal2_connected=line.connected2,
                p1=line.p1 if line.connected1 else math.nan,
                p2=line.p2 if line.connected2 else math.nan,
                i1=line.i1 if line.connected1 else math.nan,
                i2=line.i2 if line.connected2 else math.nan,
            )
            for line in self.toolkit.lines(network)
        ]

    def line_paths(self, network: Any) -> list[LinePositionData]:
        """
        Ordered waypoints of lines carrying a position extension.

        Raises:
            MissingGeoDataError: If no line is positioned
        """
        paths = [
            LinePositionData(
                id=line_id,
                coordinates=[
                    CoordinateData(lat=c.latitude, lon=c.longitude) for c in coordinates
                ],
            )
            for line_id, coordinates in self.toolkit.line_positions(network).items()
        ]
        if not paths:
            raise MissingGeoDataError("CGMES does not have GL data for lines")
        return paths

    def write_all(self, network: Any, output_dir: Path) -> dict[str, Path]:
        """
        Write all four views into ``output_dir``.

        Returns:
            dict[str, Path]: File name to written path

        Raises:
            MissingGeoDataError: If a position view is empty
            PipelineIOError: If a view cannot be derived or written
        """
        documents = {
            SUBSTATION_LOCATIONS_FILE: lambda: TopologyDocument(self.topology_tree(network)),
            SUBSTATION_POSITIONS_FILE: lambda: SubstationPositionsDocument(
                self.substation_positions(network)
            ),
            LINE_LOCATIONS_FILE: lambda: LineLocationsDocument(self.line_snapshot(network)),
            LINE_POSITIONS_FILE: lambda: LinePositionsDocument(self.line_paths(network)),
        }

        written = {}
        for file_name, build in documents.items():
            try:
                content = build().to_json()
            except GridVizException:
                raise
            except Exception as e:
                raise PipelineIOError(
                    f"Failed to convert network to JSON for {file_name}", operation="extract"
                ) from e

            target = output_dir / file_name
            try:
                target.write_text(content, encoding="utf-8")
            except OSError as e:
                raise PipelineIOError(
                    f"Failed to write JSON file: {target}", operation="extract"
                ) from e
            logger.debug("Wrote JSON file", extra={"path": str(target)})
            written[file_name] = target

        return written
