"""
Diagram renderer.

Drives the grid toolkit to write a diagram and its metadata document
into an output directory, following the fixed sidecar naming convention
{base_name}.svg / {base_name}_metadata.json.

Dependencies: gridviz.boundary.grid
System role: Render step of generation and modification pipelines
"""

import enum
import logging
from pathlib import Path
from typing import Any

from gridviz.boundary.grid.toolkit import AreaDiagramParameters, GridToolkit
from gridviz.core.exceptions import NotFoundError, PipelineIOError, ValidationError

logger = logging.getLogger(__name__)

SVG_EXTENSION = ".svg"
METADATA_SUFFIX = "_metadata.json"

AREA_BASE_NAME = "network"
SINGLE_LINE_BASE_NAME = "sld"


def svg_file(output_dir: Path, base_name: str) -> Path:
    """Path of the diagram file for ``base_name``."""
    return output_dir / f"{base_name}{SVG_EXTENSION}"


def metadata_file(output_dir: Path, base_name: str) -> Path:
    """Path of the metadata sidecar for ``base_name``."""
    return output_dir / f"{base_name}{METADATA_SUFFIX}"


class SldMode(str, enum.Enum):
    """
    Single-line diagram scope.

    SUBSTATION: one named substation
    VOLTAGE: one named voltage level
    ALL: every substation in one multi-substation diagram
    """

    SUBSTATION = "substation"
    VOLTAGE = "voltage"
    ALL = "all"

    @classmethod
    def parse(cls, value: str | None) -> "SldMode":
        """Map a request value to a mode; missing or unknown values mean ALL."""
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.ALL


class DiagramRenderer:
    """Renders area and single-line diagrams through the toolkit."""

    def __init__(self, toolkit: GridToolkit) -> None:
        self.toolkit = toolkit

    def draw_area(
        self,
        network: Any,
        output_dir: Path,
        base_name: str = AREA_BASE_NAME,
    ) -> Path:
        """
        Render the whole network with default parameters.

        Returns:
            Path: Written SVG file
        """
        return self._draw_area(network, output_dir, base_name, None)

    def redraw(
        self,
        network: Any,
        output_dir: Path,
        parameters: AreaDiagramParameters,
        base_name: str = AREA_BASE_NAME,
    ) -> Path:
        """
        Re-render the whole network with previously stored view settings.

        Args:
            network: Network handle (typically just modified)
            output_dir: Target directory
            parameters: Layout and SVG settings recovered from stored metadata
            base_name: Sidecar base name

        Returns:
            Path: Written SVG file
        """
        return self._draw_area(network, output_dir, base_name, parameters)

    def draw_single_line(
        self,
        network: Any,
        output_dir: Path,
        mode: SldMode | str | None,
        selector: str | None = None,
        base_name: str = SINGLE_LINE_BASE_NAME,
    ) -> Path:
        """
        Render a single-line diagram scoped by ``mode``.

        Args:
            network: Network handle
            output_dir: Target directory
            mode: substation, voltage, or anything else for all substations
            selector: Substation or voltage level id (ignored for all)
            base_name: Sidecar base name

        Returns:
            Path: Written SVG file

        Raises:
            ValidationError: If a scoped mode has no selector
            NotFoundError: If the selected substation or voltage level is absent
            PipelineIOError: If drawing fails
        """
        if not isinstance(mode, SldMode):
            mode = SldMode.parse(mode)

        svg_path = svg_file(output_dir, base_name)
        metadata_path = metadata_file(output_dir, base_name)

        if mode is SldMode.SUBSTATION:
            substation_id = self._require_selector(selector)
            if not self._call(self.toolkit.has_substation, network, substation_id):
                raise NotFoundError("Substation", substation_id)
            self._call(
                self.toolkit.draw_substation, network, substation_id, svg_path, metadata_path
            )
            logger.info("Generated SLD for substation", extra={"substation_id": substation_id})

        elif mode is SldMode.VOLTAGE:
            voltage_level_id = self._require_selector(selector)
            if not self._call(self.toolkit.has_voltage_level, network, voltage_level_id):
                raise NotFoundError("Voltage level", voltage_level_id)
            self._call(
                self.toolkit.draw_voltage_level, network, voltage_level_id, svg_path, metadata_path
            )
            logger.info(
                "Generated SLD for voltage level", extra={"voltage_level_id": voltage_level_id}
            )

        else:
            substation_ids = [s.id for s in self._call(self.toolkit.substations, network)]
            self._call(
                self.toolkit.draw_substations, network, substation_ids, svg_path, metadata_path
            )
            logger.info(
                "Generated SLD for all substations", extra={"count": len(substation_ids)}
            )

        return svg_path

    def _draw_area(
        self,
        network: Any,
        output_dir: Path,
        base_name: str,
        parameters: AreaDiagramParameters | None,
    ) -> Path:
        svg_path = svg_file(output_dir, base_name)
        self._call(
            self.toolkit.draw_area,
            network,
            svg_path,
            metadata_file(output_dir, base_name),
            parameters,
        )
        logger.info(
            "Generated NAD",
            extra={"svg_path": str(svg_path), "stored_parameters": parameters is not None},
        )
        return svg_path

    @staticmethod
    def _require_selector(selector: str | None) -> str:
        if not selector or not selector.strip():
            raise ValidationError("Selection id cannot be null or empty", field="selectionId")
        return selector.strip()

    @staticmethod
    def _call(draw, *args) -> Any:
        try:
            return draw(*args)
        except Exception as e:
            logger.error("Diagram drawing failed", extra={"error": str(e)})
            raise PipelineIOError(f"Failed to draw diagram: {e}", operation="draw") from e
