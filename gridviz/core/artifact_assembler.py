"""
Artifact assembler.

Locates a render's output files by naming convention, validates that
each exists, and packages their content into immutable bundles.

Dependencies: json, pathlib
System role: Bundle validation between rendering and persistence
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gridviz.core.diagram_renderer import AREA_BASE_NAME, metadata_file, svg_file
from gridviz.core.exceptions import NotFoundError, PipelineIOError
from gridviz.core.metadata_extractor import (
    LINE_LOCATIONS_FILE,
    LINE_POSITIONS_FILE,
    SUBSTATION_LOCATIONS_FILE,
    SUBSTATION_POSITIONS_FILE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagramFiles:
    """One rendered diagram paired with its metadata document."""

    svg_content: str
    svg_file_name: str
    metadata: dict[str, Any]
    metadata_file_name: str


@dataclass(frozen=True)
class MapDiagramFiles:
    """Area diagram bundle plus the four map side-channels."""

    diagram: DiagramFiles
    substation_locations: Any
    substation_positions: Any
    line_locations: Any
    line_positions: Any


class ArtifactAssembler:
    """Reads render output back into bundles."""

    def assemble(self, output_dir: Path, base_name: str, label: str = "") -> DiagramFiles:
        """
        Read ``{base_name}.svg`` and ``{base_name}_metadata.json``.

        Args:
            output_dir: Directory the renderer wrote to
            base_name: Sidecar base name
            label: Prefix for error messages (e.g. "Modified")

        Returns:
            DiagramFiles: Content and original file names

        Raises:
            NotFoundError: Naming whichever of the two files is missing
            PipelineIOError: If a file cannot be read or the metadata is not JSON
        """
        prefix = f"{label} " if label else ""
        svg_path = svg_file(output_dir, base_name)
        json_path = metadata_file(output_dir, base_name)

        self._require(svg_path, f"{prefix}SVG file")
        self._require(json_path, f"{prefix}Metadata file")

        metadata = self._read_json(json_path)
        if not isinstance(metadata, dict):
            raise PipelineIOError(
                f"Metadata file is not a JSON object: {json_path}", operation="assemble"
            )

        files = DiagramFiles(
            svg_content=self._read_text(svg_path),
            svg_file_name=svg_path.name,
            metadata=metadata,
            metadata_file_name=json_path.name,
        )
        logger.debug(
            "Assembled diagram bundle",
            extra={"output_dir": str(output_dir), "base_name": base_name},
        )
        return files

    def assemble_map(self, output_dir: Path, base_name: str = AREA_BASE_NAME) -> MapDiagramFiles:
        """
        Read an area diagram bundle together with the map side-channels.

        Raises:
            NotFoundError: Naming the first missing file
            PipelineIOError: If any file cannot be read or parsed
        """
        diagram = self.assemble(output_dir, base_name)

        channels = {}
        for file_name in (
            SUBSTATION_LOCATIONS_FILE,
            SUBSTATION_POSITIONS_FILE,
            LINE_LOCATIONS_FILE,
            LINE_POSITIONS_FILE,
        ):
            path = output_dir / file_name
            self._require(path, "JSON file")
            channels[file_name] = self._read_json(path)

        return MapDiagramFiles(
            diagram=diagram,
            substation_locations=channels[SUBSTATION_LOCATIONS_FILE],
            substation_positions=channels[SUBSTATION_POSITIONS_FILE],
            line_locations=channels[LINE_LOCATIONS_FILE],
            line_positions=channels[LINE_POSITIONS_FILE],
        )

    @staticmethod
    def _require(path: Path, file_type: str) -> None:
        if not path.is_file():
            raise NotFoundError(file_type, str(path))

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PipelineIOError(f"Failed to read file: {path}", operation="assemble") from e

    @classmethod
    def _read_json(cls, path: Path) -> Any:
        text = cls._read_text(path)
        try:
            return json.loads(text)
        except ValueError as e:
            raise PipelineIOError(f"Invalid JSON content in {path}", operation="assemble") from e
