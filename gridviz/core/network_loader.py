"""
Network loader.

Parses a stored model file into an in-memory network through the grid
toolkit, either plainly or with the geographical-location (GL) profile.
A GL-profile load that yields no positioned substation fails closed.

Dependencies: gridviz.boundary.grid, gridviz.configs
System role: Model ingestion step of every render pipeline
"""

import logging
from pathlib import Path
from typing import Any

from gridviz.boundary.grid.toolkit import GridToolkit
from gridviz.configs.grid import GridSettings
from gridviz.core.exceptions import (
    MissingGeoDataError,
    NotFoundError,
    PipelineIOError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class NetworkLoader:
    """Loads networks fresh from disk for each request."""

    def __init__(self, toolkit: GridToolkit, settings: GridSettings | None = None) -> None:
        """
        Initialize network loader.

        Args:
            toolkit: Grid toolkit used for parsing
            settings: Import settings for the GL profile
        """
        self.toolkit = toolkit
        self.settings = settings or GridSettings()

    def load_plain(self, path: str | Path | None) -> Any:
        """
        Load a network with default importer settings.

        Args:
            path: Stored model file

        Returns:
            Opaque network handle

        Raises:
            ValidationError: If path is null or empty
            NotFoundError: If the file does not exist
            PipelineIOError: If the toolkit cannot parse the file
        """
        model_path = self._validate(path)
        network = self._read(model_path, None)
        logger.info("Loaded network", extra={"path": str(model_path)})
        return network

    def load_with_geo_profile(self, path: str | Path | None) -> Any:
        """
        Load a network together with its geographical extensions.

        Args:
            path: Stored model file

        Returns:
            Opaque network handle with position extensions attached

        Raises:
            ValidationError: If path is null or empty
            NotFoundError: If the file does not exist
            PipelineIOError: If the toolkit cannot parse the file
            MissingGeoDataError: If no substation carries a position
        """
        model_path = self._validate(path)
        network = self._read(model_path, self.settings.geo_profile_parameters())

        try:
            positioned = len(self.toolkit.substation_positions(network))
        except Exception as e:
            raise PipelineIOError(
                f"Failed to read position extensions from: {model_path}", operation="load"
            ) from e

        if positioned == 0:
            logger.warning(
                "Network has no positioned substations",
                extra={"path": str(model_path)},
            )
            raise MissingGeoDataError(
                "No SubstationPosition extensions found. "
                "GL profile may be missing from CGMES files.",
                details={"path": str(model_path)},
            )

        logger.info(
            "Loaded network with GL profile",
            extra={"path": str(model_path), "positioned_substations": positioned},
        )
        return network

    @staticmethod
    def _validate(path: str | Path | None) -> Path:
        if path is None or not str(path).strip():
            raise ValidationError("File path cannot be null or empty", field="path")
        model_path = Path(path)
        if not model_path.exists():
            raise NotFoundError("Network file", str(model_path))
        return model_path

    def _read(self, model_path: Path, parameters: dict[str, str] | None) -> Any:
        try:
            network = self.toolkit.load(model_path, parameters)
        except Exception as e:
            logger.error(
                "Failed to load network",
                extra={"path": str(model_path), "error": str(e)},
            )
            raise PipelineIOError(
                f"Failed to load network from file: {model_path}", operation="load"
            ) from e

        if network is None:
            raise PipelineIOError(f"Failed to load network from: {model_path}", operation="load")
        return network
