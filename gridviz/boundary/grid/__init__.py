"""
Grid toolkit boundary.

Exports the capability interface and its record types. The pypowsybl
binding lives in ``gridviz.boundary.grid.powsybl_toolkit`` and is imported
lazily so the native library loads only when first needed.
"""

from gridviz.boundary.grid.toolkit import (
    AreaDiagramParameters,
    Coordinate,
    GridToolkit,
    LineRecord,
    SubstationRecord,
    VoltageLevelRecord,
)

__all__ = [
    "AreaDiagramParameters",
    "Coordinate",
    "GridToolkit",
    "LineRecord",
    "SubstationRecord",
    "VoltageLevelRecord",
]
