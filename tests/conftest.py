"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory grid toolkit, content store over temp dirs, SQLite
async database session, sample network models
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import copy
import json
import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Any

import pytest

from gridviz.boundary.grid.toolkit import (
    AreaDiagramParameters,
    Coordinate,
    GridToolkit,
    LineRecord,
    SubstationRecord,
    VoltageLevelRecord,
)
from gridviz.boundary.storage.content_store import ContentStore

GEO_POST_PROCESSOR_KEY = "iidm.import.cgmes.post-processors"


class FakeGridToolkit(GridToolkit):
    """
    In-memory grid toolkit reading JSON network files.

    Position extensions are only attached when the GL post-processor is
    requested, like a real CGMES import. Drawings are deterministic SVG
    listing every element, so edits show up as content changes.
    """

    def __init__(self) -> None:
        self.loads: list[tuple[Path, dict | None]] = []
        self.drawings: list[tuple[str, Any]] = []
        self.fail_drawing = False
        # When set, drawing signals draw_started and blocks until the gate opens.
        self.draw_gate: threading.Event | None = None
        self.draw_started = threading.Event()

    # Loading and inspection

    def load(self, path: Path, parameters: dict[str, str] | None = None) -> Any:
        self.loads.append((Path(path), parameters))
        model = json.loads(Path(path).read_text(encoding="utf-8"))
        network = copy.deepcopy(model)
        if not parameters or parameters.get(GEO_POST_PROCESSOR_KEY) != "cgmesGLImport":
            network["substationPositions"] = {}
            network["linePositions"] = {}
        return network

    def substations(self, network: Any) -> list[SubstationRecord]:
        return [
            SubstationRecord(id=s["id"], name=s.get("name", s["id"]), country=s.get("country"))
            for s in network.get("substations", [])
        ]

    def voltage_levels(self, network: Any) -> list[VoltageLevelRecord]:
        return [
            VoltageLevelRecord(
                id=v["id"],
                name=v.get("name", v["id"]),
                substation_id=v.get("substationId"),
                nominal_v=v["nominalV"],
                topology_kind=v.get("topologyKind"),
            )
            for v in network.get("voltageLevels", [])
        ]

    def lines(self, network: Any) -> list[LineRecord]:
        return [
            LineRecord(
                id=line["id"],
                name=line.get("name", line["id"]),
                voltage_level1_id=line["voltageLevel1"],
                voltage_level2_id=line["voltageLevel2"],
                connected1=line.get("connected1", True),
                connected2=line.get("connected2", True),
                p1=line.get("p1", 0.0),
                p2=line.get("p2", 0.0),
                i1=line.get("i1", 0.0),
                i2=line.get("i2", 0.0),
            )
            for line in network.get("lines", [])
        ]

    def substation_positions(self, network: Any) -> dict[str, Coordinate]:
        return {
            key: Coordinate(latitude=value[0], longitude=value[1])
            for key, value in network.get("substationPositions", {}).items()
        }

    def line_positions(self, network: Any) -> dict[str, list[Coordinate]]:
        return {
            key: [Coordinate(latitude=lat, longitude=lon) for lat, lon in points]
            for key, points in network.get("linePositions", {}).items()
        }

    def has_substation(self, network: Any, substation_id: str) -> bool:
        return any(s["id"] == substation_id for s in network.get("substations", []))

    def has_voltage_level(self, network: Any, voltage_level_id: str) -> bool:
        return any(v["id"] == voltage_level_id for v in network.get("voltageLevels", []))

    def has_connectable(self, network: Any, equipment_id: str) -> bool:
        return equipment_id in self._connectable_ids(network)

    def has_phase_tap_changer(self, network: Any, transformer_id: str) -> bool:
        return transformer_id in network.get("phaseTapChangers", {})

    # Drawing

    def draw_area(self, network, svg_path, metadata_path, parameters=None):
        self._check_drawing()
        parameters = parameters or AreaDiagramParameters(
            layout={"injectionsAdded": False}, svg={"svgWidthAndHeightAdded": False}
        )
        self.drawings.append(("area", parameters))
        self._write(network, svg_path, "area")
        Path(metadata_path).write_text(
            json.dumps(
                {
                    "layoutParameters": parameters.layout,
                    "svgParameters": parameters.svg,
                    "nodes": [v["id"] for v in network.get("voltageLevels", [])],
                }
            ),
            encoding="utf-8",
        )

    def draw_substation(self, network, substation_id, svg_path, metadata_path):
        self._draw_single_line(network, ("substation", substation_id), svg_path, metadata_path)

    def draw_voltage_level(self, network, voltage_level_id, svg_path, metadata_path):
        self._draw_single_line(network, ("voltage", voltage_level_id), svg_path, metadata_path)

    def draw_substations(self, network, substation_ids, svg_path, metadata_path):
        self._draw_single_line(network, ("all", list(substation_ids)), svg_path, metadata_path)

    # Structural changes

    def remove_connectable(self, network: Any, equipment_id: str) -> None:
        for key in ("lines", "loads", "generators"):
            network[key] = [e for e in network.get(key, []) if e["id"] != equipment_id]
        network.get("linePositions", {}).pop(equipment_id, None)

    def create_load(self, network, load_id, bus_or_busbar_section_id, p0, q0, position_order=None):
        network.setdefault("loads", []).append(
            {"id": load_id, "bus": bus_or_busbar_section_id, "p0": p0, "q0": q0}
        )

    def create_generator(
        self, network, generator_id, bus_or_busbar_section_id, target_p, target_v,
        min_p, max_p, position_order=None,
    ):
        network.setdefault("generators", []).append(
            {"id": generator_id, "bus": bus_or_busbar_section_id, "targetP": target_p}
        )

    def create_line(
        self, network, line_id, bus_or_busbar_section_id1, bus_or_busbar_section_id2,
        r, x, g1=0.0, b1=0.0, g2=0.0, b2=0.0, position_order1=None, position_order2=None,
    ):
        buses = network.get("buses", {})
        network.setdefault("lines", []).append(
            {
                "id": line_id,
                "voltageLevel1": buses.get(bus_or_busbar_section_id1, bus_or_busbar_section_id1),
                "voltageLevel2": buses.get(bus_or_busbar_section_id2, bus_or_busbar_section_id2),
            }
        )

    def create_substation(self, network, substation_id, name, country=None):
        network.setdefault("substations", []).append(
            {"id": substation_id, "name": name, "country": country}
        )

    def create_voltage_level(
        self, network, substation_id, voltage_level_id, name, nominal_v, topology_kind
    ):
        network.setdefault("voltageLevels", []).append(
            {
                "id": voltage_level_id,
                "name": name,
                "substationId": substation_id,
                "nominalV": nominal_v,
                "topologyKind": topology_kind,
            }
        )

    def set_phase_tap_position(self, network, transformer_id, tap_position, relative=False):
        taps = network["phaseTapChangers"]
        taps[transformer_id] = taps[transformer_id] + tap_position if relative else tap_position

    # Helpers

    @staticmethod
    def _connectable_ids(network: Any) -> set[str]:
        return {
            e["id"]
            for key in ("lines", "loads", "generators")
            for e in network.get(key, [])
        }

    def _check_drawing(self) -> None:
        if self.draw_gate is not None:
            self.draw_started.set()
            self.draw_gate.wait(timeout=5)
        if self.fail_drawing:
            raise RuntimeError("drawing backend unavailable")

    def _draw_single_line(self, network, scope, svg_path, metadata_path):
        self._check_drawing()
        self.drawings.append(scope)
        self._write(network, svg_path, scope[0])
        Path(metadata_path).write_text(json.dumps({"scope": scope[0]}), encoding="utf-8")

    @staticmethod
    def _write(network: Any, svg_path: Path, kind: str) -> None:
        elements = sorted(
            [s["id"] for s in network.get("substations", [])]
            + [v["id"] for v in network.get("voltageLevels", [])]
            + [e["id"] for key in ("lines", "loads", "generators") for e in network.get(key, [])]
        )
        taps = ",".join(f"{k}={v}" for k, v in sorted(network.get("phaseTapChangers", {}).items()))
        body = "".join(f'<g id="{element}"/>' for element in elements)
        Path(svg_path).write_text(
            f'<svg data-kind="{kind}" data-taps="{taps}">{body}</svg>', encoding="utf-8"
        )


def sample_model(with_geo: bool = False) -> dict[str, Any]:
    """Two substations joined by one line, with one load."""
    model: dict[str, Any] = {
        "substations": [
            {"id": "S1", "name": "North", "country": "DE"},
            {"id": "S2", "name": "South", "country": "DE"},
        ],
        "voltageLevels": [
            {"id": "VL1", "name": "North 380", "substationId": "S1", "nominalV": 380.0,
             "topologyKind": "BUS_BREAKER"},
            {"id": "VL2", "name": "South 380", "substationId": "S2", "nominalV": 380.0,
             "topologyKind": "NODE_BREAKER"},
        ],
        "lines": [
            {"id": "L1", "name": "North-South", "voltageLevel1": "VL1", "voltageLevel2": "VL2",
             "connected1": True, "connected2": False, "p1": 120.5, "p2": 0.0,
             "i1": 180.2, "i2": 0.0},
        ],
        "loads": [{"id": "LOAD1", "voltageLevelId": "VL2"}],
        "buses": {"B1": "VL1", "B2": "VL2"},
        "phaseTapChangers": {"PST1": 0},
    }
    if with_geo:
        model["substationPositions"] = {"S1": [52.52, 13.40], "S2": [48.14, 11.58]}
        model["linePositions"] = {"L1": [[52.52, 13.40], [50.11, 12.00], [48.14, 11.58]]}
    return model


def model_bytes(with_geo: bool = False) -> bytes:
    """Serialized sample model as it would arrive in an upload."""
    return json.dumps(sample_model(with_geo)).encode("utf-8")


@pytest.fixture
def fake_toolkit() -> FakeGridToolkit:
    """In-memory grid toolkit."""
    return FakeGridToolkit()


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for test files.

    Yields:
        Path: Path to temporary directory
    """
    temp_path = Path(tempfile.mkdtemp(prefix="gridviz_test_"))
    yield temp_path

    # Cleanup
    if temp_path.exists():
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def content_store(temp_dir: Path) -> ContentStore:
    """Content store rooted in a temporary directory."""
    return ContentStore(ingest_dir=temp_dir / "cgmes", output_dir=temp_dir / "output")


@pytest.fixture
def model_file(temp_dir: Path) -> Path:
    """Sample model without geographic extensions written to disk."""
    path = temp_dir / "model.zip"
    path.write_bytes(model_bytes())
    return path


@pytest.fixture
def geo_model_file(temp_dir: Path) -> Path:
    """Sample model with geographic extensions written to disk."""
    path = temp_dir / "geo_model.zip"
    path.write_bytes(model_bytes(with_geo=True))
    return path


@pytest.fixture
def sample_model_bytes() -> bytes:
    return model_bytes()


@pytest.fixture
def sample_geo_model_bytes() -> bytes:
    return model_bytes(with_geo=True)


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from gridviz.boundary.db.base import Base
    from gridviz.boundary.db.models import DiagramModel, MapDiagramModel  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def diagram_id() -> uuid.UUID:
    """Generate a test diagram ID."""
    return uuid.uuid4()
