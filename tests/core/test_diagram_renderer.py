"""
Tests for DiagramRenderer and SldMode.

System role: Verification of the render step
"""

import json
from pathlib import Path

import pytest

from gridviz.boundary.grid.toolkit import AreaDiagramParameters
from gridviz.core.diagram_renderer import (
    DiagramRenderer,
    SldMode,
    metadata_file,
    svg_file,
)
from gridviz.core.exceptions import NotFoundError, PipelineIOError, ValidationError


@pytest.fixture
def renderer(fake_toolkit) -> DiagramRenderer:
    return DiagramRenderer(fake_toolkit)


@pytest.fixture
def network(fake_toolkit, model_file: Path):
    return fake_toolkit.load(model_file)


class TestSldMode:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("substation", SldMode.SUBSTATION),
            ("voltage", SldMode.VOLTAGE),
            (" Voltage ", SldMode.VOLTAGE),
            ("all", SldMode.ALL),
            ("anything", SldMode.ALL),
            ("", SldMode.ALL),
            (None, SldMode.ALL),
        ],
    )
    def test_parse(self, value, expected) -> None:
        assert SldMode.parse(value) is expected


class TestDrawArea:
    """Test suite for area diagram rendering."""

    def test_writes_sidecar_pair(
        self, renderer: DiagramRenderer, network, temp_dir: Path
    ) -> None:
        svg_path = renderer.draw_area(network, temp_dir)

        assert svg_path == temp_dir / "network.svg"
        assert svg_path.is_file()
        assert (temp_dir / "network_metadata.json").is_file()

    def test_redraw_forwards_stored_parameters(
        self, renderer: DiagramRenderer, fake_toolkit, network, temp_dir: Path
    ) -> None:
        parameters = AreaDiagramParameters(
            layout={"injectionsAdded": True}, svg={"fixedWidth": 800}
        )

        renderer.redraw(network, temp_dir, parameters, base_name="nad_1")

        metadata = json.loads(metadata_file(temp_dir, "nad_1").read_text())
        assert metadata["layoutParameters"] == {"injectionsAdded": True}
        assert metadata["svgParameters"] == {"fixedWidth": 800}
        assert fake_toolkit.drawings[-1] == ("area", parameters)

    def test_drawing_failure_is_wrapped(
        self, renderer: DiagramRenderer, fake_toolkit, network, temp_dir: Path
    ) -> None:
        fake_toolkit.fail_drawing = True

        with pytest.raises(PipelineIOError) as exc_info:
            renderer.draw_area(network, temp_dir)

        assert exc_info.value.details["operation"] == "draw"


class TestDrawSingleLine:
    """Test suite for single-line rendering dispatch."""

    def test_substation_mode(
        self, renderer: DiagramRenderer, fake_toolkit, network, temp_dir: Path
    ) -> None:
        svg_path = renderer.draw_single_line(network, temp_dir, "substation", "S1")

        assert svg_path == svg_file(temp_dir, "sld")
        assert fake_toolkit.drawings == [("substation", "S1")]

    def test_voltage_mode(
        self, renderer: DiagramRenderer, fake_toolkit, network, temp_dir: Path
    ) -> None:
        renderer.draw_single_line(network, temp_dir, SldMode.VOLTAGE, "VL2")

        assert fake_toolkit.drawings == [("voltage", "VL2")]

    @pytest.mark.parametrize("mode", [None, "all", "multi"])
    def test_other_modes_draw_every_substation(
        self, renderer: DiagramRenderer, fake_toolkit, network, temp_dir: Path, mode
    ) -> None:
        renderer.draw_single_line(network, temp_dir, mode, "ignored")

        assert fake_toolkit.drawings == [("all", ["S1", "S2"])]
        assert metadata_file(temp_dir, "sld").is_file()

    def test_unknown_substation(self, renderer: DiagramRenderer, network, temp_dir: Path) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            renderer.draw_single_line(network, temp_dir, "substation", "S9")

        assert exc_info.value.message == "Substation not found: S9"

    def test_unknown_voltage_level(
        self, renderer: DiagramRenderer, network, temp_dir: Path
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            renderer.draw_single_line(network, temp_dir, "voltage", "VL9")

        assert exc_info.value.resource == "Voltage level"

    @pytest.mark.parametrize("mode", ["substation", "voltage"])
    def test_scoped_mode_requires_selector(
        self, renderer: DiagramRenderer, network, temp_dir: Path, mode
    ) -> None:
        with pytest.raises(ValidationError):
            renderer.draw_single_line(network, temp_dir, mode, " ")

    @pytest.mark.parametrize(
        "lookup, mode, selector",
        [
            ("has_substation", "substation", "S1"),
            ("has_voltage_level", "voltage", "VL1"),
            ("substations", "all", None),
        ],
    )
    def test_lookup_failure_is_wrapped(
        self,
        renderer: DiagramRenderer,
        fake_toolkit,
        network,
        temp_dir: Path,
        monkeypatch,
        lookup,
        mode,
        selector,
    ) -> None:
        def broken(*args):
            raise RuntimeError("network index unavailable")

        monkeypatch.setattr(fake_toolkit, lookup, broken)

        with pytest.raises(PipelineIOError) as exc_info:
            renderer.draw_single_line(network, temp_dir, mode, selector)

        assert "network index unavailable" in exc_info.value.message
        assert fake_toolkit.drawings == []
