"""
End-to-end pipeline tests with SQLite and the in-memory grid toolkit.

Covers NAD, map and SLD generation and re-entry through the modification
pipeline: a modified diagram keeps its id and name, changes content and
advances updated_at, while failures leave stored state untouched.

System role: Verification of generation and modification use cases
"""

import asyncio
import threading
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.application.services import (
    DiagramGenerationService,
    DiagramStorageService,
    MapDiagramStorageService,
    ModificationService,
)
from gridviz.boundary.db.models.diagram_model import DiagramType
from gridviz.boundary.storage.content_store import ContentStore
from gridviz.core.exceptions import (
    MissingGeoDataError,
    NotFoundError,
    PipelineIOError,
    ValidationError,
)
from gridviz.core.network_changes import CreateLoad, SetPhaseTapPosition
from gridviz.models.diagram import UpdateDiagramRequest


@pytest.fixture
def generation_service(test_async_db: AsyncSession, fake_toolkit, content_store: ContentStore):
    return DiagramGenerationService(test_async_db, fake_toolkit, content_store)


@pytest.fixture
def modification_service(
    test_async_db: AsyncSession, fake_toolkit, content_store: ContentStore
):
    return ModificationService(test_async_db, fake_toolkit, content_store)


@pytest.fixture
def storage_service(test_async_db: AsyncSession, content_store: ContentStore):
    return DiagramStorageService(test_async_db, content_store)


class TestGenerateNad:
    @pytest.mark.asyncio
    async def test_persists_named_artifact(
        self,
        generation_service: DiagramGenerationService,
        content_store: ContentStore,
        sample_model_bytes: bytes,
    ) -> None:
        artifact = await generation_service.generate_nad(sample_model_bytes)

        assert artifact.name == f"nad_{artifact.id}"
        assert artifact.diagram_type is DiagramType.NAD
        assert '<g id="L1"/>' in artifact.svg_content
        assert "layoutParameters" in artifact.metadata
        assert content_store.resolve(artifact.name).read_bytes() == sample_model_bytes

    @pytest.mark.asyncio
    async def test_render_workspace_is_cleaned_up(
        self,
        generation_service: DiagramGenerationService,
        temp_dir,
        sample_model_bytes: bytes,
    ) -> None:
        await generation_service.generate_nad(sample_model_bytes)

        assert list((temp_dir / "output").iterdir()) == []

    @pytest.mark.asyncio
    async def test_empty_upload_is_rejected(
        self, generation_service: DiagramGenerationService
    ) -> None:
        with pytest.raises(ValidationError):
            await generation_service.generate_nad(b"")

    @pytest.mark.asyncio
    async def test_draw_failure_persists_nothing(
        self,
        generation_service: DiagramGenerationService,
        storage_service: DiagramStorageService,
        fake_toolkit,
        content_store: ContentStore,
        sample_model_bytes: bytes,
    ) -> None:
        fake_toolkit.fail_drawing = True

        with pytest.raises(PipelineIOError):
            await generation_service.generate_nad(sample_model_bytes)

        assert await storage_service.list_all() == []
        assert list(content_store.ingest_dir.glob("*.zip")) == []

    @pytest.mark.asyncio
    async def test_persistence_failure_discards_upload(
        self,
        generation_service: DiagramGenerationService,
        content_store: ContentStore,
        sample_model_bytes: bytes,
        monkeypatch,
    ) -> None:
        async def fail_save(*args, **kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(generation_service.diagrams, "save_files", fail_save)

        with pytest.raises(RuntimeError):
            await generation_service.generate_nad(sample_model_bytes)

        assert list(content_store.ingest_dir.glob("*.zip")) == []


class TestGenerateMap:
    @pytest.mark.asyncio
    async def test_bundle_carries_all_channels(
        self,
        generation_service: DiagramGenerationService,
        sample_geo_model_bytes: bytes,
    ) -> None:
        artifact = await generation_service.generate_map(sample_geo_model_bytes)

        assert artifact.name.startswith("nad_")
        assert {s["id"] for s in artifact.substation_positions} == {"S1", "S2"}
        assert artifact.line_positions[0]["id"] == "L1"
        assert artifact.line_locations[0]["p2"] == "NaN"
        assert artifact.substation_locations[0]["voltageLevels"][0]["id"] == "VL1"

    @pytest.mark.asyncio
    async def test_model_without_gl_profile_fails_closed(
        self,
        generation_service: DiagramGenerationService,
        test_async_db: AsyncSession,
        content_store: ContentStore,
        sample_model_bytes: bytes,
    ) -> None:
        with pytest.raises(MissingGeoDataError):
            await generation_service.generate_map(sample_model_bytes)

        assert await MapDiagramStorageService(test_async_db).list_all() == []
        assert list(content_store.ingest_dir.glob("*.zip")) == []

    @pytest.mark.asyncio
    async def test_persistence_failure_discards_upload(
        self,
        generation_service: DiagramGenerationService,
        content_store: ContentStore,
        sample_geo_model_bytes: bytes,
        monkeypatch,
    ) -> None:
        async def fail_save(*args, **kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(generation_service.map_diagrams, "save", fail_save)

        with pytest.raises(RuntimeError):
            await generation_service.generate_map(sample_geo_model_bytes)

        assert list(content_store.ingest_dir.glob("*.zip")) == []


class TestGenerateSld:
    @pytest.mark.asyncio
    async def test_selection_then_render(
        self,
        generation_service: DiagramGenerationService,
        fake_toolkit,
        sample_model_bytes: bytes,
    ) -> None:
        selection = await generation_service.sld_selection_data(sample_model_bytes)

        assert [s.id for s in selection.substations] == ["S1", "S2"]
        assert [v.id for v in selection.voltage_levels] == ["VL1", "VL2"]

        artifact = await generation_service.generate_sld(
            uuid.UUID(selection.id), "voltage", "VL1"
        )

        assert artifact.id == uuid.UUID(selection.id)
        assert artifact.name == f"sld_{selection.id}"
        assert artifact.diagram_type is DiagramType.SLD
        assert fake_toolkit.drawings[-1] == ("voltage", "VL1")

    @pytest.mark.asyncio
    async def test_rerender_overwrites_same_artifact(
        self, generation_service: DiagramGenerationService, sample_model_bytes: bytes
    ) -> None:
        selection = await generation_service.sld_selection_data(sample_model_bytes)
        artifact_id = uuid.UUID(selection.id)

        first = await generation_service.generate_sld(artifact_id, "substation", "S1")
        second = await generation_service.generate_sld(artifact_id, None)

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert 'data-kind="all"' in second.svg_content

    @pytest.mark.asyncio
    async def test_unknown_upload_raises(
        self, generation_service: DiagramGenerationService
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await generation_service.generate_sld(uuid.uuid4(), "all")

        assert exc_info.value.resource == "ZIP file"

    @pytest.mark.asyncio
    async def test_unknown_substation_persists_nothing(
        self,
        generation_service: DiagramGenerationService,
        storage_service: DiagramStorageService,
        sample_model_bytes: bytes,
    ) -> None:
        selection = await generation_service.sld_selection_data(sample_model_bytes)

        with pytest.raises(NotFoundError):
            await generation_service.generate_sld(uuid.UUID(selection.id), "substation", "S9")

        assert await storage_service.exists_by_name(f"sld_{selection.id}") is False


class TestModification:
    @pytest.mark.asyncio
    async def test_remove_connectable_redraws_same_artifact(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)

        modified = await modification_service.remove_connectable(original.id, "L1")

        assert modified.id == original.id
        assert modified.name == original.name
        assert modified.created_at == original.created_at
        assert modified.updated_at > original.updated_at
        assert modified.svg_content != original.svg_content
        assert '<g id="L1"/>' not in modified.svg_content

    @pytest.mark.asyncio
    async def test_redraw_reuses_stored_parameters(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        storage_service: DiagramStorageService,
        fake_toolkit,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)
        metadata = dict(original.metadata)
        metadata["layoutParameters"] = {"injectionsAdded": True}
        await storage_service.save(original.name, original.svg_content, metadata, DiagramType.NAD)

        await modification_service.apply(
            original.id,
            CreateLoad(
                load_id="LOAD2",
                voltage_level_id="VL1",
                bus_or_busbar_section_id="B1",
                p0=5.0,
                q0=0.0,
            ),
        )

        _, parameters = fake_toolkit.drawings[-1]
        assert parameters.layout == {"injectionsAdded": True}

    @pytest.mark.asyncio
    async def test_each_change_starts_from_stored_snapshot(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)

        await modification_service.remove_connectable(original.id, "L1")
        latest = await modification_service.apply(
            original.id, SetPhaseTapPosition(transformer_id="PST1", tap_position=4)
        )

        assert 'data-taps="PST1=4"' in latest.svg_content
        assert '<g id="L1"/>' in latest.svg_content

    @pytest.mark.asyncio
    async def test_unknown_equipment_leaves_artifact_unchanged(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        storage_service: DiagramStorageService,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)

        with pytest.raises(NotFoundError):
            await modification_service.remove_connectable(original.id, "GHOST")

        stored = await storage_service.get_by_id(original.id)
        assert stored.updated_at == original.updated_at
        assert stored.svg_content == original.svg_content

    @pytest.mark.asyncio
    async def test_unknown_diagram_raises(
        self, modification_service: ModificationService
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await modification_service.remove_connectable(uuid.uuid4(), "L1")

        assert exc_info.value.resource == "Diagram"

    @pytest.mark.asyncio
    async def test_single_line_diagram_is_rejected(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        sample_model_bytes: bytes,
    ) -> None:
        selection = await generation_service.sld_selection_data(sample_model_bytes)
        sld = await generation_service.generate_sld(uuid.UUID(selection.id), "all")

        with pytest.raises(ValidationError):
            await modification_service.remove_connectable(sld.id, "L1")

    @pytest.mark.asyncio
    async def test_redraw_failure_leaves_artifact_unchanged(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        storage_service: DiagramStorageService,
        fake_toolkit,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)
        fake_toolkit.fail_drawing = True

        with pytest.raises(PipelineIOError):
            await modification_service.remove_connectable(original.id, "L1")

        stored = await storage_service.get_by_id(original.id)
        assert stored.svg_content == original.svg_content

    @pytest.mark.asyncio
    async def test_rename_waits_for_running_modification(
        self,
        generation_service: DiagramGenerationService,
        modification_service: ModificationService,
        fake_toolkit,
        test_async_db: AsyncSession,
        content_store: ContentStore,
        sample_model_bytes: bytes,
    ) -> None:
        original = await generation_service.generate_nad(sample_model_bytes)
        fake_toolkit.draw_gate = threading.Event()

        modification = asyncio.create_task(
            modification_service.remove_connectable(original.id, "L1")
        )
        assert await asyncio.to_thread(fake_toolkit.draw_started.wait, 5)

        async with AsyncSession(test_async_db.bind, expire_on_commit=False) as other_db:
            rename = asyncio.create_task(
                DiagramStorageService(other_db, content_store).update(
                    original.id,
                    UpdateDiagramRequest(name="renamed", svg_content="<svg/>", metadata={}),
                )
            )
            await asyncio.sleep(0.05)
            assert not rename.done()

            fake_toolkit.draw_gate.set()
            modified = await modification
            renamed = await rename

        assert modified.id == original.id
        assert modified.name == original.name
        assert renamed.id == original.id
        assert renamed.name == "renamed"

        test_async_db.expire_all()
        rows = await DiagramStorageService(test_async_db).list_all()
        assert [(row.id, row.name) for row in rows] == [(original.id, "renamed")]
        assert content_store.resolve("renamed").read_bytes() == sample_model_bytes
