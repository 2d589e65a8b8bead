"""
Tests for ContentStore.

System role: Verification of upload and snapshot storage
"""

from pathlib import Path

import pytest

from gridviz.boundary.storage.content_store import ContentStore
from gridviz.core.exceptions import NotFoundError, ValidationError


class TestStoreAndResolve:
    def test_store_writes_canonical_zip(self, content_store: ContentStore) -> None:
        path = content_store.store(b"model", "nad_abc")

        assert path == content_store.ingest_dir / "nad_abc.zip"
        assert path.read_bytes() == b"model"

    def test_store_overwrites_existing_name(self, content_store: ContentStore) -> None:
        content_store.store(b"first", "nad_abc")
        content_store.store(b"second", "nad_abc")

        assert content_store.resolve("nad_abc").read_bytes() == b"second"

    def test_resolve_missing_raises_not_found(self, content_store: ContentStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            content_store.resolve("nad_missing")

        assert exc_info.value.resource == "ZIP file"

    @pytest.mark.parametrize("name", ["", "  ", "../escape", "a/b", "..", "a\\b"])
    def test_rejects_invalid_names(self, content_store: ContentStore, name: str) -> None:
        with pytest.raises(ValidationError):
            content_store.store(b"model", name)


class TestRename:
    def test_moves_snapshot(self, content_store: ContentStore) -> None:
        content_store.store(b"model", "old")

        target = content_store.rename("old", "new")

        assert target == content_store.snapshot_path("new")
        assert content_store.resolve("new").read_bytes() == b"model"
        assert not content_store.snapshot_path("old").exists()

    def test_nothing_to_move_returns_none(self, content_store: ContentStore) -> None:
        assert content_store.rename("old", "new") is None

    def test_same_name_is_noop(self, content_store: ContentStore) -> None:
        content_store.store(b"model", "same")

        assert content_store.rename("same", "same") is None
        assert content_store.resolve("same").is_file()

    def test_existing_target_is_not_overwritten(self, content_store: ContentStore) -> None:
        content_store.store(b"model-a", "nad_a")
        content_store.store(b"pending-upload", "sld_x")

        with pytest.raises(ValidationError):
            content_store.rename("nad_a", "sld_x")

        assert content_store.resolve("nad_a").read_bytes() == b"model-a"
        assert content_store.resolve("sld_x").read_bytes() == b"pending-upload"


class TestDelete:
    def test_removes_snapshot_and_redraws(self, content_store: ContentStore) -> None:
        content_store.store(b"model", "nad_abc")
        redraw_dir = content_store.modification_dir("nad_abc")
        (redraw_dir / "nad_abc.svg").write_text("<svg/>")

        assert content_store.delete("nad_abc") is True
        assert not content_store.snapshot_path("nad_abc").exists()
        assert not redraw_dir.exists()

    def test_missing_snapshot_returns_false(self, content_store: ContentStore) -> None:
        assert content_store.delete("nad_missing") is False


class TestRenderWorkspace:
    def test_workspace_is_removed_on_exit(self, content_store: ContentStore) -> None:
        with content_store.render_workspace(prefix="nad_") as workspace:
            (workspace / "network.svg").write_text("<svg/>")
            assert workspace.is_dir()

        assert not workspace.exists()

    def test_workspace_is_removed_on_error(self, content_store: ContentStore) -> None:
        with pytest.raises(RuntimeError):
            with content_store.render_workspace() as workspace:
                raise RuntimeError("render failed")

        assert not workspace.exists()

    def test_workspaces_are_isolated(self, content_store: ContentStore) -> None:
        with content_store.render_workspace() as first, content_store.render_workspace() as second:
            assert first != second
            assert Path(first).parent == Path(second).parent
