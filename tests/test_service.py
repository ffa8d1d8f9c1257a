# docmirror Service Tests
# Tests for MirrorService entry points

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import FakeProvider, RecordingCallback, write_file
from docmirror.config.schema import MirrorConfig
from docmirror.errors import ContainerNotFound, DirectoryCreateFailure
from docmirror.scheduler import OperationKind, TaskScheduler
from docmirror.service import MirrorService
from docmirror.sync.categories import Category
from docmirror.sync.mirror import DirectoryPolicy, MirrorResult
from docmirror.tree.local import LocalDirectoryProvider
from docmirror.tree.node import DIRECTORY_MIME
from docmirror.tree.source import SourceTree


@pytest.fixture
def service(provider: FakeProvider, callback: RecordingCallback, temp_dir: Path):
    svc = MirrorService(SourceTree(provider), temp_dir / "mirror", callback, scheduler=TaskScheduler(4))
    yield svc
    svc.close()


class TestMirrorToLocal:
    """Tests for MirrorService.mirror_to_local."""

    def test_mirror(self, provider: FakeProvider, service: MirrorService, callback: RecordingCallback):
        cat = provider.add_dir("", "CatA")
        provider.add_file(cat, "note1.md", b"hi", last_modified=100)

        outcome = service.mirror_to_local("sync").result(timeout=10)

        assert outcome.success
        assert outcome.kind == OperationKind.MIRROR_TO_APP
        assert isinstance(outcome.result, MirrorResult)
        assert (service.mirror_root / "CatA" / "note1.md").read_bytes() == b"hi"
        assert callback.completed == [("sync", outcome.result)]

    def test_unwritable_root_raises_before_scheduling(
        self, provider: FakeProvider, callback: RecordingCallback, temp_dir: Path
    ):
        blocker = write_file(temp_dir / "blocker", "file")
        svc = MirrorService(SourceTree(provider), blocker / "mirror", callback, scheduler=TaskScheduler(1))
        try:
            with pytest.raises(DirectoryCreateFailure):
                svc.mirror_to_local("sync")
        finally:
            svc.close()
        assert callback.keys == []


class TestMirrorFromLocal:
    """Tests for MirrorService.mirror_from_local."""

    def test_writes_into_container(
        self, provider: FakeProvider, service: MirrorService, callback: RecordingCallback, temp_dir: Path
    ):
        cat = provider.add_dir("", "CatA")
        local = write_file(temp_dir / "draft.md", "hello")

        outcome = service.mirror_from_local("push", local, "CatA", "draft", "text/markdown").result(timeout=10)

        assert outcome.success
        assert outcome.result.parent_id == cat
        assert provider.nodes[outcome.result.id]["data"] == b"hello"
        assert [key for key, _ in callback.completed] == ["push"]

    def test_missing_container_fails(
        self, provider: FakeProvider, service: MirrorService, callback: RecordingCallback, temp_dir: Path
    ):
        local = write_file(temp_dir / "draft.md", "hello")

        outcome = service.mirror_from_local("push", local, "Nope", "draft", "text/markdown").result(timeout=10)

        assert not outcome.success
        assert isinstance(outcome.error, ContainerNotFound)
        assert provider.create_calls == []
        assert [key for key, _ in callback.failed] == ["push"]

    def test_container_must_be_a_directory(self, provider: FakeProvider, service: MirrorService, temp_dir: Path):
        provider.add_file("", "CatA", b"not a folder")
        local = write_file(temp_dir / "draft.md", "hello")

        outcome = service.mirror_from_local("push", local, "CatA", "draft", "text/markdown").result(timeout=10)

        assert isinstance(outcome.error, ContainerNotFound)

    def test_concurrent_writes_create_one_document(
        self, provider: FakeProvider, service: MirrorService, temp_dir: Path
    ):
        cat = provider.add_dir("", "CatA")
        local = write_file(temp_dir / "draft.md", "hello")

        futures = [
            service.mirror_from_local(i, local, "CatA", "draft", "text/markdown") for i in range(8)
        ]
        outcomes = [future.result(timeout=10) for future in futures]

        assert all(outcome.success for outcome in outcomes)
        assert len(provider.children[cat]) == 1


class TestCreateContainer:
    """Tests for MirrorService.create_container."""

    def test_create(self, provider: FakeProvider, service: MirrorService, callback: RecordingCallback):
        outcome = service.create_container("new", "Recipes").result(timeout=10)

        assert outcome.result == "Recipes"
        assert callback.completed == [("new", "Recipes")]
        assert provider.nodes[provider.child_named("", "Recipes")]["mime_type"] == DIRECTORY_MIME

    def test_create_failure(self, provider: FakeProvider, service: MirrorService, callback: RecordingCallback):
        provider.fail_create = True

        outcome = service.create_container("new", "Recipes").result(timeout=10)

        assert not outcome.success
        assert [key for key, _ in callback.failed] == ["new"]


class TestDiscoverCategories:
    """Tests for MirrorService.discover_categories."""

    def test_discover(self, provider: FakeProvider, service: MirrorService):
        cat = provider.add_dir("", "Recipes")
        provider.add_file(cat, "cover.png", b"PNG", mime_type="image/png", last_modified=5)

        outcome = service.discover_categories("cats").result(timeout=10)

        assert outcome.result == [Category("Recipes", service.mirror_root / "Recipes" / "cover.png")]
        assert (service.mirror_root / "Recipes" / "cover.png").read_bytes() == b"PNG"


class TestCopyToContainer:
    """Tests for MirrorService.copy_to_container."""

    def test_creates_container_and_names_after_it(
        self, provider: FakeProvider, service: MirrorService, temp_dir: Path
    ):
        write_file(temp_dir / "picked" / "IMG_0001.png", b"PNGDATA")
        picked = SourceTree(LocalDirectoryProvider(temp_dir / "picked"))

        outcome = service.copy_to_container("img", picked, "IMG_0001.png", "Recipes").result(timeout=10)

        assert outcome.success
        container = provider.child_named("", "Recipes")
        assert container is not None
        assert outcome.result.name == "Recipes"
        assert outcome.result.parent_id == container
        assert provider.nodes[outcome.result.id]["data"] == b"PNGDATA"

    def test_explicit_name_within_same_tree(self, provider: FakeProvider, service: MirrorService):
        source_id = provider.add_file("", "photo.png", b"PNG", mime_type="image/png")

        outcome = service.copy_to_container("img", None, source_id, "Recipes", "cover").result(timeout=10)

        assert outcome.result.name == "cover"
        assert provider.nodes[outcome.result.id]["data"] == b"PNG"


class TestFromConfig:
    """Tests for MirrorService.from_config."""

    def test_builds_local_service(self, sample_config: dict, callback: RecordingCallback):
        sample_config["mirror"]["directory_policy"] = "prune"
        sample_config["mirror"]["mtime_tolerance_ms"] = 2000
        config = MirrorConfig.model_validate(sample_config)

        with MirrorService.from_config(config, callback) as service:
            assert isinstance(service.tree.provider, LocalDirectoryProvider)
            assert service.engine.directory_policy is DirectoryPolicy.PRUNE
            assert service.engine.buffer_size == 4096
            assert service.engine.mtime_tolerance_ms == 2000
            assert service.scheduler.max_workers == 2
            outcome = service.mirror_to_local("sync").result(timeout=10)

        assert outcome.success
        assert (Path(config.mirror.root) / "CatB" / "todo.txt").read_text(encoding="utf-8") == "buy milk\n"

    def test_close_shuts_down_scheduler(self, provider: FakeProvider, callback: RecordingCallback, temp_dir: Path):
        scheduler = TaskScheduler(1)
        svc = MirrorService(SourceTree(provider), temp_dir, callback, scheduler=scheduler)

        with patch.object(scheduler, "shutdown", wraps=scheduler.shutdown) as shutdown:
            svc.close()
        shutdown.assert_called_once_with(wait=True)
