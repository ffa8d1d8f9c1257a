# docmirror Test Fixtures
# Pytest fixtures for docmirror tests

import io
import logging
import os
import tempfile
import threading
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

from docmirror.errors import ProviderQueryFailure
from docmirror.tree.node import DIRECTORY_MIME
from docmirror.tree.provider import ProviderEntry


class _WriteBuffer(io.BytesIO):
    """Byte buffer that stores its content in a FakeProvider on close."""

    def __init__(self, provider: "FakeProvider", node_id: str):
        super().__init__()
        self._provider = provider
        self._node_id = node_id

    def close(self) -> None:
        if not self.closed:
            self._provider.nodes[self._node_id]["data"] = self.getvalue()
        super().close()


class FakeProvider:
    """
    In-memory source provider.

    Nodes are kept in insertion order under each parent, which is the
    listing order. Ids are generated as "n1", "n2", ... with "" as root.
    """

    def __init__(self):
        self.nodes: dict[str, dict] = {"": {"name": "", "mime_type": DIRECTORY_MIME, "parent": None}}
        self.children: dict[str, list[str]] = {"": []}
        self.failing: set[str] = set()
        self.mime_filters: list[str | None] = []
        self.create_calls: list[tuple[str, str, str]] = []
        self.fail_create = False
        self._counter = 0
        self._lock = threading.Lock()

    # Builders

    def add_dir(self, parent_id: str, name: str) -> str:
        node_id = self._add(parent_id, name, DIRECTORY_MIME, 0, None)
        self.children[node_id] = []
        return node_id

    def add_file(
        self,
        parent_id: str,
        name: str,
        data: bytes = b"",
        mime_type: str = "text/markdown",
        last_modified: int = 0,
    ) -> str:
        return self._add(parent_id, name, mime_type, last_modified, data)

    def touch(self, node_id: str, data: bytes, last_modified: int) -> None:
        self.nodes[node_id]["data"] = data
        self.nodes[node_id]["last_modified"] = last_modified

    def remove(self, node_id: str) -> None:
        parent = self.nodes[node_id]["parent"]
        self.children[parent].remove(node_id)
        del self.nodes[node_id]

    def child_named(self, parent_id: str, name: str) -> str | None:
        for child_id in self.children[parent_id]:
            if self.nodes[child_id]["name"] == name:
                return child_id
        return None

    def _add(self, parent_id: str, name: str, mime_type: str, last_modified: int, data: bytes | None) -> str:
        with self._lock:
            self._counter += 1
            node_id = f"n{self._counter}"
            self.nodes[node_id] = {
                "name": name,
                "mime_type": mime_type,
                "parent": parent_id,
                "last_modified": last_modified,
                "data": data,
            }
            self.children[parent_id].append(node_id)
        return node_id

    # SourceProvider

    def list_children(self, node_id: str, *, mime_type: str | None = None) -> list[ProviderEntry]:
        self.mime_filters.append(mime_type)
        if node_id in self.failing:
            raise ProviderQueryFailure(f"listing {node_id} failed")
        entries = []
        for child_id in list(self.children.get(node_id, [])):
            node = self.nodes[child_id]
            if mime_type is not None and node["mime_type"] != mime_type:
                continue
            entries.append(
                ProviderEntry(
                    child_id=child_id,
                    name=node["name"],
                    mime_type=node["mime_type"],
                    last_modified=node["last_modified"],
                )
            )
        return entries

    def open_read(self, node_id: str):
        if node_id not in self.nodes:
            raise FileNotFoundError(node_id)
        return io.BytesIO(self.nodes[node_id]["data"] or b"")

    def open_write(self, node_id: str):
        if node_id not in self.nodes:
            raise FileNotFoundError(node_id)
        return _WriteBuffer(self, node_id)

    def create_document(self, parent_id: str, mime_type: str, name: str) -> str:
        self.create_calls.append((parent_id, mime_type, name))
        if self.fail_create:
            raise PermissionError("read-only provider")
        if mime_type == DIRECTORY_MIME:
            return self.add_dir(parent_id, name)
        return self.add_file(parent_id, name, b"", mime_type)

    def resolve_mime_type(self, node_id: str) -> str:
        return self.nodes[node_id]["mime_type"]


class RecordingCallback:
    """Callback collecting every notification it receives."""

    def __init__(self):
        self.completed: list[tuple] = []
        self.failed: list[tuple] = []
        self._lock = threading.Lock()

    def on_complete(self, key, result) -> None:
        with self._lock:
            self.completed.append((key, result))

    def on_failure(self, key, error) -> None:
        with self._lock:
            self.failed.append((key, error))

    @property
    def keys(self) -> list:
        return [key for key, _ in self.completed + self.failed]


def write_file(path: Path, content: str | bytes = "", mtime_ms: int | None = None) -> Path:
    """Write a file, creating parents, and optionally set its mtime in millis."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    if mtime_ms is not None:
        ns = mtime_ms * 1_000_000
        os.utime(path, ns=(ns, ns))
    return path


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo setup_logging so caplog sees package records."""
    yield
    package_logger = logging.getLogger("docmirror")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("DOCMIRROR_CONFIG", raising=False)
    return home


@pytest.fixture
def provider() -> FakeProvider:
    """Create an empty in-memory provider."""
    return FakeProvider()


@pytest.fixture
def callback() -> RecordingCallback:
    """Create a recording callback."""
    return RecordingCallback()


@pytest.fixture
def source_root(temp_dir: Path) -> Path:
    """Create a local source tree with two categories."""
    root = temp_dir / "source"
    write_file(root / "CatA" / "note1.md", "# Note 1\n", mtime_ms=1_700_000_000_000)
    write_file(root / "CatA" / "img.png", b"\x89PNG\r\n", mtime_ms=1_700_000_000_000)
    write_file(root / "CatB" / "todo.txt", "buy milk\n", mtime_ms=1_700_000_000_000)
    return root


@pytest.fixture
def mirror_root(temp_dir: Path) -> Path:
    """Path of the local mirror (not created)."""
    return temp_dir / "mirror"


@pytest.fixture
def sample_config(source_root: Path, mirror_root: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "source": {"root": str(source_root)},
        "mirror": {
            "root": str(mirror_root),
            "directory_policy": "keep",
            "copy_buffer_size": 4096,
        },
        "scheduler": {"max_workers": 2},
        "output": {"verbose": False, "colored": False},
    }


@pytest.fixture
def config_file(temp_home: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_dir = temp_home / ".config" / "docmirror"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)

    return config_path
