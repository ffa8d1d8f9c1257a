# docmirror Mirror Service
# Asynchronous entry points for the embedding application

import logging
import threading
from collections.abc import Callable, Hashable, Iterator
from concurrent.futures import Future
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from docmirror.config.schema import MirrorConfig
from docmirror.errors import ContainerNotFound
from docmirror.scheduler import MirrorCallback, Operation, OperationKind, OperationOutcome, TaskScheduler
from docmirror.sync.categories import Category, create_category, discover_categories
from docmirror.sync.mirror import MirrorEngine, MirrorResult
from docmirror.tree.local import LocalDirectoryProvider
from docmirror.tree.node import DIRECTORY_MIME, TreeNode
from docmirror.tree.source import SourceTree
from docmirror.utils.paths import ensure_dir

logger = logging.getLogger(__name__)


class MirrorService:
    """
    Schedules mirror operations and reports each one to a callback.

    Every entry point takes an opaque key, returns immediately with a
    future, and later calls exactly one of callback.on_complete(key, result)
    or callback.on_failure(key, error).

    Operations are not serialized against each other, except that
    lookups-then-creates under the same container are run one at a time.
    Callers should not run overlapping mirror and write-back operations
    against the same subtree concurrently.
    """

    def __init__(
        self,
        tree: SourceTree,
        mirror_root: Path,
        callback: MirrorCallback,
        *,
        scheduler: TaskScheduler | None = None,
        engine: MirrorEngine | None = None,
    ):
        """
        Initialize mirror service.

        Args:
            tree: Source tree to mirror.
            mirror_root: Local directory mirroring the source root.
            callback: Receiver of operation notifications.
            scheduler: Worker pool. A pool sized to the CPU count is created if omitted.
            engine: Mirror engine. One with default settings is created if omitted.
        """
        self.tree = tree
        self.mirror_root = Path(mirror_root)
        self.callback = callback
        self.scheduler = scheduler or TaskScheduler()
        self.engine = engine or MirrorEngine(tree)
        self._container_locks: dict[tuple[str | None, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: MirrorConfig, callback: MirrorCallback) -> "MirrorService":
        """Build a service over a LocalDirectoryProvider from configuration."""
        tree = SourceTree(LocalDirectoryProvider(Path(config.source.root)))
        engine = MirrorEngine(
            tree,
            directory_policy=config.mirror.directory_policy,
            buffer_size=config.mirror.copy_buffer_size,
            mtime_tolerance_ms=config.mirror.mtime_tolerance_ms,
        )
        return cls(
            tree,
            Path(config.mirror.root),
            callback,
            scheduler=TaskScheduler(config.scheduler.max_workers),
            engine=engine,
        )

    def mirror_to_local(self, key: Hashable) -> "Future[OperationOutcome]":
        """
        Mirror the whole source tree into the mirror root.

        Result: MirrorResult.

        Raises:
            DirectoryCreateFailure: If the mirror root cannot be created.
                Raised before anything is scheduled.
        """
        ensure_dir(self.mirror_root)
        return self._submit(key, OperationKind.MIRROR_TO_APP, self._mirror_to_local)

    def mirror_from_local(
        self,
        key: Hashable,
        source_path: str | Path,
        container_name: str,
        name: str,
        mime_type: str,
    ) -> "Future[OperationOutcome]":
        """
        Write a local file back into a container of the source root.

        Result: TreeNode of the written document. Fails with
        ContainerNotFound when no such container exists.
        """

        def body() -> TreeNode:
            container = self._find_container(container_name)
            with self._container_lock(container):
                return self.engine.write_file_to_external(Path(source_path), name, mime_type, container)

        return self._submit(
            key,
            OperationKind.MIRROR_TO_EXTERNAL,
            body,
            source_path=str(source_path),
            container=container_name,
            name=name,
            mime_type=mime_type,
        )

    def create_container(self, key: Hashable, name: str) -> "Future[OperationOutcome]":
        """
        Create a container under the source root if it doesn't exist.

        Result: the container name.
        """

        def body() -> str:
            with self._container_lock(self.tree.root):
                create_category(self.engine, self.tree.root, name)
            return name

        return self._submit(key, OperationKind.CREATE_CATEGORY, body, name=name)

    def discover_categories(self, key: Hashable) -> "Future[OperationOutcome]":
        """
        List categories and mirror their skeleton and images locally.

        Result: list of Category.

        Raises:
            DirectoryCreateFailure: If the mirror root cannot be created.
                Raised before anything is scheduled.
        """
        ensure_dir(self.mirror_root)

        def body() -> list[Category]:
            return discover_categories(self.engine, self.tree.root, self.mirror_root)

        return self._submit(key, OperationKind.GET_CATEGORIES, body)

    def copy_to_container(
        self,
        key: Hashable,
        source_tree: SourceTree | None,
        source_id: str,
        container_name: str,
        target_name: str | None = None,
    ) -> "Future[OperationOutcome]":
        """
        Import a document into a container, creating the container on demand.

        Intended for a category image picked by the user. The document is
        named after the container unless target_name is given.

        Args:
            key: Operation key.
            source_tree: Tree holding the document; None for this service's tree.
            source_id: Node id of the document in source_tree.
            container_name: Container under the source root.
            target_name: Document name in the container.

        Result: TreeNode of the written document.
        """
        document_name = target_name or container_name

        def body() -> TreeNode:
            with self._container_lock(self.tree.root):
                container = create_category(self.engine, self.tree.root, container_name)
            with self._container_lock(container):
                return self.engine.copy_external_to_external(
                    source_id, document_name, container, source_tree=source_tree
                )

        return self._submit(
            key,
            OperationKind.COPY_TO_CONTAINER,
            body,
            source_id=source_id,
            container=container_name,
            name=document_name,
        )

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool."""
        self.scheduler.shutdown(wait=wait)

    def __enter__(self) -> "MirrorService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _mirror_to_local(self) -> MirrorResult:
        logger.info("Mirroring source tree into %s", self.mirror_root)
        result = self.engine.mirror(self.tree.root, self.mirror_root)
        logger.info(
            "Mirror finished: %d copied, %d unchanged, %d deleted",
            len(result.copied),
            len(result.unchanged),
            len(result.deleted),
        )
        return result

    def _find_container(self, name: str) -> TreeNode:
        container = self.tree.find_child_by_name(self.tree.root, name, DIRECTORY_MIME)
        if container is None:
            raise ContainerNotFound(f"Container {name!r} does not exist")
        return container

    @contextmanager
    def _container_lock(self, container: TreeNode) -> Iterator[None]:
        """Serialize get-or-create calls against one container."""
        with self._locks_guard:
            lock = self._container_locks.setdefault(container.identity, threading.Lock())
        with lock:
            yield

    def _submit(
        self,
        key: Hashable,
        kind: OperationKind,
        body: Callable[[], Any],
        **payload: Any,
    ) -> "Future[OperationOutcome]":
        operation = Operation(key=key, kind=kind, body=body, payload=payload)
        return self.scheduler.submit(operation, self.callback)
