# docmirror Mirror Engine
# One-way tree mirroring and write-back between the source tree and local storage

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from docmirror.errors import IOFailure
from docmirror.tree.node import TreeNode
from docmirror.tree.source import SourceTree
from docmirror.utils.paths import (
    DEFAULT_BUFFER_SIZE,
    copy_stream,
    ensure_dir,
    list_entries,
    local_mtime_ms,
    mirror_path,
    safe_delete,
    set_mtime_ms,
)

logger = logging.getLogger(__name__)


class DirectoryPolicy(str, Enum):
    """How local directories missing from the source are reconciled."""

    # Local directories are never deletion candidates
    KEEP = "keep"
    # Local directories absent from the source are removed with their contents
    PRUNE = "prune"


@dataclass
class MirrorResult:
    """Result of a mirror pass. Paths are relative to the mirror root."""

    root: Path
    copied: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    directories_created: list[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        """Number of source files visited."""
        return len(self.copied) + len(self.unchanged)

    @property
    def has_changes(self) -> bool:
        """Check if the pass changed anything locally."""
        return bool(self.copied or self.deleted or self.directories_created)

    def relative(self, path: Path) -> str:
        """Path relative to the mirror root, as a POSIX string."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


class MirrorEngine:
    """
    Mirrors a source tree into a local directory and writes files back.

    Forward mirroring is a two-phase diff per directory: snapshot the
    local entries, discard each one that matches a source child while
    the children are processed in listing order, then delete what is
    left. Every run re-lists both sides; nothing is cached between runs.
    """

    def __init__(
        self,
        tree: SourceTree,
        *,
        directory_policy: DirectoryPolicy = DirectoryPolicy.KEEP,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        mtime_tolerance_ms: int = 0,
    ):
        """
        Initialize mirror engine.

        Args:
            tree: Source tree to mirror from and write back to.
            directory_policy: Whether orphan local directories are pruned.
            buffer_size: Chunk size for streamed copies.
            mtime_tolerance_ms: Slack allowed when comparing timestamps, for
                local filesystems that round modification times (FAT: 2000).
        """
        self.tree = tree
        self.directory_policy = DirectoryPolicy(directory_policy)
        self.buffer_size = buffer_size
        self.mtime_tolerance_ms = mtime_tolerance_ms

    def mirror(self, source_dir: TreeNode, target_dir: Path) -> MirrorResult:
        """
        Mirror a source directory into a local directory, recursively.

        Newer source files overwrite older local files, missing files are
        copied and local files with no source counterpart are deleted.
        A target_dir that is a symlink to a directory is mirrored through;
        only symlinks below it are replaced.

        Args:
            source_dir: Source directory node.
            target_dir: Local directory to converge.

        Returns:
            MirrorResult describing what changed.

        Raises:
            NotADirectory: If source_dir is a file.
            IOFailure: If a copy or delete fails.
            DirectoryCreateFailure: If a local directory cannot be created.
        """
        target_dir = Path(target_dir)
        result = MirrorResult(root=target_dir)
        self._mirror_directory(source_dir, target_dir, result, is_root=True)
        return result

    def _mirror_directory(
        self,
        source_dir: TreeNode,
        target_dir: Path,
        result: MirrorResult,
        *,
        is_root: bool = False,
    ) -> None:
        children = self.tree.list_children(source_dir)

        if target_dir.is_dir() and (is_root or not target_dir.is_symlink()):
            pending = list_entries(target_dir, include_dirs=self.directory_policy == DirectoryPolicy.PRUNE)
        else:
            # Fresh subtree: nothing local to reconcile
            self._prepare_directory(target_dir, result)
            pending = set()

        # Local path -> source name of the child that claimed it
        claimed: dict[Path, str] = {}
        # Case-folded local name -> first target with that name
        folded: dict[str, Path] = {}

        for child in children:
            target = mirror_path(target_dir, child.name)
            if target in claimed:
                logger.warning(
                    "Skipping %r in %s: it maps to the same local name as %r",
                    child.name,
                    source_dir.name or "<root>",
                    claimed[target],
                )
                continue
            claimed[target] = child.name
            folded.setdefault(target.name.casefold(), target)

            if child.is_directory:
                self._mirror_directory(child, target, result)
            elif self.mirror_file(child, target):
                result.copied.append(result.relative(target))
            else:
                result.unchanged.append(result.relative(target))
            pending.discard(target)

        for orphan in sorted(pending):
            if _is_alias(orphan, folded):
                # Case-insensitive filesystem: same entry under another spelling
                continue
            logger.debug("Deleting orphan %s", orphan)
            try:
                safe_delete(orphan, missing_ok=True)
            except OSError as e:
                raise IOFailure(f"Failed to delete {orphan}: {e}") from e
            result.deleted.append(result.relative(orphan))

    def _prepare_directory(self, target_dir: Path, result: MirrorResult) -> None:
        """Create a local directory, replacing a file of the same name."""
        if target_dir.exists() or target_dir.is_symlink():
            logger.debug("Replacing %s with a directory", target_dir)
            try:
                safe_delete(target_dir)
            except OSError as e:
                raise IOFailure(f"Failed to replace {target_dir}: {e}") from e
        ensure_dir(target_dir)
        result.directories_created.append(result.relative(target_dir))

    def mirror_file(self, source_file: TreeNode, target: Path) -> bool:
        """
        Bring one local file up to date with its source.

        Copies when the local file is missing, or when the source is
        newer than the local modification time by more than
        mtime_tolerance_ms.

        Returns:
            True if bytes were copied.

        Raises:
            IOFailure: If the copy fails.
        """
        try:
            if target.is_dir() and not target.is_symlink():
                logger.debug("Replacing directory %s with a file", target)
                safe_delete(target)
            elif target.exists():
                local_mtime = local_mtime_ms(target)
                if source_file.last_modified <= local_mtime + self.mtime_tolerance_ms:
                    return False
                logger.debug("Stale: %s (source %d > local %d)", target, source_file.last_modified, local_mtime)
        except OSError as e:
            raise IOFailure(f"Failed to inspect {target}: {e}") from e

        self.copy_to_local(source_file, target)
        return True

    def copy_to_local(self, source_file: TreeNode, target: Path) -> None:
        """
        Copy a source file over a local path, keeping the source timestamp.

        Raises:
            IOFailure: If reading or writing fails.
        """
        try:
            with self.tree.open_read(source_file) as stream:
                size = copy_stream(stream, target, buffer_size=self.buffer_size)
            if source_file.last_modified:
                set_mtime_ms(target, source_file.last_modified)
        except OSError as e:
            raise IOFailure(f"Failed to copy {source_file.name!r} to {target}: {e}") from e
        logger.debug("Copied %s (%d bytes)", target, size)

    def write_file_to_external(self, source_path: Path, name: str, mime_type: str, container: TreeNode) -> TreeNode:
        """
        Write a local file into a source container, replacing prior content.

        The whole file is read into memory; write-back is meant for small
        text payloads.

        Args:
            source_path: Local file to write back.
            name: Document name in the container, usually without extension.
            mime_type: MIME type of the document.
            container: Source container node.

        Returns:
            The destination node.

        Raises:
            DocumentCreateFailure: If the destination cannot be created.
            IOFailure: If the local file cannot be read or the destination written.
        """
        target = self.tree.get_or_create_child(container, name, mime_type)

        try:
            data = Path(source_path).read_bytes()
        except OSError as e:
            raise IOFailure(f"Cannot read {source_path}: {e}") from e

        try:
            with self.tree.open_write(target) as sink:
                sink.write(data)
        except OSError as e:
            raise IOFailure(f"Failed writing {name!r} to {container.name!r}: {e}") from e

        logger.debug("Wrote %s (%d bytes) to %s", name, len(data), container.name)
        return target

    def copy_external_to_external(
        self,
        source_ref: TreeNode | str,
        target_name: str,
        container: TreeNode,
        *,
        source_tree: SourceTree | None = None,
    ) -> TreeNode:
        """
        Stream a document into a source container with a bounded buffer.

        Used for user-supplied files that may be large.

        Args:
            source_ref: Source node or node id.
            target_name: Document name in the container.
            container: Source container node.
            source_tree: Tree the source belongs to; defaults to this engine's tree.

        Returns:
            The destination node.

        Raises:
            DocumentCreateFailure: If the destination cannot be created.
            IOFailure: If the copy fails.
        """
        source_tree = source_tree or self.tree
        source_id = source_ref.id if isinstance(source_ref, TreeNode) else source_ref

        try:
            mime_type = source_tree.resolve_mime_type(source_id)
        except OSError as e:
            raise IOFailure(f"Cannot resolve type of {source_id!r}: {e}") from e

        target = self.tree.get_or_create_child(container, target_name, mime_type)

        try:
            with source_tree.open_read(source_id) as src, self.tree.open_write(target) as dst:
                shutil.copyfileobj(src, dst, self.buffer_size)
        except OSError as e:
            raise IOFailure(f"Failed copying {source_id!r} to {container.name!r}: {e}") from e

        logger.debug("Copied %s into %s as %s", source_id, container.name, target_name)
        return target


def _is_alias(orphan: Path, folded: dict[str, Path]) -> bool:
    """Check if an orphan is the same local entry as a processed target."""
    target = folded.get(orphan.name.casefold())
    if target is None or target == orphan:
        return False
    try:
        return os.path.samefile(orphan, target)
    except OSError:
        return False
