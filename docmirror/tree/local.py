# docmirror Local Directory Provider
# SourceProvider adapter exposing a local directory as a source tree

import logging
import mimetypes
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from docmirror.errors import DocumentCreateFailure, ProviderQueryFailure
from docmirror.tree.node import DEFAULT_MIME, DIRECTORY_MIME
from docmirror.tree.provider import ProviderEntry
from docmirror.utils.paths import local_mtime_ms

logger = logging.getLogger(__name__)

# Types mimetypes doesn't know on every platform
_EXTRA_TYPES: dict[str, str] = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
}
_EXTRA_EXTENSIONS: dict[str, str] = {
    "text/markdown": ".md",
    "text/plain": ".txt",
}


def guess_mime_type(path: str | Path) -> str:
    """Guess the MIME type of a file from its name."""
    suffix = Path(path).suffix.lower()
    if suffix in _EXTRA_TYPES:
        return _EXTRA_TYPES[suffix]
    mime_type, _encoding = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_MIME


def guess_extension(mime_type: str) -> str:
    """Guess a file extension for a MIME type, or "" if unknown."""
    if mime_type in _EXTRA_EXTENSIONS:
        return _EXTRA_EXTENSIONS[mime_type]
    if mime_type == DEFAULT_MIME:
        return ""
    return mimetypes.guess_extension(mime_type) or ""


class LocalDirectoryProvider:
    """
    Source provider backed by a directory on the local filesystem.

    Node ids are POSIX paths relative to the root ("" is the root).
    Listings are sorted by name.
    """

    def __init__(self, root: Path):
        """
        Initialize provider.

        Args:
            root: Directory exposed as the source tree.
        """
        self.root = Path(root)

    def _resolve(self, node_id: str) -> Path:
        """Map a node id to a path under the root."""
        rel = PurePosixPath(node_id)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Node id escapes provider root: {node_id!r}")
        return self.root.joinpath(*rel.parts)

    def _child_id(self, parent_id: str, name: str) -> str:
        return str(PurePosixPath(parent_id) / name) if parent_id else name

    def list_children(self, node_id: str, *, mime_type: str | None = None) -> list[ProviderEntry]:
        directory = self._resolve(node_id)
        try:
            paths = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise ProviderQueryFailure(f"Cannot list {directory}: {e}") from e

        entries: list[ProviderEntry] = []
        for path in paths:
            try:
                child_mime = DIRECTORY_MIME if path.is_dir() else guess_mime_type(path)
                if mime_type is not None and child_mime != mime_type:
                    continue
                entries.append(
                    ProviderEntry(
                        child_id=self._child_id(node_id, path.name),
                        name=path.name,
                        mime_type=child_mime,
                        last_modified=local_mtime_ms(path),
                    )
                )
            except OSError as e:
                # Entry vanished between listing and stat
                logger.debug("Skipping %s: %s", path, e)
        return entries

    def open_read(self, node_id: str) -> BinaryIO:
        return open(self._resolve(node_id), "rb")

    def open_write(self, node_id: str) -> BinaryIO:
        return open(self._resolve(node_id), "wb")

    def create_document(self, parent_id: str, mime_type: str, name: str) -> str:
        """
        Create a file or directory under parent_id.

        The MIME type's extension is appended when name has none. An
        existing entry is never clobbered; "name (1)", "name (2)", ...
        are tried instead, as document providers do.
        """
        parent = self._resolve(parent_id)
        if not parent.is_dir():
            raise DocumentCreateFailure(f"Parent is not a directory: {parent}")

        is_dir = mime_type == DIRECTORY_MIME
        stem, ext = name, ""
        if not is_dir and not Path(name).suffix:
            ext = guess_extension(mime_type)
        elif not is_dir:
            stem, ext = Path(name).stem, Path(name).suffix

        candidate = f"{stem}{ext}"
        counter = 1
        while (parent / candidate).exists():
            candidate = f"{stem} ({counter}){ext}"
            counter += 1

        target = parent / candidate
        try:
            if is_dir:
                target.mkdir()
            else:
                target.touch(exist_ok=False)
        except OSError as e:
            raise DocumentCreateFailure(f"Cannot create {target}: {e}") from e

        return self._child_id(parent_id, candidate)

    def resolve_mime_type(self, node_id: str) -> str:
        path = self._resolve(node_id)
        if path.is_dir():
            return DIRECTORY_MIME
        return guess_mime_type(path)
