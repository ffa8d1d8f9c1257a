# docmirror Path Utilities
# Local filesystem operations for the mirror tree

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from docmirror.errors import DirectoryCreateFailure

DEFAULT_BUFFER_SIZE = 64 * 1024

_UNSAFE_CHARS = ("/", "\\", "\x00")


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.

    Raises:
        DirectoryCreateFailure: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateFailure(f"Failed to create directory: {path}: {e}") from e
    return path


def sanitize_name(name: str) -> str:
    """
    Make a source display name safe to use as a single path component.

    Separators and NUL become underscores; empty, "." and ".." names
    become "_".
    """
    for char in _UNSAFE_CHARS:
        name = name.replace(char, "_")
    if name in ("", ".", ".."):
        return "_"
    return name


def mirror_path(parent: Path, name: str) -> Path:
    """Join a mirror directory with a sanitized display name."""
    return Path(os.path.normpath(parent / sanitize_name(name)))


def strip_extension(name: str) -> str:
    """Return a file name without its last extension."""
    return os.path.splitext(name)[0]


def list_entries(directory: Path, *, include_dirs: bool = True) -> set[Path]:
    """
    Snapshot the entries of a local directory.

    Args:
        directory: Directory to list.
        include_dirs: Whether subdirectories are part of the snapshot.

    Returns:
        Set of entry paths, empty if directory doesn't exist.
    """
    if not directory.is_dir():
        return set()

    entries: set[Path] = set()
    for path in directory.iterdir():
        if path.is_dir() and not path.is_symlink() and not include_dirs:
            continue
        entries.add(Path(os.path.normpath(path)))
    return entries


def local_mtime_ms(path: Path) -> int:
    """Modification time of a local file as epoch millis."""
    return path.stat().st_mtime_ns // 1_000_000


def set_mtime_ms(path: Path, millis: int) -> None:
    """Set access and modification time of a local file from epoch millis."""
    ns = millis * 1_000_000
    os.utime(path, ns=(ns, ns))


def copy_stream(source: BinaryIO, dest: Path, *, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """
    Atomically write a byte stream to a file, replacing any existing file.

    Bytes go to a temporary file next to dest which is renamed over
    dest once complete, so readers never see a partial file.

    Args:
        source: Readable binary stream.
        dest: Destination file path.
        buffer_size: Chunk size for the copy.

    Returns:
        Number of bytes written.
    """
    ensure_dir(dest.parent)

    fd, temp_path = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
    written = 0
    try:
        with os.fdopen(fd, "wb") as f:
            while chunk := source.read(buffer_size):
                f.write(chunk)
                written += len(chunk)
        os.replace(temp_path, dest)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    return written


def safe_delete(path: Path, *, missing_ok: bool = False) -> bool:
    """
    Safely delete file or directory.

    Args:
        path: Path to delete.
        missing_ok: If True, don't raise error if path doesn't exist.

    Returns:
        True if something was deleted, False if path didn't exist.

    Raises:
        FileNotFoundError: If path doesn't exist and missing_ok is False.
    """
    if not path.exists() and not path.is_symlink():
        if missing_ok:
            return False
        raise FileNotFoundError(f"Path does not exist: {path}")

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True
