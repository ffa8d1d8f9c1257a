# docmirror Utilities Module
# Helper functions for the local mirror tree

from docmirror.utils.paths import (
    copy_stream,
    ensure_dir,
    list_entries,
    local_mtime_ms,
    mirror_path,
    safe_delete,
    sanitize_name,
    set_mtime_ms,
    strip_extension,
)

__all__ = [
    "ensure_dir",
    "sanitize_name",
    "mirror_path",
    "strip_extension",
    "list_entries",
    "local_mtime_ms",
    "set_mtime_ms",
    "copy_stream",
    "safe_delete",
]
