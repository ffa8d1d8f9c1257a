"""docmirror - one-way mirroring of a document tree into a local directory.

Mirrors a hierarchical document store (exposed through a SourceProvider)
into a local directory, writes local files back into containers of the
source tree, and discovers categories with their images.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "TreeNode",
    "SourceTree",
    "SourceProvider",
    "LocalDirectoryProvider",
    "MirrorEngine",
    "MirrorResult",
    "DirectoryPolicy",
    "Category",
    "TaskScheduler",
    "MirrorService",
    "MirrorError",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("TreeNode", "SourceTree", "SourceProvider", "LocalDirectoryProvider"):
        from docmirror import tree

        return getattr(tree, name)
    if name in ("MirrorEngine", "MirrorResult", "DirectoryPolicy", "Category"):
        from docmirror import sync

        return getattr(sync, name)
    if name == "TaskScheduler":
        from docmirror.scheduler import TaskScheduler

        return TaskScheduler
    if name == "MirrorService":
        from docmirror.service import MirrorService

        return MirrorService
    if name == "MirrorError":
        from docmirror.errors import MirrorError

        return MirrorError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
