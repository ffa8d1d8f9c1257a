# docmirror Sync Module
# Mirror engine and category discovery

from docmirror.sync.categories import Category, create_category, discover_categories
from docmirror.sync.mirror import DirectoryPolicy, MirrorEngine, MirrorResult

__all__ = [
    # Mirror
    "MirrorEngine",
    "MirrorResult",
    "DirectoryPolicy",
    # Categories
    "Category",
    "discover_categories",
    "create_category",
]
