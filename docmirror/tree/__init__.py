# docmirror Tree Module
# Source tree descriptors, provider interface and adapters

from docmirror.tree.local import LocalDirectoryProvider, guess_mime_type
from docmirror.tree.node import DEFAULT_MIME, DIRECTORY_MIME, TreeNode
from docmirror.tree.provider import ProviderEntry, SourceProvider
from docmirror.tree.source import SourceTree

__all__ = [
    # Node
    "TreeNode",
    "DIRECTORY_MIME",
    "DEFAULT_MIME",
    # Provider
    "ProviderEntry",
    "SourceProvider",
    "LocalDirectoryProvider",
    "guess_mime_type",
    # Tree
    "SourceTree",
]
