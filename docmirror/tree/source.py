# docmirror Source Tree
# Listing, lookup and creation of nodes on top of a SourceProvider

import logging
from typing import BinaryIO

from docmirror.errors import DocumentCreateFailure, IOFailure, NotADirectory
from docmirror.tree.node import DIRECTORY_MIME, TreeNode
from docmirror.tree.provider import ProviderEntry, SourceProvider
from docmirror.utils.paths import strip_extension

logger = logging.getLogger(__name__)


class SourceTree:
    """
    Read and write access to a source tree through a provider.

    Listing queries are fail-soft: a provider fault is logged and the
    listing comes back empty, so one bad directory never aborts a deep
    recursive walk. Creation and byte access are not fail-soft.

    No locking is done here. Callers that create children of the same
    container from several threads must serialize themselves.
    """

    def __init__(self, provider: SourceProvider, root_id: str = ""):
        """
        Initialize source tree.

        Args:
            provider: Provider backing this tree.
            root_id: Node id of the tree root.
        """
        self.provider = provider
        self.root = TreeNode.root(root_id)

    def list_children(self, node: TreeNode) -> list[TreeNode]:
        """
        List immediate children of a directory node.

        Raises:
            NotADirectory: If node is a file.
        """
        return self._query(node)

    def list_directories(self, node: TreeNode) -> list[TreeNode]:
        """
        List immediate child directories of a directory node.

        The filter is passed to the provider and checked again here,
        since providers are free to ignore it.

        Raises:
            NotADirectory: If node is a file.
        """
        return [child for child in self._query(node, mime_type=DIRECTORY_MIME) if child.is_directory]

    def first_image_child(self, node: TreeNode) -> TreeNode | None:
        """Return the first child with an image MIME type, in listing order."""
        for child in self._query(node):
            if child.is_image:
                return child
        return None

    def find_child_by_name(self, node: TreeNode, name: str, mime_type: str | None = None) -> TreeNode | None:
        """
        Find the first child with an exact name (and MIME type, if given).

        Provider trees may hold several children with the same name;
        only the first in listing order is returned.
        """
        for child in self._query(node):
            if child.name != name:
                continue
            if mime_type is not None and child.mime_type != mime_type:
                continue
            return child
        return None

    def get_or_create_child(self, node: TreeNode, name: str, mime_type: str) -> TreeNode:
        """
        Look up a child by name and MIME type, creating it if absent.

        A listed child matches when its MIME type equals mime_type and its
        name equals name, with or without the file extension.

        Args:
            node: Container to look in.
            name: Child name, usually without extension.
            mime_type: MIME type of the child.

        Returns:
            Existing child, or a new descriptor with last_modified = 0.

        Raises:
            NotADirectory: If node is a file.
            DocumentCreateFailure: If the provider cannot create the document.
        """
        for child in self._query(node):
            if child.mime_type != mime_type:
                continue
            if child.name == name or strip_extension(child.name) == name:
                logger.debug("Found existing %s in %s", child.name, node.name or "<root>")
                return child

        try:
            child_id = self.provider.create_document(node.id, mime_type, name)
        except DocumentCreateFailure:
            raise
        except Exception as e:
            raise DocumentCreateFailure(f"Failed to create {name!r} ({mime_type}) in {node.name!r}: {e}") from e

        if not child_id:
            raise DocumentCreateFailure(f"Provider returned no document for {name!r} in {node.name!r}")

        logger.debug("Created %s (%s) in %s", name, mime_type, node.name or "<root>")
        return TreeNode(
            id=child_id,
            parent_id=node.id,
            name=name,
            mime_type=mime_type,
            last_modified=0,
        )

    def open_read(self, node: TreeNode | str) -> BinaryIO:
        """Open a node for reading, wrapping provider errors in IOFailure."""
        node_id = node.id if isinstance(node, TreeNode) else node
        try:
            return self.provider.open_read(node_id)
        except OSError as e:
            raise IOFailure(f"Cannot open {node_id!r} for reading: {e}") from e

    def open_write(self, node: TreeNode) -> BinaryIO:
        """Open a node for truncating writes, wrapping provider errors in IOFailure."""
        try:
            return self.provider.open_write(node.id)
        except OSError as e:
            raise IOFailure(f"Cannot open {node.name!r} for writing: {e}") from e

    def resolve_mime_type(self, node_id: str) -> str:
        """Return the MIME type the provider reports for a node."""
        return self.provider.resolve_mime_type(node_id)

    def _query(self, node: TreeNode, *, mime_type: str | None = None) -> list[TreeNode]:
        """Run a listing query, returning an empty list on provider faults."""
        if not node.is_directory:
            raise NotADirectory(f"{node.name!r} is not a directory")

        try:
            entries = self.provider.list_children(node.id, mime_type=mime_type)
        except Exception as e:
            logger.warning("Listing %s failed, treating as empty: %s", node.name or "<root>", e)
            return []

        return [_node_from_entry(node, entry) for entry in entries]


def _node_from_entry(parent: TreeNode, entry: ProviderEntry) -> TreeNode:
    """Build a child descriptor from a listing row."""
    return TreeNode(
        id=entry.child_id,
        parent_id=parent.id,
        name=entry.name,
        mime_type=entry.mime_type,
        last_modified=entry.last_modified or 0,
    )
