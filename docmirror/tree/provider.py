# docmirror Source Provider
# Capability interface the mirroring core depends on

from dataclasses import dataclass
from typing import BinaryIO, Protocol, runtime_checkable


@dataclass(frozen=True)
class ProviderEntry:
    """One row of a provider listing."""

    child_id: str
    name: str
    mime_type: str
    last_modified: int = 0


@runtime_checkable
class SourceProvider(Protocol):
    """
    Access to a hierarchical document store.

    Implementations may be slow and may fail; the core never assumes
    anything beyond these five calls.
    """

    def list_children(self, node_id: str, *, mime_type: str | None = None) -> list[ProviderEntry]:
        """
        List immediate children of a node.

        Args:
            node_id: Identity of the parent node.
            mime_type: Optional filter; only children of this type are returned.

        Returns:
            Listing rows in the provider's native order.
        """
        ...

    def open_read(self, node_id: str) -> BinaryIO:
        """Open a node for reading bytes."""
        ...

    def open_write(self, node_id: str) -> BinaryIO:
        """Open a node for writing bytes, truncating existing content."""
        ...

    def create_document(self, parent_id: str, mime_type: str, name: str) -> str:
        """Create a document under a parent and return its node id."""
        ...

    def resolve_mime_type(self, node_id: str) -> str:
        """Return the MIME type of a node."""
        ...
