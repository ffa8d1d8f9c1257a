# docmirror Tree Node
# Immutable descriptor of one node in the source tree

from dataclasses import dataclass

DIRECTORY_MIME = "vnd.android.document/directory"
DEFAULT_MIME = "application/octet-stream"
IMAGE_MIME_PREFIX = "image"


@dataclass(frozen=True)
class TreeNode:
    """
    Read-only descriptor of a file or directory in the source tree.

    Built from a single listing row; never mutated afterwards.
    """

    id: str
    parent_id: str | None
    name: str
    mime_type: str
    last_modified: int = 0  # epoch millis, 0 if unknown

    @property
    def is_directory(self) -> bool:
        """Check if this node is a directory."""
        return self.mime_type == DIRECTORY_MIME

    @property
    def is_image(self) -> bool:
        """Check if this node has an image MIME type."""
        return (self.mime_type or "").startswith(IMAGE_MIME_PREFIX)

    @property
    def identity(self) -> tuple[str | None, str]:
        """Identity of the node, derived from parent identity and child id."""
        return (self.parent_id, self.id)

    @classmethod
    def root(cls, node_id: str = "") -> "TreeNode":
        """Build the descriptor for the root of a source tree."""
        return cls(
            id=node_id,
            parent_id=None,
            name=node_id,
            mime_type=DIRECTORY_MIME,
            last_modified=0,
        )
