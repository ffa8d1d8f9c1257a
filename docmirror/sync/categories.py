# docmirror Category Discovery
# One-level scan of source containers and their representative images

import logging
from dataclasses import dataclass
from pathlib import Path

from docmirror.sync.mirror import MirrorEngine
from docmirror.tree.node import DIRECTORY_MIME, TreeNode
from docmirror.utils.paths import ensure_dir, mirror_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
    """A top-level container and its local image, if it has one."""

    name: str
    image_path: Path | None = None


def discover_categories(engine: MirrorEngine, root: TreeNode, target_root: Path) -> list[Category]:
    """
    Discover categories under a source root and mirror their skeleton.

    Each child directory of root becomes a category. A local directory
    of the same name is ensured under target_root, and the category's
    first image child is copied there unless a file of that name already
    exists locally. Nothing is ever overwritten or deleted.

    Args:
        engine: Engine used for the source tree and byte copies.
        root: Source root to scan.
        target_root: Local directory receiving the category skeleton.

    Returns:
        Categories in listing order.

    Raises:
        DirectoryCreateFailure: If a local category directory cannot be created.
        IOFailure: If an image copy fails.
    """
    categories: list[Category] = []

    for folder in engine.tree.list_directories(root):
        local_dir = ensure_dir(mirror_path(Path(target_root), folder.name))
        image_path = _copy_category_image(engine, folder, local_dir)
        categories.append(Category(name=folder.name, image_path=image_path))
        logger.debug("Found category: %s", folder.name)

    return categories


def _copy_category_image(engine: MirrorEngine, folder: TreeNode, local_dir: Path) -> Path | None:
    """Copy the first image of a category once; an existing local file wins."""
    image = engine.tree.first_image_child(folder)
    if image is None:
        logger.debug("No image in category %s", folder.name)
        return None

    target = mirror_path(local_dir, image.name)
    if not target.exists():
        engine.copy_to_local(image, target)
    return target


def create_category(engine: MirrorEngine, root: TreeNode, name: str) -> TreeNode:
    """
    Create a category container under root, or return the existing one.

    Raises:
        DocumentCreateFailure: If the provider cannot create the container.
    """
    return engine.tree.get_or_create_child(root, name, DIRECTORY_MIME)
