"""Click-based CLI for docmirror - source tree mirroring."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from docmirror import __version__
from docmirror.config import (
    MirrorConfig,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from docmirror.errors import MirrorError
from docmirror.logger import setup_logging
from docmirror.output import Console
from docmirror.scheduler import OperationOutcome
from docmirror.service import MirrorService
from docmirror.sync.mirror import DirectoryPolicy
from docmirror.tree.local import LocalDirectoryProvider, guess_mime_type
from docmirror.tree.source import SourceTree

console = Console()
logger = logging.getLogger(__name__)


class CliCallback:
    """Logs operation notifications; the CLI reads outcomes from the futures."""

    def on_complete(self, key: Hashable, result: Any) -> None:
        logger.debug("Operation %s completed", key)

    def on_failure(self, key: Hashable, error: BaseException) -> None:
        logger.debug("Operation %s failed: %s", key, error)


@click.group()
@click.version_option(version=__version__, prog_name="docmirror")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Configuration file (default: ~/.config/docmirror/config.yaml or $DOCMIRROR_CONFIG)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """docmirror - mirror a document tree into a local directory.

    \b
    Source tree:  source.root in the configuration
    Mirror tree:  mirror.root in the configuration

    \b
    Newer source files overwrite older local copies, and local files
    missing from the source are removed.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _load(ctx: click.Context, verbose: bool = False) -> MirrorConfig:
    """Load configuration and set up logging, exiting on error."""
    try:
        config = load_config(ctx.obj.get("config_path"))
    except FileNotFoundError as e:
        console.print_error(str(e))
        sys.exit(1)
    except ValidationError as e:
        console.print_error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(
        verbose=verbose or config.output.verbose,
        level=config.output.log_level,
        log_file=config.output.log_file,
        colored=config.output.colored,
    )
    console.verbose = verbose or config.output.verbose

    if not Path(config.source.root).is_dir():
        console.print_error(f"Source tree not found: {config.source.root}")
        sys.exit(1)

    return config


def _run(config: MirrorConfig, submit: Callable[[MirrorService], Future]) -> OperationOutcome:
    """Run one operation to completion, exiting with 1 on failure."""
    try:
        with MirrorService.from_config(config, CliCallback()) as service:
            outcome: OperationOutcome = submit(service).result()
    except MirrorError as e:
        console.print_error(str(e))
        sys.exit(1)

    if not outcome.success:
        console.print_error(str(outcome.error))
        sys.exit(1)
    return outcome


@cli.command()
@click.option(
    "--prune-dirs/--keep-dirs",
    default=None,
    help="Delete local directories missing from the source (default: from config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def mirror(ctx: click.Context, prune_dirs: Optional[bool], verbose: bool) -> None:
    """Mirror the source tree into the local mirror directory.

    \b
    Examples:
        docmirror mirror
        docmirror mirror --prune-dirs
    """
    config = _load(ctx, verbose)
    if prune_dirs is not None:
        config.mirror.directory_policy = DirectoryPolicy.PRUNE if prune_dirs else DirectoryPolicy.KEEP
    if config.mirror.directory_policy == DirectoryPolicy.PRUNE:
        console.print_warning("Local directories missing from the source will be deleted")

    console.print_info(f"Source: {config.source.root}")
    console.print_info(f"Mirror: {config.mirror.root}")

    outcome = _run(config, lambda service: service.mirror_to_local("mirror"))
    console.print_mirror_result(outcome.result)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("container")
@click.option("--name", help="Document name (default: file name without extension)")
@click.option("--mime-type", help="MIME type (default: guessed from the file name)")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def push(
    ctx: click.Context,
    source: Path,
    container: str,
    name: Optional[str],
    mime_type: Optional[str],
    verbose: bool,
) -> None:
    """Write a local file back into a container of the source tree.

    The document is created if it doesn't exist and overwritten otherwise.
    """
    config = _load(ctx, verbose)
    doc_name = name or source.stem
    doc_mime = mime_type or guess_mime_type(source)

    outcome = _run(
        config,
        lambda service: service.mirror_from_local("push", source, container, doc_name, doc_mime),
    )
    console.print_document(outcome.result, container)


@cli.command("create-container")
@click.argument("name")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def create_container(ctx: click.Context, name: str, verbose: bool) -> None:
    """Create a container (category) under the source root."""
    config = _load(ctx, verbose)
    outcome = _run(config, lambda service: service.create_container("create-container", name))
    console.print_success(f"Container ready: {outcome.result}")


@cli.command()
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def categories(ctx: click.Context, verbose: bool) -> None:
    """List categories and copy their images into the mirror directory."""
    config = _load(ctx, verbose)
    outcome = _run(config, lambda service: service.discover_categories("categories"))
    console.print_categories(outcome.result)


@cli.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("container")
@click.option("--name", help="Document name (default: the container name)")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def import_file(ctx: click.Context, file: Path, container: str, name: Optional[str], verbose: bool) -> None:
    """Import a file into a container, creating the container if needed.

    Meant for category images: without --name the document is named
    after the container.
    """
    config = _load(ctx, verbose)
    file = file.resolve()
    source_tree = SourceTree(LocalDirectoryProvider(file.parent))

    outcome = _run(
        config,
        lambda service: service.copy_to_container("import", source_tree, file.name, container, name),
    )
    console.print_document(outcome.result, container)


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group()
def config() -> None:
    """Manage the docmirror configuration file."""
    pass


@config.command("init")
@click.pass_context
def config_init(ctx: click.Context) -> None:
    """Create a default configuration file if none exists."""
    path, created = ensure_config_exists(ctx.obj.get("config_path"))
    if created:
        console.print_success(f"Created configuration: {path}")
    else:
        console.print_info(f"Configuration already exists: {path}")


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the active configuration."""
    path = ctx.obj.get("config_path") or get_config_path()
    try:
        config = load_config(path)
    except (FileNotFoundError, ValidationError) as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_config_summary(str(path), config.source.root, config.mirror.root)
    console.print(f"Directory policy: {config.mirror.directory_policy.value}")
    console.print(f"Copy buffer: {config.mirror.copy_buffer_size} bytes")
    console.print(f"Timestamp tolerance: {config.mirror.mtime_tolerance_ms} ms")
    console.print(f"Workers: {config.scheduler.max_workers or 'CPU count'}")


@config.command("check")
@click.argument("file", type=click.Path(path_type=Path), required=False)
@click.pass_context
def config_check(ctx: click.Context, file: Optional[Path]) -> None:
    """Validate a configuration file."""
    path = file or ctx.obj.get("config_path") or get_config_path()
    is_valid, errors = validate_config_file(path)

    if is_valid:
        console.print_success(f"Configuration is valid: {path}")
        return

    console.print_error(f"Configuration is invalid: {path}")
    for error in errors:
        console.print(f"  • {error}", markup=False)
    sys.exit(1)


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print the configuration file path."""
    console.print(str(ctx.obj.get("config_path") or get_config_path()), markup=False)


if __name__ == "__main__":
    cli()
