# docmirror Console Output
# Rich-based console output for user-friendly display

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from docmirror.sync.categories import Category
from docmirror.sync.mirror import MirrorResult
from docmirror.tree.node import TreeNode


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for mirror operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(force_terminal=colored, no_color=not colored)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_mirror_result(self, result: MirrorResult) -> None:
        """
        Print mirror result summary.

        Changed paths are listed; unchanged ones only in verbose mode.
        """
        for path in result.directories_created:
            self._console.print(f"    [cyan]+[/cyan] {escape(path)}/")
        for path in result.copied:
            self._console.print(f"    [cyan]↓[/cyan] {escape(path)}")
        for path in result.deleted:
            self._console.print(f"    [red]×[/red] {escape(path)} (deleted)")
        if self.verbose:
            for path in result.unchanged:
                self._console.print(f"    [green]✓[/green] [dim]{escape(path)}[/dim]")

        status = "Mirror completed" if result.has_changes else "Mirror up to date"
        self._console.print(
            Panel(
                f"[green]{status}[/green]\n"
                f"Target: {escape(str(result.root))}\n"
                f"Files: {result.total_files} seen, {len(result.copied)} copied, "
                f"{len(result.deleted)} deleted, {len(result.directories_created)} directories created",
                title="Summary",
                border_style="green",
            )
        )

    def print_categories(self, categories: list[Category]) -> None:
        """Print discovered categories as a table."""
        if not categories:
            self._console.print("[dim]No categories found[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Category")
        table.add_column("Image", style="dim")

        for category in categories:
            image = category.image_path.name if category.image_path else "-"
            table.add_row(escape(category.name), escape(image))

        self._console.print(table)

    def print_document(self, node: TreeNode, container: str) -> None:
        """Print a written document."""
        self._console.print(
            f"[green]✓[/green] {escape(container)}/{escape(node.name)} [dim]({escape(node.mime_type)})[/dim]"
        )

    def print_config_summary(self, config_path: str, source_root: str, mirror_root: str) -> None:
        """Print configuration summary."""
        self._console.print(
            Panel(
                f"Config: {escape(str(config_path))}\n"
                f"Source: {escape(source_root)}\n"
                f"Mirror: {escape(mirror_root)}",
                title="docmirror Configuration",
                border_style="blue",
            )
        )


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
