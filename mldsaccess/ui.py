"""UI utilities for mlds-access - status messages and summaries."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mldsaccess.ssh_config import HostBlock

console = Console()


def print_info(message: str) -> None:
    """Print a progress message."""
    console.print(f"[dim]{message}[/dim]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error."""
    console.print(f"[red]Error: {message}[/red]")


def print_debug(message: str, verbose: bool) -> None:
    """Print a debug line when verbose output is on."""
    if verbose:
        console.print(f"[dim][DEBUG] {message}[/dim]", highlight=False)


def display_host_block(block: HostBlock) -> None:
    """Show the SSH config entry that will be written."""
    console.print(
        Panel(
            "\n".join(block.to_lines()),
            title="SSH config entry",
            border_style="cyan",
            expand=False,
        )
    )


def display_summary(rows: list[tuple[str, str]]) -> None:
    """Display a two-column summary table."""
    table = Table(title="Setup Summary", show_header=False)
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for item, value in rows:
        table.add_row(item, value)

    console.print(table)
