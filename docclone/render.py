"""
Rendering functions for docclone output.

Human-readable summaries go to stderr so stdout carries only the
structured result.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, Optional

console = Console(stderr=True)


def render_summary(summary: Dict[str, Any], title: str = "DocFX Checkout Summary",
                   target: Optional[Console] = None) -> None:
    """
    Render the file-count summary of a clone or parse run.

    Args:
        summary: CloneReport.summary() dictionary
        title: Table title
        target: Console to print to (stderr console by default)
    """
    out = target or console

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total files", str(summary.get('total_files', 0)))
    if summary.get('sparse', True):
        table.add_row("Checked out files", f"[green]{summary.get('checked_out_files', 0)}[/green]")
        table.add_row("  Pre-fetched", str(summary.get('prefetched', 0)))
        table.add_row("  Fetched on demand", str(summary.get('fetched_on_demand', 0)))
        table.add_row("  Swept after parse", str(summary.get('swept', 0)))
    else:
        table.add_row("Checkout", "[dim]regular (no sparse fetch)[/dim]")

    out.print(table)

    if summary.get('created_default_config'):
        out.print(f"[yellow]Created default configuration at {summary.get('config')}[/yellow]")

    unavailable = summary.get('unavailable') or []
    if unavailable:
        out.print(f"\n[yellow]Unavailable files ({len(unavailable)}):[/yellow]")
        for path in unavailable:
            out.print(f"  [red]✗[/red] {path}")
