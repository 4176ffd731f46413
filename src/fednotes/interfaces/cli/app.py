"""CLI for fednotes using Rich and Typer."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from fednotes.core import config as app_config
from fednotes.core.fed_config import FedConfig
from fednotes.core.logs import DEFAULT_TAIL_LINES, clamp_tail_lines, tail_file
from fednotes.storage import NotesRepo

app = typer.Typer(
    name="fednotes",
    help="fednotes CLI - inspect a notes directory",
    no_args_is_help=True,
)

console = Console()

NotesOption = typer.Option(
    None,
    "--notes",
    "-n",
    help="Notes directory (default: $NOTES_PATH)",
)


def _notes_path(notes: Optional[str]) -> Path:
    if notes:
        return Path(notes).expanduser()
    return app_config.NOTES_PATH


def _add_nodes(branch: Tree, nodes: list[dict]) -> None:
    for node in nodes:
        if node["type"] == "folder":
            child = branch.add(f"[bold blue]{node['name']}/[/bold blue]")
            _add_nodes(child, node.get("children") or [])
        else:
            branch.add(node["name"])


@app.command()
def tree(notes: Optional[str] = NotesOption):
    """Print the notes tree."""
    repo = NotesRepo(_notes_path(notes))
    nodes = repo.list_tree()
    if not nodes:
        console.print("[dim]No notes yet.[/dim]")
        return

    root = Tree(f"[bold]{repo.base_path}[/bold]")
    _add_nodes(root, nodes)
    console.print(root)


@app.command()
def search(
    query: str = typer.Argument(..., help="Regular expression to search for"),
    notes: Optional[str] = NotesOption,
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum matches"),
):
    """Search note contents."""
    repo = NotesRepo(_notes_path(notes))
    results = repo.search_content(query, context_lines=1, max_results=limit)
    if not results:
        console.print(f"[yellow]No matches for: {query}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Matches for {query!r}", show_header=True)
    table.add_column("Note", style="cyan")
    table.add_column("Line", style="dim", justify="right")
    table.add_column("Text")

    for result in results:
        table.add_row(
            result["path"], str(result["line_number"]), result["match_text"].strip()
        )

    console.print(table)


@app.command()
def config(notes: Optional[str] = NotesOption):
    """Show `.fed` settings with their source; secrets are masked."""
    fed = FedConfig(_notes_path(notes))

    table = Table(title=str(fed.config_file_path), show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for entry in fed.entries():
        value = entry["value"]
        table.add_row(entry["key"], "" if value is None else str(value), entry["source"])

    console.print(table)

    features = ", ".join(
        f"[green]{name}[/green]" if enabled else f"[dim]{name}[/dim]"
        for name, enabled in fed.features().items()
    )
    console.print(f"Features: {features}")


@app.command()
def tail(
    lines: int = typer.Option(
        DEFAULT_TAIL_LINES, "--lines", "-l", help="Number of lines (1-500)"
    ),
):
    """Show the end of the server log."""
    log_file = app_config.get_log_file()
    if not log_file.is_file():
        console.print(f"[red]Log file not found: {log_file}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            "\n".join(tail_file(log_file, clamp_tail_lines(lines))),
            title=f"{app_config.FEDNOTES_ENV} log",
            border_style="blue",
        )
    )


def run_cli(args: list[str] | None = None):
    """Entry point for the CLI."""
    app(args=args)


if __name__ == "__main__":
    run_cli()
