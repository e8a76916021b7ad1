import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def print_message(message: str) -> None:
    """Print one operation confirmation."""
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps({"result": message}, ensure_ascii=False))
    elif mode == "rich":
        _console.print(f"[green]✓[/] {message}", highlight=False)
    else:
        print(message)

def print_error(message: str) -> None:
    """Print a rejected operation's error message."""
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps({"error": message}, ensure_ascii=False))
    elif mode == "rich":
        _console.print(f"[bold red]✗[/] {message}", highlight=False)
    else:
        print(f"Error: {message}")

def print_section(title: str) -> None:
    mode = get_output_mode()
    if mode == "plain":
        print(f"\n--- {title} ---")
    elif mode == "rich":
        _console.rule(f"[bold cyan]{title}[/]")

def print_inventory(books: List[Any]) -> None:
    """Print the inventory according to the current output mode.
    - plain: 'ISBN - Title by Author (stock: N)' lines, or 'No books in library.'
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Inventory", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Stock", justify="right")
        for b in books:
            table.add_row(b.isbn, b.title, b.author, str(b.stock))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.isbn} - {b.title} by {b.author} (stock: {b.stock})")

def print_stats_result(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Titles:[/] {stats.get('total_titles', 0)}\n"
            f"[bold]Copies on shelf:[/] {stats.get('total_stock', 0)}\n"
            f"[bold]Users:[/] {stats.get('registered_users', 0)}\n"
            f"[bold]Active loans:[/] {stats.get('active_loans', 0)}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Titles: {stats.get('total_titles', 0)}")
        print(f"Total Stock: {stats.get('total_stock', 0)}")
        print(f"Registered Users: {stats.get('registered_users', 0)}")
        print(f"Active Loans: {stats.get('active_loans', 0)}")
