"""Output formatting utilities."""

import json
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

console = Console()


def format_output(
    data: Any,
    format_type: str = "table",
    columns: Optional[List[str]] = None,
    title: Optional[str] = None,
) -> None:
    """Format and print data based on format type."""
    if format_type == "json":
        print_json(data)
    elif format_type == "yaml":
        print_yaml(data)
    else:
        if isinstance(data, list):
            print_table(data, columns, title)
        elif isinstance(data, dict):
            print_fields(data, title)
        else:
            console.print(data)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    json_str = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False, word_wrap=True)
    console.print(syntax)


def print_yaml(data: Any) -> None:
    """Print data as formatted YAML."""
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=False, word_wrap=True)
    console.print(syntax)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, (list, tuple)):
        return "\n".join(escape(str(v)) for v in value) or "-"
    if isinstance(value, dict):
        return escape(json.dumps(value, default=str))
    return escape(str(value))


def print_table(
    data: List[Dict[str, Any]],
    columns: Optional[List[str]] = None,
    title: Optional[str] = None,
) -> None:
    """Print a list of records as a table."""
    if not data:
        console.print("[dim]No data to display[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")

    display_columns = columns or list(data[0].keys())
    for col in display_columns:
        table.add_column(col.replace("_", " ").title())

    for item in data:
        table.add_row(*(_cell(item.get(col)) for col in display_columns))

    console.print(table)


def print_fields(data: Dict[str, Any], title: Optional[str] = None) -> None:
    """Print a single record as a field/value table."""
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")
