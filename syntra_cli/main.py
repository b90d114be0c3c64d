"""Syntra CLI - Main entry point."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from syntra_core.core.logging import configure_logging
from syntra_core.emotion import EmotionLabel, describe_context, get_classifier
from syntra_core.exceptions import SyntraError
from syntra_core.feedback import FeedbackEngine, emotion_advice
from syntra_core.history import write_export
from syntra_core.security import SecurityVault

from . import __version__
from .commands import history
from .utils.output import format_output, print_error, print_success

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="syntra")
@click.option("--storage-dir", envvar="SYNTRA_HISTORY_STORAGE_DIR", type=click.Path(file_okay=False),
              help="Directory holding the history file (default ~/.syntra)")
@click.option("--key-file", envvar="SYNTRA_KEY_FILE", type=click.Path(dir_okay=False),
              help="Key bundle used to encrypt and decrypt history")
@click.option("--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table",
              help="Output format")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    storage_dir: Optional[str],
    key_file: Optional[str],
    output: str,
    debug: bool,
):
    """Syntra CLI - Emotion-aware conversation history.

    \b
    Examples:
      syntra classify "I am so happy and excited today"
      syntra coach "I hate waiting" --emotion angry
      syntra keygen --out syntra-key.json
      syntra --key-file syntra-key.json history add "Hello there"
    """
    ctx.ensure_object(dict)
    configure_logging(level="debug" if debug else "warning")

    ctx.obj["storage_dir"] = storage_dir
    ctx.obj["key_file"] = key_file
    ctx.obj["output"] = output
    ctx.obj["debug"] = debug


@cli.command("classify")
@click.argument("text")
@click.pass_context
def classify(ctx: click.Context, text: str):
    """Detect the emotion of TEXT."""
    result = get_classifier().classify(text)

    if ctx.obj["output"] != "table":
        format_output(
            {**result.to_dict(), "context": describe_context(result.label)},
            ctx.obj["output"],
        )
        return

    table = Table(title="Emotion")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Emotion", result.label.value)
    table.add_row("Confidence", f"{result.confidence:.0f}%")
    table.add_row("Context", describe_context(result.label))
    console.print(table)


@cli.command("coach")
@click.argument("text")
@click.option("--emotion", "-e", type=click.Choice([label.value for label in EmotionLabel]),
              help="Emotion to score against (detected from TEXT when omitted)")
@click.pass_context
def coach(ctx: click.Context, text: str, emotion: Optional[str]):
    """Score how effectively TEXT communicates and suggest improvements."""
    label = EmotionLabel(emotion) if emotion else get_classifier().classify(text).label
    result = FeedbackEngine().score(text, label)

    if ctx.obj["output"] != "table":
        format_output(
            {"emotion": label.value, "band": result.band.value, **result.to_dict()},
            ctx.obj["output"],
        )
        return

    color = {"excellent": "green", "fair": "yellow"}.get(result.band.value, "red")
    console.print(Panel.fit(
        f"[bold {color}]{result.score}[/bold {color}] / 100  ({label.value})",
        title="Communication Score",
        border_style="blue",
    ))
    console.print(f"[bold]Feedback:[/bold] {result.feedback}")
    console.print(f"[bold]Suggestion:[/bold] {result.suggestion}")
    console.print(f"[bold]Advice:[/bold] {emotion_advice(label)}")
    if result.improvements:
        console.print("[bold]Improvements:[/bold]")
        for item in result.improvements:
            console.print(f"  • {item}")


@cli.command("keygen")
@click.option("--out", "out_file", type=click.Path(dir_okay=False),
              help="Write the key bundle to this file instead of stdout")
def keygen(out_file: Optional[str]):
    """Generate a new encryption key bundle."""
    vault = SecurityVault()
    vault.generate_key()
    bundle = vault.export_key_material()

    if not out_file:
        click.echo(bundle.decode("utf-8"))
        return

    try:
        path = write_export(out_file, bundle)
    except SyntraError as e:
        print_error(f"Failed to write key bundle: {e.message}")
        sys.exit(1)
    print_success(f"Key bundle written to {path}")
    console.print("  Keep this file safe: history encrypted with it cannot be read without it.")


# Register command groups
cli.add_command(history)


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
