"""Conversation history commands."""

import sys
from typing import Optional, Tuple

import click

from syntra_core.analytics import EmotionDistribution
from syntra_core.emotion import EmotionLabel
from syntra_core.exceptions import DecryptionError, SyntraError
from syntra_core.history import LOCKED_PLACEHOLDER, HistoryFilter, HistoryStore, write_export
from syntra_core.pipeline import ConversationPipeline

from ..utils.context import build_store, run_async
from ..utils.output import format_output, print_error, print_success, print_warning

EMOTION_CHOICES = click.Choice([label.value for label in EmotionLabel])

ENTRY_COLUMNS = ["id", "timestamp", "speaker", "emotion", "confidence", "original_text", "translated_text"]


def _entry_row(entry) -> dict:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        "speaker": entry.speaker,
        "emotion": entry.emotion.value,
        "confidence": f"{entry.emotion_confidence:.0f}%",
        "original_text": entry.original_text,
        "translated_text": entry.translated_text,
    }


async def _open(ctx: click.Context) -> HistoryStore:
    store = build_store(ctx)
    try:
        await store.load()
    except DecryptionError:
        print_warning(LOCKED_PLACEHOLDER)
        print_error("Stored history is encrypted. Pass the matching --key-file.")
        sys.exit(1)
    except SyntraError as e:
        print_error(f"Failed to load history: {e.message}")
        sys.exit(1)
    return store


async def _save(store: HistoryStore) -> None:
    if not await store.flush():
        reason = store.last_error.message if store.last_error else "unknown error"
        print_error(f"History not saved: {reason}")
        sys.exit(1)


@click.group()
def history():
    """Record, search and export conversation history.

    \b
    Examples:
      syntra history add "I am so happy today" --speaker alice
      syntra history search --emotion happy
      syntra history export history.csv --redact secret
    """
    pass


@history.command("add")
@click.argument("text")
@click.option("--speaker", "-s", default="user", help="Speaker name")
@click.option("--from", "source_language", default="en", help="Source language code")
@click.option("--to", "target_language", default="en", help="Target language code")
@click.option("--session", "session_id", default="default", help="Session ID")
@click.pass_context
def add_entry(
    ctx: click.Context,
    text: str,
    speaker: str,
    source_language: str,
    target_language: str,
    session_id: str,
):
    """Run one conversation turn and record it."""

    async def _run():
        store = await _open(ctx)
        pipeline = ConversationPipeline(store, classification_latency=0, translation_latency=0)
        result = await pipeline.run(
            text,
            speaker=speaker,
            source_language=source_language,
            target_language=target_language,
            session_id=session_id,
        )
        await _save(store)
        return result

    result = run_async(_run())
    if result is None:
        print_error("Turn was cancelled")
        sys.exit(1)

    if ctx.obj["output"] == "table":
        format_output(
            {
                **_entry_row(result.entry),
                "score": result.session.score,
                "encrypted": result.entry.encrypted,
            },
            title="Recorded Entry",
        )
    else:
        format_output(
            {"entry": result.entry.to_dict(), "session": result.session.to_dict()},
            ctx.obj["output"],
        )


@history.command("search")
@click.option("--search", "-q", help="Case-insensitive text search")
@click.option("--emotion", "-e", type=EMOTION_CHOICES, help="Exact emotion")
@click.option("--speaker", "-s", help="Exact speaker")
@click.option("--redact", "-r", multiple=True, help="Keyword to mask (repeatable)")
@click.pass_context
def search(
    ctx: click.Context,
    search: Optional[str],
    emotion: Optional[str],
    speaker: Optional[str],
    redact: Tuple[str, ...],
):
    """Search conversation history."""
    store = run_async(_open(ctx))
    for keyword in redact:
        store.vault.add_redaction(keyword)

    entries = [
        store.display(entry)
        for entry in store.query(HistoryFilter(search=search, emotion=emotion, speaker=speaker))
    ]

    if ctx.obj["output"] == "table":
        format_output([_entry_row(e) for e in entries], columns=ENTRY_COLUMNS, title="History")
        click.echo(f"\nTotal: {len(entries)}")
    else:
        format_output([e.to_dict() for e in entries], ctx.obj["output"])


@history.command("export")
@click.argument("output_file", type=click.Path(dir_okay=False))
@click.option("--search", "-q", help="Case-insensitive text search")
@click.option("--emotion", "-e", type=EMOTION_CHOICES, help="Exact emotion")
@click.option("--speaker", "-s", help="Exact speaker")
@click.option("--redact", "-r", multiple=True, help="Keyword to mask (repeatable)")
@click.pass_context
def export_history(
    ctx: click.Context,
    output_file: str,
    search: Optional[str],
    emotion: Optional[str],
    speaker: Optional[str],
    redact: Tuple[str, ...],
):
    """Export conversation history to CSV."""
    store = run_async(_open(ctx))
    for keyword in redact:
        store.vault.add_redaction(keyword)

    filter = HistoryFilter(search=search, emotion=emotion, speaker=speaker)
    try:
        path = write_export(output_file, store.export_csv(filter))
    except SyntraError as e:
        print_error(f"Export failed: {e.message}")
        sys.exit(1)

    print_success(f"Exported {len(store.query(filter))} entries to {path}")


@history.command("delete")
@click.argument("entry_id")
@click.pass_context
def delete_entry(ctx: click.Context, entry_id: str):
    """Delete one history entry."""

    async def _run():
        store = await _open(ctx)
        deleted = store.delete(entry_id)
        if deleted:
            await _save(store)
        return deleted

    if not run_async(_run()):
        print_error(f"Entry not found: {entry_id}")
        sys.exit(1)
    print_success(f"Deleted entry {entry_id}")


@history.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def clear_history(ctx: click.Context, yes: bool):
    """Delete every history entry."""
    if not yes and not click.confirm("Delete all history entries?", default=False):
        print_warning("Aborted")
        return

    async def _run():
        store = await _open(ctx)
        count = store.clear()
        await _save(store)
        return count

    count = run_async(_run())
    print_success(f"Cleared {count} entries")


@history.command("stats")
@click.pass_context
def stats(ctx: click.Context):
    """Show emotion distribution and per-session counts."""
    store = run_async(_open(ctx))
    distribution = EmotionDistribution.from_entries(store.entries)

    data = {
        "total_entries": len(store),
        "dominant_emotion": distribution.dominant.value,
        "distribution": distribution.to_dict(),
        "speakers": store.unique_speakers(),
        "sessions": store.session_counts(),
    }
    format_output(data, ctx.obj["output"], title="History Statistics")
