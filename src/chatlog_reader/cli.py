"""CLI entry points: chatlog parse, show, search, stats, status, clear-cache, init-env."""

from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

import click

from .config import Config


def _load(config: Config, path: Path, use_cache: bool = True):
    """Load *path*, printing progress to stderr."""
    from .archive import NoTranscriptFound
    from .loader import ChatLoader

    def on_progress(messages):
        click.echo(f"Parsed {len(messages):,} message(s)...", err=True)

    if not use_cache:
        config = replace(config, use_cache=False)
    loader = ChatLoader(config, on_progress=on_progress)
    try:
        loaded = loader.load(path)
    except NoTranscriptFound as e:
        raise click.ClickException(str(e))
    except zipfile.BadZipFile as e:
        raise click.ClickException(f"Not a valid archive: {path} ({e})")

    for failure in loaded.failures:
        click.echo(f"Warning: could not extract {failure.entry_name}: {failure.reason}", err=True)
    return loader, loaded


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


def _format_message(message, me: str | None = None) -> str:
    from .parsing.dates import display_timestamp
    from .stats import display_sender

    header = f"[{display_timestamp(message.timestamp)}] {display_sender(message.sender, me)}"
    if message.is_view_once:
        header += " (view once)"
    lines = [f"{header}: {message.text}"]
    if message.media_url:
        lines.append(f"  media: {message.media_url}")
    return "\n".join(lines)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Chatlog Reader: parse and browse exported chat transcripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    Config().load_env_file()  # Seed os.environ before constructing final config
    config = Config()
    ctx.obj["config"] = config


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output messages as JSON")
@click.option("--no-cache", is_flag=True, help="Ignore and do not update the cache")
@click.pass_context
def parse(ctx: click.Context, path: Path, as_json: bool, no_cache: bool) -> None:
    """Parse a transcript (.txt) or export archive (.zip)."""
    config = ctx.obj["config"]
    loader, loaded = _load(config, path, use_cache=not no_cache)
    try:
        if as_json:
            click.echo(json.dumps([m.to_dict() for m in loaded.messages], indent=2, ensure_ascii=False))
            return
        source = "cache" if loaded.from_cache else "transcript"
        click.echo(f"{len(loaded.messages):,} message(s) from {source}")
        if loaded.media:
            click.echo(f"{len(set(loaded.media.values())):,} media file(s) resolved")
    finally:
        loader.close()


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--query", "-q", default="", help="Only messages containing this text")
@click.option("--from", "date_from", help="First day to include (YYYY-MM-DD)")
@click.option("--to", "date_to", help="Last day to include (YYYY-MM-DD)")
@click.option("--limit", "-n", type=int, default=0, help="Max messages to show (0 = all)")
@click.pass_context
def show(ctx: click.Context, path: Path, query: str, date_from: str | None, date_to: str | None, limit: int) -> None:
    """Print messages, optionally filtered by text and date range."""
    from .filters import filter_messages
    from .stats import detect_me_sender

    config = ctx.obj["config"]
    start, end = _parse_day(date_from), _parse_day(date_to)
    loader, loaded = _load(config, path)
    try:
        messages = filter_messages(loaded.messages, query, start, end)
        if not messages:
            click.echo("No messages match.")
            return
        me = detect_me_sender(loaded.messages)
        for message in messages[:limit or None]:
            click.echo(_format_message(message, me))
    finally:
        loader.close()


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("query")
@click.option("--limit", "-n", type=int, default=10, help="Max results to return")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def search(ctx: click.Context, path: Path, query: str, limit: int, as_json: bool) -> None:
    """Rank messages in a chat by relevance to QUERY."""
    from .search import get_backend, search_messages

    config = ctx.obj["config"]
    try:
        get_backend(config.search_backend)
    except ValueError as e:
        raise click.ClickException(str(e))

    loader, loaded = _load(config, path)
    try:
        results = search_messages(loaded.messages, query, config.search_backend, limit)
    finally:
        loader.close()

    if as_json:
        output = [
            {
                "rank": r.rank,
                "score": r.score,
                "index": r.index,
                **r.message.to_dict(),
            }
            for r in results
        ]
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
    elif results:
        for r in results:
            click.echo(f"\n--- [{r.rank}] #{r.index} (score: {r.score:.2f}) ---")
            click.echo(_format_message(r.message))
    else:
        click.echo("No results found.")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def stats(ctx: click.Context, path: Path) -> None:
    """Show message counts per participant."""
    from .stats import chat_title, compute_stats, detect_me_sender

    config = ctx.obj["config"]
    loader, loaded = _load(config, path)
    try:
        chat_stats = compute_stats(loaded.messages)
        me = detect_me_sender(loaded.messages)
    finally:
        loader.close()

    click.echo(chat_title(chat_stats, me))
    click.echo("=" * 40)
    click.echo(f"Messages: {chat_stats.total_messages:,}")
    click.echo(f"Media: {chat_stats.media_count:,}")
    if me:
        click.echo(f"Exported by (guess): {me}")
    click.echo("\nParticipants:")
    for name, count in chat_stats.participants.most_common():
        click.echo(f"  {name}: {count:,}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration and cache contents."""
    from .cache import MessageCache

    config = ctx.obj["config"]

    click.echo("Chatlog Reader Status")
    click.echo("=" * 40)

    click.echo(f"\nCache dir: {config.cache_dir}")
    click.echo(f"  Exists: {config.cache_dir.exists()}")
    keys = MessageCache(config.cache_dir).keys()
    if keys:
        click.echo(f"  Cached chats: {len(keys)}")
        for key in keys:
            click.echo(f"    {key}")
    else:
        click.echo("  Cached chats: none")

    click.echo(f"\nEnv file: {config.env_file}")
    click.echo(f"  Exists: {'yes' if config.env_file.exists() else 'no'}")

    click.echo(f"\nSlices: first {config.first_slice_lines:,} line(s), then {config.slice_lines:,}")
    click.echo(f"Progress every: {config.flush_every:,} message(s)")
    click.echo(f"Search backend: {config.search_backend}")


@cli.command("clear-cache")
@click.pass_context
def clear_cache(ctx: click.Context) -> None:
    """Delete all cached parse results."""
    from .cache import MessageCache

    config = ctx.obj["config"]
    removed = MessageCache(config.cache_dir).clear()
    click.echo(f"Removed {removed} cached chat(s)")


@cli.command("init-env")
@click.pass_context
def init_env(ctx: click.Context) -> None:
    """Create a commented settings file."""
    config = ctx.obj["config"]
    if config.ensure_env_file():
        click.echo(f"Created {config.env_file}")
    else:
        click.echo(f"Env file: {config.env_file} (already exists)")
