"""tagdiary CLI - per-day diary with tag collections."""

import asyncio
import json
import logging
import sys

import click
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import load_config
from .core.dates import resolve_date, to_date_key
from .errors import DiaryError, NotAuthenticated
from .workflows import build_manager, format_collection, get_store, open_session


def _run(coro):
    """Run a coroutine, reporting diary errors the CLI way."""
    try:
        return asyncio.run(coro)
    except DiaryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _date_key(value: str) -> str:
    try:
        return to_date_key(resolve_date(value))
    except DiaryError as e:
        raise click.BadParameter(str(e))


@click.group()
@click.version_option(package_name="tagdiary")
@click.option("--owner", help="Owner id (defaults to OWNER in tagdiary.conf)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, owner: str | None, verbose: bool):
    """tagdiary - one entry per day, grouped by #tags."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config()
    ctx.obj["owner"] = owner


@main.command()
@click.argument("day", default="today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx, day: str, as_json: bool):
    """Show the entry for DAY (default: today)."""
    date_key = _date_key(day)

    async def fetch():
        manager = await build_manager(ctx.obj["config"], ctx.obj["owner"])
        return await manager.fetch_entry(date_key)

    entry = _run(fetch())

    if as_json:
        click.echo(json.dumps({"date": entry.date, "content": entry.content, "exists": entry.exists}, indent=2))
    elif not entry.exists:
        click.echo(f"No entry for {entry.date}.")
    else:
        click.echo(entry.content)


@main.command()
@click.argument("day", default="today")
@click.option("--editor", "use_editor", is_flag=True, help="Edit the entry in $EDITOR")
@click.pass_context
def write(ctx, day: str, use_editor: bool):
    """Replace the entry for DAY with text from stdin or $EDITOR."""
    date_key = _date_key(day)
    config = ctx.obj["config"]

    async def save():
        manager = await build_manager(config, ctx.obj["owner"])
        session = await open_session(manager, AsyncIOScheduler(), config, date_key)
        existing = await manager.fetch_entry(date_key)
        if use_editor or sys.stdin.isatty():
            content = click.edit(text=existing.content, extension=".md")
            if content is None:
                return False
            content = content.rstrip("\n")
        else:
            content = sys.stdin.read()
        if existing.exists and content == existing.content:
            return False
        session.on_edit(content)
        await session.flush()
        return True

    if _run(save()):
        click.echo(f"Saved {date_key}.")
    else:
        click.echo("No changes.")


@main.command()
@click.argument("text")
@click.option("--day", default="today", help="Date to append to (default: today)")
@click.pass_context
def append(ctx, text: str, day: str):
    """Append a line of TEXT to an entry."""
    date_key = _date_key(day)
    config = ctx.obj["config"]

    async def save():
        manager = await build_manager(config, ctx.obj["owner"])
        session = await open_session(manager, AsyncIOScheduler(), config, date_key)
        session.on_edit(await manager.append_to_entry(date_key, text))
        await session.flush()

    _run(save())
    click.echo(f"Appended to {date_key}.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tags(ctx, as_json: bool):
    """List tags with the number of tagged sections."""

    async def load():
        manager = await build_manager(ctx.obj["config"], ctx.obj["owner"])
        return manager.tag_counts()

    counts = _run(load())
    marker = ctx.obj["config"].tag_marker

    if as_json:
        click.echo(json.dumps(counts, indent=2))
    elif not counts:
        click.echo("No tags yet.")
    else:
        for tag, count in counts.items():
            click.echo(f"{marker}{tag:<20} {count}")


@main.command()
@click.argument("tag")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def collection(ctx, tag: str, as_json: bool):
    """Show every section tagged TAG, oldest first."""
    config = ctx.obj["config"]
    tag = tag.removeprefix(config.tag_marker)

    async def resolve():
        manager = await build_manager(config, ctx.obj["owner"])
        return await manager.resolve_tag_collection(tag)

    sections = _run(resolve())

    if as_json:
        click.echo(json.dumps([{"date": s.date, "content": s.content} for s in sections], indent=2))
    else:
        click.echo(format_collection(tag, sections, config.tag_marker))


@main.command()
@click.pass_context
def dates(ctx):
    """List dates that have entries."""
    config = ctx.obj["config"]
    owner = ctx.obj["owner"] or config.owner

    async def load():
        if not owner:
            raise NotAuthenticated("No owner configured. Set OWNER in tagdiary.conf or pass --owner.")
        return await get_store(config).list_dates(owner)

    for date_key in _run(load()):
        click.echo(date_key)


@main.command()
def bot():
    """Run the Telegram bot."""
    from .telegram_bot import run_bot

    try:
        run_bot()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
