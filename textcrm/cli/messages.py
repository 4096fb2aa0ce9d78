"""
Message Commands
----------------

Commands:
    - send: Store a message and update the registries
    - messages: List messages, optionally for one person or place
    - delete-message: Delete a message by id
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from typing import List, Optional, Tuple

# --- Third party imports ---
import click

# --- Local imports ---
from textcrm.core.exceptions import TextCrmError
from textcrm.core.logging_manager import handle_cli_error
from textcrm.dataclasses import ConfirmedSelection, Coordinate, MentionType, Message
from textcrm.pipeline import MessageLog, SuggestionComposer
from textcrm.utils.name_matching import find_name
from . import get_composer, open_log


def _echo_message(message: Message) -> None:
    click.echo(f"{message.id}  {message}")
    for mention in message.mentions:
        click.echo(f"    {mention.text} ({mention.type.display_name})")


async def _locate(composer: SuggestionComposer, name: str) -> Optional[Coordinate]:
    """First live search coordinate for a place, preferring an exact name hit."""
    results = await composer.search_places(name)
    located = [r for r in results if r.coordinate is not None]
    if not located:
        return None
    match = find_name(name, [r.name for r in located])
    chosen = next((r for r in located if r.name == match), located[0])
    return chosen.coordinate


async def _confirmations(
    log: MessageLog,
    composer: Optional[SuggestionComposer],
    person_names: Tuple[str, ...],
    place_names: Tuple[str, ...],
) -> List[ConfirmedSelection]:
    selections = [ConfirmedSelection(name=n, kind=MentionType.PERSON) for n in person_names]
    for name in place_names:
        coordinate = None
        known = log.snapshot.find_place(name)
        if known is not None:
            coordinate = known.coordinate
        if coordinate is None and composer is not None:
            coordinate = await _locate(composer, name)
        selections.append(
            ConfirmedSelection(name=name, kind=MentionType.PLACE, coordinate=coordinate)
        )
    return selections


@click.command()
@click.argument("text")
@click.option(
    "--person",
    "person_names",
    multiple=True,
    help="Confirm a person mention (repeatable)",
)
@click.option(
    "--place",
    "place_names",
    multiple=True,
    help="Confirm a place mention (repeatable)",
)
@click.option(
    "--locate",
    is_flag=True,
    help="Look up coordinates for confirmed places",
)
@click.pass_context
def send(ctx, text, person_names, place_names, locate):
    """Send a message."""

    async def run() -> Message:
        log = await open_log(ctx)
        composer = get_composer(ctx) if locate else None
        confirmed = await _confirmations(log, composer, person_names, place_names)
        return await log.send(text, confirmed=confirmed)

    try:
        message = asyncio.run(run())
        click.echo("✅ Message sent")
        _echo_message(message)
        if not message.mentions:
            click.echo("💡 No mentions recognized. Use --person/--place to confirm new names")

    except TextCrmError as e:
        handle_cli_error(ctx, e, "send", additional_context={"text": text})


@click.command()
@click.option("--person", "person_name", help="Only messages mentioning this person")
@click.option("--place", "place_name", help="Only messages mentioning this place")
@click.pass_context
def messages(ctx, person_name, place_name):
    """List messages (newest first when filtered)."""
    if person_name and place_name:
        raise click.UsageError("Use either --person or --place, not both")

    try:
        log = asyncio.run(open_log(ctx))

        if person_name:
            selected = log.messages_for_person(person_name)
            title = f"👤 Messages mentioning {person_name}"
        elif place_name:
            selected = log.messages_for_place(place_name)
            title = f"📍 Messages mentioning {place_name}"
        else:
            selected = log.messages
            title = "📝 Messages"

        click.echo(f"\n{title} ({len(selected)}):\n")
        for message in selected:
            _echo_message(message)

    except TextCrmError as e:
        handle_cli_error(ctx, e, "messages")


@click.command("delete-message")
@click.argument("message_id")
@click.pass_context
def delete_message(ctx, message_id):
    """Delete a message by id."""

    async def run() -> bool:
        log = await open_log(ctx)
        return await log.delete_message(message_id)

    try:
        if asyncio.run(run()):
            click.echo(f"🗑️  Deleted message {message_id}")
        else:
            click.echo(f"⚠️  No message with id {message_id}")

    except TextCrmError as e:
        handle_cli_error(
            ctx, e, "delete-message", additional_context={"message_id": message_id}
        )
