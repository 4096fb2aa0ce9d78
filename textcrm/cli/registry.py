"""
Registry Commands
-----------------

Browse and edit the People and Places registries.

Commands:
    - people: List people with message counts
    - places: List places with message counts and coordinates
    - add-contact: Add a contact and list them as a person
    - delete-person: Delete a person and the messages only about them
    - delete-place: Delete a place and the messages only about it
"""
import asyncio
from typing import List

import click

from textcrm.core.exceptions import TextCrmError
from textcrm.core.logging_manager import handle_cli_error
from textcrm.dataclasses import Message, Person
from . import open_log


def _last_seen(entity) -> str:
    if entity.last_mentioned_at is None:
        return "never"
    return entity.last_mentioned_at.strftime("%Y-%m-%d %H:%M")


@click.command()
@click.pass_context
def people(ctx):
    """List people."""
    try:
        log = asyncio.run(open_log(ctx))
        registry = log.snapshot.people

        click.echo(f"\n👥 People ({len(registry)}):\n")
        for person in registry:
            click.echo(f"  • {person}  last: {_last_seen(person)}")

    except TextCrmError as e:
        handle_cli_error(ctx, e, "people")


@click.command()
@click.pass_context
def places(ctx):
    """List places."""
    try:
        log = asyncio.run(open_log(ctx))
        registry = log.snapshot.places

        click.echo(f"\n📍 Places ({len(registry)}):\n")
        for place in registry:
            line = f"  • {place}  last: {_last_seen(place)}"
            if place.coordinate is not None:
                line += f"  ({place.latitude:.5f}, {place.longitude:.5f})"
            click.echo(line)

    except TextCrmError as e:
        handle_cli_error(ctx, e, "places")


@click.command("add-contact")
@click.argument("name")
@click.pass_context
def add_contact(ctx, name):
    """Add a contact."""

    async def run() -> Person:
        log = await open_log(ctx)
        return await log.add_person(name)

    try:
        person = asyncio.run(run())
        click.echo(f"✅ Added contact {person.name}")

    except TextCrmError as e:
        handle_cli_error(ctx, e, "add-contact", additional_context={"name": name})


def _report_deleted(kind: str, name: str, removed: List[Message]) -> None:
    click.echo(f"🗑️  Deleted {kind} {name}")
    if removed:
        click.echo(f"  Removed {len(removed)} message(s) that mentioned only {name}")


@click.command("delete-person")
@click.argument("name")
@click.confirmation_option(prompt="⚠️  Messages mentioning only this person will be deleted. Continue?")
@click.pass_context
def delete_person(ctx, name):
    """Delete a person."""

    async def run() -> List[Message]:
        log = await open_log(ctx)
        return await log.delete_person(name)

    try:
        _report_deleted("person", name, asyncio.run(run()))

    except TextCrmError as e:
        handle_cli_error(ctx, e, "delete-person", additional_context={"name": name})


@click.command("delete-place")
@click.argument("name")
@click.confirmation_option(prompt="⚠️  Messages mentioning only this place will be deleted. Continue?")
@click.pass_context
def delete_place(ctx, name):
    """Delete a place."""

    async def run() -> List[Message]:
        log = await open_log(ctx)
        return await log.delete_place(name)

    try:
        _report_deleted("place", name, asyncio.run(run()))

    except TextCrmError as e:
        handle_cli_error(ctx, e, "delete-place", additional_context={"name": name})
