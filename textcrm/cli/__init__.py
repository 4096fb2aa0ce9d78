#!/usr/bin/env python3
"""
TextCRM Command-Line Interface
------------------------------

Notes with @mentions, and the People and Places they add up to.

This module provides the main CLI group and the shared context setup
used by every command.

Command Structure:
    - Setup (init)
    - Messages (send, messages, delete-message)
    - Registries (people, places, add-contact, delete-person, delete-place)
    - Suggestions (suggest)

Usage:
    # Every command runs as a signed-in user
    crm --user ada send "Lunch with @Alice at @Deli"

    # Confirm a new name the way a picked suggestion would
    crm --user ada send "Dinner at @Luigi Trattoria" --place "Luigi Trattoria" --locate

    # Browse
    crm --user ada people
    crm --user ada messages --person Alice
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Optional

# --- Third party imports ---
import click

# --- Local imports ---
from textcrm.core.config import CrmConfig, load_config
from textcrm.core.logging_manager import setup_logger
from textcrm.core.paths import CONFIG_PATH, CONTACTS_PATH, DB_PATH, LOG_DIR
from textcrm.core.session import UserSession
from textcrm.database import CrmDB, SqlMessageStore
from textcrm.pipeline import MessageLog, SuggestionComposer
from textcrm.sources import NominatimPlaceSearch, YamlContactSource


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--contacts",
    "contacts_path",
    type=click.Path(),
    default=str(CONTACTS_PATH),
    help="Path to contacts YAML file",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=str(CONFIG_PATH),
    help="Path to configuration YAML file",
)
@click.option(
    "--user",
    envvar="TEXTCRM_USER",
    default=None,
    help="Signed-in user id (or TEXTCRM_USER)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, log_dir, contacts_path, config_path, user, verbose):
    """TextCRM: notes, mentions, people and places"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["contacts_path"] = Path(contacts_path)
    ctx.obj["config_path"] = Path(config_path)
    ctx.obj["user"] = user
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = setup_logger(Path(log_dir), "cli")
    ctx.call_on_close(lambda: _teardown(ctx))


def _teardown(ctx) -> None:
    session: Optional[UserSession] = ctx.obj.get("session")
    if session is not None:
        session.close()
    db: Optional[CrmDB] = ctx.obj.get("db")
    if db is not None:
        db.dispose()
    ctx.obj["logger"].close()


def get_db(ctx) -> CrmDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = CrmDB(
            db_path=ctx.obj["db_path"],
            logger=ctx.obj["logger"],
        )
    return ctx.obj["db"]


def get_config(ctx) -> CrmConfig:
    if "config" not in ctx.obj:
        ctx.obj["config"] = load_config(ctx.obj["config_path"])
    return ctx.obj["config"]


def get_session(ctx) -> UserSession:
    """Open the user session. Fails when no user id was given."""
    if "session" not in ctx.obj:
        session = UserSession.open(ctx.obj["user"])
        ctx.obj["logger"].bind(user_id=session.user_id)
        ctx.obj["session"] = session
    return ctx.obj["session"]


def get_place_search(ctx) -> NominatimPlaceSearch:
    search = get_config(ctx).search
    return NominatimPlaceSearch(
        url=search.url,
        user_agent=search.user_agent,
        timeout=search.timeout,
        limit=search.result_limit,
        logger=ctx.obj["logger"],
    )


def get_composer(ctx, live: bool = True) -> SuggestionComposer:
    config = get_config(ctx)
    return SuggestionComposer(
        place_search=get_place_search(ctx) if live else None,
        limit=config.suggestion_limit,
        min_search_length=config.min_search_length,
        logger=ctx.obj["logger"],
    )


async def open_log(ctx) -> MessageLog:
    """Build the message log for the signed-in user and load it."""
    session = get_session(ctx)
    store = SqlMessageStore(get_db(ctx), session, logger=ctx.obj["logger"])
    contacts = YamlContactSource(ctx.obj["contacts_path"], logger=ctx.obj["logger"])
    log = MessageLog(store, contacts, logger=ctx.obj["logger"])
    await log.load()
    return log


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init  # noqa: E402
from .messages import send, messages, delete_message  # noqa: E402
from .registry import people, places, add_contact, delete_person, delete_place  # noqa: E402
from .suggest import suggest  # noqa: E402

cli.add_command(init)
cli.add_command(send)
cli.add_command(messages)
cli.add_command(delete_message)
cli.add_command(people)
cli.add_command(places)
cli.add_command(add_contact)
cli.add_command(delete_person)
cli.add_command(delete_place)
cli.add_command(suggest)


if __name__ == "__main__":
    cli(obj={})
