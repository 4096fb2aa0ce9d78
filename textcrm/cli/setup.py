"""
Setup Commands
--------------

Commands:
    - init: Create the database schema
"""
import click

from textcrm.core.exceptions import TextCrmError
from textcrm.core.logging_manager import handle_cli_error
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the message database."""
    try:
        click.echo("🗄️  Initializing database schema...")
        db = get_db(ctx)
        db.initialize_schema()
        click.echo(f"  Database: {db.db_path}")
        click.echo(f"  Tables: {', '.join(sorted(db.table_names()))}")
        click.echo("✅ Database initialized!")

    except TextCrmError as e:
        handle_cli_error(ctx, e, "init")
