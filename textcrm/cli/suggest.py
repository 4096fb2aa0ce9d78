"""
Suggestion Commands
-------------------

Commands:
    - suggest: Show completions for a partly typed mention
"""
import asyncio
from typing import List

import click

from textcrm.core.exceptions import TextCrmError
from textcrm.core.logging_manager import handle_cli_error
from textcrm.dataclasses import SuggestionItem
from textcrm.utils.name_matching import MENTION_MARKER
from . import get_composer, open_log


@click.command()
@click.argument("partial")
@click.option(
    "--live/--no-live",
    default=True,
    help="Include live place search results",
)
@click.pass_context
def suggest(ctx, partial, live):
    """Suggest completions for PARTIAL (text after @)."""
    partial = partial[len(MENTION_MARKER):] if partial.startswith(MENTION_MARKER) else partial

    async def run() -> List[SuggestionItem]:
        log = await open_log(ctx)
        composer = get_composer(ctx, live=live)
        return await composer.suggest(partial, log.contact_names(), log.snapshot.places)

    try:
        items = asyncio.run(run())

        if not items:
            click.echo(f"No suggestions for @{partial}")
            return

        click.echo(f"\n💡 Suggestions for @{partial}:\n")
        for item in items:
            line = f"  {item.label}  [{item.kind.display_name}]"
            if item.subtitle:
                line += f"  {item.subtitle}"
            click.echo(line)

    except TextCrmError as e:
        handle_cli_error(ctx, e, "suggest", additional_context={"partial": partial})
