"""
Tiered Assistant - Main Entry Point

Starts the interactive console conversation.
"""

import asyncio

import click

from .core.config import settings
from .core.graph import EscalationGraph
from .memory import ConversationMemory
from .session import ConsoleSession
from .utils.console import ConsoleReader
from .utils.logger import get_logger, setup_logger


logger = get_logger()


async def _chat_mode() -> int:
    """Interactive chat mode."""
    reader = ConsoleReader(
        fallback=settings.prompt_fallback,
        allow_empty=settings.allow_empty_prompt
    )
    graph = EscalationGraph(reporter=reader.write)
    session = ConsoleSession(reader, graph.workflow, ConversationMemory())

    try:
        return await session.run()
    finally:
        reader.close()


@click.command()
@click.option("--debug", is_flag=True, help="Enable debug mode")
def cli(debug: bool):
    """🤖 Tiered Assistant - answers escalate to web lookups when needed"""
    if debug:
        setup_logger(level="DEBUG")

    try:
        handled = asyncio.run(_chat_mode())
    except KeyboardInterrupt:
        click.echo()
        return
    logger.with_agent("Session").info(f"Session ended after {handled} answers")


# ==================== Entry Point ====================

def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
