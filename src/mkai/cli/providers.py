"""Provider factory for CLI commands.

Centralizes creation of the store, gateway, voice adapter and orchestrator
from environment settings.
"""

import logging
from collections.abc import Callable

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import Settings
from ..gateway import ModelGateway, create_model_gateway
from ..orchestrator import ConversationOrchestrator
from ..store import MessageStore, create_key_value_store
from ..voice import VoiceIO, create_voice_io

_console = Console()


def configure_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route library logging through Rich, exiting if the level name is unknown."""
    if not isinstance(logging.getLevelName(level), int):
        (console or _console).print(
            f"[red]Error: unknown log level '{level}' (check MKAI_LOG_LEVEL)[/red]"
        )
        raise typer.Exit(code=1)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or _console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def get_store(settings: Settings) -> MessageStore:
    """Create the message store on the configured backend.

    Environment variables:
        MKAI_STORE: Backend type (sqlite, memory; default: sqlite)
        MKAI_DB_PATH: SQLite file (default: ~/.mkai/history.db)
    """
    if settings.store_backend == "sqlite":
        backend = create_key_value_store("sqlite", path=settings.db_path)
    else:
        backend = create_key_value_store(settings.store_backend)
    return MessageStore(backend)


def get_gateway(settings: Settings, console: Console | None = None) -> ModelGateway:
    """Create the Gemini gateway, exiting if no API key is configured.

    Environment variables:
        GEMINI_API_KEY: Gemini API key (API_KEY also accepted)
        MKAI_TEXT_MODEL: Text model
        MKAI_IMAGE_MODEL: Image model
    """
    con = console or _console
    if not settings.api_key:
        con.print("[red]Error: GEMINI_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)

    return create_model_gateway(
        "gemini",
        api_key=settings.api_key,
        text_model=settings.text_model,
        image_model=settings.image_model,
    )


def get_voice(settings: Settings, mute: bool = False, capture: bool = True) -> VoiceIO:
    """Create the voice adapter in the configured locale."""
    return create_voice_io(locale=settings.voice_locale, mute=mute, capture=capture)


def get_orchestrator(
    settings: Settings,
    store: MessageStore,
    mute: bool = False,
    capture: bool = True,
    on_composing: Callable[[bool], None] | None = None,
    console: Console | None = None,
) -> ConversationOrchestrator:
    """Wire an orchestrator around an already created store."""
    return ConversationOrchestrator(
        store=store,
        gateway=get_gateway(settings, console),
        voice=get_voice(settings, mute=mute, capture=capture),
        on_composing=on_composing,
    )
