"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table

from ..chat.models import ChatMessage, Role
from ..config import Settings
from ..media import export_image, load_attachment
from ..orchestrator import ConversationOrchestrator, OutcomeKind, SubmissionOutcome
from ..store import MessageStore
from .providers import configure_logging, get_orchestrator, get_store

# Load environment variables
load_dotenv()

app = typer.Typer(
    name="mkai",
    help="MK AI: chat with Gemini from the terminal, with voice and watermarked images",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()

PROMPT = "[bold cyan]You[/bold cyan] › "
CHAT_PREVIEW_MESSAGES = 6  # Stored turns shown when a chat session opens
TABLE_CONTENT_WIDTH = 60
CHAT_HELP = (
    "[dim]Commands: /image PATH attaches an image to your next message, "
    "/voice speaks one message, /reset clears history, /quit exits.[/dim]"
)


class ComposingIndicator:
    """Spinner shown while the assistant is composing."""

    def __init__(self, con: Console):
        self._status: Status = con.status("[magenta]MK AI is thinking...[/magenta]", spinner="dots")

    def __call__(self, composing: bool) -> None:
        if composing:
            self._status.start()
        else:
            self._status.stop()


def render_message(message: ChatMessage) -> Panel:
    """Render one turn as a Rich panel."""
    body = message.content or "[dim](no text)[/dim]"
    if message.image:
        body += "\n[dim]\\[image attached][/dim]"
    if message.generated_image:
        body += f"\n[green]\\[generated image][/green] [dim]save it with: mkai export {message.id}[/dim]"

    if message.role == Role.USER:
        return Panel(body, title="You", subtitle=message.display_time, title_align="left", border_style="cyan")
    return Panel(body, title="MK AI", subtitle=message.display_time, title_align="left", border_style="magenta")


def print_outcome(outcome: SubmissionOutcome | None) -> None:
    if outcome is None:
        console.print("[dim]Nothing to send.[/dim]")
        return
    if outcome.kind == OutcomeKind.NO_IMAGE:
        console.print("[yellow]No image was produced for that request.[/yellow]")
        return
    if outcome.reply is not None:
        console.print(render_message(outcome.reply))


async def load_history(store: MessageStore) -> list[ChatMessage]:
    """Connect the store backend and load the conversation, exiting on corrupt data."""
    await store.backend.connect()
    try:
        return await store.load()
    except ValidationError:
        console.print("[red]Error: stored history is unreadable. Run 'mkai reset' to start over.[/red]")
        await store.backend.disconnect()
        raise typer.Exit(code=1)


async def voice_turn(orchestrator: ConversationOrchestrator) -> SubmissionOutcome | None:
    console.print("[dim]Listening...[/dim]")
    outcome = await orchestrator.listen_and_submit()
    if outcome is None:
        console.print("[yellow]Didn't catch that.[/yellow]")
        return None
    console.print(render_message(outcome.user_message))
    return outcome


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging"
    )
):
    """Configure logging before any command runs."""
    settings = Settings.from_env()
    configure_logging("DEBUG" if verbose else settings.log_level, console)


@app.command()
def chat(
    mute: bool = typer.Option(
        False,
        "--mute",
        "-m",
        help="Do not speak replies aloud"
    ),
    image: Path | None = typer.Option(
        None,
        "--image",
        "-i",
        exists=True,
        dir_okay=False,
        help="Image to attach to the first message"
    )
):
    """Start an interactive chat session."""
    async def _chat():
        settings = Settings.from_env()
        store = get_store(settings)
        orchestrator = get_orchestrator(
            settings, store, mute=mute, on_composing=ComposingIndicator(console), console=console
        )
        history = await load_history(store)

        try:
            for message in history[-CHAT_PREVIEW_MESSAGES:]:
                console.print(render_message(message))
            console.print(CHAT_HELP)

            pending_image = load_attachment(image) if image else None
            while True:
                line = await asyncio.to_thread(console.input, PROMPT)
                command, _, argument = line.strip().partition(" ")

                if command in ("/quit", "/exit"):
                    break
                if command == "/reset":
                    await orchestrator.reset()
                    console.print("[green]Conversation cleared.[/green]")
                    continue
                if command == "/image":
                    try:
                        pending_image = load_attachment(argument.strip())
                        console.print(f"[dim]Attached {argument.strip()}[/dim]")
                    except OSError as e:
                        console.print(f"[red]Cannot read image: {e}[/red]")
                    continue
                if command == "/voice":
                    print_outcome(await voice_turn(orchestrator))
                    continue

                outcome = await orchestrator.submit(text=line, image=pending_image)
                if outcome is not None:
                    pending_image = None
                print_outcome(outcome)

        except (EOFError, KeyboardInterrupt):
            console.print()
        finally:
            if orchestrator.voice is not None:
                orchestrator.voice.cancel_playback()
            await store.backend.disconnect()

    asyncio.run(_chat())


@app.command()
def ask(
    text: str = typer.Argument("", help="Message to send"),
    image: Path | None = typer.Option(
        None,
        "--image",
        "-i",
        exists=True,
        dir_okay=False,
        help="Image to attach"
    ),
    mute: bool = typer.Option(
        False,
        "--mute",
        "-m",
        help="Do not speak the reply aloud"
    )
):
    """Send one message and print the reply."""
    async def _ask():
        settings = Settings.from_env()
        store = get_store(settings)
        orchestrator = get_orchestrator(
            settings, store, mute=mute, capture=False,
            on_composing=ComposingIndicator(console), console=console
        )
        await load_history(store)

        try:
            attachment = load_attachment(image) if image else None
            print_outcome(await orchestrator.submit(text=text, image=attachment))
        finally:
            await store.backend.disconnect()

    asyncio.run(_ask())


@app.command()
def listen(
    mute: bool = typer.Option(
        False,
        "--mute",
        "-m",
        help="Do not speak the reply aloud"
    )
):
    """Capture one spoken message from the microphone and reply to it."""
    async def _listen():
        settings = Settings.from_env()
        store = get_store(settings)
        orchestrator = get_orchestrator(
            settings, store, mute=mute, on_composing=ComposingIndicator(console), console=console
        )
        await load_history(store)

        try:
            print_outcome(await voice_turn(orchestrator))
        finally:
            await store.backend.disconnect()

    asyncio.run(_listen())


@app.command()
def history(
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        min=1,
        help="Number of most recent messages to show"
    )
):
    """Show stored conversation turns."""
    async def _history():
        store = get_store(Settings.from_env())
        messages = await load_history(store)
        await store.backend.disconnect()

        if not messages:
            console.print("[yellow]No conversation history[/yellow]")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Time", style="dim", width=5)
        table.add_column("Role", style="cyan", width=9)
        table.add_column("Message")
        table.add_column("Media", style="green", width=9)
        table.add_column("ID", style="dim")

        for message in messages[-limit:]:
            content = message.content
            if len(content) > TABLE_CONTENT_WIDTH:
                content = content[:TABLE_CONTENT_WIDTH] + "..."
            media = "generated" if message.generated_image else "attached" if message.image else ""
            table.add_row(message.display_time, message.role.value, content, media, message.id)

        console.print(table)
        console.print(f"[dim]{len(messages)} messages stored[/dim]")

    asyncio.run(_history())


@app.command()
def reset(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt"
    )
):
    """Clear the conversation and delete its stored copy."""
    if not yes and not typer.confirm("Delete the whole conversation?"):
        console.print("[dim]Aborted.[/dim]")
        return

    async def _reset():
        store = get_store(Settings.from_env())
        await store.backend.connect()
        try:
            await store.clear()
        finally:
            await store.backend.disconnect()
        console.print("[green]Conversation cleared.[/green]")

    asyncio.run(_reset())


@app.command()
def export(
    message_id: str = typer.Argument(..., help="ID of an assistant message with a generated image"),
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        file_okay=False,
        help="Directory to save the image in"
    )
):
    """Save a generated image as MK_AI_Generated_<timestamp>.png."""
    async def _export():
        store = get_store(Settings.from_env())
        await load_history(store)
        await store.backend.disconnect()

        message = store.find(message_id)
        if message is None or not message.generated_image:
            console.print(f"[red]Error: no generated image with id {message_id}[/red]")
            raise typer.Exit(code=1)

        path = export_image(message.generated_image, directory)
        console.print(f"[green]Saved {path}[/green]")

    asyncio.run(_export())


if __name__ == "__main__":
    app()
