import asyncio
import logging

import typer
from typing_extensions import Annotated
from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.prompt import Prompt
from rich.table import Table

from aia_orchestrator.client.aia_orchestrator import AIAOrchestrator
from aia_orchestrator.exceptions import OrchestrationError

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer()
console = Console()

ConfigOption = Annotated[
    str, typer.Option(help="Path to the configuration JSON or Python file.")
]


def load_orchestrator(config: str) -> AIAOrchestrator:
    """Build the client, exiting with a readable message on bad configuration."""
    try:
        return AIAOrchestrator(config_path=config)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)


async def stream_response(
    orchestrator: AIAOrchestrator, conversation_id: str, message: str
) -> None:
    """Stream one turn, showing status lines until content arrives."""
    full_response = ""
    response = None
    with Live(console=console, refresh_per_second=10, transient=True) as live:
        live.update(Spinner("dots", "Thinking..."))
        try:
            async for event in orchestrator.stream_events(conversation_id, message):
                if event.type == "status":
                    live.update(Spinner("dots", event.status))
                elif event.type == "content":
                    full_response += event.delta
                    live.update(full_response)
                elif event.type == "completed":
                    response = event.response
        except OrchestrationError as e:
            live.update("")
            console.print(f"[bold red]Error during processing:[/bold red] {e}")
            return

    if full_response:
        console.print(f"[bright_blue]AIA:[/bright_blue] {full_response}")
    else:
        console.print("[yellow]No response was produced.[/yellow]")
    if response is not None:
        console.print(f"[dim]{response.total_tokens} tokens[/dim]")

    await orchestrator.wait_for_naming()
    title = orchestrator.get_title(conversation_id)
    if title:
        console.print(f"[dim]Conversation: {title}[/dim]")


async def chat_session(orchestrator: AIAOrchestrator, conversation_id: str) -> None:
    """Read prompts and stream replies on one event loop until the user exits."""
    while True:
        user_message = Prompt.ask("[bold green]You[/bold green]")

        if user_message.lower() in ["exit", "quit"]:
            console.print("[yellow]Exiting chat session.[/yellow]")
            return

        if not user_message.strip():
            continue

        await stream_response(orchestrator, conversation_id, user_message)


@app.command()
def chat(config: ConfigOption = "config.json"):
    """
    Start an interactive chat session.
    Type 'exit' or 'quit' to end the session.
    """
    with console.status("[bold green]Initializing...", spinner="dots"):
        orchestrator = load_orchestrator(config)
    conversation_id = orchestrator.new_conversation()
    console.print("[green]Ready. Start chatting![/green]")
    console.print("[dim]Type 'exit' or 'quit' to end.[/dim]")

    # Provider clients hold connection pools bound to the loop that created them
    try:
        asyncio.run(chat_session(orchestrator, conversation_id))
    except KeyboardInterrupt:
        console.print("\n[yellow]Exiting chat session (KeyboardInterrupt).[/yellow]")


@app.command()
def route(
    prompt: Annotated[str, typer.Argument(help="Prompt to route.")],
    config: ConfigOption = "config.json",
):
    """Show which provider would handle a prompt."""
    orchestrator = load_orchestrator(config)
    try:
        category, provider = orchestrator.route(prompt)
    except OrchestrationError as e:
        console.print(f"[bold red]Routing failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(f"Category: [cyan]{category.value if category else 'none'}[/cyan]")
    console.print(f"Provider: [bright_blue]{provider.name}[/bright_blue] ({provider.kind.value})")


@app.command()
def providers(config: ConfigOption = "config.json"):
    """List the configured providers."""
    orchestrator = load_orchestrator(config)
    table = Table(title="Providers")
    for column in ("Name", "Kind", "Model", "Enabled", "Default", "Priority", "Strengths"):
        table.add_column(column)
    for provider in orchestrator.list_providers():
        table.add_row(
            provider.name,
            provider.kind.value,
            provider.deployment_name or provider.model_id,
            "yes" if provider.enabled else "no",
            "yes" if provider.is_default else "",
            str(provider.priority),
            ", ".join(sorted(provider.strengths)),
        )
    console.print(table)


@app.command()
def tools(config: ConfigOption = "config.json"):
    """List the registered tools."""
    orchestrator = load_orchestrator(config)
    table = Table(title="Tools")
    table.add_column("Name")
    table.add_column("Description")
    for tool in orchestrator.list_tools():
        table.add_row(tool["name"], tool["description"])
    console.print(table)


if __name__ == "__main__":
    app()
