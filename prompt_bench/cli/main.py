"""
CLI interface for Prompt Bench.

Provides an interactive transcript editor on the terminal.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from prompt_bench.config.loader import DEFAULT_CONFIG, EditorConfig, load_editor_config
from prompt_bench.core.entries import CallEntry, Entry, TextEntry
from prompt_bench.core.errors import ConfigurationError
from prompt_bench.core.ledger import total_usage
from prompt_bench.core.pricing import PRICING_TABLE
from prompt_bench.core.session import Session, initial_conversation
from prompt_bench.core.submission import SubmissionController
from prompt_bench.sdk.openai_client import OpenAIBoundary

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

HELP_TEXT = """\
Type text to fill the trailing user turn.
  /submit        send the conversation to the model
  /edit N TEXT   replace the text of entry N
  /del N         delete entry N
  /role N        cycle the role of entry N
  /show          show the transcript
  /cost          show token usage and estimated cost
  /help          show this help
  /quit          leave the editor"""


def setup_logging(verbose: bool = False, debug: bool = False):
    """Configure logging for the editor."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
        force=True,
    )


def _build_session(config: EditorConfig) -> Session:
    controller = SubmissionController(
        boundary=OpenAIBoundary(),
        target_model=config.target_model,
        functions=config.functions
    )
    return Session(
        controller,
        entries=initial_conversation(config.system_prompt),
        pricing_table=config.pricing_table()
    )


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Prompt Bench CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Prompt Bench - Use --help to see available commands")


@app.command()
def models():
    """List known models and their pricing."""
    table = Table(title="Model pricing (USD per 1K tokens)")
    table.add_column("Model")
    table.add_column("Prompt", justify="right")
    table.add_column("Completion", justify="right")
    for model, pricing in PRICING_TABLE.prices.items():
        table.add_row(model, str(pricing.prompt_cost_per_1k), str(pricing.completion_cost_per_1k))
    console.print(table)


@app.command()
def chat(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to editor YAML configuration"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show request logging"),
    debug: bool = typer.Option(False, "--debug", help="Show debug logging")
):
    """
    Edit a conversation and submit it to the model.

    The transcript can be edited freely between submissions; each
    submission sends the whole conversation as shown.
    """
    setup_logging(verbose=verbose, debug=debug)

    try:
        config = load_editor_config(config_path) if config_path else DEFAULT_CONFIG
    except (FileNotFoundError, yaml.YAMLError, ConfigurationError) as e:
        console.print(f"[red]Error loading configuration:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    session = _build_session(config)
    loop = asyncio.new_event_loop()
    console.print(f"Prompt Bench - model [bold]{config.target_model}[/] - /help for commands")
    _display_transcript(session)

    try:
        while True:
            try:
                line = typer.prompt("", default="", show_default=False, prompt_suffix="> ")
            except typer.Abort:
                break

            if not _handle_line(session, line, loop):
                break
    finally:
        loop.close()

    sys.exit(EXIT_CODE_PASS)


def _handle_line(session: Session, line: str, loop: asyncio.AbstractEventLoop) -> bool:
    """Apply one line of input to the session. Returns False to quit."""
    if not line.strip():
        return True
    if not line.startswith("/"):
        session.type_next_turn(line)
        _display_transcript(session)
        return True

    command, _, rest = line[1:].partition(" ")
    command = command.lower()

    if command in ("quit", "exit", "q"):
        return False
    if command == "help":
        console.print(HELP_TEXT)
        return True
    if command == "show":
        _display_transcript(session)
        return True
    if command == "cost":
        _display_cost(session)
        return True
    if command == "submit":
        _submit(session, loop)
        return True

    if command in ("edit", "del", "role"):
        index_text, _, text = rest.partition(" ")
        try:
            index = int(index_text)
            if command == "edit":
                session.set_content(index, text)
            elif command == "del":
                session.delete(index)
            else:
                session.cycle_role(index)
        except ValueError:
            console.print(f"[red]Error:[/] expected an entry number, got '{escape(index_text)}'")
            return True
        except (IndexError, TypeError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            return True
        _display_transcript(session)
        return True

    console.print(f"[red]Unknown command:[/] /{escape(command)} (try /help)")
    return True


def _submit(session: Session, loop: asyncio.AbstractEventLoop) -> None:
    # one loop for the whole session so the HTTP client stays usable
    with console.status("Waiting for the model..."):
        result = loop.run_until_complete(session.submit())

    if result is None:
        console.print("[yellow]A submission is already in flight[/]")
        return
    if session.error:
        console.print(f"[red]{escape(session.error)}[/]")
        return
    _display_transcript(session)
    _display_cost(session)


def _format_currency(amount: float) -> str:
    """Format currency, keeping sub-cent amounts visible."""
    return f"${amount:,.4f}"


def _format_entry(entry: Entry) -> str:
    if isinstance(entry, TextEntry):
        return entry.content
    if isinstance(entry, CallEntry):
        arguments = entry.function_call.arguments
        try:
            arguments = json.dumps(json.loads(arguments), indent=2)
        except ValueError:
            pass
        return f"function call\n{entry.function_call.name}\n{arguments}"
    raise TypeError(f"Not a conversation entry: {entry!r}")


def _display_transcript(session: Session) -> None:
    """Display the conversation with the trailing user box."""
    table = Table(show_header=True, expand=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Role", style="bold", width=10)
    table.add_column("Content")
    for index, entry in enumerate(session.view()):
        table.add_row(str(index), entry.role.value.upper(), Text(_format_entry(entry)))
    console.print(table)


def _display_cost(session: Session) -> None:
    """Display per-model token usage and the estimated total."""
    if not session.ledger:
        console.print("[dim]No usage yet.[/]")
        return

    table = Table(title="Usage")
    table.add_column("Model")
    table.add_column("Prompt tokens", justify="right")
    table.add_column("Completion tokens", justify="right")
    for model, usage in session.ledger.items():
        table.add_row(model, str(usage.prompt_tokens), str(usage.completion_tokens))
    if len(session.ledger) > 1:
        total = total_usage(session.ledger)
        table.add_row("[bold]Total[/]", str(total.prompt_tokens), str(total.completion_tokens))
    console.print(table)

    try:
        console.print(f"Estimated cost: {_format_currency(session.estimated_cost())}")
    except ConfigurationError as e:
        console.print(f"[red]Pricing error:[/] {escape(str(e))}")


if __name__ == "__main__":
    app()
