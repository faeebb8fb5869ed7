"""CLI entry point and commands.

Provides the main CLI application with commands for:
- ask: Stream an answer for a question
- version: Show the installed version
"""

import asyncio
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from answer_client.exceptions import AnswerClientError
from answer_client.logging_config import configure_logging

app = typer.Typer(
    name="answer-client",
    help="Ask questions to a streaming answer-generation service",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else None)


@app.command()
def ask(
    question: Annotated[str, typer.Argument(help="The question to ask")],
    endpoint: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--endpoint", "-e", help="Search endpoint URL (defaults to SEARCH_ENDPOINT)"),
    ] = None,
    api_key: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--api-key", "-k", help="API key (defaults to ANSWER_API_KEY)"),
    ] = None,
    related: Annotated[
        int,
        typer.Option("--related", "-r", help="Number of related questions to request (0 = none)"),
    ] = 3,
    context: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--context", "-c", help="Free-text description of the user"),
    ] = None,
) -> None:
    """Stream the answer to a question.

    Examples:
        answer-client ask "How do I create an index?"
        answer-client ask "What is a facet?" --related 5 --context "new user"
    """
    try:
        asyncio.run(_run_ask(question, endpoint, api_key, related, context))
    except AnswerClientError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    except KeyboardInterrupt:
        console.print("[yellow]Answer aborted[/yellow]")
        raise typer.Exit(code=130) from None


async def _run_ask(
    question: str,
    endpoint: str | None,
    api_key: str | None,
    related: int,
    context: str | None,
) -> None:
    """Run one streamed answer and render it live."""
    from answer_client.session import AnswerSession
    from answer_client.state import AskParams, Related, SessionEvent, TextUserContext

    params = AskParams(
        query=question,
        user_data=TextUserContext(text=context) if context else None,
        related=Related(how_many=related) if related > 0 else None,
    )

    collected: dict[str, Any] = {}

    async with AnswerSession(search_endpoint=endpoint, api_key=api_key) as session:
        session.on(SessionEvent.SOURCE_CHANGE, lambda s: collected.__setitem__("sources", s))
        session.on(SessionEvent.RELATED_QUERIES, lambda q: collected.__setitem__("related", q))
        session.on(SessionEvent.ANSWER_ABORTED, lambda _: collected.__setitem__("aborted", True))

        console.print(Panel(f"[bold blue]{question}[/bold blue]", title="❓ Question"))

        answer = ""
        with Live(Markdown(""), console=console, refresh_per_second=12) as live:
            async for content in session.ask_stream(params):
                answer = content
                live.update(Markdown(answer))

    if collected.get("aborted"):
        console.print("[yellow]Answer aborted[/yellow]")

    sources = collected.get("sources")
    if sources is not None and sources.hits:
        table = Table(title=f"Sources ({sources.count})", show_header=True)
        table.add_column("ID", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Title")
        for hit in sources.hits:
            title = hit.document.get("title") or hit.document.get("name") or ""
            table.add_row(hit.id, f"{hit.score:.3f}", str(title))
        console.print(table)

    related_queries = collected.get("related")
    if related_queries:
        console.print("\n[bold]Related questions[/bold]")
        for query in related_queries:
            console.print(f"  • {query}")


@app.command()
def version() -> None:
    """Show the installed version."""
    from answer_client import __version__

    console.print(f"answer-client {__version__}")


if __name__ == "__main__":
    app()
