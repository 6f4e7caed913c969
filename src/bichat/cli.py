"""Typer CLI definition for bichat."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import typer

from .client import DEFAULT_SERVER_URL, FALLBACK_MESSAGE, DashboardClient
from .config import generate_config, get_config_path

app = typer.Typer(help="Speech and BI query gateways for the chat dashboard")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_ANSWER = (
    "I've analyzed your data and generated insights based on your question."
)


def configure_logging(debug: bool) -> None:
    """Configure root logging for CLI commands."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )


def format_answer(response: dict[str, Any]) -> str:
    """Summarize a BI response for terminal output.

    Args:
        response: Decoded BI response

    Returns:
        Multi-line summary: insights, SQL and result row count
    """
    lines = [response.get("insights") or DEFAULT_ANSWER]

    sql = response.get("sql_query")
    if sql:
        lines.append("")
        lines.append(f"SQL: {sql}")

    results = response.get("results")
    if isinstance(results, list):
        lines.append(f"Rows: {len(results)}")

    return "\n".join(lines)


@app.command()
def serve(
    host: str | None = typer.Option(
        None, "--host", help="Bind address (from config if omitted)"
    ),
    port: int | None = typer.Option(
        None, "--port", help="HTTP port (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Run the gateway HTTP server."""
    configure_logging(debug)

    from .server import run

    run(host=host, port=port)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for the BI backend"),
    server: str = typer.Option(DEFAULT_SERVER_URL, "--server", help="bichat server URL"),
    chart: Path | None = typer.Option(None, "--chart", help="Save chart image to file"),
    speak: Path | None = typer.Option(
        None, "--speak", help="Save spoken insights (MP3) to file"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show request failures"),
) -> None:
    """Ask a question through a running bichat server."""
    if debug:
        configure_logging(debug)

    client = DashboardClient(base_url=server)
    response = asyncio.run(client.ask(question))
    if response is None:
        typer.echo(FALLBACK_MESSAGE, err=True)
        raise typer.Exit(1)

    typer.echo(format_answer(response))

    if chart:
        saved = client.save_chart(response, chart)
        if saved:
            typer.echo(f"Chart saved to {saved}")
        else:
            typer.echo("No chart in response", err=True)

    if speak:
        insights = response.get("insights")
        audio = asyncio.run(client.synthesize(insights)) if insights else None
        if audio is None:
            typer.echo("Error: Failed to synthesize insights", err=True)
            raise typer.Exit(1)
        speak.write_bytes(audio)
        typer.echo(f"Audio saved to {speak}")


@app.command()
def say(
    text: str = typer.Argument(..., help="Text to synthesize"),
    output: Path = typer.Option(..., "-o", "--output", help="MP3 output file"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID"),
    server: str = typer.Option(DEFAULT_SERVER_URL, "--server", help="bichat server URL"),
    debug: bool = typer.Option(False, "--debug", help="Show request failures"),
) -> None:
    """Synthesize text through a running bichat server."""
    if debug:
        configure_logging(debug)

    client = DashboardClient(base_url=server)
    audio = asyncio.run(client.synthesize(text, voice))
    if audio is None:
        typer.echo("Error: Failed to generate speech", err=True)
        raise typer.Exit(1)

    try:
        output.write_bytes(audio)
    except OSError as e:
        if debug:
            typer.echo(f"Debug - File system error: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to save audio file: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Audio saved to {output}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default config file."""
    path = get_config_path()
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        raise typer.Exit(1)
    typer.echo(f"Wrote {generate_config(path)}")
