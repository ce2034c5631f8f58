"""CLI interface — thin wrapper over CourseService and the FastMCP server."""

import asyncio
import json
import logging

import typer

from coursegen.config import settings
from coursegen.duration import format_clock
from coursegen.ingestion.gateway import QuotaExceededError
from coursegen.service import CourseService, InvalidPromptError


app = typer.Typer(
    name="coursegen",
    help="Turn a learning topic into a difficulty-ordered course of YouTube segments.",
    no_args_is_help=True,
)


def _get_service() -> CourseService:
    """Create a service instance with default dependencies."""
    return CourseService()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command (warnings only unless --verbose)."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@app.command()
def course(
    prompt: str = typer.Argument(..., help="What you want to learn, e.g. 'python'."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw results as JSON."),
) -> None:
    """Build a course for a topic and print its segments."""
    svc = _get_service()
    if not svc.client.available:
        typer.echo("⚠️  YOUTUBE_API_KEY is not set; no videos can be fetched.", err=True)

    try:
        videos = asyncio.run(svc.build_course(prompt))
    except InvalidPromptError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    except QuotaExceededError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([v.model_dump(mode="json") for v in videos], indent=2))
        return

    if not videos:
        typer.echo("No videos available for this topic.")
        return

    first = videos[0]
    typer.echo(f"📚 Course for: {prompt}")
    typer.echo(f"   Channel: {first.channel}  ({first.views_label})\n")
    for i, v in enumerate(videos, 1):
        start = format_clock(v.start_seconds or 0)
        typer.echo(f"  {i}. [{v.difficulty_label:<12s}] {start:>8s}  {v.duration_label:>8s}  {v.title}")
        typer.echo(f"     {v.url}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the coursegen server (MCP tools plus the /api/getVideos endpoint)."""
    from coursegen.server import mcp

    if stdio:
        typer.echo("Starting coursegen MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting coursegen server on http://{host}:{port} (MCP at /mcp, API at /api/getVideos)")
        mcp.run(transport="streamable-http", host=host, port=port)


if __name__ == "__main__":
    app()
