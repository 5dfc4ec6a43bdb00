"""customformats command line.

Commands:
    mimes   List the MIME types known to the demo registry
    probe   Show which format a request would be given
    serve   Start the demo server

Usage:
    $ customformats mimes
    $ customformats mimes --content-type application/x-iphone
    $ customformats probe --user-agent "Mozilla/5.0 (iPhone; ...)"
    $ customformats probe --format xml --only iphone --force
    $ customformats serve --port 8080
"""

from __future__ import annotations

from typing import Annotated, NoReturn

import typer
from fastapi import Request
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from customformats.demo import build_registry, start_server
from customformats.routing import DEFAULT_FORMAT
from customformats.selection import (
    FORMAT_PARAM,
    candidate_formats,
    has_explicit_format,
    select_format,
)

app = typer.Typer(
    help="Custom response formats chosen per request",
    no_args_is_help=True,
)
console = Console()


def _error(message: str) -> NoReturn:
    """Print error and exit."""
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _build_request(path: str, user_agent: str) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [(b"user-agent", user_agent.encode("latin-1", errors="replace"))],
    }
    return Request(scope)


@app.command()
def mimes(
    content_type: Annotated[
        str | None,
        typer.Option("--content-type", "-t", help="Show only the format accepting this type"),
    ] = None,
) -> None:
    """List MIME types, including the demo custom formats."""
    registry = build_registry()

    if content_type is not None:
        name = registry.mime_registry.format_for_content_type(content_type)
        if name is None:
            _error(f"No format accepts content type: {content_type}")
        console.print(f"[bold]{escape(content_type)}[/bold] -> [green]{name}[/green]")
        return

    table = Table(title="MIME Types")
    table.add_column("Format", style="green")
    table.add_column("Content Types")
    table.add_column("Transform", style="cyan")
    table.add_column("Quality")
    table.add_column("Selector")

    for name, mime in registry.mime_registry.available_mime_types.items():
        if name in registry:
            selector = "yes" if registry.get_selector(name) else "-"
        else:
            selector = "[dim]built-in[/dim]"
        table.add_row(
            name,
            ", ".join(mime.accepts),
            mime.transform_method,
            f"{mime.default_quality:g}",
            selector,
        )

    console.print(table)


@app.command()
def probe(
    user_agent: Annotated[
        str, typer.Option("--user-agent", "-A", help="User-Agent header to send")
    ] = "",
    path: Annotated[str, typer.Option(help="Request path")] = "/",
    format_name: Annotated[
        str | None, typer.Option("--format", "-f", help="Format already named by the path")
    ] = None,
    only: Annotated[
        list[str] | None,
        typer.Option("--only", help="Restrict selection to these formats (repeatable)"),
    ] = None,
    force: Annotated[bool, typer.Option(help="Run selectors even if a format is set")] = False,
) -> None:
    """Show which format the demo registry picks for a request."""
    registry = build_registry()
    selectors = registry.selectors_snapshot()
    restrict = tuple(only or ())

    for name in restrict:
        if name not in selectors:
            _error(f"Unknown format or format without a selector: {name}")

    params: dict[str, str] = {}
    if format_name:
        params[FORMAT_PARAM] = format_name

    request = _build_request(path, user_agent)
    runs_selectors = force or not has_explicit_format(params)
    tried = candidate_formats(selectors, restrict) if runs_selectors else []
    select_format(request, params, selectors, restrict, force)
    selected = params.get(FORMAT_PARAM)

    console.print(f"[bold]User-Agent:[/bold] {escape(user_agent) or '[dim]none[/dim]'}")
    if runs_selectors:
        console.print(f"[bold]Candidates:[/bold] {', '.join(tried) or '-'}")
    else:
        console.print("[bold]Candidates:[/bold] [dim]skipped, format already set[/dim]")
    if selected:
        content_type = registry.mime_registry.content_type_for(selected) or "unknown"
        console.print(f"[bold green]Format:[/bold green] {selected} ({content_type})")
    else:
        console.print(f"[bold yellow]Format:[/bold yellow] {DEFAULT_FORMAT} (default)")


@app.command()
def serve(
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 8080,
    host: Annotated[str, typer.Option("--host", help="Host to bind to")] = "127.0.0.1",
) -> None:
    """Start the demo server."""
    start_server(host=host, port=port)


if __name__ == "__main__":
    app()
