"""Command line interface for sharedrop."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from sharedrop.archive import build_archive
from sharedrop.config import DEFAULT_ROOT, AppConfig
from sharedrop.errors import ShareError
from sharedrop.search.textsearch import count_matches, search_in_file
from sharedrop.web.app import create_app

console = Console()
app = typer.Typer(help="sharedrop - share a directory over HTTP")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@app.command()
def serve(
    directory: Path = typer.Option(DEFAULT_ROOT, "--dir", help="Directory to share"),
    host: str = typer.Option(AppConfig().host, help="Host interface"),
    port: int = typer.Option(AppConfig().port, help="Server port"),
    user: Optional[str] = typer.Option(None, "--user", help="Username for basic auth"),
    password: Optional[str] = typer.Option(None, "--pass", help="Password for basic auth"),
    cert: Optional[Path] = typer.Option(None, "--cert", help="TLS certificate file"),
    key: Optional[Path] = typer.Option(None, "--key", help="TLS private key file"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not log requests"),
    disable_hidden_files: bool = typer.Option(
        False, "--disable-hidden-files", help="Never show or archive hidden files"
    ),
    read_only: bool = typer.Option(False, "--readonly", help="Disable uploads and deletes"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the file sharing server."""
    _setup_logging(verbose)
    config = AppConfig(
        root=directory,
        host=host,
        port=port,
        username=user,
        password=password,
        tls_cert=cert,
        tls_key=key,
        quiet=quiet,
        disable_hidden_files=disable_hidden_files,
        read_only=read_only,
    )
    try:
        config.validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    import uvicorn

    web_app = create_app(config)
    scheme = "https" if config.tls_enabled else "http"
    console.print(
        f"Sharing [bold]{config.resolve_root(Path.cwd())}[/bold] on {scheme}://{host}:{port}"
    )
    if config.auth_enabled:
        console.print("Basic authentication enabled.")
    if read_only:
        console.print("[yellow]Read-only mode: uploads and deletes are disabled.[/yellow]")

    uvicorn.run(
        web_app,
        host=host,
        port=port,
        ssl_certfile=str(cert) if cert else None,
        ssl_keyfile=str(key) if key else None,
        access_log=False,
        log_level="debug" if verbose else "info",
    )


@app.command()
def search(
    path: Path = typer.Argument(..., help="File to search"),
    term: str = typer.Argument(..., help="Literal text to look for"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c", help="Match case"),
    whole_word: bool = typer.Option(False, "--whole-word", "-w", help="Match whole words only"),
) -> None:
    """Search for a term inside a text file."""
    try:
        results = search_in_file(path, term, case_sensitive=case_sensitive, whole_word=whole_word)
    except ShareError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=1) from exc

    if count_matches(results) == 0:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Line")
    table.add_column("Content")
    for result in results:
        if result.is_sentinel:
            continue
        table.add_row(str(result.line_number), result.content)
    console.print(table)
    if results[-1].is_sentinel:
        console.print(f"[yellow]{results[-1].content}[/yellow]")


@app.command("zip")
def zip_command(
    directory: Path = typer.Argument(..., help="Directory to archive"),
    output: Path = typer.Argument(..., help="Destination zip file"),
    no_hidden: bool = typer.Option(False, "--no-hidden", help="Skip hidden entries"),
) -> None:
    """Write a zip archive of a directory."""
    try:
        archive = build_archive(directory, include_hidden=not no_hidden)
    except ShareError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=1) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(archive), output)
    console.print(f"Archive written to [bold]{output}[/bold]")


if __name__ == "__main__":  # pragma: no cover
    app()
