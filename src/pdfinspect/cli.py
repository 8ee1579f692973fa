"""Command line interface for pdfinspect."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from pdfinspect.config import AppConfig
from pdfinspect.errors import AccessDenied, InvalidInput
from pdfinspect.tools.handlers import Envelope, ToolContext, get_pdf_toc, read_pdf, search_pdf_text
from pdfinspect.web.app import app as web_app
from pdfinspect.web.app import configure_app


console = Console()
app = typer.Typer(help="pdfinspect - confined PDF reading, outline and text search")

ROOT_OPTION_HELP = "Allowed root directory (repeatable). Defaults to the working directory."


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _source(value: str) -> Dict[str, str]:
    if value.startswith(("http://", "https://")):
        return {"url": value}
    return {"path": value}


def _context(roots: Optional[List[Path]]) -> ToolContext:
    config = AppConfig(roots=list(roots or []))
    return ToolContext(
        confinement=config.build_confinement(),
        fetch_timeout=config.fetch_timeout,
        max_fetch_bytes=config.max_fetch_bytes,
    )


def _run(handler: Any, args: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
    try:
        envelope: Envelope = handler(args, context)
    except (InvalidInput, AccessDenied) as exc:
        raise typer.BadParameter(str(exc)) from exc
    if not envelope["success"]:
        console.print(f"[red]{envelope['error']}[/red]")
        raise typer.Exit(code=1)
    return envelope["data"]


def _print_warnings(data: Dict[str, Any]) -> None:
    for warning in data.get("warnings", []):
        console.print(f"[yellow]{warning}[/yellow]")


@app.command()
def search(
    source: str = typer.Argument(..., help="Relative PDF path or http(s) URL"),
    query: str = typer.Argument(..., help="Text to search for"),
    root: Optional[List[Path]] = typer.Option(None, "--root", "-r", help=ROOT_OPTION_HELP),
    page: Optional[int] = typer.Option(None, help="Only search this 1-based page"),
    depth: int = typer.Option(0, min=0, max=5, help="Context depth (0=surrounding words, 1-5=page)"),
    max_results: int = typer.Option(20, min=1, max=100, help="Maximum number of results"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", help="Match case"),
    context_words: int = typer.Option(5, min=0, max=50, help="Surrounding fragments for depth 0"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search a PDF for a literal string."""
    _setup_logging(verbose)
    args: Dict[str, Any] = {
        "source": _source(source),
        "query": query,
        "depth": depth,
        "max_results": max_results,
        "case_sensitive": case_sensitive,
        "context_words": context_words,
    }
    if page is not None:
        args["page"] = page

    data = _run(search_pdf_text, args, _context(root))
    if not data["results"]:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Page")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Context")

    for result in data["results"]:
        snippet = result.get("context", "").replace("\n", " ")
        table.add_row(
            str(result["page"]), str(result["match_start"]), str(result["match_end"]), snippet[:180]
        )

    console.print(table)
    console.print(f"Total matches: {data['total_matches']}")
    _print_warnings(data)


def _add_outline_rows(table: Table, nodes: List[Dict[str, Any]], level: int) -> None:
    for node in nodes:
        page = node.get("page")
        table.add_row("  " * level + node["title"], "" if page is None else str(page))
        _add_outline_rows(table, node.get("items", []), level + 1)


@app.command()
def toc(
    source: str = typer.Argument(..., help="Relative PDF path or http(s) URL"),
    root: Optional[List[Path]] = typer.Option(None, "--root", "-r", help=ROOT_OPTION_HELP),
    max_depth: int = typer.Option(5, min=1, max=10, help="Maximum outline depth"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the table of contents of a PDF."""
    _setup_logging(verbose)
    data = _run(get_pdf_toc, {"source": _source(source), "max_depth": max_depth}, _context(root))
    if "outline" not in data:
        _print_warnings(data)
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Title")
    table.add_column("Page")
    _add_outline_rows(table, data["outline"], 0)
    console.print(table)


@app.command()
def read(
    sources: List[str] = typer.Argument(..., help="Relative PDF paths or http(s) URLs"),
    root: Optional[List[Path]] = typer.Option(None, "--root", "-r", help=ROOT_OPTION_HELP),
    pages: Optional[str] = typer.Option(None, help="Pages to extract, e.g. '1-3,5'"),
    full_text: bool = typer.Option(False, "--full-text", help="Print the text of every page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Read metadata and text from one or more PDFs."""
    _setup_logging(verbose)
    items = []
    for value in sources:
        item: Dict[str, Any] = _source(value)
        if pages is not None:
            item["pages"] = pages
        items.append(item)

    data = _run(read_pdf, {"sources": items, "include_full_text": full_text}, _context(root))
    failed = 0
    for entry in data["results"]:
        console.print(f"[bold]{entry['source']}[/bold]")
        if not entry["success"]:
            failed += 1
            console.print(f"[red]{entry['error']}[/red]")
            continue
        info = entry["data"]
        if "num_pages" in info:
            console.print(f"Pages: {info['num_pages']}")
        for key, value in info.get("metadata", {}).items():
            console.print(f"{key}: {value}")
        for page_text in info.get("page_texts", []):
            console.print(f"[cyan]--- page {page_text['page']} ---[/cyan]")
            console.print(page_text["text"], markup=False)
        if "full_text" in info:
            console.print(info["full_text"], markup=False)
        _print_warnings(info)

    if failed:
        raise typer.Exit(code=1)


@app.command()
def serve(
    root: Optional[List[Path]] = typer.Option(None, "--root", "-r", help=ROOT_OPTION_HELP),
    host: str = typer.Option(AppConfig().host, help="Host interface"),
    port: int = typer.Option(AppConfig().port, help="Server port"),
    fetch_timeout: float = typer.Option(AppConfig().fetch_timeout, help="Timeout for URL sources (s)"),
    max_fetch_bytes: int = typer.Option(
        AppConfig().max_fetch_bytes, min=1, help="Largest PDF accepted from a URL (bytes)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the HTTP tool server."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    _setup_logging(verbose)
    config = AppConfig(
        roots=list(root or []),
        fetch_timeout=fetch_timeout,
        max_fetch_bytes=max_fetch_bytes,
        host=host,
        port=port,
    )
    configure_app(config)
    roots = ", ".join(web_app.state.context.confinement.roots)
    console.print(f"Starting pdfinspect on http://{host}:{port} (roots: {roots})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="debug" if verbose else "info",
    )


def main() -> None:
    app()
