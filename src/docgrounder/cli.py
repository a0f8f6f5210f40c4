"""Command line interface for docgrounder.

The index lives in process memory, so every command builds it from the data
directory before doing its work.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from docgrounder.config import AppConfig
from docgrounder.errors import ConfigurationError, ProviderError
from docgrounder.index.indexer import IndexStats
from docgrounder.service import KnowledgeBase
from docgrounder.web.app import app as web_app, configure


console = Console()
app = typer.Typer(help="docgrounder - grounded answers from local JSON documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(data_dir: Path | None, model: str | None) -> AppConfig:
    config = AppConfig.from_env()
    if data_dir is not None:
        config.data_dir = data_dir
    if model is not None:
        config.model_name = model
    return config


def _print_stats(stats: IndexStats) -> None:
    console.print(
        f"Inserted: {stats.inserted}, updated: {stats.updated}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}, "
        f"chunks upserted: {stats.upserted}"
    )


@app.command()
def index(
    data_dir: Path = typer.Argument(None, help="Directory with JSON documents."),
    model: str = typer.Option(None, help="Sentence-transformer model name"),
    max_tokens: int = typer.Option(AppConfig().max_tokens, help="Chunk size in tokens"),
    overlap: int = typer.Option(AppConfig().overlap, help="Chunk overlap in tokens"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index the JSON documents of a directory and report the counts."""
    _setup_logging(verbose)
    config = _build_config(data_dir, model)
    config.max_tokens = max_tokens
    config.overlap = overlap

    kb = KnowledgeBase(config, base_dir=Path.cwd())
    console.print(f"Indexing [bold]{kb.data_dir}[/bold]...")
    _print_stats(kb.reindex())


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Directory with JSON documents"),
    model: str = typer.Option(None, help="Sentence-transformer model name"),
    top_k: int = typer.Option(5, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Execute a semantic search."""
    _setup_logging(verbose)
    kb = KnowledgeBase(_build_config(data_dir, model), base_dir=Path.cwd())
    kb.reindex()

    results = kb.search(query, top_k=top_k)
    if results.is_empty:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Source")
    table.add_column("Section")
    table.add_column("Snippet")

    for hit in results:
        snippet = hit.text.replace("\n", " ")
        table.add_row(
            f"{hit.score:.4f}",
            str(hit.metadata.get("source", "")),
            str(hit.metadata.get("section", "")),
            snippet[:180],
        )

    console.print(table)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to answer"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Directory with JSON documents"),
    model: str = typer.Option(None, help="Sentence-transformer model name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Answer a question from the indexed documents."""
    _setup_logging(verbose)
    kb = KnowledgeBase(_build_config(data_dir, model), base_dir=Path.cwd())
    kb.reindex()

    try:
        answer = kb.ask(question)
    except (ConfigurationError, ProviderError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(answer.answer)
    if answer.sources:
        console.print(f"[dim]Sources: {', '.join(answer.sources)}[/dim]")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(3000, help="Server port"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Directory with JSON documents"),
) -> None:
    """Start the HTTP service."""
    configure(_build_config(data_dir, None))
    console.print(f"Starting docgrounder on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
