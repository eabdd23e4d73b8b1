import asyncio
import json
import typer
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from quadstream.exceptions import QuadSyntaxError
from quadstream.logging_config import logger, setup_logging
from quadstream.nquads import iter_file, serialize_quad
from quadstream.schemas import Quad, QuadPattern
from quadstream.streaming_store import StreamingStore

app = typer.Typer(help="Live pattern reads over a quad store that is still being written.")
console = Console()


@app.callback()
def global_options(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log store activity to stderr at DEBUG level."
    ),
):
    """
    quadstream: read quad patterns while the data is still arriving.
    """
    if verbose:
        setup_logging(level="DEBUG", suppress_console=False, force=True)
    else:
        setup_logging(suppress_console=True, force=True)


async def _match_while_importing(
    path: Path, pattern: QuadPattern
) -> Tuple[List[Quad], List[Quad], Dict[str, Any]]:
    """
    Open a live read before the file is imported, then import and finalize.

    Returns:
        (all quads the read produced, the new-fact notifications, store stats)
    """
    store = StreamingStore()
    stream = store.read(*pattern.terms())
    fresh: List[Quad] = []
    stream.on("quad", fresh.append)
    consumer = asyncio.create_task(stream.to_list())

    try:
        await store.write(iter_file(path))
    finally:
        store.finalize()
    results = await consumer
    return results, fresh, store.stats()


def _quad_table(title: str, quads: List[Quad]) -> Table:
    table = Table(title=title)
    table.add_column("Subject", style="cyan", no_wrap=True)
    table.add_column("Predicate", style="magenta")
    table.add_column("Object", style="green")
    table.add_column("Graph", style="yellow")
    for item in quads:
        table.add_row(*(term.to_string() for term in item.terms()))
    return table


@app.command()
def match(
    path: Path = typer.Argument(
        ..., help="N-Quads file to import.", exists=True, dir_okay=False, readable=True
    ),
    subject: Optional[str] = typer.Option(
        None, "--subject", "-s", help="Subject term (canonical form, e.g. http://ex.org/s or _:b0)."
    ),
    predicate: Optional[str] = typer.Option(
        None, "--predicate", "-p", help="Predicate IRI."
    ),
    object_: Optional[str] = typer.Option(
        None, "--object", "-o", help='Object term (literals as "value"@lang).'
    ),
    graph: Optional[str] = typer.Option(
        None, "--graph", "-g", help="Graph IRI. Omit to match every graph."
    ),
    new_only: bool = typer.Option(
        False, "--new-only", help="Only report new-fact notifications."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON."
    ),
):
    """
    Match a quad pattern against a file while it is being imported.
    """
    pattern = QuadPattern.of(subject, predicate, object_, graph)
    try:
        results, fresh, stats = asyncio.run(_match_while_importing(path, pattern))
    except QuadSyntaxError as exc:
        logger.error(f"Import of {path} failed: {exc}")
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    quads = fresh if new_only else results

    if json_output:
        payload = {
            "pattern": [term.to_string() if term is not None else None for term in pattern.terms()],
            "count": len(quads),
            "quads": [serialize_quad(item) for item in quads],
            "stats": stats,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    title = "New facts" if new_only else f"Matches in '{path.name}'"
    console.print(_quad_table(title, quads))
    console.print(f"Found [bold blue]{len(quads)}[/bold blue] quads ({stats['store_size']} stored).")


@app.command()
def stats(
    path: Path = typer.Argument(
        ..., help="N-Quads file to import.", exists=True, dir_okay=False, readable=True
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON."
    ),
):
    """
    Import a file and report store statistics.
    """
    try:
        _, _, store_stats = asyncio.run(_match_while_importing(path, QuadPattern()))
    except QuadSyntaxError as exc:
        logger.error(f"Import of {path} failed: {exc}")
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(store_stats, indent=2))
        return

    table = Table(title=f"Store statistics for '{path.name}'")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")
    for key, value in store_stats.items():
        table.add_row(key, str(value))
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
