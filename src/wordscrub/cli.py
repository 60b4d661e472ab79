"""Console front end: scan, redact and report in one command."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from wordscrub.config import (
    DEFAULT_EXTENSIONS,
    EXTENSION_PRESETS,
    build_request,
    expand_presets,
    load_words_file,
    normalize_extensions,
)
from wordscrub.errors import ConfigError
from wordscrub.models import Diagnostic, FileScanResult
from wordscrub.report import ReportGenerator, format_size, report_path
from wordscrub.scheduler import EventPump, ProgressListener, WorkerScheduler

app = typer.Typer(
    help="Find forbidden words in text files, save redacted copies and write a report.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

EXIT_INTERRUPTED = 130


class ConsoleListener(ProgressListener):
    """Renders run progress. Only ever called from the main thread via EventPump."""

    def __init__(self, progress: Progress, task_id: TaskID, verbose: bool = False) -> None:
        self.progress = progress
        self.task_id = task_id
        self.verbose = verbose

    def total_files_known(self, total: int) -> None:
        self.progress.update(self.task_id, total=total)

    def files_processed(self, count: int) -> None:
        self.progress.update(self.task_id, completed=count)

    def file_matched(self, result: FileScanResult) -> None:
        self.progress.console.print(
            f"[green]Match:[/green] {escape(result.path)} (replacements: {result.total_replacements})"
        )

    def status_message(self, message: str) -> None:
        if self.verbose:
            self.progress.console.print(f"[dim]{escape(message)}[/dim]")

    def diagnostic(self, diag: Diagnostic) -> None:
        self.progress.console.print(f"[yellow]{escape(str(diag))}[/yellow]")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def scan(
    words: Path = typer.Option(..., "--words", help="File with one forbidden word per line."),
    output: Path = typer.Option(..., "--output", help="Directory for copies and the report (created if missing)."),
    extensions: str = typer.Option(
        ",".join(DEFAULT_EXTENSIONS), "--extensions", help="Comma-separated extensions, e.g. txt,.log"
    ),
    preset: Optional[list[str]] = typer.Option(
        None, "--preset", help=f"Extension group to add: {', '.join(EXTENSION_PRESETS)}."
    ),
    root: Optional[list[Path]] = typer.Option(
        None, "--root", help="Directory to scan. Repeatable. Default: every fixed and removable drive."
    ),
    max_concurrency: Optional[int] = typer.Option(None, "--max-concurrency", help="Files scanned at once (default 4)."),
    drain_timeout: Optional[float] = typer.Option(
        None, "--drain-timeout", help="Seconds to wait for in-flight files after Ctrl+C (default 30)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every status message and debug logs."),
):
    """Scan files for forbidden words."""
    _configure_logging(verbose)

    try:
        word_list = load_words_file(str(words))
        exts = normalize_extensions(extensions) | expand_presets(preset or [])
        request = build_request(
            word_list,
            str(output),
            exts,
            max_concurrency=max_concurrency,
            roots=[str(r) for r in root or []],
            drain_timeout=drain_timeout,
        )
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    try:
        os.makedirs(request.output_dir, exist_ok=True)
    except OSError as e:
        err_console.print(f"[red]Error:[/red] cannot create output directory {request.output_dir}: {e}")
        raise typer.Exit(1)

    console.print(f"Forbidden words loaded: {len(request.words)}")
    console.print(f"Output directory: {request.output_dir}")
    console.print(f"File extensions: {', '.join(sorted(request.extensions))}")
    console.print("Starting scan...")

    interrupted = False
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("Scanning", total=None)
        pump = EventPump(ConsoleListener(progress, task_id, verbose))
        handle = WorkerScheduler(listener=pump).run(request)
        try:
            while not handle.wait(0.1):
                pump.drain()
        except KeyboardInterrupt:
            interrupted = True
            progress.console.print("[yellow]Cancelling, waiting for files in progress...[/yellow]")
            if not handle.cancel_and_drain():
                progress.console.print("[yellow]Some files did not finish in time and were abandoned.[/yellow]")
        pump.drain()

    results = handle.results()
    aggregate = handle.aggregate()
    try:
        path = ReportGenerator().generate(results, report_path(request.output_dir))
    except OSError as e:
        err_console.print(f"[red]Error:[/red] cannot write report: {e}")
        raise typer.Exit(1)

    console.print()
    console.print("[bold]Scan finished.[/bold]" if not interrupted else "[bold]Scan cancelled.[/bold]")
    console.print(f"Files processed: {handle.files_processed}")
    console.print(f"Files matched: {aggregate.files_matched} ({format_size(aggregate.total_bytes)})")
    console.print(f"Total replacements: {aggregate.total_replacements}")
    console.print(f"Report saved: {path}")

    if interrupted:
        raise typer.Exit(EXIT_INTERRUPTED)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
