"""
Anatomy Guru CLI Application.

Provides a command-line interface for turning a student answer sheet
and faculty notes into a structured evaluation report.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from anatomy_guru.config import Settings, get_settings
from anatomy_guru.evaluation import EvaluationEngine
from anatomy_guru.models import EvaluationReport, QuestionStatus, UploadedFile
from anatomy_guru.report import calculate_total, classify_question, export_pdf, from_json
from anatomy_guru.report.renderer import DEFAULT_TITLE, GENERAL_FEEDBACK_SECTIONS, format_number
from anatomy_guru.shell import AppShell

# Create Typer app
app = typer.Typer(
    name="anatomy-guru",
    help="Structured medical evaluation reports from answer sheets and faculty notes",
    add_completion=False,
)

console = Console()

_STATUS_STYLES = {
    QuestionStatus.UNATTEMPTED: "red",
    QuestionStatus.CORRECT: "green",
    QuestionStatus.PARTIAL: "white",
}


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)


def _configure_logging(settings: Settings, verbose: bool = False) -> None:
    level = "DEBUG" if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def evaluate(
    source_file: Annotated[
        Path, typer.Argument(help="Student answer sheet (PDF, DOCX or image)")
    ],
    notes_file: Annotated[Path, typer.Argument(help="Faculty notes (PDF, DOCX or image)")],
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for exported reports"),
    ] = None,
    json_export: Annotated[
        bool,
        typer.Option("--json/--no-json", help="Save the report as JSON"),
    ] = True,
    pdf_export: Annotated[
        bool,
        typer.Option("--pdf/--no-pdf", help="Print the report to PDF"),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show detailed output"),
    ] = False,
) -> None:
    """
    Evaluate an answer sheet against faculty notes.

    Both files are normalized, sent to the model in one request, and the
    returned report is displayed and exported.
    """
    settings = _load_settings()
    _configure_logging(settings, verbose)

    for path in (source_file, notes_file):
        if not path.is_file():
            console.print(f"[red]Error:[/red] File not found: {path}")
            raise typer.Exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Reading files...", total=None)
        shell = AppShell(
            settings=settings,
            on_progress=lambda label: progress.update(task, description=label),
        )
        shell.select_source(UploadedFile.from_path(source_file))
        shell.select_notes(UploadedFile.from_path(notes_file))

        report = shell.analyze()

    if report is None:
        console.print(Panel(f"[red]{shell.state.error}[/red]", title="Processing Error"))
        raise typer.Exit(1)

    _display_report(report, verbose)

    directory = output_dir or settings.output_directory
    if json_export:
        console.print(f"[green]JSON saved to:[/green] {shell.download_json(directory)}")
    if pdf_export:
        console.print(f"[green]PDF saved to:[/green] {shell.export_pdf(directory)}")


@app.command()
def render(
    report_file: Annotated[Path, typer.Argument(help="JSON report exported earlier")],
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the PDF"),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Document title (defaults to the JSON file name)"),
    ] = None,
) -> None:
    """
    Print a previously exported JSON report to PDF.
    """
    _configure_logging(_load_settings())

    if not report_file.is_file():
        console.print(f"[red]Error:[/red] File not found: {report_file}")
        raise typer.Exit(1)

    try:
        report = from_json(report_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[red]Invalid report:[/red] {e}")
        raise typer.Exit(1)

    document_title = title or report_file.stem or DEFAULT_TITLE
    directory = output_dir or report_file.parent
    path = export_pdf(report, directory / f"{document_title}.pdf", title=document_title)

    _display_report(report)
    console.print(f"[green]PDF saved to:[/green] {path}")


@app.command()
def health() -> None:
    """
    Check if the evaluator is operational.

    Verifies API connectivity and configuration.
    """
    settings = _load_settings()
    console.print("[bold]Anatomy Guru Health Check[/bold]\n")

    console.print("[dim]Checking configuration...[/dim]")
    console.print(f"  API Base URL: {settings.api_base_url}")
    console.print(f"  Model: {settings.model}")
    console.print(f"  API Key: {'set' if settings.api_key else '[red]missing[/red]'}")
    console.print(f"  PDF text threshold: {settings.min_pdf_text_length} characters")

    console.print("\n[dim]Checking API connectivity...[/dim]")
    engine = EvaluationEngine(settings)

    if engine.health_check():
        console.print("[green]✓ API is reachable[/green]")
    else:
        console.print("[red]✗ API is not reachable[/red]")
        raise typer.Exit(1)

    console.print("\n[green]All systems operational[/green]")


def _display_report(report: EvaluationReport, verbose: bool = False) -> None:
    """Display a report summary in the terminal."""

    console.print(
        Panel(
            f"[bold]{report.student_name or 'Unknown Student'}[/bold]\n"
            f"{report.test_title or 'General Medicine Test'}\n"
            f"Topics: {report.test_topics or 'N/A'}  |  Date: {report.test_date or 'N/A'}",
            title="Evaluation Report",
        )
    )

    table = Table(title="Question Breakdown")
    table.add_column("Q No", style="cyan")
    table.add_column("Feedback")
    table.add_column("Marks", justify="right")

    for question in report.questions:
        style = _STATUS_STYLES[classify_question(question)]
        table.add_row(
            question.q_no,
            "\n".join(f"• {point}" for point in question.feedback_points),
            f"{format_number(question.marks)}/{format_number(question.max_marks)}",
            style=style,
        )

    max_score = format_number(report.max_score) if report.max_score else "100"
    total = format_number(calculate_total(report))
    table.add_row("", "[bold]Total Score Summation[/bold]", f"[bold]{total} / {max_score}[/bold]")
    console.print(table)

    if verbose:
        for field_name, heading in GENERAL_FEEDBACK_SECTIONS:
            items = getattr(report.general_feedback, field_name)
            body = "\n".join(f"• {item}" for item in items)
            console.print(Panel(body or "[dim]No specific feedback provided.[/dim]", title=heading))


if __name__ == "__main__":
    app()
