"""
Report export.

JSON export writes the report exactly as received (camelCase fields,
declaration order, pretty-printed). PDF export lays the rendered HTML
out on A4 pages with PyMuPDF, the way a browser print would.
"""

import io
import json
import logging
import re
from pathlib import Path

import fitz  # PyMuPDF

from anatomy_guru.models import EvaluationReport
from anatomy_guru.report.renderer import ReportRenderer

logger = logging.getLogger(__name__)

PAGE_SIZE = "a4"
PAGE_MARGIN = 36  # points

_WHITESPACE = re.compile(r"\s+")
_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


def json_filename(report: EvaluationReport) -> str:
    """File name for a report's JSON export."""
    student = _WHITESPACE.sub("_", report.student_name)
    return f"AnatomyGuru_{student}_Report.json"


def to_json(report: EvaluationReport) -> str:
    """Serialize a report to pretty-printed JSON."""
    return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def from_json(content: str) -> EvaluationReport:
    """Load a report previously written by `to_json`."""
    return EvaluationReport.model_validate_json(content)


def save_json(report: EvaluationReport, directory: Path) -> Path:
    """
    Write a report's JSON export into a directory.

    Returns:
        Path of the written file.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / json_filename(report)
    path.write_text(to_json(report), encoding="utf-8")
    logger.info("Saved JSON report to %s", path)
    return path


def print_title(source_name: str) -> str:
    """Document title for printing: the source file name without its extension."""
    return _LAST_EXTENSION.sub("", source_name)


def render_pdf(html: str, title: str) -> bytes:
    """
    Lay out an HTML document on A4 pages.

    Args:
        html: The document to print.
        title: Title stored in the PDF metadata.

    Returns:
        The PDF file contents.
    """
    mediabox = fitz.paper_rect(PAGE_SIZE)
    where = mediabox + (PAGE_MARGIN, PAGE_MARGIN, -PAGE_MARGIN, -PAGE_MARGIN)

    buffer = io.BytesIO()
    story = fitz.Story(html=html)
    writer = fitz.DocumentWriter(buffer)

    more = True
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
    writer.close()

    with fitz.open(stream=buffer.getvalue(), filetype="pdf") as doc:
        doc.set_metadata({"title": title, "creator": "AnatomyGuru Evaluation Suite"})
        return doc.tobytes(garbage=3, deflate=True)


def export_pdf(
    report: EvaluationReport,
    path: Path,
    renderer: ReportRenderer | None = None,
    title: str | None = None,
) -> Path:
    """
    Print a report to a PDF file.

    The renderer's title is overridden for this print only.

    Args:
        report: The report to print.
        path: Destination file.
        renderer: Renderer to use. A default renderer if not provided.
        title: Document title. The renderer's current title if not provided.

    Returns:
        Path of the written file.
    """
    renderer = renderer or ReportRenderer()
    document_title = title or renderer.title

    with renderer.titled(document_title):
        html = renderer.render_html(report)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(render_pdf(html, document_title))
    logger.info("Saved PDF report to %s", path)
    return path
