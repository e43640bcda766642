"""
Application shell.

Owns the UI state and runs the evaluation pipeline:
normalize source -> normalize notes -> remote evaluation -> report.

State lives in one immutable `ShellState` that is replaced on every
transition, so the dashboard/report invariants can be checked directly.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict

from anatomy_guru.config import Settings, get_settings
from anatomy_guru.evaluation import EvaluationBackend, EvaluationEngine, PromptBuilder
from anatomy_guru.extractors import DocumentNormalizer
from anatomy_guru.models import EvaluationReport, UploadedFile
from anatomy_guru.report import ReportRenderer, export_pdf, print_title, save_json

logger = logging.getLogger(__name__)

MISSING_FILES_MESSAGE = "Please upload both the Answer Sheet and Faculty Notes."
GENERIC_ERROR_MESSAGE = "An error occurred during evaluation."
ANALYSIS_STEP = "AI performing gap analysis..."


class View(str, Enum):
    """Which screen the shell is showing."""

    DASHBOARD = "dashboard"
    REPORT = "report"


class ShellState(BaseModel):
    """Snapshot of everything the UI displays."""

    model_config = ConfigDict(frozen=True)

    source_file: UploadedFile | None = None
    notes_file: UploadedFile | None = None
    report: EvaluationReport | None = None
    is_loading: bool = False
    loading_step: str = ""
    error: str | None = None
    view: View = View.DASHBOARD


class AppShell:
    """
    State machine for the evaluation workflow.

    dashboard -> report happens whenever a report arrives;
    report -> dashboard only through `go_home()`, which clears the
    report and any error. Failures keep the shell on the dashboard.
    """

    def __init__(
        self,
        backend: EvaluationBackend | None = None,
        normalizer: DocumentNormalizer | None = None,
        renderer: ReportRenderer | None = None,
        settings: Settings | None = None,
        on_progress: Callable[[str], None] | None = None,
    ):
        """
        Initialize the shell.

        Args:
            backend: Evaluation backend. The live engine if not provided.
            normalizer: Document normalizer. Built from settings if not provided.
            renderer: Report renderer used for PDF export.
            settings: Configuration settings. Uses global settings if not provided.
            on_progress: Called with each pipeline stage label.
        """
        self._settings = settings or get_settings()
        self._backend = backend or EvaluationEngine(self._settings)
        self._normalizer = normalizer or DocumentNormalizer(self._settings)
        self._renderer = renderer or ReportRenderer()
        self._on_progress = on_progress
        self._state = ShellState()

    @property
    def state(self) -> ShellState:
        return self._state

    @property
    def can_analyze(self) -> bool:
        """Both files are selected and no analysis is running."""
        state = self._state
        has_files = state.source_file is not None and state.notes_file is not None
        return has_files and not state.is_loading

    def _update(self, **changes: object) -> None:
        self._state = self._state.model_copy(update=changes)

    def select_source(self, upload: UploadedFile) -> None:
        self._update(source_file=upload)

    def select_notes(self, upload: UploadedFile) -> None:
        self._update(notes_file=upload)

    def _set_step(self, label: str) -> None:
        self._update(loading_step=label)
        if self._on_progress is not None:
            self._on_progress(label)

    def analyze(self) -> EvaluationReport | None:
        """
        Run the full pipeline on the selected files.

        Returns:
            The new report, or None if validation or any stage failed
            (the reason is in `state.error`).
        """
        source, notes = self._state.source_file, self._state.notes_file
        if source is None or notes is None:
            self._update(error=MISSING_FILES_MESSAGE)
            return None

        if self._state.is_loading:
            logger.warning("Analysis already in progress, ignoring request")
            return None

        self._update(is_loading=True, error=None)

        try:
            source_doc = self._normalizer.normalize(source, on_progress=self._set_step)
            notes_doc = self._normalizer.normalize(notes, on_progress=self._set_step)

            self._set_step(ANALYSIS_STEP)
            report = self._backend.evaluate(
                source_doc, notes_doc, PromptBuilder.get_system_instruction()
            )
        except Exception as e:
            logger.exception("Analysis failure")
            self._update(error=str(e) or GENERIC_ERROR_MESSAGE)
            return None
        finally:
            self._update(is_loading=False, loading_step="")

        self.receive_report(report)
        return report

    def receive_report(self, report: EvaluationReport | None) -> None:
        """Store a new report and switch to the report view."""
        if report is None:
            return
        self._update(report=report, view=View.REPORT)

    def go_home(self) -> None:
        """Return to the dashboard, discarding the report and any error."""
        self._update(report=None, error=None, view=View.DASHBOARD)

    def _require_report(self) -> EvaluationReport:
        if self._state.report is None:
            raise ValueError("No report available to export")
        return self._state.report

    def download_json(self, directory: Path | None = None) -> Path:
        """
        Save the current report as JSON.

        Raises:
            ValueError: If there is no report.
        """
        report = self._require_report()
        return save_json(report, directory or self._settings.output_directory)

    def export_pdf(self, directory: Path | None = None) -> Path:
        """
        Print the current report to PDF, titled after the source file.

        The file is named `<title>_Report.pdf` so an answer sheet in the
        output directory is never overwritten.

        Raises:
            ValueError: If there is no report.
        """
        report = self._require_report()
        source = self._state.source_file
        title = print_title(source.name) if source is not None else self._renderer.title

        path = (directory or self._settings.output_directory) / f"{title}_Report.pdf"
        return export_pdf(report, path, renderer=self._renderer, title=title)
