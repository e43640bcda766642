"""
Unit tests for the application shell.

Tests the dashboard/report state machine, input validation, error
surfacing, and the export actions, with a substitute backend.
"""

from pathlib import Path
from unittest.mock import MagicMock

import fitz  # PyMuPDF
import pytest

from anatomy_guru.config import Settings
from anatomy_guru.evaluation import PARSE_FAILURE_MESSAGE, EvaluationEngine, LLMError
from anatomy_guru.models import EvaluationReport, NormalizedDocument, TextDocument, UploadedFile
from anatomy_guru.shell import (
    ANALYSIS_STEP,
    GENERIC_ERROR_MESSAGE,
    MISSING_FILES_MESSAGE,
    AppShell,
    View,
)


@pytest.fixture
def ready_shell(
    test_settings: Settings,
    fake_backend,
    docx_upload: UploadedFile,
    text_pdf_upload: UploadedFile,
) -> AppShell:
    """A shell with both files selected and a backend that succeeds."""
    shell = AppShell(backend=fake_backend, settings=test_settings)
    shell.select_source(text_pdf_upload)
    shell.select_notes(docx_upload)
    return shell


class TestValidation:
    """Tests for the analyze preconditions."""

    @pytest.mark.parametrize("selected", ["none", "source", "notes"])
    def test_missing_files(
        self,
        test_settings: Settings,
        fake_backend,
        docx_upload: UploadedFile,
        selected: str,
    ) -> None:
        """Test analysis without both files never calls the backend."""
        shell = AppShell(backend=fake_backend, settings=test_settings)
        if selected == "source":
            shell.select_source(docx_upload)
        elif selected == "notes":
            shell.select_notes(docx_upload)

        assert not shell.can_analyze
        assert shell.analyze() is None
        assert shell.state.error == MISSING_FILES_MESSAGE
        assert shell.state.view == View.DASHBOARD
        assert fake_backend.calls == []

    def test_can_analyze(self, ready_shell: AppShell) -> None:
        """Test analysis is enabled once both files are selected."""
        assert ready_shell.can_analyze

    def test_analysis_in_flight(
        self,
        test_settings: Settings,
        backend_factory,
        sample_report: EvaluationReport,
        docx_upload: UploadedFile,
    ) -> None:
        """Test a second analyze request is ignored while one is running."""
        observed: dict[str, object] = {}

        class ReentrantBackend(backend_factory):
            def evaluate(self, source, notes, instruction):
                observed["can_analyze"] = shell.can_analyze
                observed["nested"] = shell.analyze()
                observed["step"] = shell.state.loading_step
                return super().evaluate(source, notes, instruction)

        backend = ReentrantBackend(report=sample_report)
        shell = AppShell(backend=backend, settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)

        assert shell.analyze() == sample_report
        assert observed == {"can_analyze": False, "nested": None, "step": ANALYSIS_STEP}
        assert len(backend.calls) == 1
        assert not shell.state.is_loading


class TestStateMachine:
    """Tests for the dashboard/report transitions."""

    def test_success_moves_to_report(
        self, ready_shell: AppShell, sample_report: EvaluationReport
    ) -> None:
        """Test a new report switches to the report view."""
        report = ready_shell.analyze()

        assert report == sample_report
        assert ready_shell.state.report == sample_report
        assert ready_shell.state.view == View.REPORT
        assert ready_shell.state.error is None
        assert not ready_shell.state.is_loading
        assert ready_shell.state.loading_step == ""

    def test_receive_report(
        self, test_settings: Settings, fake_backend, sample_report: EvaluationReport
    ) -> None:
        """Test any non-null report moves the shell to the report view."""
        shell = AppShell(backend=fake_backend, settings=test_settings)

        shell.receive_report(None)
        assert shell.state.view == View.DASHBOARD

        shell.receive_report(sample_report)
        assert shell.state.view == View.REPORT
        assert shell.state.report == sample_report

    def test_go_home_clears(self, ready_shell: AppShell) -> None:
        """Test navigating home clears the report and the error."""
        ready_shell.analyze()

        ready_shell.go_home()

        assert ready_shell.state.view == View.DASHBOARD
        assert ready_shell.state.report is None
        assert ready_shell.state.error is None

    def test_go_home_keeps_files(self, ready_shell: AppShell) -> None:
        """Test the selected files survive navigation."""
        ready_shell.analyze()
        ready_shell.go_home()

        assert ready_shell.can_analyze

    def test_state_is_replaced(self, ready_shell: AppShell) -> None:
        """Test transitions produce a new snapshot."""
        before = ready_shell.state

        ready_shell.analyze()

        assert ready_shell.state is not before
        assert before.view == View.DASHBOARD


class TestPipeline:
    """Tests for the sequential normalize-then-evaluate pipeline."""

    def test_progress_labels(
        self,
        test_settings: Settings,
        fake_backend,
        docx_upload: UploadedFile,
        scanned_pdf_upload: UploadedFile,
    ) -> None:
        """Test the source is normalized before the notes, then evaluated."""
        labels: list[str] = []
        shell = AppShell(backend=fake_backend, settings=test_settings, on_progress=labels.append)
        shell.select_source(docx_upload)
        shell.select_notes(scanned_pdf_upload)

        shell.analyze()

        assert labels == [
            "Parsing DOCX: faculty_notes.docx",
            "Extracting PDF: scanned.pdf",
            "Encoding Visual Data: scanned.pdf",
            ANALYSIS_STEP,
        ]

    def test_backend_receives_documents(self, ready_shell: AppShell, fake_backend) -> None:
        """Test the backend gets the normalized source, notes and instruction."""
        ready_shell.analyze()

        [(source, notes, instruction)] = fake_backend.calls
        assert isinstance(source, TextDocument)
        assert source.name == "answer_sheet.pdf"
        assert isinstance(notes, TextDocument)
        assert notes.name == "faculty_notes.docx"
        assert "Anatomy Guru Master Evaluator" in instruction

    def test_custom_normalizer(
        self,
        test_settings: Settings,
        fake_backend,
        docx_upload: UploadedFile,
    ) -> None:
        """Test the normalizer can be substituted."""
        normalized: NormalizedDocument = TextDocument(name="x.docx", text="stub")
        normalizer = MagicMock()
        normalizer.normalize.return_value = normalized
        shell = AppShell(backend=fake_backend, normalizer=normalizer, settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)

        shell.analyze()

        assert normalizer.normalize.call_count == 2
        assert fake_backend.calls[0][:2] == (normalized, normalized)


class TestErrors:
    """Tests for failure handling."""

    def test_backend_error_stays_on_dashboard(
        self,
        test_settings: Settings,
        backend_factory,
        docx_upload: UploadedFile,
    ) -> None:
        """Test a remote failure surfaces its message."""
        message = "Rate limit exceeded. Please wait a moment and try again."
        shell = AppShell(backend=backend_factory(error=LLMError(message)), settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)

        assert shell.analyze() is None
        assert shell.state.error == message
        assert shell.state.view == View.DASHBOARD
        assert shell.state.report is None
        assert not shell.state.is_loading

    def test_error_without_message(
        self,
        test_settings: Settings,
        backend_factory,
        docx_upload: UploadedFile,
    ) -> None:
        """Test an error with no message gets the generic text."""
        shell = AppShell(backend=backend_factory(error=RuntimeError()), settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)

        shell.analyze()

        assert shell.state.error == GENERIC_ERROR_MESSAGE

    def test_corrupt_docx_aborts(
        self,
        test_settings: Settings,
        fake_backend,
        docx_upload: UploadedFile,
    ) -> None:
        """Test a document parsing failure stops the pipeline before the remote call."""
        shell = AppShell(backend=fake_backend, settings=test_settings)
        shell.select_source(UploadedFile(name="answers.docx", data=b"not a zip"))
        shell.select_notes(docx_upload)

        assert shell.analyze() is None
        assert shell.state.error is not None
        assert shell.state.error.startswith("Failed to read 'answers.docx'")
        assert fake_backend.calls == []

    def test_invalid_json_response(
        self,
        test_settings: Settings,
        mock_llm_client: MagicMock,
        docx_upload: UploadedFile,
    ) -> None:
        """Test a non-JSON model response shows the fallback message."""
        mock_llm_client.generate.return_value = "I could not read the documents."
        shell = AppShell(backend=EvaluationEngine(test_settings), settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)

        assert shell.analyze() is None
        assert shell.state.error == PARSE_FAILURE_MESSAGE
        assert shell.state.view == View.DASHBOARD
        assert shell.state.report is None

    def test_only_latest_error(
        self,
        test_settings: Settings,
        backend_factory,
        sample_report: EvaluationReport,
        docx_upload: UploadedFile,
    ) -> None:
        """Test a new analysis replaces the previous error."""
        backend = backend_factory(error=LLMError("first failure"))
        shell = AppShell(backend=backend, settings=test_settings)
        shell.select_source(docx_upload)
        shell.select_notes(docx_upload)
        shell.analyze()

        backend.error = None
        backend.report = sample_report
        shell.analyze()

        assert shell.state.error is None
        assert shell.state.view == View.REPORT


class TestExports:
    """Tests for the export actions."""

    def test_exports_require_report(self, ready_shell: AppShell) -> None:
        """Test exporting without a report raises error."""
        with pytest.raises(ValueError, match="No report"):
            ready_shell.download_json()

        with pytest.raises(ValueError, match="No report"):
            ready_shell.export_pdf()

    def test_download_json(self, ready_shell: AppShell, temp_dir: Path) -> None:
        """Test the JSON export is named after the student."""
        ready_shell.analyze()

        path = ready_shell.download_json(temp_dir)

        assert path.name == "AnatomyGuru_Priya_Sharma_Report.json"
        assert path.exists()

    def test_download_json_default_directory(
        self, ready_shell: AppShell, test_settings: Settings
    ) -> None:
        """Test the configured output directory is used by default."""
        ready_shell.analyze()

        path = ready_shell.download_json()

        assert path.parent == test_settings.output_directory

    def test_export_pdf_titled_after_source(
        self, ready_shell: AppShell, temp_dir: Path
    ) -> None:
        """Test the PDF takes the source file's base name as its title."""
        ready_shell.analyze()

        path = ready_shell.export_pdf(temp_dir)

        assert path == temp_dir / "answer_sheet_Report.pdf"
        with fitz.open(path) as doc:
            assert doc.metadata["title"] == "answer_sheet"

    def test_export_pdf_keeps_source_file(
        self, ready_shell: AppShell, text_pdf_upload: UploadedFile, temp_dir: Path
    ) -> None:
        """Test exporting next to the answer sheet leaves the sheet untouched."""
        source_path = temp_dir / text_pdf_upload.name
        source_path.write_bytes(text_pdf_upload.data)
        ready_shell.analyze()

        path = ready_shell.export_pdf(temp_dir)

        assert path != source_path
        assert source_path.read_bytes() == text_pdf_upload.data
        assert path.read_bytes().startswith(b"%PDF")
