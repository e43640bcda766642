"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import io
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import MagicMock, patch

import fitz  # PyMuPDF
import pytest
from docx import Document

from anatomy_guru.config import Settings
from anatomy_guru.evaluation import EvaluationBackend
from anatomy_guru.evaluation.schema import GENERAL_FEEDBACK_FIELDS
from anatomy_guru.models import (
    EvaluationReport,
    GeneralFeedback,
    NormalizedDocument,
    QuestionFeedback,
    UploadedFile,
)


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with mocked values."""
    return Settings(
        api_key="test-api-key-for-testing",
        api_base_url="https://test.api.local",
        model="test-model",
        llm_temperature=0.0,
        min_pdf_text_length=150,
        max_file_size_mb=5.0,
        output_directory=temp_dir / "output",
    )


# ==============================================================================
# Report Fixtures
# ==============================================================================


@pytest.fixture
def sample_report_data() -> dict[str, Any]:
    """A report as the model returns it (camelCase JSON object)."""
    return {
        "studentName": "Priya Sharma",
        "testTitle": "Thorax Grand Test",
        "testTopics": "Heart, Mediastinum, Pleura",
        "testDate": "12 March 2026",
        "totalScore": 8,
        "maxScore": 15,
        "questions": [
            {
                "qNo": "1",
                "feedbackPoints": ["Not attempted"],
                "marks": 0,
                "maxMarks": 5,
                "isCorrect": False,
            },
            {
                "qNo": "2",
                "feedbackPoints": ["Excellent grasp of anatomy"],
                "marks": 5,
                "maxMarks": 5,
                "isCorrect": True,
            },
            {
                "qNo": "3",
                "feedbackPoints": ["Partially correct, missing diagram"],
                "marks": 3,
                "maxMarks": 5,
                "isCorrect": False,
            },
        ],
        "generalFeedback": {
            "overallPerformance": ["Sound foundation in cardiac anatomy."],
            "mcqs": ["All MCQs match the answer key."],
            "contentAccuracy": ["The **coronary sinus** tributaries were incomplete."],
            "completenessOfAnswers": ["Question 1 was left blank."],
            "presentationDiagrams": ["Label the layers of the pericardium."],
            "investigations": [],
            "attemptingQuestions": ["Attempt every question, even partially."],
            "actionPoints": ["Revise venous drainage of the heart.", "Practise labelled diagrams."],
        },
    }


@pytest.fixture
def sample_report(sample_report_data: dict[str, Any]) -> EvaluationReport:
    """The sample report as a model."""
    return EvaluationReport.model_validate(sample_report_data)


@pytest.fixture
def sample_llm_response(sample_report_data: dict[str, Any]) -> str:
    """Sample model response body."""
    return json.dumps(sample_report_data)


def make_question(marks: float, *points: str, q_no: str = "1") -> QuestionFeedback:
    """Build a question with the given marks and feedback points."""
    return QuestionFeedback(
        q_no=q_no,
        feedback_points=list(points),
        marks=marks,
        max_marks=5,
        is_correct=False,
    )


def make_report(*questions: QuestionFeedback, student_name: str = "Test Student") -> EvaluationReport:
    """Build a report around the given questions."""
    return EvaluationReport(
        student_name=student_name,
        test_title="Upper Limb Test",
        test_topics="Brachial plexus",
        test_date="1 January 2026",
        total_score=sum(q.marks for q in questions),
        max_score=5 * len(questions),
        questions=list(questions),
        general_feedback=GeneralFeedback.model_validate(
            {name: [] for name in GENERAL_FEEDBACK_FIELDS}
        ),
    )


# ==============================================================================
# Upload Fixtures
# ==============================================================================


LONG_PAGE_TEXT = (
    "Question 1. Describe the boundaries of the inguinal canal. "
    "Answer: The anterior wall is formed by the external oblique aponeurosis "
    "and the posterior wall by the transversalis fascia."
)


def build_docx(*paragraphs: str) -> bytes:
    """Create a .docx file in memory."""
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_pdf(*page_texts: str) -> bytes:
    """Create a PDF in memory with one page per text (empty text = blank page)."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_textbox(fitz.Rect(72, 72, 523, 770), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def docx_upload() -> UploadedFile:
    """Faculty notes as a Word document."""
    return UploadedFile(
        name="faculty_notes.docx",
        data=build_docx("Q1 - 0/5 not attempted", "Q2 - 5/5 good", "Q3 - 3/5 diagram poor"),
    )


@pytest.fixture
def text_pdf_upload() -> UploadedFile:
    """A two-page PDF with a proper text layer."""
    return UploadedFile(
        name="answer_sheet.pdf",
        mime_type="application/pdf",
        data=build_pdf(LONG_PAGE_TEXT, "Page two. " + LONG_PAGE_TEXT),
    )


@pytest.fixture
def scanned_pdf_upload() -> UploadedFile:
    """A PDF with almost no extractable text, like a scan."""
    return UploadedFile(
        name="scanned.pdf",
        mime_type="application/pdf",
        data=build_pdf("Roll No 42", ""),
    )


@pytest.fixture
def image_upload() -> UploadedFile:
    """A photographed answer sheet."""
    return UploadedFile(
        name="answer_photo.png",
        mime_type="image/png",
        data=b"\x89PNG\r\n\x1a\n" + b"\x00" * 64,
    )


# ==============================================================================
# Mock Fixtures
# ==============================================================================


class FakeBackend(EvaluationBackend):
    """Evaluation backend that returns a fixed report or raises a fixed error."""

    def __init__(
        self,
        report: EvaluationReport | None = None,
        error: Exception | None = None,
    ):
        self.report = report
        self.error = error
        self.calls: list[tuple[NormalizedDocument, NormalizedDocument, str]] = []

    def evaluate(
        self,
        source: NormalizedDocument,
        notes: NormalizedDocument,
        instruction: str,
    ) -> EvaluationReport:
        self.calls.append((source, notes, instruction))
        if self.error is not None:
            raise self.error
        assert self.report is not None
        return self.report


@pytest.fixture
def fake_backend(sample_report: EvaluationReport) -> FakeBackend:
    """Backend that always returns the sample report."""
    return FakeBackend(report=sample_report)


@pytest.fixture
def mock_llm_client(sample_llm_response: str) -> Generator[MagicMock, None, None]:
    """Mock the LLM client to avoid actual API calls."""
    with patch("anatomy_guru.evaluation.engine.LLMClient") as mock_class:
        mock_instance = MagicMock()
        mock_instance.generate.return_value = sample_llm_response
        mock_instance.health_check.return_value = True
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def upload_factory(temp_dir: Path) -> Callable[[str, bytes], Path]:
    """Write bytes to a named file in the temp directory."""

    def _write(name: str, data: bytes) -> Path:
        path = temp_dir / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def pdf_builder() -> Callable[..., bytes]:
    """Build PDFs in memory (one page per text)."""
    return build_pdf


@pytest.fixture
def docx_builder() -> Callable[..., bytes]:
    """Build Word documents in memory (one paragraph per text)."""
    return build_docx


@pytest.fixture
def report_builder() -> Callable[..., EvaluationReport]:
    """Build reports from questions."""
    return make_report


@pytest.fixture
def question_builder() -> Callable[..., QuestionFeedback]:
    """Build single questions from marks and feedback points."""
    return make_question


@pytest.fixture
def backend_factory() -> type[FakeBackend]:
    """The fake backend class, for tests that need a custom report or error."""
    return FakeBackend
