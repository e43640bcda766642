"""
Pydantic models for the Anatomy Guru evaluator.

These models define the schemas for:
- Uploaded files and their normalized (text or binary) representation
- The structured evaluation report returned by the model
- Per-question status classification used by the renderer

Report models carry camelCase aliases so that the model's JSON output
parses directly and exports keep the same field names and order.
"""

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME_TYPE = "application/pdf"
DEFAULT_MIME_TYPE = "application/octet-stream"


# ==============================================================================
# Upload Models
# ==============================================================================


class UploadedFile(BaseModel):
    """
    A file selected by the user, held in memory for one evaluation.

    The MIME type is only a hint and may be empty.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Original file name, including extension",
    )

    mime_type: str = Field(
        default="",
        description="MIME type hint supplied with the file",
    )

    data: bytes = Field(
        ...,
        repr=False,
        description="Raw file contents",
    )

    @classmethod
    def from_path(cls, path: Path | str, mime_type: str | None = None) -> "UploadedFile":
        """
        Read a file from disk.

        Args:
            path: Path to the file.
            mime_type: Explicit MIME type. Guessed from the file name if omitted.

        Returns:
            UploadedFile with the file's bytes.
        """
        file_path = Path(path)
        guessed = mime_type or mimetypes.guess_type(file_path.name)[0] or ""
        return cls(name=file_path.name, mime_type=guessed, data=file_path.read_bytes())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size_bytes(self) -> int:
        """Size of the file contents in bytes."""
        return len(self.data)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def extension(self) -> str:
        """Lowercased file extension (e.g. '.pdf')."""
        return Path(self.name).suffix.lower()

    @property
    def is_docx(self) -> bool:
        return self.extension == ".docx" or self.mime_type == DOCX_MIME_TYPE

    @property
    def is_pdf(self) -> bool:
        return self.extension == ".pdf" or self.mime_type == PDF_MIME_TYPE

    def resolved_mime_type(self) -> str:
        """MIME type hint, falling back to a guess from the file name."""
        if self.mime_type:
            return self.mime_type
        return mimetypes.guess_type(self.name)[0] or DEFAULT_MIME_TYPE


# ==============================================================================
# Normalized Document Models
# ==============================================================================


class TextDocument(BaseModel):
    """A document whose content was extracted as plain text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"

    name: str = Field(..., min_length=1)

    text: str = Field(
        ...,
        description="Extracted text content",
    )

    @field_validator("text")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Text documents must carry some content."""
        if not v.strip():
            raise ValueError("Text document content cannot be empty")
        return v


class BinaryDocument(BaseModel):
    """A document sent to the model as an encoded binary payload."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["binary"] = "binary"

    name: str = Field(..., min_length=1)

    mime_type: str = Field(
        ...,
        min_length=1,
        description="MIME type of the original file",
    )

    data: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Base64-encoded file contents",
    )

    @property
    def data_url(self) -> str:
        """The payload as a `data:` URL."""
        return f"data:{self.mime_type};base64,{self.data}"


NormalizedDocument = Annotated[
    Union[TextDocument, BinaryDocument],
    Field(discriminator="kind"),
]


# ==============================================================================
# Evaluation Report Models
# ==============================================================================


class QuestionFeedback(BaseModel):
    """
    Feedback and marks for a single question.

    Marks are copied from the faculty notes and may legitimately be zero.
    Whole numbers stay integers so exports keep the model's own values.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="forbid",
    )

    q_no: str = Field(..., alias="qNo")

    feedback_points: list[str] = Field(..., alias="feedbackPoints")

    marks: int | float = Field(..., description="Marks awarded by the faculty")

    max_marks: int | float = Field(..., alias="maxMarks")

    is_correct: bool = Field(..., alias="isCorrect")


class GeneralFeedback(BaseModel):
    """The fixed eight-section general feedback. Every section must be present."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    overall_performance: list[str] = Field(..., alias="overallPerformance")
    mcqs: list[str] = Field(..., alias="mcqs")
    content_accuracy: list[str] = Field(..., alias="contentAccuracy")
    completeness_of_answers: list[str] = Field(..., alias="completenessOfAnswers")
    presentation_diagrams: list[str] = Field(..., alias="presentationDiagrams")
    investigations: list[str] = Field(..., alias="investigations")
    attempting_questions: list[str] = Field(..., alias="attemptingQuestions")
    action_points: list[str] = Field(..., alias="actionPoints")


class EvaluationReport(BaseModel):
    """
    Complete structured evaluation of one student's answer sheet.

    `questions` is kept in display order. `total_score` is the value the
    model declared; the renderer recomputes its own sum from the marks.
    Mirrors the declared output schema: every field is required and
    unknown keys are rejected.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    student_name: str = Field(..., alias="studentName")
    test_title: str = Field(..., alias="testTitle")
    test_topics: str = Field(..., alias="testTopics")
    test_date: str = Field(..., alias="testDate")
    total_score: int | float = Field(..., alias="totalScore")
    max_score: int | float = Field(..., alias="maxScore")
    questions: list[QuestionFeedback] = Field(...)
    general_feedback: GeneralFeedback = Field(..., alias="generalFeedback")


class QuestionStatus(str, Enum):
    """Display classification of a question."""

    UNATTEMPTED = "unattempted"
    CORRECT = "correct"
    PARTIAL = "partial"
