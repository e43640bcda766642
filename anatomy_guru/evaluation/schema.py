"""
JSON schema declared to the model for structured output.

Mirrors the EvaluationReport model field for field. Every object is
closed (no additional properties) and every field is required, which
is what strict structured-output mode expects.
"""

from typing import Any

GENERAL_FEEDBACK_FIELDS: tuple[str, ...] = (
    "overallPerformance",
    "mcqs",
    "contentAccuracy",
    "completenessOfAnswers",
    "presentationDiagrams",
    "investigations",
    "attemptingQuestions",
    "actionPoints",
)

QUESTION_FIELDS: tuple[str, ...] = ("qNo", "feedbackPoints", "marks", "maxMarks", "isCorrect")

REPORT_FIELDS: tuple[str, ...] = (
    "studentName",
    "testTitle",
    "testTopics",
    "testDate",
    "totalScore",
    "maxScore",
    "questions",
    "generalFeedback",
)

_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

QUESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "qNo": {"type": "string"},
        "feedbackPoints": _STRING_LIST,
        "marks": {"type": "number"},
        "maxMarks": {"type": "number"},
        "isCorrect": {"type": "boolean"},
    },
    "required": list(QUESTION_FIELDS),
    "additionalProperties": False,
}

GENERAL_FEEDBACK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {name: _STRING_LIST for name in GENERAL_FEEDBACK_FIELDS},
    "required": list(GENERAL_FEEDBACK_FIELDS),
    "additionalProperties": False,
}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "studentName": {"type": "string"},
        "testTitle": {"type": "string"},
        "testTopics": {"type": "string"},
        "testDate": {"type": "string"},
        "totalScore": {"type": "number"},
        "maxScore": {"type": "number"},
        "questions": {"type": "array", "items": QUESTION_SCHEMA},
        "generalFeedback": GENERAL_FEEDBACK_SCHEMA,
    },
    "required": list(REPORT_FIELDS),
    "additionalProperties": False,
}


def response_format() -> dict[str, Any]:
    """The `response_format` argument for a chat-completions request."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "evaluation_report",
            "strict": True,
            "schema": RESPONSE_SCHEMA,
        },
    }
