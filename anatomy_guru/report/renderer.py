"""
Report renderer.

Maps an EvaluationReport onto a printable HTML document. The displayed
total is recomputed from the per-question marks, and each question is
classified for styling.
"""

import re
from contextlib import contextmanager
from typing import Iterator

from anatomy_guru.models import EvaluationReport, QuestionFeedback, QuestionStatus

DEFAULT_TITLE = "AnatomyGuru Evaluation Report"

UNATTEMPTED_MARKERS: tuple[str, ...] = ("not attempted", "skipped")
CORRECT_MARKERS: tuple[str, ...] = ("excellent", "perfect", "precise", "correct")
HEDGING_QUALIFIERS: tuple[str, ...] = ("partially", "partly", "mostly", "not")

GENERAL_FEEDBACK_SECTIONS: tuple[tuple[str, str], ...] = (
    ("overall_performance", "1) Overall Performance"),
    ("mcqs", "2) MCQs"),
    ("content_accuracy", "3) Content Accuracy"),
    ("completeness_of_answers", "4) Completeness of Answers"),
    ("presentation_diagrams", "5) Presentation & Diagrams (Major drawback)"),
    ("investigations", "6) Investigations (Must improve)"),
    ("attempting_questions", "7) Attempting All Questions"),
    ("action_points", "8) What to do next (Action points)"),
)

_BOLD = re.compile(r"\*\*(.*?)\*\*")

# Plain substring match, except where a qualifier directly precedes the
# marker ("partially correct").
_CORRECT = re.compile(
    "".join(f"(?<!{q} )" for q in HEDGING_QUALIFIERS)
    + "(?:"
    + "|".join(CORRECT_MARKERS)
    + ")"
)

_STYLE = """
body { font-family: "Times New Roman", Times, serif; font-size: 11pt; color: #1e1e1e; }
h1 { font-size: 13pt; color: #dc2626; text-align: center; text-transform: uppercase; }
h2 { font-size: 12pt; color: #dc2626; text-decoration: underline; }
h3 { font-size: 11pt; font-weight: bold; margin-bottom: 2pt; }
p.meta { text-align: center; margin: 2pt; }
p.student { margin-top: 10pt; }
.label { color: #dc2626; font-weight: bold; }
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #94a3b8; padding: 4pt; vertical-align: top; }
th { color: #dc2626; text-transform: uppercase; }
td.qno, td.marks { text-align: center; font-weight: bold; }
tr.unattempted { background-color: #fef2f2; }
tr.unattempted li { color: #b91c1c; font-style: italic; font-weight: bold; }
tr.correct { background-color: #ecfdf5; }
tr.correct td.marks { color: #047857; }
tr.unattempted td.marks { color: #dc2626; }
tr.total td { background-color: #f8fafc; font-weight: bold; }
td.total-label { text-align: right; text-transform: uppercase; }
td.total-value { text-align: center; color: #dc2626; }
.empty { color: #94a3b8; font-style: italic; }
div.general { border: 1px solid #0f172a; padding: 8pt; margin-top: 12pt; }
"""


def calculate_total(report: EvaluationReport) -> float:
    """Sum of the marks awarded across all questions."""
    return float(sum(q.marks for q in report.questions))


def classify_question(question: QuestionFeedback) -> QuestionStatus:
    """
    Classify a question for display.

    The first matching rule wins: zero marks or an "unattempted" phrase
    beats any "correct" phrase in the same feedback.
    """
    feedback_text = " ".join(question.feedback_points).lower()

    if question.marks == 0 or any(m in feedback_text for m in UNATTEMPTED_MARKERS):
        return QuestionStatus.UNATTEMPTED

    if _CORRECT.search(feedback_text):
        return QuestionStatus.CORRECT

    return QuestionStatus.PARTIAL


def render_markup(text: str) -> str:
    """Turn `**text**` into `<strong>text</strong>`; everything else is kept as is."""
    return _BOLD.sub(r"<strong>\1</strong>", text)


def format_number(value: float) -> str:
    """Render whole numbers without a trailing `.0`."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


class ReportRenderer:
    """
    Renders evaluation reports as standalone HTML documents.

    The document title can be overridden for the duration of a print
    with `titled()`.
    """

    def __init__(self, title: str = DEFAULT_TITLE):
        self.title = title

    @contextmanager
    def titled(self, title: str) -> Iterator["ReportRenderer"]:
        """Temporarily override the document title, restoring it afterwards."""
        original = self.title
        self.title = title
        try:
            yield self
        finally:
            self.title = original

    def render_html(self, report: EvaluationReport | None) -> str:
        """
        Render a report (or the empty placeholder) as an HTML document.

        Args:
            report: The report to render, or None.

        Returns:
            A complete HTML document.
        """
        if report is None:
            body = '<p class="empty">No report data available.</p>'
        else:
            body = "\n".join(
                [
                    self._render_header(report),
                    self._render_questions(report),
                    self._render_general_feedback(report),
                ]
            )

        return (
            "<!DOCTYPE html>\n"
            "<html>\n<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{self.title}</title>\n"
            f"<style>{_STYLE}</style>\n"
            "</head>\n<body>\n"
            f"{body}\n"
            "</body>\n</html>\n"
        )

    def _render_header(self, report: EvaluationReport) -> str:
        return (
            f"<h1>{report.test_title or 'General Medicine Test'}</h1>\n"
            f'<p class="meta"><b>Topics: {report.test_topics or "N/A"}</b></p>\n'
            f'<p class="meta"><b>Date: {report.test_date or "N/A"}</b></p>\n'
            f'<p class="student"><span class="label">Student Name:</span> '
            f"<b>{report.student_name or 'Unknown Student'}</b></p>"
        )

    def _render_questions(self, report: EvaluationReport) -> str:
        rows: list[str] = []

        for question in report.questions:
            status = classify_question(question)
            rows.append(
                f'<tr class="{status.value}">'
                f'<td class="qno">{question.q_no}</td>'
                f"<td>{self._render_list(question.feedback_points, placeholder=False)}</td>"
                f'<td class="marks">{format_number(question.marks)}</td>'
                "</tr>"
            )

        max_score = format_number(report.max_score) if report.max_score else "100"
        rows.append(
            '<tr class="total">'
            '<td class="total-label" colspan="2">Total Score Summation</td>'
            f'<td class="total-value">{format_number(calculate_total(report))} / {max_score}</td>'
            "</tr>"
        )

        return (
            "<table>\n"
            "<tr><th>Q No</th><th>Feedback</th><th>Marks</th></tr>\n"
            + "\n".join(rows)
            + "\n</table>"
        )

    def _render_general_feedback(self, report: EvaluationReport) -> str:
        sections = ['<div class="general">', "<h2>General Feedback:</h2>"]

        for field_name, heading in GENERAL_FEEDBACK_SECTIONS:
            items = getattr(report.general_feedback, field_name)
            sections.append(f"<h3>{heading}</h3>")
            sections.append(self._render_list(items))

        sections.append("</div>")
        return "\n".join(sections)

    def _render_list(self, items: list[str], placeholder: bool = True) -> str:
        if not items:
            return '<p class="empty">No specific feedback provided.</p>' if placeholder else ""

        entries = "".join(f"<li>{render_markup(item)}</li>" for item in items)
        return f"<ul>{entries}</ul>"
