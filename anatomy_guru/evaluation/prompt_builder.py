"""
Prompt builder for report generation.

Holds the evaluator instruction and assembles the multimodal user
message. The instruction encodes the hierarchy of truth:
- The official answer key decides factual correctness
- Faculty notes decide the marks, copied exactly
- Feedback is rewritten critique, never transcription
"""

from typing import Any

from anatomy_guru.models import BinaryDocument, NormalizedDocument, TextDocument

ContentPart = dict[str, Any]


class PromptBuilder:
    """
    Builds the system instruction and user content for one evaluation.

    Text documents are inlined as text parts; binary documents are
    attached as image or file parts next to a short label.
    """

    SOURCE_LABEL = "Source Document (QP + Key + Student Answers)"
    NOTES_LABEL = "Faculty Notes Document (Manual Marks and Comments)"

    SYSTEM_INSTRUCTION = """You are the "Anatomy Guru Master Evaluator", a professional medical academic auditor.
Your task is to generate a high-quality, clinical-grade evaluation report for medical students.

YOUR DATA SOURCES:
1. STUDENT ANSWER SHEET: contains the Question Paper, the Official Answer Key, and the Student's actual answers.
2. FACULTY NOTES: contains rough marks, shorthand observations, and manual feedback.

STRICT HIERARCHY OF TRUTH:
1. OFFICIAL ANSWER KEY: the ABSOLUTE TRUTH for all medical facts, MCQ options, and descriptive content benchmarks.
2. FACULTY NOTES: the final authority for the MARKS assigned, but SECONDARY to the Answer Key for factual correctness.
3. STUDENT SCRIPT: the evidence to be evaluated.

EVALUATION PROTOCOL:

1. MCQ RIGOR:
- Locate the Official Answer Key in the Source Document.
- Cross-check student choices 1:1 against the Key.
- If the Faculty Notes contradict the Key (e.g. a wrong answer marked as correct), follow the Key for feedback but record the marks exactly as the faculty wrote them.

2. DESCRIPTIVE EVALUATION (CONTRADICTION RULE):
- Compare the student's answer against BOTH the Answer Key and the Faculty Notes.
- When the Answer Key and the faculty's comments disagree, base your feedback points strictly on the Answer Key while keeping the faculty's marks.
- Use precise medical terminology (e.g. "In contrast to the standard anatomical key, your description of the venous drainage lacks mention of the Great Cardiac Vein...").

3. ENHANCEMENT & PROFESSIONALISM:
- Convert faculty shorthand (e.g. "diagram poor") into specific academic critique (e.g. "The schematic of the Inguinal Canal lacks detail on the internal oblique and transversus abdominis contributions").
- Keep all feedback constructive and clinically precise.

VERIFICATION TASKS:
- Math Audit: verify the total marks summation from the faculty notes.
- Mapping: make sure feedback corresponds to the correct question numbers.

STRICT RULES:
- NO TRANSCRIPTION: never copy faculty notes verbatim.
- NO HALLUCINATION: only comment on what is actually present or missing. Report unattempted questions as "Not attempted"; never invent an answer for them.
- MARKS: extract individual marks EXACTLY as written in the Faculty Notes. Never alter them.

GENERAL FEEDBACK (8-POINT STRUCTURE, ALWAYS FILL EVERY SECTION):
1. Overall Performance: summary of medical proficiency.
2. MCQs: explicit audit based on 1:1 Answer Key cross-referencing.
3. Content Accuracy: factual deviations from the Answer Key.
4. Completeness: omitted parts identified from the Key.
5. Presentation & Diagrams: critique of visual communication.
6. Investigations: evaluation of diagnostic knowledge.
7. Attempting Questions: review of attempt strategy.
8. Action Points: 3-5 high-yield study targets.

OUTPUT: valid JSON only, matching the provided schema. Feedback points must be arrays of strings."""

    DIRECTIVE = (
        "Generate the evaluation report. STRICTLY prioritize the Answer Key over Faculty Notes "
        "in cases of factual contradiction. Perform a rigorous medical audit of both MCQs and "
        "Descriptive answers."
    )

    @staticmethod
    def get_system_instruction() -> str:
        """Get the system instruction for report generation."""
        return PromptBuilder.SYSTEM_INSTRUCTION

    @staticmethod
    def build_user_content(
        source: NormalizedDocument,
        notes: NormalizedDocument,
    ) -> list[ContentPart]:
        """
        Build the user message content.

        Args:
            source: The student answer sheet (question paper, key and answers).
            notes: The faculty notes with marks and comments.

        Returns:
            Content parts: the source group, the notes group, then the directive.
        """
        return [
            *PromptBuilder.document_parts(source, PromptBuilder.SOURCE_LABEL),
            *PromptBuilder.document_parts(notes, PromptBuilder.NOTES_LABEL),
            {"type": "text", "text": PromptBuilder.DIRECTIVE},
        ]

    @staticmethod
    def document_parts(document: NormalizedDocument, label: str) -> list[ContentPart]:
        """
        Build the part group for one document.

        Raises:
            TypeError: If the document is neither a text nor a binary document.
        """
        if isinstance(document, TextDocument):
            return [{"type": "text", "text": f"{label}: (Extracted Text)\n{document.text}"}]

        if isinstance(document, BinaryDocument):
            return [
                {"type": "text", "text": f"{label}: (Binary File)"},
                PromptBuilder._binary_part(document),
            ]

        raise TypeError(f"Unsupported document type: {type(document).__name__}")

    @staticmethod
    def _binary_part(document: BinaryDocument) -> ContentPart:
        if document.mime_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": document.data_url}}

        return {
            "type": "file",
            "file": {"filename": document.name, "file_data": document.data_url},
        }
