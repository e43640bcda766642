"""
Evaluation Module.

Builds the multimodal request, calls the model with a strict output
schema, and validates the returned report.
"""

from anatomy_guru.evaluation.engine import EvaluationBackend, EvaluationEngine
from anatomy_guru.evaluation.llm_client import LLMClient, LLMError
from anatomy_guru.evaluation.parser import PARSE_FAILURE_MESSAGE, ReportParseError, ResponseParser
from anatomy_guru.evaluation.prompt_builder import PromptBuilder

__all__ = [
    "EvaluationBackend",
    "EvaluationEngine",
    "LLMClient",
    "LLMError",
    "PARSE_FAILURE_MESSAGE",
    "PromptBuilder",
    "ReportParseError",
    "ResponseParser",
]
