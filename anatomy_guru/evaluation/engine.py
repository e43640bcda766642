"""
Evaluation engine - the boundary to the remote model.

`EvaluationBackend` is the one-method interface the rest of the
application depends on; `EvaluationEngine` is the live implementation.
"""

import logging
from abc import ABC, abstractmethod

from anatomy_guru.config import Settings, get_settings
from anatomy_guru.evaluation.llm_client import LLMClient
from anatomy_guru.evaluation.parser import ResponseParser
from anatomy_guru.evaluation.prompt_builder import PromptBuilder
from anatomy_guru.evaluation.schema import response_format
from anatomy_guru.models import EvaluationReport, NormalizedDocument

logger = logging.getLogger(__name__)


class EvaluationBackend(ABC):
    """Produces an evaluation report from two normalized documents."""

    @abstractmethod
    def evaluate(
        self,
        source: NormalizedDocument,
        notes: NormalizedDocument,
        instruction: str,
    ) -> EvaluationReport:
        """
        Evaluate a student answer sheet against faculty notes.

        Args:
            source: The student answer sheet.
            notes: The faculty notes.
            instruction: The system instruction (grading policy).

        Returns:
            A schema-validated EvaluationReport.

        Raises:
            LLMError: If the remote call fails.
            ReportParseError: If the response is not a valid report.
        """
        ...


class EvaluationEngine(EvaluationBackend):
    """
    Sends one structured-output request per evaluation.

    No retries and no caching: each call maps to exactly one request.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the evaluation engine.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
        """
        self._settings = settings or get_settings()
        self._llm_client = LLMClient(self._settings)
        self._prompt_builder = PromptBuilder()
        self._response_parser = ResponseParser()

    def evaluate(
        self,
        source: NormalizedDocument,
        notes: NormalizedDocument,
        instruction: str | None = None,
    ) -> EvaluationReport:
        system_prompt = instruction or self._prompt_builder.get_system_instruction()
        user_content = self._prompt_builder.build_user_content(source, notes)

        logger.info(
            "Requesting evaluation of '%s' (%s) with notes '%s' (%s)",
            source.name,
            source.kind,
            notes.name,
            notes.kind,
        )

        raw_response = self._llm_client.generate(
            system_prompt=system_prompt,
            user_content=user_content,
            response_format=response_format(),
        )
        return self._response_parser.parse(raw_response)

    def health_check(self) -> bool:
        """
        Check if the evaluation engine is operational.

        Returns:
            True if the model API is reachable.
        """
        return self._llm_client.health_check()
