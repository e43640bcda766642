"""
Response parser for the model's structured output.

Parses the JSON body returned by the model and validates it against
the EvaluationReport schema. Any failure is reported with a single
user-facing message; the details go to the log.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from anatomy_guru.models import EvaluationReport

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = (
    "Could not generate structured feedback. Please try again with clearer documents."
)


class ReportParseError(Exception):
    """Raised when the model's response is not a valid evaluation report."""

    def __init__(self, message: str = PARSE_FAILURE_MESSAGE, raw_response: str | None = None):
        self.raw_response = raw_response
        super().__init__(message)


class ResponseParser:
    """
    Parses and validates model responses.

    Ensures:
    1. Response is valid JSON
    2. The top-level value is an object
    3. All required report fields are present with the right types
    """

    def parse(self, response: str) -> EvaluationReport:
        """
        Parse a model response into an EvaluationReport.

        Args:
            response: Raw response body (expected JSON).

        Returns:
            Validated EvaluationReport.

        Raises:
            ReportParseError: If the body is not JSON or doesn't match the schema.
        """
        try:
            data: Any = json.loads(response)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse model response as JSON: %s", e)
            raise ReportParseError(raw_response=response) from e

        if not isinstance(data, dict):
            logger.error("Model response is a %s, expected an object", type(data).__name__)
            raise ReportParseError(raw_response=response)

        try:
            return EvaluationReport.model_validate(data)
        except ValidationError as e:
            logger.error("Model response does not match the report schema: %s", e)
            raise ReportParseError(raw_response=response) from e
