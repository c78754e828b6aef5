"""Failure kinds raised by the extraction and sequencing contracts."""

from __future__ import annotations

from typing import Sequence


class RoutePlannerError(Exception):
    """Base class for contract failures.

    ``message`` is always safe to show to an end user; ``kind`` names the
    failure category so callers can branch without string matching.
    """

    kind = "RoutePlannerError"
    default_message = "The request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentialError(RoutePlannerError):
    kind = "MissingCredential"
    default_message = (
        "Gemini API key is not configured. Set ROUTEPLANNER_GEMINI_API_KEY and try again."
    )


class EmptyExtractionError(RoutePlannerError):
    kind = "EmptyExtraction"
    default_message = "No client records were recognized in the document."


class MalformedResponseError(RoutePlannerError):
    kind = "MalformedResponse"
    default_message = "The AI service returned a response that could not be processed."


class UpstreamFailureError(RoutePlannerError):
    kind = "UpstreamFailure"
    default_message = "Failed to communicate with the AI service."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestTimeoutError(RoutePlannerError):
    kind = "Timeout"
    default_message = "The AI service did not answer in time."


class PayloadTooLargeError(RoutePlannerError):
    kind = "PayloadTooLarge"

    def __init__(self, size: int | None, limit: int) -> None:
        if size is None:
            super().__init__(f"Document exceeds the maximum accepted size of {limit} bytes.")
        else:
            super().__init__(f"Document is {size} bytes; the maximum accepted size is {limit} bytes.")
        self.size = size
        self.limit = limit


class RequestInProgressError(RoutePlannerError):
    kind = "RequestInProgress"

    def __init__(self, operation: str) -> None:
        super().__init__(f"Another {operation} request is still running. Wait for it to finish.")
        self.operation = operation


class InvariantViolationError(RoutePlannerError):
    """Sequencing response was not a permutation of the requested identifiers."""

    kind = "InvariantViolation"

    def __init__(
        self,
        *,
        missing: Sequence[str] = (),
        unknown: Sequence[str] = (),
        duplicated: Sequence[str] = (),
    ) -> None:
        self.missing = list(missing)
        self.unknown = list(unknown)
        self.duplicated = list(duplicated)
        problems = []
        if self.missing:
            problems.append(f"missing {', '.join(self.missing)}")
        if self.unknown:
            problems.append(f"unknown {', '.join(self.unknown)}")
        if self.duplicated:
            problems.append(f"duplicated {', '.join(self.duplicated)}")
        super().__init__(
            "The AI service returned a visiting order that does not match the selected clients ("
            + "; ".join(problems)
            + ")."
        )
