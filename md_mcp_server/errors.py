"""
Error taxonomy and classification for clinical tool handlers.

Every fault raised while a tool runs is turned into a `ClinicalToolError`
subclass before it reaches a transport. The classified error knows its kind,
severity, whether a retry makes sense and which recovery actions to suggest.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

Severity = Literal["low", "medium", "high", "critical"]

DEFAULT_ERROR_MESSAGES: Dict[str, str] = {
    "PROCESSING_ERROR": "Error occurred during local processing",
    "VALIDATION_ERROR": "Input validation failed",
    "TIMEOUT_ERROR": "Processing timed out",
}


class ClinicalToolError(Exception):
    """Base class for classified tool failures."""

    kind = "ClinicalToolError"
    code = "UNKNOWN_ERROR"
    default_severity: Severity = "medium"
    default_recoverable = True
    default_suggestions: tuple = ("Try the request again",)

    def __init__(
        self,
        message: str,
        *,
        severity: Optional[Severity] = None,
        suggestions: Optional[Iterable[str]] = None,
        recoverable: Optional[bool] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.severity: Severity = severity or self.default_severity
        self.suggestions: List[str] = list(suggestions or self.default_suggestions)
        self.recoverable = self.default_recoverable if recoverable is None else recoverable
        self.details: Dict[str, Any] = dict(details or {})
        self.timestamp = datetime.now(timezone.utc)

    def with_context(self, **context: Any) -> "ClinicalToolError":
        """Return a copy whose details also carry the given operation context."""
        enriched = type(self)(
            self.message,
            severity=self.severity,
            suggestions=self.suggestions,
            recoverable=self.recoverable,
            details={**self.details, **context},
        )
        enriched.timestamp = self.timestamp
        return enriched

    def should_alert(self) -> bool:
        return self.severity in ("high", "critical")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "timestamp": self.timestamp.isoformat(),
            "suggestions": list(self.suggestions),
            "details": self.details,
        }


class ValidationError(ClinicalToolError):
    """Malformed or missing input. Surfaced to the caller, never retried."""

    kind = "ValidationError"
    code = "INVALID_INPUT"
    default_recoverable = False
    default_suggestions = (
        "Check the required parameters for this tool",
        "Ensure all required fields are provided",
        "Verify data types match the expected schema",
        "Consult the tool's documentation for correct usage",
    )

    @classmethod
    def from_pydantic(cls, tool_name: str, exc: PydanticValidationError) -> "ValidationError":
        issues = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            issues.append({"path": location, "message": err.get("msg", ""), "type": err.get("type")})
        summary = "; ".join(f"{issue['path']}: {issue['message']}" for issue in issues)
        return cls(
            f"Invalid input for tool '{tool_name}': {summary}",
            details={"validation_errors": issues},
        )


class ProcessingTimeoutError(ClinicalToolError):
    kind = "ProcessingTimeoutError"
    code = "PROCESSING_TIMEOUT"
    default_suggestions = (
        "Retry the processing",
        "The system may be experiencing high load",
    )


class ProcessingError(ClinicalToolError):
    kind = "ProcessingError"
    code = "PROCESSING_ERROR"
    default_suggestions = (
        "Retry the operation",
        "Check input parameters",
    )


class UnknownError(ClinicalToolError):
    kind = "UnknownError"
    code = "UNKNOWN_ERROR"
    default_suggestions = (
        "Try the request again",
        "Check input parameters",
        "Contact support if problem persists",
    )


def classify_error(exc: BaseException, context: Optional[str] = None) -> ClinicalToolError:
    """
    Map any exception onto the clinical error taxonomy.

    Already-classified errors are returned unchanged.
    """
    if isinstance(exc, ClinicalToolError):
        return exc

    details: Dict[str, Any] = {"original_error": str(exc)}
    if context:
        details["context"] = context

    if isinstance(exc, PydanticValidationError):
        error = ValidationError.from_pydantic(context or "unknown", exc)
        error.details.update(details)
        return error
    if isinstance(exc, TimeoutError):
        return ProcessingTimeoutError(DEFAULT_ERROR_MESSAGES["TIMEOUT_ERROR"], details=details)
    if "processing" in str(exc).lower():
        return ProcessingError(DEFAULT_ERROR_MESSAGES["PROCESSING_ERROR"], details=details)
    return UnknownError(f"Unexpected error: {exc}", details=details)


_LOG_LEVELS = {
    "critical": logging.ERROR,
    "high": logging.ERROR,
    "medium": logging.WARNING,
    "low": logging.INFO,
}


def log_error(error: ClinicalToolError, context: Optional[str] = None) -> None:
    level = _LOG_LEVELS.get(error.severity, logging.DEBUG)
    logger.log(
        level,
        "[%s] %s (context=%s, recoverable=%s)",
        error.code,
        error.message,
        context,
        error.recoverable,
    )
