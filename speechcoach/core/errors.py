from __future__ import annotations

from typing import Any


class SpeechCoachError(Exception):
    """Base for errors that map onto an HTTP response."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.error
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class Unauthorized(SpeechCoachError):
    status_code = 401
    error = "Unauthorized"


class BadRequest(SpeechCoachError):
    status_code = 400
    error = "Bad request"


class NotFound(SpeechCoachError):
    status_code = 404
    error = "Not found"


class Conflict(SpeechCoachError):
    status_code = 409
    error = "Conflict"


class PayloadTooLarge(SpeechCoachError):
    status_code = 413
    error = "Payload too large"


class UnsupportedAudio(SpeechCoachError):
    """The recording could not be converted into a format the analysis model accepts."""

    status_code = 422
    error = "Unsupported audio"


class OracleUnavailable(SpeechCoachError):
    """The analysis model could not be reached or returned nothing."""

    status_code = 503
    error = "Analysis service unavailable"


class SchemaViolation(SpeechCoachError):
    """
    The analysis model answered, but the answer does not fit the analysis schema.

    `details` lists every failing field as {"field": "gaps.0.type", "message": ...}.
    """

    status_code = 502
    error = "Invalid analysis format from AI"

    def __init__(self, details: list[dict[str, str]], message: str | None = None):
        self.details = details
        fields = ", ".join(d["field"] for d in details) or "<root>"
        super().__init__(message or f"Analysis failed validation on: {fields}")

    @property
    def fields(self) -> list[str]:
        return [d["field"] for d in self.details]

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["details"] = self.details
        return body


class InternalError(SpeechCoachError):
    # message stays generic, the cause is only logged
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or "An unexpected error occurred while processing the request.")
