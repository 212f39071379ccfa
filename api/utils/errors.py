"""
Domain errors raised by services and engines.

Routes do not catch these; the handler registered in api.api turns each one
into a JSON response with the error's status code:

- ValidationError        -> 400 (missing or invalid input)
- NotFoundError          -> 404 (course, lesson or profile absent or not owned)
- UpstreamProviderError  -> 502 (LLM call failed or returned unusable data)
- PersistenceError       -> 500 (storage read/write failed)
"""

from __future__ import annotations

from typing import Any, Optional


class LearnSphereError(Exception):
    status_code: int = 500
    public_message: Optional[str] = None

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.public_message or self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(LearnSphereError):
    status_code = 400


class NotFoundError(LearnSphereError):
    status_code = 404


class UpstreamProviderError(LearnSphereError):
    status_code = 502

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["message"] = f"{self.message} Please try again."
        return body


class PersistenceError(LearnSphereError):
    status_code = 500
    public_message = "A storage error occurred. Please try again later."

    def to_response(self) -> dict[str, Any]:
        # Storage details stay in the logs.
        return {"message": self.public_message}
