# app/errors.py
# Role: Error types raised by routes and services.
#       main.py turns them into the {"success": false, "error": ...} envelope.

from typing import Optional


class ApiError(Exception):
    """
    An error that maps directly to an HTTP response.
    """

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


class BadRequestError(ApiError):
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(400, message, details)


class NotFoundError(ApiError):
    def __init__(self, message: str = "Not found"):
        super().__init__(404, message)


class GmailError(Exception):
    """Mail provider or identity provider call failed."""


class ExtractionError(Exception):
    """LLM call failed or returned output that does not match the schema."""
