"""Job exceptions."""

from typing import List
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    field: str = ""
    exit_code: int = 2


class JobError(Exception):
    """Base class for errors raised by the job lifecycle hooks."""

    exit_code = 1


class JobValidationError(JobError):
    """Raised when required job inputs (params or secrets) are missing.

    The CLI catches it and maps it to exit code 2.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        super().__init__("\n".join(error.message for error in errors))


class HttpRequestError(JobError):
    """Raised when the outbound HTTP request fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(message)
