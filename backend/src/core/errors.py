"""
Application error taxonomy.

Every failure the API reports is an AppError tagged with an ErrorKind. The
kind carries the default HTTP status and the `errorType` string exposed in
error responses; individual errors may override the status (e.g. bad login
credentials are a 400 while a bad bearer token is a 401, both AUTHENTICATION).
"""
from enum import Enum


class ErrorKind(Enum):
    """Kind tag for application errors: (errorType, default status code)."""

    VALIDATION = ("ValidationError", 400)
    AUTHENTICATION = ("AuthenticationError", 401)
    FORBIDDEN = ("ForbiddenError", 403)
    NOT_FOUND = ("NotFoundError", 404)
    CONFLICT = ("UserConflictError", 409)
    RATE_LIMITED = ("RateLimitError", 429)
    DATABASE = ("DatabaseError", 500)
    SERVER = ("ServerError", 500)

    def __init__(self, error_type: str, status_code: int) -> None:
        self.error_type = error_type
        self.status_code = status_code


class AppError(Exception):
    """A tagged application error: kind, message and HTTP status."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code or kind.status_code
        super().__init__(message)

    @property
    def error_type(self) -> str:
        """The errorType string exposed to clients."""
        return self.kind.error_type

    def __repr__(self) -> str:
        return f"AppError({self.kind.name}, {self.message!r}, {self.status_code})"


def error_type_for_status(status_code: int) -> str:
    """Best-effort errorType for failures that did not originate as an AppError."""
    for kind in ErrorKind:
        if kind.status_code == status_code:
            return kind.error_type
    return ErrorKind.SERVER.error_type
