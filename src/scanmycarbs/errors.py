"""Application error taxonomy mapped to HTTP status codes at the API edge."""


class AppError(Exception):
    """Base class for errors that carry a client-facing message."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class AuthError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class NotFoundError(AppError):
    """Entity absent or not owned by the caller."""

    status_code = 404


class ConflictError(AppError):
    """Uniqueness conflict, e.g. an email already in use."""

    status_code = 409


class UpstreamError(AppError):
    """External provider unreachable or returned malformed data."""

    status_code = 502


class ImageRecognitionError(UpstreamError):
    """The image classifier call failed.

    The message is fixed; provider details go to the log, not the client.
    """

    def __init__(self, message: str = "Image analysis failed") -> None:
        super().__init__(message)


class PersistenceError(AppError):
    """Storage layer failure; the message is never shown to clients."""

    status_code = 500
