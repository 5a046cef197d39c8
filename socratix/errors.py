"""Exception hierarchy for the dialogue engine and its collaborators."""
from fastapi import HTTPException, status


class SocratixError(Exception):
    """Base exception for all application errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=str(self))


class InputError(SocratixError):
    """Raised for a submission that is rejected before any network call."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotAuthenticatedError(SocratixError):
    """Raised when a write is attempted without a current user."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class SessionNotFoundError(SocratixError):
    """Raised when a session is missing or owned by another learner."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class SessionBusyError(SocratixError):
    """Raised when a start or submit is already in flight for the session."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is already processing a turn")


class DialogueStateError(SocratixError):
    """Raised when an operation is not valid in the session's current state."""

    status_code = status.HTTP_409_CONFLICT


class StorageError(SocratixError):
    """Raised when the persistent store fails."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str, original_error: Exception = None):
        self.operation = operation
        self.original_error = original_error
        if original_error is not None:
            super().__init__(f"Storage {operation} failed: {original_error}")
        else:
            super().__init__(f"Storage {operation} failed")


class TutorError(SocratixError):
    """Raised when the generative text service fails."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, action: str, original_error: Exception = None):
        self.action = action
        self.original_error = original_error
        detail = f": {original_error}" if original_error is not None else ""
        super().__init__(f"Tutor {action} failed{detail}")


class TutorRateLimitedError(TutorError):
    """Raised when the generator is still rate limited after retries."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail="Tutor rate limit reached. Please try again in a few moments."
        )


class MalformedOutputError(TutorError):
    """Raised when generator output cannot be decoded for a dialogue action."""

    def __init__(self, action: str, raw_output: str):
        self.action = action
        self.original_error = None
        self.raw_output = raw_output
        SocratixError.__init__(self, f"Tutor {action} returned malformed output")
