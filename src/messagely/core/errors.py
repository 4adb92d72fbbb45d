class MessagelyError(Exception):
    """
    Base error for every failure the core reports to its callers.
    Attributes:
        message: User-facing description
        status_code: HTTP status the API layer answers with
        cause: Original exception, if the error wraps one
    """
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, cause: Exception | None = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(MessagelyError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateUsernameError(MessagelyError):
    status_code = 400
    default_message = "Username taken. Please pick another!"


class InvalidCredentialsError(MessagelyError):
    status_code = 400
    default_message = "Invalid user/password"


class InvalidReferenceError(MessagelyError):
    status_code = 400
    default_message = "Referenced user does not exist"


class InvalidTokenError(MessagelyError):
    status_code = 401
    default_message = "Invalid token"


class ForbiddenError(MessagelyError):
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(MessagelyError):
    status_code = 404
    default_message = "Not found"


class StorageError(MessagelyError):
    status_code = 500
    default_message = "Internal server error"
