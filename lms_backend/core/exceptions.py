"""Custom exceptions for the application."""


class BaseAPIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        details: dict = None,
        headers: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)


class ValidationError(BaseAPIException):
    """Missing or malformed input."""

    def __init__(self, message: str = "All fields are required!", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict error."""

    def __init__(self, message: str = "User already exists!", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="CONFLICT_ERROR",
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found error."""

    def __init__(self, message: str = "User does not exist!", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="NOT_FOUND_ERROR",
            details=details
        )


class InvalidCredentialsError(BaseAPIException):
    """Email or password did not match.

    Sign-in uses the same message as an unknown email so the response
    does not reveal which of the two failed.
    """

    def __init__(self, message: str = "User does not exist!", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_CREDENTIALS",
            details=details
        )


class AuthenticationError(BaseAPIException):
    """Missing, invalid or revoked session."""

    def __init__(self, message: str = "Unauthorized: Please Login.", details: dict = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR",
            details=details,
            headers={"WWW-Authenticate": "Bearer"}
        )


class RateLimitExceeded(BaseAPIException):
    """Rate limit exceeded error."""

    def __init__(
        self,
        message: str = "Too many requests from this IP, please try again later.",
        retry_after: int = None,
        details: dict = None
    ):
        super().__init__(
            message=message,
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=details,
            headers={"Retry-After": str(retry_after)} if retry_after else None
        )


class ConfigurationError(BaseAPIException):
    """Configuration error."""

    def __init__(self, message: str = "Configuration error", details: dict = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIGURATION_ERROR",
            details=details
        )


class InvalidTokenError(Exception):
    """Bearer token is malformed, expired or carries a bad signature."""
