GENERIC_UNAVAILABLE = "Payment service temporarily unavailable"


class AppError(Exception):
    status_code = 500
    error = "Application error"
    # When False the message is logged but never shown to the caller
    expose = True

    def __init__(self, message, status_code=None):
        super().__init__(message)
        if status_code:
            self.status_code = status_code
        self.message = message

    @property
    def public_message(self):
        return self.message if self.expose else GENERIC_UNAVAILABLE


class ValidationError(AppError):
    status_code = 400
    error = "Validation error"


class InitiationRejected(AppError):
    status_code = 400
    error = "Payment request rejected"


class UpstreamUnavailable(AppError):
    status_code = 500
    error = "Upstream unavailable"
    expose = False


class UpstreamTimeout(UpstreamUnavailable):
    status_code = 504
    error = "Upstream timeout"

    @property
    def public_message(self):
        return "Request timeout. Please try again."


class UpstreamAuthError(AppError):
    status_code = 503
    error = "Upstream authentication failed"
    expose = False


class DarajaAPIError(AppError):
    """Daraja answered, but with an error body (``errorCode`` / ``errorMessage``)."""
    status_code = 502
    error = "Daraja error"

    def __init__(self, message, error_code=None, http_status=None, body=None):
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status
        self.body = body or {}


class MalformedCallback(AppError):
    status_code = 400
    error = "Malformed callback"
    expose = False
