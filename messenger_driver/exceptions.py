"""Exceptions raised by the Messenger driver."""


class MessengerDriverError(Exception):
    """Base exception for Messenger driver errors."""

    pass


class MalformedPayloadError(MessengerDriverError):
    """Raised when a webhook body is not valid JSON or lacks ``entry``."""

    pass


class PlatformError(MessengerDriverError):
    """Raised when the Graph API answers with a non-200 status.

    Attributes:
        status_code: HTTP status returned by Facebook
        platform_message: ``error.message`` from the response body, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        platform_message: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.platform_message = platform_message
