from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .sms import MessageResponse


class SendblueError(Exception):
    """Base class for every error raised by this package."""


class PhoneNumberParseError(SendblueError, ValueError):
    """
    The phone number could not be normalized to E.164.

    Retrying with the same input is pointless; show the user something like
    "please check the phone number you entered".
    """

    def __init__(self, raw: str) -> None:
        super().__init__("failed to parse phone number")
        self.raw = raw


class RequestConstructionError(SendblueError):
    """The outbound request could not be serialized or built."""


class TransportError(SendblueError):
    """The HTTP exchange itself failed (DNS, connection, TLS, timeout)."""


class ResponseReadError(SendblueError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseParseError(SendblueError):
    """The response body was not a JSON object shaped like a MessageResponse."""

    def __init__(self, message: str, *, status_code: int | None = None, body: bytes = b"") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RemoteRejectedError(SendblueError):
    """Sendblue answered with status ERROR."""

    def __init__(self, response: MessageResponse, *, status_code: int | None = None) -> None:
        message = "failed to send, returned error"
        if response.error_code:
            message += f" (error_code={response.error_code})"
        super().__init__(message)
        self.response = response
        self.status_code = status_code

    @property
    def error_code(self) -> str:
        return self.response.error_code


class WebhookError(SendblueError):
    pass


class WebhookReadError(WebhookError):
    pass


class WebhookParseError(WebhookError):
    pass
