"""
Error taxonomy for the card creation pipeline.
Every stage raises one of these with a message that can be shown to the user.
"""

from enum import Enum
from typing import Optional


class GatewayErrorKind(Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    EMPTY_RESPONSE = "empty_response"


class SubmissionErrorKind(Enum):
    BAD_REQUEST = "bad_request"
    TOO_LARGE = "too_large"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    UNKNOWN = "unknown"


SUBMISSION_MESSAGES = {
    SubmissionErrorKind.BAD_REQUEST: "Bad Request: Please check the provided vocabulary.",
    SubmissionErrorKind.TOO_LARGE: "The vocabulary list is too large.",
    SubmissionErrorKind.RATE_LIMITED: "Too many requests. Please wait and try again.",
    SubmissionErrorKind.SERVER_ERROR: "The server encountered an error. Please try again later.",
    SubmissionErrorKind.TIMEOUT: "The request timed out. Please try again.",
    SubmissionErrorKind.NETWORK_UNREACHABLE: (
        "Network error: The server might be down or blocked. Please try again later."
    ),
    SubmissionErrorKind.UNKNOWN: "An unexpected error occurred.",
}


class CardCreatorError(Exception):
    """Base class for all recoverable pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EncodingError(CardCreatorError):
    """Raised when an image cannot be read or encoded."""


class GatewayError(CardCreatorError):
    """Raised when the generative model call fails or returns no text."""

    def __init__(self, message: str, kind: GatewayErrorKind = GatewayErrorKind.NETWORK,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class ParseError(CardCreatorError):
    """Raised when a model reply cannot be turned into entries."""

    def __init__(self, message: str, block: Optional[int] = None):
        super().__init__(message)
        self.block = block


class SubmissionError(CardCreatorError):
    """Raised when the deck could not be delivered through any route."""

    def __init__(self, message: Optional[str] = None,
                 kind: SubmissionErrorKind = SubmissionErrorKind.UNKNOWN,
                 status_code: Optional[int] = None):
        super().__init__(message or SUBMISSION_MESSAGES[kind])
        self.kind = kind
        self.status_code = status_code


class SessionStateError(RuntimeError):
    """Raised when a session operation is called from the wrong state."""
