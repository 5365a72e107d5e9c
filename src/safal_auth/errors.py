"""
Safal error types: transport/HTTP taxonomy shared by every auth flow.
"""

from enum import Enum
from typing import Any, Optional


class SafalError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class FlowStateError(SafalError):
    """A flow transition was invoked from a state that does not allow it."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("invalid_state", message, details)


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    NO_DATA = "no_data"
    DECODING_ERROR = "decoding_error"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"
    NO_INTERNET = "no_internet"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    UNKNOWN = "unknown"
    CANCELLED = "cancelled"


class NetworkError(SafalError):
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(self.kind.value, message, details)


class InvalidURLError(NetworkError):
    kind = ErrorKind.INVALID_URL

    def __init__(self) -> None:
        super().__init__("Invalid URL")


class NoDataError(NetworkError):
    kind = ErrorKind.NO_DATA

    def __init__(self) -> None:
        super().__init__("No data received")


class DecodingError(NetworkError):
    kind = ErrorKind.DECODING_ERROR

    def __init__(self) -> None:
        super().__init__("Failed to decode response")


class UnauthorizedError(NetworkError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class ServerError(NetworkError):
    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int):
        super().__init__(f"Server error: {status_code}", {"status_code": status_code})
        self.status_code = status_code


class NoInternetError(NetworkError):
    kind = ErrorKind.NO_INTERNET

    def __init__(self) -> None:
        super().__init__("No internet connection")


class InvalidResponseError(NetworkError):
    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self) -> None:
        super().__init__("Invalid response from server")


class ApiError(NetworkError):
    kind = ErrorKind.API_ERROR


class UnknownError(NetworkError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, cause: Any):
        super().__init__(str(cause))
        self.cause = cause


class CancelledRequestError(NetworkError):
    kind = ErrorKind.CANCELLED

    def __init__(self) -> None:
        super().__init__("cancelled")


def describe_error(error: BaseException) -> str:
    """Single user-facing message for any failure raised by a flow."""
    if isinstance(error, SafalError):
        return error.message
    return str(error)
