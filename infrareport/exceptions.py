"""Exception classes for report generation.

Contains all exception classes raised while producing a report:
- ReportError: Base exception for report generation errors
- ValidationError: Missing image or description
- ConversionError: The uploaded image could not be transcoded
- ConfigurationError: Missing or invalid API key / settings
- RateLimitError: The local request window is full
- QuotaExceededError: The upstream service reported quota exhaustion
- AccessDeniedError: The API key lacks permission (HTTP 403)
- UpstreamFormatError: The upstream response is missing expected fields
- UpstreamError: Any other non-2xx upstream response
- NetworkError: Transport failure before a response was received
- RunInProgressError: A report run is already active
"""

from typing import Optional


class ReportError(Exception):
    """Base exception for report generation errors."""

    pass


class ValidationError(ReportError):
    """Raised when the user input is incomplete."""

    pass


class ConversionError(ReportError):
    """Raised when the uploaded image cannot be decoded or re-encoded."""

    pass


class ConfigurationError(ReportError):
    """Raised when the API key or settings are missing or invalid."""

    pass


# Backward compatibility alias used by the provider layer
MissingAPIKeyError = ConfigurationError


class RateLimitError(ReportError):
    """Raised when the local sliding window does not admit another request."""

    def __init__(self, message: str, wait_seconds: float = 0.0):
        super().__init__(message)
        self.wait_seconds = wait_seconds


class QuotaExceededError(ReportError):
    """Raised when the upstream service reports quota exhaustion (HTTP 429)."""

    def __init__(self, message: str, status_code: Optional[int] = 429):
        super().__init__(message)
        self.status_code = status_code


class AccessDeniedError(ReportError):
    """Raised when the API key is rejected (HTTP 403)."""

    pass


class UpstreamFormatError(ReportError):
    """Raised when the upstream response is missing expected fields."""

    pass


class UpstreamError(ReportError):
    """Raised for any other non-2xx response from the upstream service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ReportError):
    """Raised when the transport fails before a response is received."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RunInProgressError(ReportError):
    """Raised when a new run is requested while another one is active."""

    pass
