"""
Typed failures raised by provider calls.

Every error that reaches a caller carries the Payload of the exchange that
failed, so the caller can log or display the full request/response context.

Hierarchy:
    RequestError            HTTP failure with a best-effort message (base kind)
    ├── TransportError      no HTTP response was received at all
    ├── QuotaError          rate limit, overload, or truncation at max length
    └── ParseError          the response did not have the expected shape
"""

from typing import Optional

from ..models.payload import Payload


class RequestError(Exception):
    """
    Base exception for failed provider calls.

    Attributes:
        message: Human readable message (from the provider body when possible)
        payload: Snapshot of the failed exchange
        status_code: HTTP status code if a response was received
    """

    def __init__(
        self,
        message: str,
        payload: Optional[Payload] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.status_code = status_code


class TransportError(RequestError):
    """The request produced no interpretable response."""


class QuotaError(RequestError):
    """Rate limit, overload, or truncation-as-quota condition."""


class ParseError(RequestError):
    """The provider response had an unexpected shape."""
