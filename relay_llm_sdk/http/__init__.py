"""HTTP transport layer with cooperative cancellation."""

from .cancellation import CallHandle, CancellationToken, abort_current_request
from .transport import SendMode, Transport, TransportResult

__all__ = [
    "CallHandle",
    "CancellationToken",
    "abort_current_request",
    "SendMode",
    "Transport",
    "TransportResult",
]
