"""
Error classification for provider calls.

Turns the terminal status of a call (transport result, finish reason, or an
error object reported inside a stream) into one of the typed failures of
``providers.errors``. Precedence is fixed:

1. HTTP 429 -> QuotaError
2. HTTP 503 -> QuotaError
3. Any other transport or HTTP failure -> RequestError (TransportError when
   no HTTP response was received at all)
4. Truncation at max length on a successful non-streaming call -> QuotaError

Messages come from the provider's error body when one can be parsed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Type

from ..config.constants import MAX_TOKENS_MESSAGE, MODEL_OVERLOADED_MESSAGE, QUOTA_EXCEEDED_MESSAGE
from ..http.transport import TransportResult
from ..models.payload import Payload
from ..observability.logging import ProviderLogger
from ..providers.base import ProviderAdapter
from ..providers.errors import QuotaError, RequestError, TransportError


class ErrorCategory(Enum):
    """Why a call failed."""
    RATE_LIMIT = "rate_limit"
    OVERLOADED = "overloaded"
    TRUNCATED = "truncated"
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_ERROR = "http_error"
    STREAM_ERROR = "stream_error"


@dataclass
class ErrorClassification:
    """Outcome of classifying a failed call."""
    category: ErrorCategory
    error_type: Type[RequestError]
    message: str
    status_code: Optional[int] = None

    @property
    def is_quota(self) -> bool:
        return issubclass(self.error_type, QuotaError)


class ErrorClassifier:
    """Classifies call outcomes and builds the matching typed errors."""

    def __init__(self, logger: Optional[ProviderLogger] = None):
        self.logger = logger or ProviderLogger("classifier")

    def classify_result(
        self,
        result: TransportResult,
        response_text: Optional[str],
        adapter: ProviderAdapter,
    ) -> Optional[ErrorClassification]:
        """
        Classify the transport outcome of a call.

        Args:
            result: Terminal status from the transport
            response_text: Body text; for streaming calls everything received
            adapter: Adapter of the call, used to read the error body

        Returns:
            ErrorClassification, or None if the transfer succeeded
        """
        status = result.status_code

        if status == 429:
            message = adapter.extract_error_message(response_text) or QUOTA_EXCEEDED_MESSAGE
            return ErrorClassification(ErrorCategory.RATE_LIMIT, QuotaError, message, status)

        if status == 503:
            message = adapter.extract_error_message(response_text) or MODEL_OVERLOADED_MESSAGE
            return ErrorClassification(ErrorCategory.OVERLOADED, QuotaError, message, status)

        if result.succeeded:
            return None

        message = (
            adapter.extract_error_message(response_text)
            or f"Request failed: {status or 0} - {result.error or 'unknown error'}"
        )
        if result.is_connection_error:
            timed_out = bool(result.error) and "timed out" in result.error
            category = ErrorCategory.TIMEOUT if timed_out else ErrorCategory.NETWORK
            return ErrorClassification(category, TransportError, message, status)
        return ErrorClassification(ErrorCategory.HTTP_ERROR, RequestError, message, status)

    def classify_finish_reason(
        self,
        finish_reason: Optional[str],
        adapter: ProviderAdapter,
    ) -> Optional[ErrorClassification]:
        """Truncation at max length counts as a quota condition."""
        if adapter.is_truncated(finish_reason):
            return ErrorClassification(ErrorCategory.TRUNCATED, QuotaError, MAX_TOKENS_MESSAGE)
        return None

    def classify_stream_error(self, message: str, adapter: ProviderAdapter) -> ErrorClassification:
        """Classify an error object reported inside an otherwise successful stream."""
        if adapter.is_quota_message(message):
            return ErrorClassification(ErrorCategory.RATE_LIMIT, QuotaError, message)
        return ErrorClassification(ErrorCategory.STREAM_ERROR, RequestError, message)

    def to_error(self, classification: ErrorClassification, payload: Payload) -> RequestError:
        """
        Build the typed error for a classification and log the failed exchange.

        Returns:
            The error, carrying ``payload`` amended with the message
        """
        payload = payload.with_error(classification.message)
        self.logger.error(
            classification.message,
            model=payload.model,
            url=payload.url,
            category=classification.category.value,
            status=classification.status_code,
        )
        self.logger.debug(payload.report())
        return classification.error_type(
            classification.message,
            payload=payload,
            status_code=classification.status_code,
        )
