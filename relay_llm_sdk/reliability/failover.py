"""
Failover orchestration for one logical call.

Policy: one initial attempt plus at most one retry, and only when the
configuration can switch to a genuinely different candidate (the fallback
model in simple mode, the next enabled cloud configuration otherwise).
Each attempt is bounded by an overall timeout; a timeout is terminal.

Terminal failures produce exactly one warning: the quota warning (at most once
per process until ``reset_quota_warning()``) or the generic generation-failed
warning (every time). Warnings are advisory only; the caller gets None.
"""

import asyncio
import threading
from typing import Awaitable, Callable, Optional, TypeVar

from ..config.constants import (
    API_ERROR_ADVISORY,
    GENERATION_FAILED_WARNING,
    OVERALL_TIMEOUT_SECONDS,
    QUOTA_EXCEEDED_WARNING,
    QUOTA_REACHED_ADVISORY,
    TRYING_NEXT_ADVISORY,
)
from ..config.settings import ProviderSettings
from ..http.cancellation import CancellationToken
from ..observability.logging import ProviderLogger
from ..providers.errors import QuotaError
from .advisories import AdvisoryNotifier, LoggingNotifier

T = TypeVar("T")

logger = ProviderLogger("failover")

_quota_warning_shown = False
_quota_warning_lock = threading.Lock()


def reset_quota_warning() -> None:
    """Allow the quota warning to be shown again (e.g. for a new session)."""
    global _quota_warning_shown
    with _quota_warning_lock:
        _quota_warning_shown = False


def _claim_quota_warning() -> bool:
    global _quota_warning_shown
    with _quota_warning_lock:
        if _quota_warning_shown:
            return False
        _quota_warning_shown = True
        return True


class FailoverOrchestrator:
    """Runs an operation with the one-retry failover policy."""

    def __init__(
        self,
        settings: ProviderSettings,
        notifier: Optional[AdvisoryNotifier] = None,
        overall_timeout: float = OVERALL_TIMEOUT_SECONDS,
    ):
        self.settings = settings
        self.notifier = notifier or LoggingNotifier()
        self.overall_timeout = overall_timeout

    async def execute(
        self,
        operation: Callable[[], Awaitable[Optional[T]]],
        on_failure: Optional[Callable[[Exception], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        """
        Run ``operation`` and retry it once against the next candidate.

        ``operation`` is called again for the retry, so it must read the
        active configuration when it runs.

        Args:
            operation: Zero-argument coroutine function making one attempt
            on_failure: Receives the terminal error
            cancel_token: Checked before each attempt; once cancelled the call
                returns None without advisories

        Returns:
            The operation's result, or None on terminal failure or cancellation
        """
        if self._cancelled(cancel_token):
            return None

        try:
            return await self._attempt(operation, "Operation", 1)
        except asyncio.TimeoutError as e:
            self._fail(e, e, on_failure)
            return None
        except Exception as e:
            first_error = e

        if self._cancelled(cancel_token):
            return None

        if not self.settings.advance_for_retry():
            self._fail(first_error, first_error, on_failure)
            return None

        next_model = self.settings.get_current_model()
        logger.info("Retrying with next candidate", model=next_model, error_type=type(first_error).__name__)
        if not self.settings.use_simple_config:
            self._advise_retry(first_error, next_model)

        try:
            return await self._attempt(operation, "Retry operation", 2)
        except asyncio.TimeoutError as e:
            self._fail(e, e, on_failure)
            return None
        except Exception as retry_error:
            # Warning wording follows the error that triggered the failover
            self._fail(first_error, retry_error, on_failure)
            return None

    async def _attempt(
        self, operation: Callable[[], Awaitable[Optional[T]]], label: str, attempt: int
    ) -> Optional[T]:
        model = self.settings.get_current_model()
        try:
            result = await asyncio.wait_for(operation(), timeout=self.overall_timeout)
        except asyncio.TimeoutError:
            error = asyncio.TimeoutError(f"{label} exceeded overall timeout of {self.overall_timeout:g}s")
            logger.log_attempt(attempt, model, error)
            raise error from None
        except Exception as e:
            logger.log_attempt(attempt, model, e)
            raise
        logger.log_attempt(attempt, model)
        return result

    def _cancelled(self, cancel_token: Optional[CancellationToken]) -> bool:
        if cancel_token is not None and cancel_token.cancelled:
            logger.info("Call cancelled before attempt", reason=cancel_token.reason)
            return True
        return False

    def _advise_retry(self, error: Exception, next_model: str) -> None:
        prefix = QUOTA_REACHED_ADVISORY if isinstance(error, QuotaError) else API_ERROR_ADVISORY
        self.notifier.advise(f"{prefix}. {TRYING_NEXT_ADVISORY.format(model=next_model)}")

    def _fail(
        self,
        warning_error: Exception,
        terminal_error: Exception,
        on_failure: Optional[Callable[[Exception], None]],
    ) -> None:
        if isinstance(warning_error, QuotaError):
            if _claim_quota_warning():
                logger.warning(str(warning_error))
                self.notifier.warn(QUOTA_EXCEEDED_WARNING)
        else:
            logger.error("Generation failed", error=warning_error)
            self.notifier.warn(GENERATION_FAILED_WARNING.format(error=warning_error))

        if on_failure is not None:
            on_failure(terminal_error)
