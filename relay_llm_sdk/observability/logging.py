"""
Structured logging for the relay SDK.

Every record carries ``component=<area>`` plus whatever call fields are known
(``backend``, ``model``, ``attempt``, ``request_id``), so one logical call can
be followed from the failover layer down to the transport.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Optional


class ProviderLogger:
    """Structured logger bound to one SDK component."""

    def __init__(self, component: str):
        """
        Args:
            component: Area of the SDK (e.g., "chat", "http", "failover")
        """
        self.component = component
        self.logger = logging.getLogger(f"relay_llm_sdk.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        fields = [f"component={self.component}"]

        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")

        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, model: Optional[str] = None,
              request_id: Optional[str] = None, **kwargs):
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                self._format_message(message, model=model, request_id=request_id, **kwargs)
            )

    def info(self, message: str, model: Optional[str] = None,
             request_id: Optional[str] = None, **kwargs):
        self.logger.info(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    def warning(self, message: str, model: Optional[str] = None,
                request_id: Optional[str] = None, **kwargs):
        self.logger.warning(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    def error(self, message: str, model: Optional[str] = None,
              request_id: Optional[str] = None, error: Optional[Exception] = None, **kwargs):
        """Log an error; ``error`` adds its type and message as fields."""
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)

        self.logger.error(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    @contextmanager
    def track_request(self, method: str, model: Optional[str], backend: Optional[str] = None,
                      request_id: Optional[str] = None):
        """
        Context manager timing one call against one backend.

        Args:
            method: "complete" or "stream"
            model: Model the call is made with
            backend: Provider the call goes to (e.g., "google", "openrouter")
            request_id: Optional request ID (generated if not provided)

        Yields:
            Dict with request_id, backend, model, method and start_time
        """
        if request_id is None:
            request_id = str(uuid.uuid4())[:8]

        start_time = time.time()

        self.debug(f"Starting {method} request", model=model, request_id=request_id, backend=backend)

        metadata = {
            'request_id': request_id,
            'backend': backend,
            'model': model,
            'method': method,
            'start_time': start_time
        }

        try:
            yield metadata

            self.info(
                f"Completed {method} request",
                model=model,
                request_id=request_id,
                backend=backend,
                duration_ms=int((time.time() - start_time) * 1000)
            )

        except Exception as e:
            self.error(
                f"Failed {method} request",
                model=model,
                request_id=request_id,
                backend=backend,
                duration_ms=int((time.time() - start_time) * 1000),
                error=e
            )
            raise

    def log_usage(self, token_count: int, model: Optional[str], request_id: str,
                  backend: Optional[str] = None, finish_reason: Optional[str] = None):
        """Log the token count a backend reported for one call."""
        self.info(
            "Token usage",
            model=model,
            request_id=request_id,
            backend=backend,
            total_tokens=token_count,
            finish_reason=finish_reason
        )

    def log_streaming_metrics(self, fragments: int, total_chars: int, duration: float,
                              model: Optional[str], request_id: str):
        chars_per_second = total_chars / duration if duration > 0 else 0

        self.debug(
            "Streaming metrics",
            model=model,
            request_id=request_id,
            fragments=fragments,
            total_chars=total_chars,
            duration_ms=int(duration * 1000),
            chars_per_second=int(chars_per_second)
        )

    def log_attempt(self, attempt: int, model: Optional[str], error: Optional[Exception] = None):
        """Log the outcome of one failover attempt (``error`` None means success)."""
        if error is None:
            self.debug("Attempt succeeded", model=model, attempt=attempt)
        else:
            self.warning(
                "Attempt failed",
                model=model,
                attempt=attempt,
                error_type=type(error).__name__,
                error_msg=str(error)
            )
