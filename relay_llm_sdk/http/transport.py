"""
HTTP transport for provider calls.

One ``send`` issues exactly one HTTP request, buffered or streamed, and
reports the outcome as a ``TransportResult``. Low-level failures (timeouts,
connection errors, interrupted bodies) are captured in the result rather than
raised, so the error classifier can tell them apart from HTTP error statuses.
The transport never retries.

While the request is pending the caller waits cooperatively: the request runs
as a task and the transport polls it, checking the call's cancellation token
between polls.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

import httpx

from ..config.constants import (
    CONNECT_TIMEOUT_ENV_VAR,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    POLL_INTERVAL_SECONDS,
    READ_TIMEOUT_ENV_VAR,
)
from ..observability.logging import ProviderLogger
from .cancellation import CallHandle, CancellationToken, register_call, unregister_call

logger = ProviderLogger("http")


class SendMode(str, Enum):
    """How the response body is delivered."""
    BUFFERED = "buffered"
    STREAMING = "streaming"


@dataclass
class TransportResult:
    """Terminal status of one HTTP call."""
    status_code: Optional[int] = None
    body: Optional[bytes] = None
    error: Optional[str] = None
    completed: bool = False
    cancelled: bool = False
    bytes_received: int = 0

    @property
    def is_connection_error(self) -> bool:
        """No HTTP response was received at all."""
        return self.status_code is None and not self.cancelled

    @property
    def is_http_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 400

    @property
    def succeeded(self) -> bool:
        return (
            self.completed
            and not self.cancelled
            and self.status_code is not None
            and not self.is_http_error
            and self.error is None
        )

    @property
    def text(self) -> Optional[str]:
        if self.body is None:
            return None
        return self.body.decode("utf-8", errors="replace")


@dataclass
class _TransferState:
    status_code: Optional[int] = None
    bytes_received: int = 0


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


class Transport:
    """Sends provider requests through a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self._client = client
        self._connect_timeout = (
            connect_timeout if connect_timeout is not None
            else _env_float(CONNECT_TIMEOUT_ENV_VAR, DEFAULT_CONNECT_TIMEOUT)
        )
        self._read_timeout = (
            read_timeout if read_timeout is not None
            else _env_float(READ_TIMEOUT_ENV_VAR, DEFAULT_READ_TIMEOUT)
        )
        self._poll_interval = poll_interval

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(self._read_timeout, connect=self._connect_timeout)
            self._client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        url: str,
        body: Union[str, bytes],
        headers: Optional[Dict[str, str]] = None,
        mode: SendMode = SendMode.BUFFERED,
        on_chunk: Optional[Callable[[bytes], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
        on_handle: Optional[Callable[[CallHandle], None]] = None,
        method: str = "POST",
    ) -> TransportResult:
        """
        Issue one HTTP call.

        Args:
            url: Request URL
            body: Request body (str bodies are UTF-8 encoded)
            headers: Extra request headers; JSON content type is the default
            mode: BUFFERED returns the whole body; STREAMING hands every
                received chunk to ``on_chunk`` as it arrives
            on_chunk: Chunk callback for STREAMING mode
            cancel_token: Token polled while the call is pending
            on_handle: Receives the per-call abort handle before sending
            method: HTTP method

        Returns:
            TransportResult describing the terminal status of the call
        """
        content = body.encode("utf-8") if isinstance(body, str) else body
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        handle = CallHandle(url, cancel_token)
        register_call(handle)
        if on_handle is not None:
            on_handle(handle)

        state = _TransferState()
        task = asyncio.ensure_future(
            self._perform(method, url, content, request_headers, mode, on_chunk, state)
        )
        try:
            while not task.done():
                if handle.aborted:
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass
                    logger.debug("Request cancelled", url=url, reason=handle.token.reason)
                    return TransportResult(
                        status_code=state.status_code,
                        error=handle.token.reason or "cancelled",
                        cancelled=True,
                        bytes_received=state.bytes_received,
                    )
                await asyncio.wait({task}, timeout=self._poll_interval)
            return task.result()
        finally:
            unregister_call(handle)
            handle.release()
            if not task.done():
                task.cancel()

    async def _perform(
        self,
        method: str,
        url: str,
        content: bytes,
        headers: Dict[str, str],
        mode: SendMode,
        on_chunk: Optional[Callable[[bytes], None]],
        state: _TransferState,
    ) -> TransportResult:
        try:
            if mode is SendMode.BUFFERED:
                response = await self.client.request(method, url, content=content, headers=headers)
                state.status_code = response.status_code
                state.bytes_received = len(response.content)
                return TransportResult(
                    status_code=response.status_code,
                    body=response.content,
                    error=None if response.is_success else _status_error(response),
                    completed=True,
                    bytes_received=state.bytes_received,
                )

            async with self.client.stream(method, url, content=content, headers=headers) as response:
                state.status_code = response.status_code
                async for chunk in response.aiter_bytes():
                    if not chunk:
                        continue
                    state.bytes_received += len(chunk)
                    if on_chunk is not None:
                        on_chunk(chunk)
                return TransportResult(
                    status_code=response.status_code,
                    error=None if response.is_success else _status_error(response),
                    completed=True,
                    bytes_received=state.bytes_received,
                )

        except httpx.TimeoutException as e:
            if isinstance(e, httpx.ConnectTimeout) or state.status_code is None:
                message = f"Connection timed out ({self._connect_timeout:g}s)"
            else:
                message = f"Read timed out ({self._read_timeout:g}s)"
            logger.warning(message, url=url)
            return TransportResult(
                status_code=state.status_code,
                error=message,
                bytes_received=state.bytes_received,
            )
        except httpx.HTTPError as e:
            logger.warning("Transport failure", url=url, error_type=type(e).__name__)
            return TransportResult(
                status_code=state.status_code,
                error=str(e) or type(e).__name__,
                bytes_received=state.bytes_received,
            )


def _status_error(response: httpx.Response) -> str:
    return f"HTTP {response.status_code} {response.reason_phrase}".rstrip()
