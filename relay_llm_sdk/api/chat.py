"""
Single-attempt chat client.

Wires one call together: adapter (request building and parsing), transport
(the HTTP exchange), decoder (streamed values) and classifier (typed
failures). No retries happen here; see ``reliability.failover`` for that.
"""

import json
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config.settings import ProviderSettings
from ..http.cancellation import CallHandle, CancellationToken
from ..http.transport import SendMode, Transport
from ..models.generation import GenerationRequest, ResponseFragment
from ..models.payload import Payload
from ..observability.logging import ProviderLogger
from ..providers.base import ProviderAdapter
from ..providers.errors import ParseError, RequestError
from ..providers.factory import create_adapter
from ..reliability.error_classifier import ErrorClassifier
from ..streaming import JsonStreamDecoder

logger = ProviderLogger("chat")


@dataclass
class _PreparedCall:
    adapter: ProviderAdapter
    url: str
    model: Optional[str]
    body: str
    backend: str

    def payload(self, response: Optional[str] = None, token_count: int = 0) -> Payload:
        return Payload(
            url=self.url,
            model=self.model,
            request=self.body,
            response=response,
            token_count=token_count,
        )


@dataclass
class _StreamState:
    parts: List[str]
    token_count: int = 0
    finish_reason: Optional[str] = None
    error: Optional[str] = None
    fragments: int = 0


class ChatClient:
    """
    Makes one chat completion call against the active configuration.

    The configuration is read fresh on every call, so rotation between calls
    takes effect immediately.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        transport: Optional[Transport] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.settings = settings
        self.transport = transport or Transport()
        self.classifier = classifier or ErrorClassifier()

    async def complete(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
        on_handle: Optional[Callable[[CallHandle], None]] = None,
    ) -> Optional[Payload]:
        """
        Wait for the full answer.

        Returns:
            Success Payload, or None if the call was cancelled or no usable
            credential/endpoint is configured

        Raises:
            RequestError: Or one of its subclasses, carrying the Payload
        """
        call = self._prepare(request, stream=False)
        if call is None:
            return None

        with logger.track_request("complete", call.model, call.backend) as meta:
            try:
                return await self._complete(call, cancel_token, on_handle, meta["request_id"])
            except RequestError:
                raise
            except Exception as e:
                raise self._unexpected(call, e) from e

    async def stream(
        self,
        request: GenerationRequest,
        on_fragment: Optional[Callable[[ResponseFragment], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
        on_handle: Optional[Callable[[CallHandle], None]] = None,
    ) -> Optional[Payload]:
        """
        Stream the answer, handing each text fragment to ``on_fragment``.

        Fragments are delivered synchronously, in order, as they are decoded.
        Exceptions raised by ``on_fragment`` abort the call and surface as
        RequestError.

        Returns:
            Success Payload with the concatenated text and the last reported
            token count, or None (cancelled / not configured)

        Raises:
            RequestError: Or one of its subclasses, carrying the Payload
        """
        call = self._prepare(request, stream=True)
        if call is None:
            return None

        with logger.track_request("stream", call.model, call.backend) as meta:
            try:
                return await self._stream(call, on_fragment, cancel_token, on_handle, meta["request_id"])
            except RequestError:
                raise
            except Exception as e:
                raise self._unexpected(call, e) from e

    def _prepare(self, request: GenerationRequest, stream: bool) -> Optional[_PreparedCall]:
        config = self.settings.get_active_config()
        if config is None:
            logger.error("No active provider configuration.")
            return None

        adapter = create_adapter(config)
        model = request.model or config.model
        if not adapter.is_available():
            logger.error("API key is missing.", model=model)
            return None

        url = adapter.endpoint(model, stream)
        if not url:
            logger.error("Endpoint URL is missing.", model=model)
            return None

        if request.model != model:
            request = request.model_copy(update={"model": model})
        body = json.dumps(adapter.build_request(request, stream), ensure_ascii=False)
        logger.debug(f"API request: {url}\n{body}", model=model)
        return _PreparedCall(
            adapter=adapter, url=url, model=model, body=body, backend=adapter.get_provider_name()
        )

    async def _complete(
        self,
        call: _PreparedCall,
        cancel_token: Optional[CancellationToken],
        on_handle: Optional[Callable[[CallHandle], None]],
        request_id: str,
    ) -> Optional[Payload]:
        adapter = call.adapter
        result = await self.transport.send(
            call.url,
            call.body,
            headers=adapter.headers(),
            mode=SendMode.BUFFERED,
            cancel_token=cancel_token,
            on_handle=on_handle,
        )
        if result.cancelled:
            logger.info("Request cancelled", model=call.model, request_id=request_id)
            return None

        text = result.text
        classification = self.classifier.classify_result(result, text, adapter)
        if classification is not None:
            raise self.classifier.to_error(classification, call.payload(response=text))

        logger.debug(f"API response: \n{text}", model=call.model, request_id=request_id)
        try:
            parsed = adapter.parse_full_response(text or "")
        except ParseError as e:
            payload = call.payload(response=text).with_error(e.message)
            logger.error(e.message, model=call.model, request_id=request_id, url=call.url)
            raise ParseError(e.message, payload=payload, status_code=result.status_code) from e

        classification = self.classifier.classify_finish_reason(parsed.finish_reason, adapter)
        if classification is not None:
            payload = call.payload(response=text, token_count=parsed.token_count)
            raise self.classifier.to_error(classification, payload)

        logger.log_usage(parsed.token_count, call.model, request_id, call.backend, parsed.finish_reason)
        # A body arrived, so the text is never None here
        return call.payload(response=parsed.text or "", token_count=parsed.token_count)

    async def _stream(
        self,
        call: _PreparedCall,
        on_fragment: Optional[Callable[[ResponseFragment], None]],
        cancel_token: Optional[CancellationToken],
        on_handle: Optional[Callable[[CallHandle], None]],
        request_id: str,
    ) -> Optional[Payload]:
        adapter = call.adapter
        decoder = JsonStreamDecoder(adapter.stream_framing)
        state = _StreamState(parts=[])
        start_time = time.time()

        def handle_values(values: List) -> None:
            for value in values:
                fragment = adapter.parse_fragment(value)
                if fragment.error:
                    if state.error is None:
                        state.error = fragment.error
                    continue
                if fragment.token_count is not None:
                    state.token_count = fragment.token_count
                if fragment.finish_reason:
                    state.finish_reason = fragment.finish_reason
                if fragment.text:
                    state.parts.append(fragment.text)
                    state.fragments += 1
                    if on_fragment is not None:
                        on_fragment(fragment)

        result = await self.transport.send(
            call.url,
            call.body,
            headers=adapter.headers(),
            mode=SendMode.STREAMING,
            on_chunk=lambda chunk: handle_values(decoder.feed(chunk)),
            cancel_token=cancel_token,
            on_handle=on_handle,
        )
        if result.cancelled:
            logger.info("Request cancelled", model=call.model, request_id=request_id)
            return None
        handle_values(decoder.finish())

        received = decoder.received_text() or None
        classification = self.classifier.classify_result(result, received, adapter)
        if classification is not None:
            raise self.classifier.to_error(classification, call.payload(response=received))

        if state.error is not None:
            classification = self.classifier.classify_stream_error(state.error, adapter)
            payload = call.payload(response=received, token_count=state.token_count)
            raise self.classifier.to_error(classification, payload)

        if decoder.remainder().strip():
            logger.debug(f"Unparsed stream remainder: {decoder.remainder()!r}", model=call.model)

        full_text = "".join(state.parts)
        logger.debug(f"API response: \n{full_text}", model=call.model, request_id=request_id)
        logger.log_streaming_metrics(
            state.fragments, len(full_text), time.time() - start_time, call.model, request_id
        )
        logger.log_usage(state.token_count, call.model, request_id, call.backend, state.finish_reason)
        return call.payload(response=full_text, token_count=state.token_count)

    def _unexpected(self, call: _PreparedCall, error: Exception) -> RequestError:
        message = str(error) or type(error).__name__
        logger.error(
            "Unexpected error during call", model=call.model, backend=call.backend, url=call.url, error=error
        )
        return RequestError(message, payload=call.payload().with_error(message))
