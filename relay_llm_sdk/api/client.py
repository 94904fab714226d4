"""Main client interface for the relay LLM SDK."""

from typing import Any, Callable, Dict, List, Optional

from ..config.constants import OVERALL_TIMEOUT_SECONDS
from ..config.settings import ProviderSettings
from ..http.cancellation import CancellationToken
from ..http.transport import Transport
from ..models.conversation_types import ConversationTurn
from ..models.generation import GenerationParams, GenerationRequest, ResponseFragment
from ..models.payload import Payload
from ..providers.errors import RequestError
from ..reliability.advisories import AdvisoryNotifier
from ..reliability.failover import FailoverOrchestrator, reset_quota_warning
from ..streaming import JsonStreamDecoder
from .chat import ChatClient


class RelayLLMClient:
    """High-level client: one chat call with failover to the next candidate."""

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        transport: Optional[Transport] = None,
        notifier: Optional[AdvisoryNotifier] = None,
        overall_timeout: float = OVERALL_TIMEOUT_SECONDS,
    ):
        """
        Initialize the client.

        Args:
            settings: Provider configuration; read from the environment if omitted
            transport: Optional transport (e.g. one wrapping a mocked httpx client)
            notifier: Receives advisories; they are logged if omitted
            overall_timeout: Upper bound in seconds for each attempt
        """
        self.settings = settings or ProviderSettings.from_env()
        self.chat_client = ChatClient(self.settings, transport)
        self.orchestrator = FailoverOrchestrator(self.settings, notifier, overall_timeout)

    async def chat(
        self,
        instruction: Optional[str],
        turns: List[ConversationTurn],
        params: Optional[GenerationParams] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Payload]:
        """
        Get a complete answer.

        Returns:
            The success Payload, the Payload of the terminal failure (with
            ``error_message`` set), or None if the call was cancelled or
            nothing is configured
        """
        request = _build_request(instruction, turns, params)

        async def attempt() -> Optional[Payload]:
            return await self.chat_client.complete(request, cancel_token)

        return await self._run(attempt, cancel_token)

    async def chat_stream(
        self,
        instruction: Optional[str],
        turns: List[ConversationTurn],
        on_fragment: Optional[Callable[[ResponseFragment], None]] = None,
        params: Optional[GenerationParams] = None,
        on_json: Optional[Callable[[Dict[str, Any]], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Payload]:
        """
        Stream an answer.

        Args:
            instruction: System instruction
            turns: Conversation so far
            on_fragment: Receives each text fragment as it arrives
            params: Generation options
            on_json: Receives every complete JSON object found in the
                generated text, as soon as it is complete
            cancel_token: Cancels the call cooperatively

        Returns:
            Same as ``chat``
        """
        request = _build_request(instruction, turns, params)

        async def attempt() -> Optional[Payload]:
            # A retry starts over with fresh text
            objects = JsonStreamDecoder("raw") if on_json is not None else None

            def handle(fragment: ResponseFragment) -> None:
                if on_fragment is not None:
                    on_fragment(fragment)
                if objects is not None:
                    for value in objects.feed(fragment.text):
                        on_json(value)

            return await self.chat_client.stream(request, handle, cancel_token)

        return await self._run(attempt, cancel_token)

    def reset_session(self) -> None:
        """Start over: show the quota warning again and go back to the first candidate."""
        reset_quota_warning()
        self.settings.reset_rotation()

    async def aclose(self) -> None:
        await self.chat_client.transport.aclose()

    async def __aenter__(self) -> "RelayLLMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _run(self, operation, cancel_token: Optional[CancellationToken]) -> Optional[Payload]:
        failures: List[Exception] = []
        payload = await self.orchestrator.execute(
            operation, on_failure=failures.append, cancel_token=cancel_token
        )
        if payload is not None or not failures:
            return payload

        # Rebuild a payload from the terminal error
        error = failures[-1]
        if isinstance(error, RequestError) and error.payload is not None:
            return error.payload
        return Payload(url="Unknown", model="Unknown", error_message=str(error) or "Unknown Error")


def _build_request(
    instruction: Optional[str],
    turns: List[ConversationTurn],
    params: Optional[GenerationParams],
) -> GenerationRequest:
    # The model stays unset so every attempt uses the then-active configuration
    return GenerationRequest(
        instruction=instruction,
        turns=list(turns),
        params=params or GenerationParams(),
    )
