"""
Example: Streaming with Failover

This example streams an answer from the configured provider, collects the
JSON objects the model emits while it is still talking, and falls back to a
second provider when the first one runs out of quota.

Configure the providers through the environment (or a .env file), e.g.:

    RELAY_PROVIDER=google
    RELAY_MODEL=gemini-2.5-pro
    RELAY_API_KEY=...
    RELAY_FALLBACK_PROVIDER=openrouter
    RELAY_FALLBACK_MODEL=google/gemma-3-27b-it
    RELAY_FALLBACK_API_KEY=...
"""

import asyncio

from relay_llm_sdk import ConversationTurn, GenerationParams, RelayLLMClient, TurnRole
from relay_llm_sdk.reliability import AdvisoryNotifier


class ConsoleNotifier(AdvisoryNotifier):
    """Print advisories the way a chat UI would show a toast."""

    def advise(self, message: str) -> None:
        print(f"\n[info] {message}")

    def warn(self, message: str) -> None:
        print(f"\n[warning] {message}")


async def example_streaming_with_json():
    """Stream a reply and pick up JSON objects as soon as they are complete."""
    print("=== Streaming with JSON objects ===\n")

    instruction = (
        "You are a game master. Reply with one JSON object per character, "
        'shaped like {"name": ..., "line": ...}.'
    )
    turns = [ConversationTurn(role=TurnRole.USER, content="Two guards argue about the weather.")]

    def on_json(value):
        print(f"\n  -> {value.get('name')}: {value.get('line')}")

    async with RelayLLMClient(notifier=ConsoleNotifier()) as client:
        payload = await client.chat_stream(
            instruction,
            turns,
            on_fragment=lambda fragment: print(fragment.text, end='', flush=True),
            params=GenerationParams(temperature=0.8, max_tokens=400),
            on_json=on_json,
        )

    if payload is None:
        print("\nNo provider is configured.")
    elif payload.error_message:
        print(f"\nFailed: {payload.error_message}")
        print(payload.report())
    else:
        print(f"\n\nModel: {payload.model}  Tokens: {payload.token_count}")


async def example_buffered_chat():
    """Wait for the complete answer."""
    print("\n=== Buffered chat ===\n")

    async with RelayLLMClient() as client:
        payload = await client.chat(
            "Answer in one sentence.",
            [ConversationTurn(role=TurnRole.USER, content="What is a haiku?")],
        )

    if payload is not None and payload.error_message is None:
        print(payload.response)


async def main():
    await example_streaming_with_json()
    await example_buffered_chat()


if __name__ == "__main__":
    asyncio.run(main())
