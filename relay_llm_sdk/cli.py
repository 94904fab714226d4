"""CLI entry point for the relay LLM SDK."""

import argparse
import asyncio
import logging
from typing import Optional

from dotenv import load_dotenv

from .api.client import RelayLLMClient
from .config.endpoints import get_endpoint_url
from .config.settings import ProviderSettings
from .models.conversation_types import ConversationTurn, TurnRole
from .models.generation import GenerationParams, ProviderType, ResponseFragment


async def generate_text(prompt: str, instruction: Optional[str] = None, max_tokens: Optional[int] = None,
                        temperature: Optional[float] = None, stream: bool = False) -> int:
    """Generate text with the configured provider; returns the exit code."""
    params = GenerationParams(max_tokens=max_tokens, temperature=temperature)
    turns = [ConversationTurn(role=TurnRole.USER, content=prompt)]

    async with RelayLLMClient() as client:
        model = client.settings.get_current_model() or "(provider default)"
        if stream:
            print(f"Streaming response from {model}:\n")

            def print_fragment(fragment: ResponseFragment) -> None:
                print(fragment.text, end='', flush=True)

            payload = await client.chat_stream(instruction, turns, print_fragment, params)
            print()  # New line at the end
        else:
            payload = await client.chat(instruction, turns, params)
            if payload is not None and payload.error_message is None:
                print(f"Response from {model}:\n")
                print(payload.response)

    if payload is None:
        print("Error: no response (check the provider configuration)")
        return 1
    if payload.error_message:
        print(f"Error: {payload.error_message}")
        return 1
    print(f"\nTokens used: {payload.token_count}")
    return 0


def list_providers() -> None:
    """List supported providers with their default endpoints."""
    active = ProviderSettings.from_env().get_active_config()

    print("Providers:")
    print("-" * 50)
    for provider in ProviderType:
        marker = "*" if active is not None and active.provider == provider else " "
        print(f"{marker} {provider.value:<12} {get_endpoint_url(provider) or '(base URL required)'}")


def main():
    """Main CLI function."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="Relay LLM SDK CLI")
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Generate command
    generate_parser = subparsers.add_parser('generate', help='Generate text with the configured provider')
    generate_parser.add_argument('prompt', help='Text prompt')
    generate_parser.add_argument('--instruction', help='System instruction')
    generate_parser.add_argument('--max-tokens', type=int, help='Maximum tokens to generate')
    generate_parser.add_argument('--temperature', type=float, help='Temperature (0.0-2.0)')
    generate_parser.add_argument('--stream', action='store_true', help='Stream the response')

    subparsers.add_parser('list-providers', help='List supported providers')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == 'generate':
        raise SystemExit(asyncio.run(generate_text(
            args.prompt,
            args.instruction,
            args.max_tokens,
            args.temperature,
            args.stream
        )))
    elif args.command == 'list-providers':
        list_providers()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
