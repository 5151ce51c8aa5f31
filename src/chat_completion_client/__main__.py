"""Entry point for `python -m chat_completion_client`."""

import argparse
import asyncio
import logging
import sys

from .config import settings
from .llm import ChatMessage, CompletionClient, CompletionResult, ConfigError, Role


async def _run(prompt: str, system: str) -> int:
    client = CompletionClient.from_settings(settings)
    conversation = []
    if system:
        conversation.append(ChatMessage(Role.SYSTEM, system))
    conversation.append(ChatMessage(Role.USER, prompt))

    outcomes = []
    try:
        client.complete(conversation, outcomes.append)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        await client.aclose()
        return 2
    await client.aclose()

    outcome = outcomes[0]
    if isinstance(outcome, CompletionResult):
        print(outcome.content)
        return 0
    print(f"Error: {outcome}", file=sys.stderr)
    return 1


def main():
    parser = argparse.ArgumentParser(description="Send one chat completion request.")
    parser.add_argument("prompt")
    parser.add_argument("--system", default="", help="Optional system instruction")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(message)s",
        datefmt="%H:%M:%S",
    )
    sys.exit(asyncio.run(_run(args.prompt, args.system)))


if __name__ == "__main__":
    main()
