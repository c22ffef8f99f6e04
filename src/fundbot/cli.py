"""
Interactive command-line loop for fundbot.

Each line is passed through the TurnOrchestrator and the reply is printed.
`exit` or `quit` ends the session.
"""

import asyncio
import sys
from typing import Callable

from .agent.orchestrator import TurnOrchestrator
from .app import EXAMPLE_QUERIES, build_orchestrator
from .config import load_settings
from .logging_config import get_logger, setup_logging

logger = get_logger("fundbot.app")

PROMPT = "\nYou: "
EXIT_COMMANDS = {"exit", "quit"}


def print_banner(output: Callable[[str], None] = print) -> None:
    output("=" * 60)
    output("Fundbot - ask about clients, AUM and transactions")
    output("Examples:")
    for example in EXAMPLE_QUERIES:
        output(f"  - {example}")
    output("Type 'exit' or 'quit' to leave.")
    output("=" * 60)


async def run_cli(
    orchestrator: TurnOrchestrator,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
) -> None:
    """Read-eval-print loop; returns only through sys.exit."""
    print_banner(output)
    while True:
        try:
            line = input_fn(PROMPT)
        except (EOFError, KeyboardInterrupt):
            output("\nGoodbye!")
            sys.exit(0)

        query = line.strip()
        if query.lower() in EXIT_COMMANDS:
            output("Goodbye!")
            sys.exit(0)
        if not query:
            output("Please enter a question.")
            continue

        try:
            reply = await orchestrator.handle_turn(query)
        except Exception as e:
            logger.exception("CLI turn failed: %s", e)
            output(f"Error: {e}")
            continue
        output(f"\nBot: {reply}")


def main() -> None:
    setup_logging()
    settings = load_settings()
    orchestrator = build_orchestrator(settings)
    asyncio.run(run_cli(orchestrator))


if __name__ == "__main__":
    main()
