"""
Store Agent - Main Entry Point
==============================

Interactive console for the support agent. It:
1. Loads configuration
2. Loads the store knowledge base
3. Registers the store tools
4. Creates the OpenAI backend and one agent session
5. Reads customer messages until 'exit'

Run with:
    python -m storeagent.main

Or after installing:
    storeagent
"""

import asyncio
import sys
from typing import Awaitable, Callable

from storeagent.agent import Agent, OpenAIBackend
from storeagent.store import load_catalog
from storeagent.tools.store_tools import create_store_registry
from storeagent.utils.config import Config, get_config
from storeagent.utils.logger import Logger

main_logger = Logger("Main")

BANNER = """
🤖 STORE SUPPORT AGENT
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
Autonomous reasoning and tool use over the store catalog
Type 'exit' to quit, 'reset' to start a new conversation
"""

EXAMPLE_PROMPTS = [
    "I need something under 2000 rupees for my home office that can arrive before January 3rd",
    "Where is my order O9002?",
    "Can I return order O9001?",
]


def build_agent(config: Config) -> Agent:
    """Wire the catalog, tools and backend into one agent session."""
    catalog = load_catalog(config.store.data_path)
    registry = create_store_registry(catalog)
    backend = OpenAIBackend.from_config(config.openai)

    return Agent(
        backend=backend,
        registry=registry,
        max_iterations=config.agent.max_iterations,
        parallel_tools=config.agent.parallel_tools,
    )


async def _read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def run_console(
    agent: Agent,
    read_line: Callable[[str], Awaitable[str]] = _read_line,
    write: Callable[[str], None] = print
) -> None:
    """
    Run the line-based chat loop until 'exit' or end of input.

    Args:
        agent: The session to talk to
        read_line: Returns the next line typed after the prompt
        write: Prints a line of output
    """
    write(BANNER)
    write("💡 Try asking:")
    for prompt in EXAMPLE_PROMPTS:
        write(f"  - '{prompt}'")
    write("")

    while True:
        try:
            line = await read_line("You: ")
        except EOFError:
            break

        command = line.strip().lower()
        if command == "exit":
            break
        if command == "reset":
            agent.reset()
            write("\n🔄 Conversation reset!\n")
            continue
        if not command:
            continue

        reply = await agent.chat(line)
        write(f"\n🤖 Agent: {reply}\n")

    write("\n👋 Thank you for chatting! Have a great day!")


async def main() -> None:
    try:
        # Loads .env first, so its LOG_LEVEL applies from the first line logged
        config = get_config()
        main_logger.info("Starting store agent...")
        agent = build_agent(config)
    except Exception as e:
        main_logger.error("Failed to start agent", e)
        sys.exit(1)

    await run_console(agent)


def run():
    """Synchronous entry point for the `storeagent` command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
