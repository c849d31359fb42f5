"""
Agent Core
==========

The agent loop for one customer session.

Agent Loop:
    User Message
         │
         ▼
    Append user turn
         │
         ▼
    Model request with full history + tool manifest  ◄──┐
         │                                             │
         ▼                                             │
    Append assistant turn                              │
         │                                             │
    ┌─── Has Tool Calls? ───┐                          │
    │                       │                          │
    Yes                     No                         │
    │                       │                          │
    ▼                       ▼                          │
    Dispatch each tool  Return content                 │
    Append tool turns                                  │
    │                                                  │
    └──────────────────────────────────────────────────┘

The loop stops after max_iterations model requests without a final
answer, and stops immediately when a round fails (a BackendError or any
other exception). Neither case raises: chat() always returns text the
customer can read.

A failed or cancelled round is rolled back: its assistant turn and any of
its tool turns are removed, while the user turn and earlier completed
rounds stay. The session remains usable for the next chat() call.

A tool failure (unknown tool, bad arguments, missing order) is not an
error here. It is appended as a tool turn like any other result and the
model decides what to say about it.

One Agent is one session. It must not be driven by two callers at once.
"""

import asyncio
from enum import Enum

from storeagent.agent.backend import BackendError, FinalAnswer, ModelBackend
from storeagent.agent.context import build_system_prompt
from storeagent.agent.conversation import ConversationState, Turn
from storeagent.agent.tools_executor import ToolExecutor
from storeagent.tools import ToolRegistry
from storeagent.utils.logger import Logger

logger = Logger("Agent")

BACKEND_ERROR_MESSAGE = (
    "I apologize, but I encountered an error processing your request. "
    "Please try again."
)
ITERATION_LIMIT_MESSAGE = (
    "I apologize, but I've reached my processing limit. "
    "Could you please rephrase your question?"
)


class AgentState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    REQUESTING_COMPLETION = "requesting_completion"
    DISPATCHING_TOOLS = "dispatching_tools"
    RETURNING_ANSWER = "returning_answer"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"


class Agent:
    """
    A tool-using support agent bound to one conversation.

    Example:
        agent = Agent(backend, registry)

        reply = await agent.chat("Where is my order O9002?")
        print(reply)

        agent.reset()  # start a new conversation
    """

    # Maximum model round-trips per user message
    MAX_TOOL_ITERATIONS = 10

    def __init__(
        self,
        backend: ModelBackend,
        registry: ToolRegistry,
        system_prompt: str | None = None,
        max_iterations: int = MAX_TOOL_ITERATIONS,
        parallel_tools: bool = False
    ):
        """
        Args:
            backend: Model backend used for every completion
            registry: Tools the model may call
            system_prompt: Seed system turn, defaults to the store prompt
            max_iterations: Model round-trips allowed per chat() call
            parallel_tools: Dispatch sibling tool calls concurrently
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.backend = backend
        self.registry = registry
        self.max_iterations = max_iterations
        self.tool_executor = ToolExecutor(registry, parallel=parallel_tools)
        self.conversation = ConversationState.seeded(
            system_prompt if system_prompt is not None else build_system_prompt()
        )
        self.state = AgentState.AWAITING_USER_INPUT

        # The manifest is fixed for the session so every request echoes it
        self._manifest = registry.definitions()

    @property
    def history(self) -> tuple[Turn, ...]:
        return self.conversation.turns

    async def chat(self, user_message: str) -> str:
        """
        Answer one user message, calling tools as the model asks.

        Args:
            user_message: The customer's message

        Returns:
            The model's final answer, or a fixed fallback message when a
            round fails or the iteration limit is reached
        """
        logger.info(f"Processing message: {user_message[:50]}")

        self.conversation.append_user(user_message)

        try:
            iterations = 0
            while iterations < self.max_iterations:
                iterations += 1
                logger.debug(f"Iteration {iterations}")

                round_start = len(self.conversation)
                try:
                    answer = await self._run_round()
                except BackendError as e:
                    logger.error("Model backend failed", e)
                    self.conversation.truncate(round_start)
                    return BACKEND_ERROR_MESSAGE
                except asyncio.CancelledError:
                    logger.warning("Request cancelled, abandoning the current round")
                    self.conversation.truncate(round_start)
                    raise
                except Exception as e:
                    logger.error("Unexpected error while processing message", e)
                    self.conversation.truncate(round_start)
                    return BACKEND_ERROR_MESSAGE

                if answer is not None:
                    logger.info(
                        f"Generated response ({len(answer)} chars) "
                        f"after {iterations} iteration(s)"
                    )
                    return answer

            self.state = AgentState.ITERATION_LIMIT_REACHED
            logger.warning(f"Reached max tool iterations ({self.max_iterations})")
            return ITERATION_LIMIT_MESSAGE
        finally:
            self.state = AgentState.AWAITING_USER_INPUT

    async def _run_round(self) -> str | None:
        """
        One model request plus the tool calls it asks for.

        Returns:
            The final answer, or None when tool results were appended and
            the model must be asked again
        """
        self.state = AgentState.REQUESTING_COMPLETION
        message = await self.backend.complete(self.conversation.turns, self._manifest)

        self.conversation.append_assistant(message.content, message.tool_calls)

        outcome = message.outcome
        if isinstance(outcome, FinalAnswer):
            self.state = AgentState.RETURNING_ANSWER
            return outcome.text

        self.state = AgentState.DISPATCHING_TOOLS
        results = await self.tool_executor.execute_all(outcome.tool_calls)
        for result in results:
            self.conversation.append_tool_result(result.tool_call_id, result.to_message())
        return None

    def reset(self) -> None:
        """Discard everything after the seed system turn."""
        self.conversation.reset()
        logger.info("Conversation reset")
