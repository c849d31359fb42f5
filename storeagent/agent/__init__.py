"""
Agent System
============

The agent answers a customer by asking the model, running whatever tools
the model requests, feeding the results back, and repeating until the
model gives a final answer.

This module provides:
- Agent: One conversation session with chat() and reset()
- ConversationState: The turn history of a session
- ModelBackend / OpenAIBackend: The model service adapter
- ToolExecutor: Runs a round of tool calls
"""

from storeagent.agent.backend import (
    AssistantMessage,
    BackendError,
    FinalAnswer,
    ModelBackend,
    OpenAIBackend,
    ToolCallsRequested,
)
from storeagent.agent.conversation import ConversationState, ToolCallRequest, Turn
from storeagent.agent.core import (
    Agent,
    AgentState,
    BACKEND_ERROR_MESSAGE,
    ITERATION_LIMIT_MESSAGE,
)
from storeagent.agent.tools_executor import ToolCallResult, ToolExecutor

__all__ = [
    "Agent",
    "AgentState",
    "AssistantMessage",
    "BACKEND_ERROR_MESSAGE",
    "BackendError",
    "ConversationState",
    "FinalAnswer",
    "ITERATION_LIMIT_MESSAGE",
    "ModelBackend",
    "OpenAIBackend",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolCallsRequested",
    "ToolExecutor",
    "Turn",
]
