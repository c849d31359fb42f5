"""
Model Backend
=============

The agent's only network boundary. A backend takes the full turn history
and the tool manifest and returns exactly one assistant message.

Every failure (connection errors, timeouts, non-success responses and
bodies missing the expected fields) is raised as a single BackendError.
Backends never retry; what to do about a failure is the agent's decision.

Outcome of a reply:
    A reply that requests at least one tool call is ToolCallsRequested,
    even when it also carries text. Only a reply without tool calls is a
    FinalAnswer.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from storeagent.agent.conversation import ToolCallRequest, Turn
from storeagent.tools import ToolDefinition
from storeagent.utils.config import OpenAIConfig
from storeagent.utils.logger import Logger

logger = Logger("Backend")


class BackendError(Exception):
    """
    The model backend could not produce an assistant message.

    Attributes:
        status_code: HTTP status from the provider, when there was a response
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class FinalAnswer:
    text: str


@dataclass(frozen=True)
class ToolCallsRequested:
    tool_calls: tuple[ToolCallRequest, ...]
    content: str | None = None


@dataclass(frozen=True)
class AssistantMessage:
    """One reply from the model: optional text and zero or more tool calls."""
    content: str | None
    tool_calls: tuple[ToolCallRequest, ...] = ()

    @property
    def outcome(self) -> FinalAnswer | ToolCallsRequested:
        if self.tool_calls:
            return ToolCallsRequested(tool_calls=self.tool_calls, content=self.content)
        return FinalAnswer(text=self.content or "")


class ModelBackend(ABC):
    """Protocol adapter between the agent and a chat model service."""

    @abstractmethod
    async def complete(
        self,
        turns: Sequence[Turn],
        tools: Sequence[ToolDefinition]
    ) -> AssistantMessage:
        """
        Request the next assistant message.

        Args:
            turns: Full history, system turn first
            tools: The tool manifest

        Raises:
            BackendError: On any transport, status or format failure
        """


def parse_tool_arguments(raw: str | None) -> dict[str, Any]:
    """
    Parse the model's argument text into a dict.

    Empty text means no arguments.

    Raises:
        BackendError: If the text is not a JSON object
    """
    if raw is None or not raw.strip():
        return {}
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BackendError(f"Malformed tool call arguments: {e}") from e
    if not isinstance(arguments, dict):
        raise BackendError("Malformed tool call arguments: expected a JSON object")
    return arguments


class OpenAIBackend(ModelBackend):
    """
    Chat Completions backend using OpenAI function calling.

    Example:
        backend = OpenAIBackend.from_config(get_config().openai)
        message = await backend.complete(state.turns, registry.definitions())
    """

    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    @classmethod
    def from_config(cls, config: OpenAIConfig) -> "OpenAIBackend":
        client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            max_retries=0,
        )
        logger.info(f"OpenAI backend using model: {config.model}")
        return cls(client, config.model)

    async def complete(
        self,
        turns: Sequence[Turn],
        tools: Sequence[ToolDefinition]
    ) -> AssistantMessage:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": [turn.to_openai_message() for turn in turns],
        }
        if tools:
            request["tools"] = [tool.to_openai_function() for tool in tools]
            request["tool_choice"] = "auto"

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.APITimeoutError as e:
            raise BackendError("OpenAI request timed out") from e
        except openai.APIConnectionError as e:
            raise BackendError(f"Could not reach OpenAI: {e}") from e
        except openai.APIStatusError as e:
            raise BackendError(
                f"OpenAI API Error: {_provider_message(e)}",
                status_code=e.status_code
            ) from e
        except openai.APIError as e:
            raise BackendError(f"OpenAI API Error: {e}") from e

        return self._parse_response(response)

    def _parse_response(self, response: Any) -> AssistantMessage:
        try:
            message = response.choices[0].message
            content = message.content
            raw_calls = message.tool_calls or []
            tool_calls = tuple(
                ToolCallRequest(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=parse_tool_arguments(tc.function.arguments),
                    raw_arguments=tc.function.arguments,
                )
                for tc in raw_calls
            )
        except (AttributeError, IndexError, TypeError) as e:
            raise BackendError(f"Malformed response from OpenAI: {e}") from e

        ids = [tc.id for tc in tool_calls]
        if len(set(ids)) != len(ids):
            raise BackendError(f"Malformed response from OpenAI: duplicate tool call ids {ids}")

        logger.debug(f"Received assistant message with {len(tool_calls)} tool call(s)")
        return AssistantMessage(content=content, tool_calls=tool_calls)


def _provider_message(error: openai.APIStatusError) -> str:
    """Error description supplied by the provider, if any."""
    body = error.body
    if isinstance(body, dict):
        message = body.get("message")
        if not message and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
        if message:
            return str(message)
    return error.message
