import json
from datetime import date
from typing import Callable, Sequence

import pytest

from storeagent.agent import Agent, AssistantMessage, ModelBackend, ToolCallRequest, Turn
from storeagent.store import load_catalog
from storeagent.tools import ToolDefinition
from storeagent.tools.store_tools import create_store_registry

TODAY = date(2025, 1, 1)


def tool_call(call_id: str, name: str, **arguments) -> ToolCallRequest:
    return ToolCallRequest(
        id=call_id,
        name=name,
        arguments=arguments,
        raw_arguments=json.dumps(arguments),
    )


def reply(content: str | None = None, *tool_calls: ToolCallRequest) -> AssistantMessage:
    return AssistantMessage(content=content, tool_calls=tuple(tool_calls))


class ScriptedBackend(ModelBackend):
    """
    Returns queued replies in order. A queued exception is raised instead.
    With a responder, replies are produced from the round number (1-based).
    """

    def __init__(
        self,
        replies: Sequence[AssistantMessage | Exception] = (),
        responder: Callable[[int], AssistantMessage] | None = None,
    ):
        self.replies = list(replies)
        self.responder = responder
        self.requests: list[tuple[tuple[Turn, ...], tuple[ToolDefinition, ...]]] = []

    async def complete(self, turns, tools):
        self.requests.append((tuple(turns), tuple(tools)))
        if self.responder is not None:
            return self.responder(len(self.requests))
        item = self.replies.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def registry(catalog):
    return create_store_registry(catalog, today=lambda: TODAY)


@pytest.fixture
def make_agent(registry):
    def _make(backend: ModelBackend, **kwargs) -> Agent:
        kwargs.setdefault("system_prompt", "You are a store support agent.")
        return Agent(backend, registry, **kwargs)
    return _make
