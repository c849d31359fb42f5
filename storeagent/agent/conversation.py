"""
Conversation State
==================

The ordered history of one session, sent in full with every completion
request.

A session starts with a single system turn. After that it only grows by:
- a user turn per chat() call
- the assistant turn returned by the model
- one tool turn per tool call in that assistant turn, in the same order

reset() truncates back to the seed system turn.

Tool pairing:
    When an assistant turn requests tool calls, their ids become "pending".
    Each tool turn must answer the next pending id. No user or assistant
    turn may be added until every pending id is answered, which is what
    OpenAI's chat protocol requires of the message list.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class ToolCallRequest:
    """
    A tool call requested by the model.

    Attributes:
        id: Correlation token, unique within its assistant turn
        name: Requested tool name
        arguments: Parsed arguments
        raw_arguments: The argument text exactly as the model produced it
    """
    id: str
    name: str
    arguments: dict[str, Any]
    raw_arguments: str | None = None

    def to_openai_tool_call(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": (
                    self.raw_arguments
                    if self.raw_arguments is not None
                    else json.dumps(self.arguments)
                ),
            },
        }


@dataclass(frozen=True)
class Turn:
    """One role-tagged entry in the conversation."""
    role: Role
    content: str | None
    tool_calls: tuple[ToolCallRequest, ...] = ()
    tool_call_id: str | None = None

    def to_openai_message(self) -> dict:
        """Format as a chat completions message dict."""
        message: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_openai_tool_call() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            message["tool_call_id"] = self.tool_call_id
        return message


@dataclass
class ConversationState:
    """
    Append-only turn history for one session.

    Example:
        state = ConversationState.seeded("You are a helpful assistant.")
        state.append_user("Where is my order O9002?")
        state.append_assistant(None, [ToolCallRequest("call_1", "get_order_status", {...})])
        state.append_tool_result("call_1", '{"success": true, ...}')
        state.reset()
        assert len(state) == 1

    A round interrupted before all its tool turns are appended is removed
    with truncate(), so the next user turn can be appended.
    """
    _turns: list[Turn] = field(default_factory=list)
    _pending_tool_calls: list[str] = field(default_factory=list)

    @classmethod
    def seeded(cls, system_prompt: str) -> "ConversationState":
        return cls(_turns=[Turn(role="system", content=system_prompt)])

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def _require_no_pending(self, what: str) -> None:
        if self._pending_tool_calls:
            raise ValueError(
                f"Cannot append {what} turn: tool results pending for "
                f"{', '.join(self._pending_tool_calls)}"
            )

    def append_user(self, content: str) -> Turn:
        self._require_no_pending("user")
        turn = Turn(role="user", content=content)
        self._turns.append(turn)
        return turn

    def append_assistant(
        self,
        content: str | None,
        tool_calls: list[ToolCallRequest] | tuple[ToolCallRequest, ...] = ()
    ) -> Turn:
        """
        Append the model's reply. Its tool call ids become pending.

        Raises:
            ValueError: If tool results are still pending or ids repeat
        """
        self._require_no_pending("assistant")

        ids = [tc.id for tc in tool_calls]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate tool call ids in assistant turn: {ids}")

        turn = Turn(role="assistant", content=content, tool_calls=tuple(tool_calls))
        self._turns.append(turn)
        self._pending_tool_calls = ids
        return turn

    def append_tool_result(self, tool_call_id: str, content: str) -> Turn:
        """
        Append the result of the next pending tool call.

        Raises:
            ValueError: If tool_call_id is not the next pending id
        """
        if not self._pending_tool_calls:
            raise ValueError(f"No tool call pending for result {tool_call_id}")
        expected = self._pending_tool_calls[0]
        if tool_call_id != expected:
            raise ValueError(
                f"Tool result for {tool_call_id} out of order, expected {expected}"
            )

        turn = Turn(role="tool", content=content, tool_call_id=tool_call_id)
        self._turns.append(turn)
        self._pending_tool_calls.pop(0)
        return turn

    def truncate(self, length: int) -> None:
        """
        Drop every turn after the first `length` turns.

        Used to abandon a round that did not finish: cutting back to the
        length before its assistant turn also clears its pending tool calls.

        Raises:
            ValueError: If length would remove the seed system turn
        """
        if length < 1:
            raise ValueError("Cannot truncate away the seed system turn")
        del self._turns[length:]
        self._pending_tool_calls.clear()

    def reset(self) -> None:
        """Keep only the seed system turn."""
        self.truncate(1)
