"""
Tool Executor
=============

Runs the tool calls from one assistant turn through the registry.

Tool Execution Round:
    1. The model returns an assistant message with tool calls
    2. The executor dispatches each call by name
    3. Each result is paired with the id of the call that produced it
    4. The agent appends the results as tool turns, in request order

Calls run one after another by default. With parallel=True sibling calls
run concurrently; results still come back in request order.
"""

import asyncio
from dataclasses import dataclass
from typing import Sequence

from storeagent.agent.conversation import ToolCallRequest
from storeagent.tools import ToolRegistry, ToolResult
from storeagent.utils.logger import Logger

logger = Logger("ToolExecutor")


@dataclass(frozen=True)
class ToolCallResult:
    """
    Result of executing a tool call.

    Attributes:
        tool_call_id: The original tool call ID
        name: The tool name
        result: The tool result
    """
    tool_call_id: str
    name: str
    result: ToolResult

    def to_message(self) -> str:
        return self.result.to_message()


class ToolExecutor:
    """
    Dispatches tool calls and collects their results.

    Example:
        executor = ToolExecutor(registry)
        results = await executor.execute_all(message.tool_calls)
        for r in results:
            state.append_tool_result(r.tool_call_id, r.to_message())
    """

    def __init__(self, registry: ToolRegistry, parallel: bool = False):
        self.registry = registry
        self.parallel = parallel

    async def execute_one(self, tool_call: ToolCallRequest) -> ToolCallResult:
        result = await self.registry.dispatch(tool_call.name, tool_call.arguments)

        if result.success:
            logger.debug(f"Tool {tool_call.name} succeeded")
        else:
            logger.warning(f"Tool {tool_call.name} failed: {result.error}")

        return ToolCallResult(
            tool_call_id=tool_call.id,
            name=tool_call.name,
            result=result
        )

    async def execute_all(self, tool_calls: Sequence[ToolCallRequest]) -> list[ToolCallResult]:
        """
        Execute every tool call of a round.

        Returns:
            ToolCallResults in the same order as tool_calls
        """
        if self.parallel and len(tool_calls) > 1:
            return await self.execute_parallel(tool_calls)

        results = []
        for tool_call in tool_calls:
            results.append(await self.execute_one(tool_call))
        return results

    async def execute_parallel(self, tool_calls: Sequence[ToolCallRequest]) -> list[ToolCallResult]:
        """Execute tool calls concurrently, returning results in input order."""
        logger.debug(f"Dispatching {len(tool_calls)} tool calls concurrently")
        results = await asyncio.gather(*(self.execute_one(tc) for tc in tool_calls))
        return list(results)
