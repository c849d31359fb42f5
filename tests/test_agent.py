import asyncio
import json

import pytest

from conftest import ScriptedBackend, reply, tool_call
from storeagent.agent import (
    Agent,
    AgentState,
    BACKEND_ERROR_MESSAGE,
    BackendError,
    ITERATION_LIMIT_MESSAGE,
)
from storeagent.tools import ToolDefinition, ToolRegistry, ToolResult


def _assert_tool_turns_paired(turns):
    """Every assistant turn with tool calls is followed by matching tool turns, in order."""
    for index, turn in enumerate(turns):
        if turn.role == "assistant" and turn.tool_calls:
            following = turns[index + 1:index + 1 + len(turn.tool_calls)]
            assert [t.role for t in following] == ["tool"] * len(turn.tool_calls)
            assert [t.tool_call_id for t in following] == [tc.id for tc in turn.tool_calls]


async def test_direct_answer_uses_one_round(make_agent):
    backend = ScriptedBackend([reply("Hello! How can I help?")])
    agent = make_agent(backend)

    answer = await agent.chat("hi")

    assert answer == "Hello! How can I help?"
    assert len(backend.requests) == 1
    assert [t.role for t in agent.history] == ["system", "user", "assistant"]


async def test_search_then_answer(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "search_products", query="accessories", max_price=500)),
        reply("The USB-C Cable costs 299."),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("find accessories under 500")

    assert answer == "The USB-C Cable costs 299."
    assert len(backend.requests) == 2

    roles = [t.role for t in agent.history]
    assert roles == ["system", "user", "assistant", "tool", "assistant"]

    tool_turn = agent.history[3]
    assert tool_turn.tool_call_id == "call_1"
    payload = json.loads(tool_turn.content)
    assert payload["success"] is True
    assert [p["id"] for p in payload["products"]] == ["P1003"]

    # the second request already contains the tool result
    second_turns, _ = backend.requests[1]
    assert second_turns[-1].role == "tool"


async def test_missing_order_is_fed_back_not_raised(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "get_order_status", order_id="O9999")),
        reply("Sorry, I couldn't find order O9999."),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("Where is my order O9999?")

    assert answer == "Sorry, I couldn't find order O9999."
    tool_turn = agent.history[3]
    assert json.loads(tool_turn.content) == {"success": False, "error": "Order not found"}


async def test_unknown_tool_is_reported_to_model(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "cancel_order", order_id="O9001")),
        reply("I can't cancel orders."),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("cancel O9001")

    assert answer == "I can't cancel orders."
    assert json.loads(agent.history[3].content) == {"success": False, "error": "Unknown function"}


async def test_multiple_tool_calls_in_one_round_keep_order(make_agent):
    backend = ScriptedBackend([
        reply(
            "Let me check both.",
            tool_call("a", "get_product_details", product_id="P1001"),
            tool_call("b", "get_order_status", order_id="O9002"),
            tool_call("c", "check_return_eligibility", order_id="O9001"),
        ),
        reply("Done."),
    ])
    agent = make_agent(backend)

    await agent.chat("details please")

    turns = agent.history
    assert [t.tool_call_id for t in turns if t.role == "tool"] == ["a", "b", "c"]
    _assert_tool_turns_paired(turns)


async def test_content_with_tool_calls_does_not_end_loop(make_agent):
    backend = ScriptedBackend([
        reply("Checking your order now.", tool_call("call_1", "get_order_status", order_id="O9002")),
        reply("Your order is delayed due to a warehouse delay."),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("Where is O9002?")

    assert answer == "Your order is delayed due to a warehouse delay."
    assert len(backend.requests) == 2
    assert agent.history[2].content == "Checking your order now."


async def test_iteration_limit(make_agent):
    backend = ScriptedBackend(
        responder=lambda n: reply(None, tool_call(f"call_{n}", "get_product_details", product_id="P1001"))
    )
    agent = make_agent(backend)

    answer = await agent.chat("loop forever")

    assert answer == ITERATION_LIMIT_MESSAGE
    assert len(backend.requests) == 10

    turns = agent.history
    assert sum(1 for t in turns if t.role == "assistant") == 10
    assert sum(1 for t in turns if t.role == "tool") == 10
    _assert_tool_turns_paired(turns)
    assert agent.state is AgentState.AWAITING_USER_INPUT


async def test_custom_iteration_limit(make_agent):
    backend = ScriptedBackend(
        responder=lambda n: reply(None, tool_call(f"call_{n}", "get_product_details", product_id="P1001"))
    )
    agent = make_agent(backend, max_iterations=3)

    assert await agent.chat("again") == ITERATION_LIMIT_MESSAGE
    assert len(backend.requests) == 3


def test_iteration_limit_must_be_positive(registry):
    with pytest.raises(ValueError):
        Agent(ScriptedBackend(), registry, max_iterations=0)


async def test_backend_error_on_first_round(make_agent):
    backend = ScriptedBackend([BackendError("connection refused")])
    agent = make_agent(backend)

    answer = await agent.chat("hello")

    assert answer == BACKEND_ERROR_MESSAGE
    assert [t.role for t in agent.history] == ["system", "user"]


async def test_backend_error_keeps_completed_rounds(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "get_order_status", order_id="O9001")),
        BackendError("OpenAI API Error: overloaded", status_code=503),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("status of O9001")

    assert answer == BACKEND_ERROR_MESSAGE
    assert len(backend.requests) == 2
    # user + round 1 only, no dangling assistant turn from round 2
    assert [t.role for t in agent.history] == ["system", "user", "assistant", "tool"]


async def test_session_continues_after_backend_error(make_agent):
    backend = ScriptedBackend([BackendError("timeout"), reply("Back online.")])
    agent = make_agent(backend)

    await agent.chat("first")
    answer = await agent.chat("second")

    assert answer == "Back online."
    assert [t.role for t in agent.history] == ["system", "user", "user", "assistant"]


async def test_unexpected_backend_exception_returns_apology(make_agent):
    backend = ScriptedBackend([RuntimeError("boom"), reply("Recovered.")])
    agent = make_agent(backend)

    answer = await agent.chat("hello")

    assert answer == BACKEND_ERROR_MESSAGE
    assert [t.role for t in agent.history] == ["system", "user"]
    assert agent.state is AgentState.AWAITING_USER_INPUT

    assert await agent.chat("again") == "Recovered."


async def test_unexpected_exception_keeps_completed_rounds(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "get_order_status", order_id="O9001")),
        RuntimeError("boom"),
    ])
    agent = make_agent(backend)

    assert await agent.chat("status of O9001") == BACKEND_ERROR_MESSAGE
    assert [t.role for t in agent.history] == ["system", "user", "assistant", "tool"]


def _blocking_registry(started: asyncio.Event) -> ToolRegistry:
    async def wait_forever(params: dict) -> ToolResult:
        started.set()
        await asyncio.Event().wait()
        return ToolResult.ok()

    schema = {"type": "object", "properties": {}, "required": []}
    return ToolRegistry([ToolDefinition("wait_forever", "never returns", schema, wait_forever)])


async def test_cancel_during_dispatch_leaves_session_usable():
    started = asyncio.Event()
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "wait_forever")),
        reply("Second answer."),
    ])
    agent = Agent(backend, _blocking_registry(started), system_prompt="s")

    task = asyncio.create_task(agent.chat("first"))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert [t.role for t in agent.history] == ["system", "user"]
    assert agent.state is AgentState.AWAITING_USER_INPUT

    answer = await agent.chat("second")

    assert answer == "Second answer."
    assert [t.role for t in agent.history] == ["system", "user", "user", "assistant"]


async def test_timeout_during_dispatch_leaves_session_usable():
    started = asyncio.Event()
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "wait_forever")),
        reply("Still here."),
    ])
    agent = Agent(backend, _blocking_registry(started), system_prompt="s")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(agent.chat("first"), timeout=0.05)

    assert await agent.chat("second") == "Still here."
    _assert_tool_turns_paired(agent.history)


async def test_handler_returning_wrong_type_is_fed_back_as_failure():
    async def bad_handler(params: dict):
        return {"success": True}

    schema = {"type": "object", "properties": {}, "required": []}
    registry = ToolRegistry([ToolDefinition("bad", "returns a dict", schema, bad_handler)])
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "bad")),
        reply("That tool is broken."),
    ])
    agent = Agent(backend, registry, system_prompt="s")

    answer = await agent.chat("use bad")

    assert answer == "That tool is broken."
    assert json.loads(agent.history[3].content) == {
        "success": False,
        "error": "Tool bad returned an invalid result",
    }


async def test_manifest_identical_on_every_request(make_agent, registry):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "search_products", query="mouse")),
        reply("Found it."),
    ])
    agent = make_agent(backend)

    await agent.chat("mouse?")

    manifests = [tools for _, tools in backend.requests]
    assert manifests[0] == manifests[1] == registry.definitions()


async def test_reset_keeps_only_seed_turn(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("call_1", "search_products", query="lamp")),
        reply("The Desk Lamp is 999."),
    ])
    agent = make_agent(backend, system_prompt="seed prompt")

    await agent.chat("lamp?")
    agent.reset()

    assert len(agent.history) == 1
    assert agent.history[0].role == "system"
    assert agent.history[0].content == "seed prompt"


async def test_default_system_prompt_mentions_date(registry):
    agent = Agent(ScriptedBackend(), registry)
    assert "Current date:" in agent.history[0].content


async def test_parallel_tools_append_in_request_order(catalog):
    async def slow(params: dict) -> ToolResult:
        await asyncio.sleep(0.05)
        return ToolResult.ok(name="slow")

    async def fast(params: dict) -> ToolResult:
        return ToolResult.ok(name="fast")

    schema = {"type": "object", "properties": {}, "required": []}
    registry = ToolRegistry([
        ToolDefinition("slow", "slow tool", schema, slow),
        ToolDefinition("fast", "fast tool", schema, fast),
    ])
    backend = ScriptedBackend([
        reply(None, tool_call("1", "slow"), tool_call("2", "fast")),
        reply("ok"),
    ])
    agent = Agent(backend, registry, system_prompt="s", parallel_tools=True)

    await agent.chat("go")

    tool_turns = [t for t in agent.history if t.role == "tool"]
    assert [t.tool_call_id for t in tool_turns] == ["1", "2"]
    assert [json.loads(t.content)["name"] for t in tool_turns] == ["slow", "fast"]


async def test_multi_step_plan(make_agent):
    backend = ScriptedBackend([
        reply(None, tool_call("s", "search_products", query="electronics", max_price=2000)),
        reply(None, tool_call("d", "check_delivery_time", product_id="P1001", required_date="2025-01-03")),
        reply(None, tool_call("t", "calculate_total_cost", product_ids=["P1001"], quantities=[1])),
        reply("The Wireless Mouse arrives by 2025-01-03 and costs 849 with shipping."),
    ])
    agent = make_agent(backend)

    answer = await agent.chat("something under 2000 that arrives before Jan 3rd")

    assert answer.startswith("The Wireless Mouse")
    assert len(backend.requests) == 4
    total = json.loads(agent.history[-2].content)
    assert total["total"] == 849
    _assert_tool_turns_paired(agent.history)
