"""
Tools System
============

Tools are functions the agent can call on its own initiative. The model
picks a tool by name from the manifest, the registry runs it, and the
result goes back into the conversation.

Each tool has:
- a unique name
- a description shown to the model to help it choose
- a JSON Schema for its parameters (type: object, properties, required)
- an async handler taking the argument dict and returning a ToolResult

Dispatch contract:
    dispatch(name, arguments) -> ToolResult

    Never raises. An unregistered name, arguments that do not match the
    schema, a handler raising ToolArgumentError, or any other handler
    failure all come back as ToolResult(success=False, error=...), so the
    model can read the reason and correct itself.

This module provides:
- ToolResult for standardized responses
- ToolDefinition for declaring tools
- ToolArgumentError for handlers rejecting their input
- ToolRegistry for looking up and dispatching tools
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Awaitable
import json

from storeagent.utils.logger import Logger

logger = Logger("Tools")

UNKNOWN_FUNCTION_ERROR = "Unknown function"


class ToolArgumentError(Exception):
    """Raised by a handler when its arguments are invalid or reference a missing entity."""


@dataclass
class ToolResult:
    """
    Standardized result from tool execution.

    Attributes:
        success: Whether the tool executed successfully
        data: Tool-specific payload, merged into the serialized result
        error: Reason if success is False
    """
    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def ok(cls, **payload: Any) -> "ToolResult":
        if "success" in payload:
            raise ValueError("Payload must not contain a 'success' key")
        return cls(success=True, data=payload)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        """
        Flatten into the wire shape:
        {"success": true, ...payload} or {"success": false, "error": "..."}
        """
        if self.success:
            return {**self.data, "success": True}
        return {"success": False, "error": self.error}

    def to_message(self) -> str:
        """Serialize as the content of a tool turn."""
        return json.dumps(self.to_dict(), default=str)


# JSON Schema type name -> accepted Python types
_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


def _matches_type(value: Any, json_type: str | None) -> bool:
    if json_type is None or json_type not in _JSON_TYPES:
        return True
    # bool is a subclass of int, but JSON keeps them apart
    if isinstance(value, bool) and json_type in ("number", "integer"):
        return False
    return isinstance(value, _JSON_TYPES[json_type])


@dataclass(frozen=True)
class ToolDefinition:
    """
    Definition of a callable tool.

    Attributes:
        name: Unique identifier for the tool
        description: What the tool does (shown to the model)
        parameters: JSON Schema for the parameters
        handler: Async function that runs the tool

    Example:
        async def get_order_status(args: dict) -> ToolResult:
            order = catalog.find_order(args["order_id"])
            if order is None:
                return ToolResult.fail("Order not found")
            return ToolResult.ok(order=order.to_dict())

        tool = ToolDefinition(
            name="get_order_status",
            description="Get detailed status of an order",
            parameters={
                "type": "object",
                "properties": {
                    "order_id": {"type": "string", "description": "The order ID"}
                },
                "required": ["order_id"]
            },
            handler=get_order_status
        )
    """
    name: str
    description: str
    parameters: dict
    handler: Callable[[dict], Awaitable[ToolResult]]

    def to_openai_function(self) -> dict:
        """Convert to the OpenAI function-calling tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters
            }
        }

    def validate_arguments(self, arguments: dict) -> str | None:
        """
        Check arguments against the parameter schema.

        Only top-level keys are checked: required keys are present, no
        undeclared keys appear, and each value has the declared JSON type.
        Array item types are checked when the schema declares them.

        Returns:
            A reason string when invalid, None when the arguments are acceptable
        """
        properties: dict = self.parameters.get("properties", {})

        for key in self.parameters.get("required", []):
            if key not in arguments or arguments[key] is None:
                return f"Missing required argument: {key}"

        for key, value in arguments.items():
            if key not in properties:
                return f"Unexpected argument: {key}"
            if value is None:
                continue
            prop = properties[key]
            expected = prop.get("type")
            if not _matches_type(value, expected):
                return f"Invalid type for argument '{key}': expected {expected}"
            if expected == "array" and "items" in prop:
                item_type = prop["items"].get("type")
                if not all(_matches_type(item, item_type) for item in value):
                    return f"Invalid item type in argument '{key}': expected {item_type}"

        return None


class ToolRegistry:
    """
    Registry mapping tool names to their definitions.

    The manifest sent to the model is the registration order, so it stays
    identical for every completion request.

    Example:
        registry = ToolRegistry()
        registry.register(my_tool)

        result = await registry.dispatch("my_tool", {"order_id": "O9001"})
        manifest = registry.definitions()
    """

    def __init__(self, tools: list[ToolDefinition] | None = None):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with this name already exists
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def definitions(self) -> tuple[ToolDefinition, ...]:
        """All registered tools, in registration order."""
        return tuple(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    async def dispatch(self, name: str, arguments: dict) -> ToolResult:
        """
        Run a tool by name.

        Args:
            name: The tool name requested by the model
            arguments: Parsed arguments

        Returns:
            ToolResult from the tool, or a failed ToolResult describing why
            the tool could not run
        """
        logger.info(f"Agent using tool: {name}", {"arguments": arguments})

        tool = self.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return ToolResult.fail(UNKNOWN_FUNCTION_ERROR)

        problem = tool.validate_arguments(arguments)
        if problem:
            logger.warning(f"Rejected arguments for {name}: {problem}")
            return ToolResult.fail(problem)

        try:
            result = await tool.handler(arguments)
        except ToolArgumentError as e:
            return ToolResult.fail(str(e))
        except Exception as e:
            logger.error(f"Tool execution failed: {name}", e)
            return ToolResult.fail(str(e))

        if not isinstance(result, ToolResult):
            logger.error(f"Tool {name} returned {type(result).__name__} instead of ToolResult")
            return ToolResult.fail(f"Tool {name} returned an invalid result")
        return result


__all__ = [
    "ToolArgumentError",
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "UNKNOWN_FUNCTION_ERROR",
]
