"""
Store Agent - Tool-Using Customer Support Assistant
===================================================

A conversational agent that answers e-commerce support questions by letting
a language model decide, turn by turn, whether to answer directly or call
one of the store tools (product search, order tracking, delivery checks,
pricing, returns).

This package provides:
- Agent loop with an iteration cap and user-safe fallbacks
- Conversation state with tool call/result pairing
- OpenAI function-calling backend
- Tool registry and the store tools
"""

__version__ = "1.0.0"
