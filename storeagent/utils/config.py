"""
Configuration Management
========================

All environment variables the agent reads are validated and typed here.
A `.env` file in the working directory (or any parent) is loaded first.

Usage:
    from storeagent.utils.config import get_config

    config = get_config()
    print(config.openai.model)
    print(config.agent.max_iterations)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from storeagent.utils.logger import Logger

logger = Logger("Config")


def _required(name: str) -> str:
    """
    Get a required environment variable.

    Raises:
        ValueError: If the variable is not set
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(
            f"Missing required environment variable: {name}\n"
            f"Please ensure {name} is set in your .env file."
        )
    return value


def _optional(name: str, default: str) -> str:
    return os.getenv(name, default)


def _optional_int(name: str, default: int) -> int:
    """Get an optional integer variable, falling back to default when invalid."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


def _optional_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"{name} is not a valid number, using default: {default}")
        return default


def _optional_bool(name: str, default: bool) -> bool:
    """True if the value is 'true' (case-insensitive)."""
    value = os.getenv(name)
    if not value:
        return default
    return value.lower() == "true"


# ==============================================================================
# Configuration Dataclasses
# ==============================================================================

@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI API configuration."""
    api_key: str            # sk-... API key
    model: str              # Model for chat completions
    base_url: str | None    # Alternative OpenAI-compatible endpoint
    timeout_seconds: float  # Bound on a single completion round-trip


@dataclass(frozen=True)
class AgentConfig:
    """Agent loop configuration."""
    max_iterations: int     # Model round-trips allowed per user message
    parallel_tools: bool    # Dispatch sibling tool calls concurrently


@dataclass(frozen=True)
class StoreConfig:
    """Knowledge base configuration."""
    data_path: Path | None  # JSON file replacing the built-in records


@dataclass(frozen=True)
class Config:
    """
    Root configuration object.

        config = get_config()
        config.openai.api_key
        config.agent.max_iterations
    """
    openai: OpenAIConfig
    agent: AgentConfig
    store: StoreConfig


def load_config() -> Config:
    """
    Load and validate all configuration from environment.

    Raises:
        ValueError: If required configuration is missing
    """
    load_dotenv()

    data_path = os.getenv("STORE_DATA_PATH")
    max_iterations = _optional_int("AGENT_MAX_ITERATIONS", 10)
    if max_iterations < 1:
        logger.warning("AGENT_MAX_ITERATIONS must be at least 1, using default: 10")
        max_iterations = 10

    return Config(
        openai=OpenAIConfig(
            api_key=_required("OPENAI_API_KEY"),
            model=_optional("OPENAI_MODEL", "gpt-4o-mini"),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            timeout_seconds=_optional_float("OPENAI_TIMEOUT_SECONDS", 60.0),
        ),
        agent=AgentConfig(
            max_iterations=max_iterations,
            parallel_tools=_optional_bool("AGENT_PARALLEL_TOOLS", False),
        ),
        store=StoreConfig(
            data_path=Path(data_path) if data_path else None,
        ),
    )


# ==============================================================================
# Singleton
# ==============================================================================

_config_instance: Config | None = None


def get_config() -> Config:
    """
    Get the cached configuration, loading it on first access.

    Returns:
        Config: The application configuration
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
