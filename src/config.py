"""
src/config.py

Process configuration for the agent: gateway endpoint, model, generation
parameters and loop guards. Values are resolved once (see `from_env`) and
passed into the orchestrator; nothing in the core reads the environment.
"""


import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolChoice(str, Enum):

    AUTO = "auto"
    FORCED = "forced"
    NONE = "none"


# Defaults
DEFAULT_BASE_URL: str = "http://localhost:12434/engines/llama.cpp/v1"   # Docker Model Runner
DEFAULT_MODEL: str = "ai/lucy:Q8_0"
DEFAULT_TEMPERATURE: float = 0.0
DEFAULT_TIMEOUT: float = 120.0
DEFAULT_MAX_ITERATIONS: int = 10
DEFAULT_LOG_LEVEL: str = "INFO"


class GatewaySettings(BaseModel):
    """Everything the completion gateway needs to reach the model."""

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 0        # SDK-level retries; the loop itself never retries

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":

        env = os.environ if environ is None else environ

        return cls(
            base_url=env.get("MODEL_RUNNER_BASE_URL") or DEFAULT_BASE_URL,
            model=env.get("MODEL_RUNNER_MODEL") or DEFAULT_MODEL,
            api_key=env.get("MODEL_RUNNER_API_KEY", ""),
        )


class AgentSettings(BaseModel):
    """Generation parameters and loop guards for one agent."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0)
    parallel_tool_calls: Optional[bool] = None
    tool_choice: ToolChoice = ToolChoice.AUTO
    forced_tool: Optional[str] = None
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    deadline_seconds: Optional[float] = Field(default=None, gt=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentSettings":

        env = os.environ if environ is None else environ
        values = {}

        if env.get("AGENT_MAX_ITERATIONS"):
            values["max_iterations"] = int(env["AGENT_MAX_ITERATIONS"])
        if env.get("AGENT_DEADLINE_SECONDS"):
            values["deadline_seconds"] = float(env["AGENT_DEADLINE_SECONDS"])
        if env.get("AGENT_TEMPERATURE"):
            values["temperature"] = float(env["AGENT_TEMPERATURE"])

        return cls(**values)


def log_level(environ: Optional[Mapping[str, str]] = None) -> str:

    env = os.environ if environ is None else environ

    return (env.get("AGENT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


def format_duration(seconds: float) -> str:
    """Very simple duration formatter"""

    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"

    return f"{seconds:.2f}s"
# EOF
