"""Tests for configuration readers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MODEL,
    AgentSettings,
    GatewaySettings,
    ToolChoice,
    format_duration,
    log_level,
)


def test_gateway_defaults_from_empty_env():
    settings = GatewaySettings.from_env({})
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.model == DEFAULT_MODEL
    assert settings.api_key == ""


def test_gateway_from_env():
    settings = GatewaySettings.from_env({
        "MODEL_RUNNER_BASE_URL": "http://model-runner.docker.internal/engines/v1",
        "MODEL_RUNNER_MODEL": "ai/qwen3:latest",
        "MODEL_RUNNER_API_KEY": "secret",
    })
    assert settings.base_url == "http://model-runner.docker.internal/engines/v1"
    assert settings.model == "ai/qwen3:latest"
    assert settings.api_key == "secret"


def test_agent_from_env():
    settings = AgentSettings.from_env({"AGENT_MAX_ITERATIONS": "4", "AGENT_DEADLINE_SECONDS": "30"})
    assert settings.max_iterations == 4
    assert settings.deadline_seconds == 30.0
    assert settings.tool_choice is ToolChoice.AUTO


def test_agent_defaults():
    settings = AgentSettings.from_env({})
    assert settings.max_iterations == DEFAULT_MAX_ITERATIONS
    assert settings.deadline_seconds is None
    assert settings.temperature == 0.0


def test_max_iterations_must_be_positive():
    with pytest.raises(ValidationError):
        AgentSettings(max_iterations=0)


def test_settings_are_frozen():
    with pytest.raises(ValidationError):
        AgentSettings().max_iterations = 3


def test_log_level():
    assert log_level({}) == "INFO"
    assert log_level({"AGENT_LOG_LEVEL": "debug"}) == "DEBUG"


def test_format_duration():
    assert format_duration(0.0125) == "12.5ms"
    assert format_duration(2.5) == "2.50s"
