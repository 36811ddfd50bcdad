"""Shared fixtures: the demo registry and an agent factory on a scripted gateway.

No test talks to a real model endpoint.
"""

from __future__ import annotations

import pytest

from config import AgentSettings
from helpers import ScriptedGateway
from orchestrator.gateway import GenerationParams
from orchestrator.loop import Orchestrator
from tools.demo import default_registry


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def params():
    return GenerationParams(model="test-model")


@pytest.fixture
def make_agent(registry, params):
    """Factory: make_agent(responses, clock=None, **settings) -> (orchestrator, gateway)."""

    def _make(responses, clock=None, **settings):
        gateway = ScriptedGateway(responses)
        kwargs = {"params": params, "settings": AgentSettings(**settings)}
        if clock is not None:
            kwargs["clock"] = clock
        return Orchestrator(gateway, registry, **kwargs), gateway

    return _make
