"""Test doubles for the gateway and the clock."""

from __future__ import annotations

import json

from conversation.turns import ToolCallRequest
from orchestrator.gateway import FinalAnswer, ToolCallsRequested


class ScriptedGateway:
    """Replays a fixed list of responses; an exception in the list is raised."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def complete(self, transcript, tools, params):
        self.calls.append({"transcript": transcript, "tools": tools, "params": params})
        if not self._responses:
            raise AssertionError("ScriptedGateway ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def tool_calls(*calls: tuple) -> ToolCallsRequested:
    """Build a ToolCallsRequested from (id, name, args) tuples; dict args are JSON-encoded."""
    return ToolCallsRequested(tool_calls=tuple(
        ToolCallRequest(id=cid, name=name, arguments=args if isinstance(args, str) else json.dumps(args))
        for cid, name, args in calls
    ))


def final(text: str) -> FinalAnswer:
    return FinalAnswer(text=text)


class FakeClock:
    """Advances by a fixed tick on every read."""

    def __init__(self, tick: float = 0.5):
        self.now = 0.0
        self.tick = tick

    def __call__(self) -> float:
        self.now += self.tick
        return self.now
