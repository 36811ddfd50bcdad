"""Tests for the OpenAI gateway: request building and response parsing.

The OpenAI client is replaced by a stub; responses are real SDK models.
"""

from __future__ import annotations

import pytest
import openai
from openai.types.chat import ChatCompletion

from config import AgentSettings, GatewaySettings, ToolChoice
from conversation.turns import ToolCallRequest, Transcript
from orchestrator.gateway import (
    FinalAnswer,
    GatewayError,
    GenerationParams,
    OpenAIGateway,
    ToolCallsRequested,
    parse_completion,
)


def completion(finish_reason: str, content=None, tool_calls=None) -> ChatCompletion:
    message = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = [
            {"id": cid, "type": "function", "function": {"name": name, "arguments": args}}
            for cid, name, args in tool_calls
        ]
    return ChatCompletion.model_validate({
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [{"index": 0, "finish_reason": finish_reason, "message": message}],
    })


class StubCompletions:
    def __init__(self, result):
        self.result = result
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class StubClient:
    def __init__(self, result):
        self.completions = StubCompletions(result)
        self.chat = self


def gateway_for(result):
    client = StubClient(result)
    return OpenAIGateway(GatewaySettings(), client=client), client.completions


class TestParse:
    def test_tool_calls(self):
        resp = completion("tool_calls", tool_calls=[("1", "calculate_sum", '{"a": 40, "b": 2}')])
        parsed = parse_completion(resp)
        assert isinstance(parsed, ToolCallsRequested)
        assert parsed.tool_calls == (ToolCallRequest(id="1", name="calculate_sum", arguments='{"a": 40, "b": 2}'),)

    def test_tool_calls_finish_reason_without_calls(self):
        parsed = parse_completion(completion("tool_calls", tool_calls=[]))
        assert isinstance(parsed, ToolCallsRequested)
        assert parsed.tool_calls == ()

    def test_stop(self):
        parsed = parse_completion(completion("stop", content="42"))
        assert parsed == FinalAnswer(text="42")

    def test_stop_without_content(self):
        assert parse_completion(completion("stop")).text == ""

    def test_unexpected_finish_reason(self):
        with pytest.raises(GatewayError, match="length"):
            parse_completion(completion("length", content="truncat"))

    def test_duplicate_ids(self):
        resp = completion("tool_calls", tool_calls=[("1", "say_hello", "{}"), ("1", "say_hello", "{}")])
        with pytest.raises(GatewayError, match="duplicate"):
            parse_completion(resp)

    def test_no_choices(self):
        resp = ChatCompletion.model_validate({
            "id": "x", "object": "chat.completion", "created": 0, "model": "m", "choices": [],
        })
        with pytest.raises(GatewayError, match="no choices"):
            parse_completion(resp)


class TestRequest:
    def test_request_shape(self, registry):
        gateway, completions = gateway_for(completion("stop", content="hi"))
        params = GenerationParams(model="ai/lucy", temperature=0.0, parallel_tool_calls=False)

        result = gateway.complete(Transcript.start("hello"), registry.snapshot(), params)

        assert result == FinalAnswer(text="hi")
        request = completions.requests[0]
        assert request["model"] == "ai/lucy"
        assert request["messages"] == [{"role": "user", "content": "hello"}]
        assert request["temperature"] == 0.0
        assert request["tool_choice"] == "auto"
        assert request["parallel_tool_calls"] is False
        assert [t["function"]["name"] for t in request["tools"]] == registry.names()

    def test_no_tools_no_tool_choice(self):
        gateway, completions = gateway_for(completion("stop", content="hi"))
        gateway.complete(Transcript.start("hello"), (), GenerationParams(model="m"))
        assert "tools" not in completions.requests[0]
        assert "tool_choice" not in completions.requests[0]

    def test_parallel_flag_omitted_when_unset(self, registry):
        gateway, completions = gateway_for(completion("stop", content="hi"))
        gateway.complete(Transcript.start("hello"), registry.snapshot(), GenerationParams(model="m"))
        assert "parallel_tool_calls" not in completions.requests[0]

    def test_sdk_error_becomes_gateway_error(self, registry):
        gateway, _ = gateway_for(openai.OpenAIError("connection refused"))
        with pytest.raises(GatewayError, match="connection refused") as info:
            gateway.complete(Transcript.start("hello"), registry.snapshot(), GenerationParams(model="m"))
        assert isinstance(info.value.__cause__, openai.OpenAIError)


class TestClient:
    def test_keyless_settings_build_a_client(self):
        gateway = OpenAIGateway(GatewaySettings(api_key=""))
        assert gateway._client.api_key == "not-needed"
        assert str(gateway._client.base_url).startswith(GatewaySettings().base_url)

    def test_configured_key_is_used(self):
        gateway = OpenAIGateway(GatewaySettings(api_key="sk-local"))
        assert gateway._client.api_key == "sk-local"


class TestParams:
    def test_forced_named_tool(self):
        params = GenerationParams(model="m", tool_choice=ToolChoice.FORCED, forced_tool="say_hello")
        assert params.tool_choice_param() == {"type": "function", "function": {"name": "say_hello"}}

    def test_forced_any_tool(self):
        assert GenerationParams(model="m", tool_choice=ToolChoice.FORCED).tool_choice_param() == "required"

    def test_none(self):
        assert GenerationParams(model="m", tool_choice=ToolChoice.NONE).tool_choice_param() == "none"

    def test_from_settings(self):
        params = GenerationParams.from_settings(
            GatewaySettings(model="ai/qwen3"),
            AgentSettings(temperature=0.3, parallel_tool_calls=False),
        )
        assert params.model == "ai/qwen3"
        assert params.temperature == 0.3
        assert params.parallel_tool_calls is False
        assert params.tool_choice is ToolChoice.AUTO
