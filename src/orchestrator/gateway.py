"""
src/orchestrator/gateway.py

Completion gateway: the one network boundary of the agent.

- CompletionGateway: what the loop depends on (transcript + tools + params in,
  FinalAnswer or ToolCallsRequested out, GatewayError on failure)
- OpenAIGateway: implementation on the OpenAI chat-completions API, which is
  also what Docker Model Runner, Ollama, llama.cpp etc. speak
"""


from __future__ import annotations
import logging
import time
from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence, Tuple, Union

import openai
from openai import OpenAI
from pydantic import BaseModel, ConfigDict

from config import AgentSettings, GatewaySettings, ToolChoice
from conversation.turns import ToolCallRequest, Transcript
from tools.registry import ToolDefinition


logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Network, auth, quota or malformed-response failure. Fatal to the run."""


# -------- Request / response models --------------------------------------------


class GenerationParams(BaseModel):

    model_config = ConfigDict(frozen=True)

    model: str
    temperature: float = 0.0
    parallel_tool_calls: Optional[bool] = None
    tool_choice: ToolChoice = ToolChoice.AUTO
    forced_tool: Optional[str] = None

    @classmethod
    def from_settings(cls, gateway: GatewaySettings, agent: AgentSettings) -> "GenerationParams":

        return cls(
            model=gateway.model,
            temperature=agent.temperature,
            parallel_tool_calls=agent.parallel_tool_calls,
            tool_choice=agent.tool_choice,
            forced_tool=agent.forced_tool,
        )

    def tool_choice_param(self) -> Union[str, Dict[str, Any]]:
        """The `tool_choice` value as the chat-completions API expects it."""

        if self.tool_choice is ToolChoice.FORCED:
            if self.forced_tool:
                return {"type": "function", "function": {"name": self.forced_tool}}
            return "required"

        return self.tool_choice.value


class FinalAnswer(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["final_answer"] = "final_answer"
    text: str


class ToolCallsRequested(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_calls"] = "tool_calls"
    tool_calls: Tuple[ToolCallRequest, ...] = ()
    text: Optional[str] = None


GatewayResponse = Union[FinalAnswer, ToolCallsRequested]


class CompletionGateway(Protocol):

    def complete(
            self,
            transcript: Transcript,
            tools: Sequence[ToolDefinition],
            params: GenerationParams,
    ) -> GatewayResponse:
        ...


# -------- Response parsing -----------------------------------------------------


def extract_tool_calls(choice) -> List[ToolCallRequest]:
    """
    Normalise tool calls from an OpenAI response choice.

    Arguments are kept as the raw JSON string; decoding them is the executor's
    job so that a malformed payload becomes a tool error, not a gateway error.
    """

    out: List[ToolCallRequest] = []
    tcs = getattr(choice.message, "tool_calls", None)

    if not tcs:
        return out

    for tc in tcs:
        if tc.type == "function" and tc.function:
            out.append(ToolCallRequest(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or ""))
        else:
            logger.warning("Ignoring non-function tool call %s (type=%s)", tc.id, tc.type)

    ids = [tc.id for tc in out]
    if len(set(ids)) != len(ids):
        raise GatewayError(f"Malformed response: duplicate tool call ids {ids}")

    return out


def parse_completion(resp) -> GatewayResponse:
    """Branch on the finish reason of the first choice."""

    choices = getattr(resp, "choices", None)
    if not choices:
        raise GatewayError("Malformed response: no choices")

    choice = choices[0]
    finish_reason = choice.finish_reason

    if finish_reason == "tool_calls":
        return ToolCallsRequested(tool_calls=tuple(extract_tool_calls(choice)), text=choice.message.content)

    if finish_reason == "stop":
        return FinalAnswer(text=choice.message.content or "")

    raise GatewayError(f"Unexpected finish reason: {finish_reason}")


# -------- OpenAI implementation ------------------------------------------------


class OpenAIGateway:
    """Calls an OpenAI-compatible chat-completions endpoint."""

    def __init__(self, settings: GatewaySettings, client: Optional[OpenAI] = None):

        self._settings = settings
        self._client = client or OpenAI(
            base_url=settings.base_url,
            # Local runners take no key, but the SDK refuses an empty one.
            api_key=settings.api_key or "not-needed",
            timeout=settings.timeout,
            max_retries=settings.max_retries,
        )

    def build_request(
            self,
            transcript: Transcript,
            tools: Sequence[ToolDefinition],
            params: GenerationParams,
    ) -> Dict[str, Any]:

        request: Dict[str, Any] = {
            "model": params.model,
            "messages": transcript.to_messages(),
            "temperature": params.temperature,
        }

        if tools:
            request["tools"] = [t.to_openai() for t in tools]
            request["tool_choice"] = params.tool_choice_param()
            if params.parallel_tool_calls is not None:
                request["parallel_tool_calls"] = params.parallel_tool_calls

        return request

    def complete(
            self,
            transcript: Transcript,
            tools: Sequence[ToolDefinition],
            params: GenerationParams,
    ) -> GatewayResponse:

        request = self.build_request(transcript, tools, params)
        started = time.perf_counter()

        try:
            resp = self._client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            raise GatewayError(f"{type(exc).__name__}: {exc}") from exc

        logger.info("Completion from %s in %.2fs", params.model, time.perf_counter() - started)

        return parse_completion(resp)
