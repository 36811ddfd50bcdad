"""
src/conversation/turns.py

Conversation state: the turn variants and the append-only transcript.

A Transcript is an immutable value. `append()` returns a new transcript and
leaves the old one untouched, so a run can hand snapshots around (to the
gateway, to tests, to the UI) without anyone seeing a later mutation.
"""


from __future__ import annotations
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ToolCallRequest(BaseModel):
    """One tool invocation asked for by the model. `arguments` stays raw JSON."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: str = ""

    def to_openai(self) -> Dict[str, Any]:

        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class UserTurn(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    text: str

    def to_message(self) -> Dict[str, Any]:

        return {"role": "user", "content": self.text}


class AssistantTurn(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["assistant"] = "assistant"
    text: Optional[str] = None
    tool_calls: Tuple[ToolCallRequest, ...] = ()

    def to_message(self) -> Dict[str, Any]:

        message: Dict[str, Any] = {"role": "assistant", "content": self.text}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]

        return message


class ToolResultTurn(BaseModel):

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_result"] = "tool_result"
    tool_call_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> Dict[str, Any]:

        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "content": json.dumps(self.payload, ensure_ascii=False),
        }


Turn = Annotated[Union[UserTurn, AssistantTurn, ToolResultTurn], Field(discriminator="kind")]

_TURN_ADAPTER: TypeAdapter = TypeAdapter(Turn)


def parse_turn(data: Dict[str, Any]) -> Turn:
    """Rebuild a turn from its `model_dump()` form."""

    return _TURN_ADAPTER.validate_python(data)


class Transcript(BaseModel):

    model_config = ConfigDict(frozen=True)

    turns: Tuple[Turn, ...] = ()

    @classmethod
    def start(cls, user_text: str) -> "Transcript":

        return cls(turns=(UserTurn(text=user_text),))

    def append(self, *turns: Turn) -> "Transcript":

        return Transcript(turns=self.turns + tuple(turns))

    @property
    def last(self) -> Optional[Turn]:

        return self.turns[-1] if self.turns else None

    def pending_tool_calls(self) -> List[str]:
        """Ids of requested tool calls that have no ToolResult turn yet."""

        # Local models often reuse ids like "call_0" across responses, so match
        # results against the oldest open request rather than a global set.
        pending: List[str] = []

        for turn in self.turns:
            if isinstance(turn, AssistantTurn):
                pending.extend(tc.id for tc in turn.tool_calls)
            elif isinstance(turn, ToolResultTurn) and turn.tool_call_id in pending:
                pending.remove(turn.tool_call_id)

        return pending

    def to_messages(self) -> List[Dict[str, Any]]:
        """Chat-completions message list, in transcript order."""

        return [turn.to_message() for turn in self.turns]

    def __len__(self) -> int:

        return len(self.turns)
