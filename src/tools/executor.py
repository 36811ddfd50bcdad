"""
src/tools/executor.py

Tool execution bridge: raw tool-call arguments in, result payload out.

The executor never raises past `execute()`. Unknown tools, arguments that do
not decode or validate, exceptions raised by the tool itself and return values
with no JSON form all come back as an error ToolResult, so the loop can hand
them to the model as data.
"""


import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from tools.errors import InvalidArguments, ToolError, ToolFailed
from tools.registry import ToolDefinition, ToolRegistry


logger = logging.getLogger(__name__)

RawArguments = Union[str, bytes, Mapping[str, Any], None]


class ToolResult(BaseModel):
    """Outcome of one tool execution; `payload()` is what the model receives."""

    name: str
    ok: bool
    output: Dict[str, Any] = {}
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def payload(self) -> Dict[str, Any]:

        if self.ok:
            return dict(self.output)

        return {"error": self.error, "type": self.error_kind}

    def content(self) -> str:
        """Payload serialised for a tool message."""

        return json.dumps(self.payload(), ensure_ascii=False)

    @classmethod
    def failure(cls, name: str, exc: ToolError) -> "ToolResult":

        return cls(name=name, ok=False, error=str(exc), error_kind=exc.kind)


def _describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors to 'field: message' pairs the model can act on."""

    parts = []

    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")

    return "; ".join(parts)


def decode_arguments(definition: ToolDefinition, raw: RawArguments) -> Dict[str, Any]:
    """
    Decode a raw argument payload into validated keyword arguments.

    Accepts the JSON string the model produced (empty means no arguments), its
    UTF-8 bytes, or an already-decoded mapping. Optional parameters the model
    left out or sent as null are not passed, so the tool's own defaults apply.

    Raises:
        InvalidArguments: payload is not a JSON object, or fails the schema.
    """

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidArguments(definition.name, f"arguments are not valid UTF-8 ({exc.reason})") from exc

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        data: Any = {}
    elif isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidArguments(definition.name, f"arguments are not valid JSON ({exc.msg})") from exc
    else:
        data = dict(raw)

    if not isinstance(data, dict):
        raise InvalidArguments(definition.name, f"expected a JSON object, got {type(data).__name__}")

    try:
        args = definition.args_model.model_validate(data)
    except ValidationError as exc:
        raise InvalidArguments(definition.name, _describe_validation_error(exc)) from exc

    # Required fields are never None here; strict validation rejects null for them.
    return args.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


def serialise_output(value: Any) -> Dict[str, Any]:
    """
    Turn a tool's return value into a JSON-safe payload.

    Mappings are the payload; anything else goes under `result`. Dates,
    decimals, enums and models become their JSON form.

    Raises:
        TypeError, ValueError: the value has no JSON representation.
    """

    if isinstance(value, BaseModel):
        data = value.model_dump(mode="json")
    elif isinstance(value, Mapping):
        data = to_jsonable_python(dict(value))
    else:
        data = {"result": to_jsonable_python(value)}

    json.dumps(data, ensure_ascii=False)

    return data


class ToolExecutor:
    """
    Looks tools up in a registry, validates arguments, runs them.

    Usage:
        executor = ToolExecutor(registry)
        result = executor.execute("calculate_sum", '{"a": 40, "b": 2}')
        result.payload()   # {"result": 42}
    """

    def __init__(self, registry: ToolRegistry):

        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:

        return self._registry

    def execute(self, name: str, raw_arguments: RawArguments) -> ToolResult:

        try:
            definition = self._registry.resolve(name)
            kwargs = decode_arguments(definition, raw_arguments)
        except ToolError as exc:
            logger.info("Rejected call to %s: %s", name, exc)
            return ToolResult.failure(name, exc)

        try:
            output = serialise_output(definition.handler(**kwargs))
        except Exception as exc:
            logger.warning("Tool %s failed: %s", name, exc, exc_info=True)
            return ToolResult.failure(name, ToolFailed(name, exc))

        return ToolResult(name=name, ok=True, output=output)
