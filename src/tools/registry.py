"""
src/tools/registry.py

Tool registry: the fixed, ordered set of tools the model may call during a run.

Each tool is declared JSON-schema style (the way the model sees it) and gets a
generated pydantic argument model, so the executor can turn a raw argument
payload into validated, typed keyword arguments before calling the tool.
"""


from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, StrictBool, StrictInt, StrictStr, create_model, model_validator
from rapidfuzz import fuzz, process

from tools.errors import DuplicateToolName, UnknownTool


logger = logging.getLogger(__name__)


# -------- Schema descriptors ---------------------------------------------------


class ParamType(str, Enum):

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


# Strict mode still lets an int through for a float field, which is what
# "number" means in JSON schema.
_PYTHON_TYPES: Dict[ParamType, Any] = {
    ParamType.STRING: StrictStr,
    ParamType.NUMBER: float,
    ParamType.INTEGER: StrictInt,
    ParamType.BOOLEAN: StrictBool,
    ParamType.ARRAY: List[Any],
    ParamType.OBJECT: Dict[str, Any],
}


class ParamSpec(BaseModel):

    model_config = ConfigDict(frozen=True)

    type: ParamType
    description: str = ""
    enum: Optional[Tuple[Any, ...]] = None

    def python_type(self) -> Any:

        if self.enum:
            return Literal[self.enum]

        return _PYTHON_TYPES[self.type]

    def to_json_schema(self) -> Dict[str, Any]:

        out: Dict[str, Any] = {"type": self.type.value}
        if self.description:
            out["description"] = self.description
        if self.enum:
            out["enum"] = list(self.enum)

        return out


class ToolSchema(BaseModel):
    """Parameter contract of one tool: `properties` plus the `required` names."""

    model_config = ConfigDict(frozen=True)

    properties: Dict[str, ParamSpec] = Field(default_factory=dict)
    required: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _required_fields_exist(self) -> "ToolSchema":

        missing = [name for name in self.required if name not in self.properties]
        if missing:
            raise ValueError(f"required fields not declared in properties: {missing}")
        if len(set(self.required)) != len(self.required):
            raise ValueError("required fields must be unique")

        return self

    def is_required(self, name: str) -> bool:

        return name in self.required

    def to_json_schema(self) -> Dict[str, Any]:

        return {
            "type": "object",
            "properties": {name: spec.to_json_schema() for name, spec in self.properties.items()},
            "required": list(self.required),
            "additionalProperties": False,
        }


# -------- Tool definition ------------------------------------------------------


class ToolDefinition(BaseModel):
    """A named, schema-described local function. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=r"^[A-Za-z0-9_-]{1,64}$")
    description: str
    parameters: ToolSchema = Field(default_factory=ToolSchema)
    handler: Callable[..., Any] = Field(exclude=True, repr=False)

    _args_model: Type[BaseModel] = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:

        self._args_model = _build_args_model(self.name, self.parameters)

    @property
    def args_model(self) -> Type[BaseModel]:
        """Pydantic model the raw arguments are decoded into."""

        return self._args_model

    def to_openai(self) -> Dict[str, Any]:
        """Build an OpenAI function spec."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.to_json_schema(),
            },
        }


def _build_args_model(tool_name: str, schema: ToolSchema) -> Type[BaseModel]:
    """
    Generate the per-tool argument model.

    Fields get positional internal names and carry the parameter name as alias,
    so parameter names such as `json` or `model_id` never collide with pydantic.
    """

    fields: Dict[str, Any] = {}

    for idx, (name, spec) in enumerate(schema.properties.items()):
        py_type = spec.python_type()
        if schema.is_required(name):
            fields[f"p{idx}"] = (py_type, Field(..., alias=name))
        else:
            fields[f"p{idx}"] = (Optional[py_type], Field(default=None, alias=name))

    return create_model(
        f"{tool_name}_arguments",
        __config__=ConfigDict(strict=True, extra="forbid"),
        **fields,
    )


def define_tool(
        name: str,
        description: str,
        handler: Callable[..., Any],
        *,
        properties: Optional[Dict[str, Any]] = None,
        required: Iterable[str] = (),
) -> ToolDefinition:
    """Shorthand for declaring a tool with a JSON-schema-like parameter dict."""

    return ToolDefinition(
        name=name,
        description=description,
        parameters=ToolSchema(properties=properties or {}, required=tuple(required)),
        handler=handler,
    )


# -------- Registry -------------------------------------------------------------


class ToolRegistry:
    """
    Ordered set of tool definitions, unique by name.

    Build it once per run; the orchestrator hands `snapshot()` to every gateway
    call so the model sees the same action set for the whole conversation.
    """

    def __init__(self, definitions: Iterable[ToolDefinition] = ()):

        self._tools: Dict[str, ToolDefinition] = {}

        for definition in definitions:
            self.register(definition)

    def register(self, definition: ToolDefinition) -> ToolDefinition:

        if definition.name in self._tools:
            raise DuplicateToolName(definition.name)

        self._tools[definition.name] = definition
        logger.debug("Registered tool %s", definition.name)

        return definition

    def resolve(self, name: str) -> ToolDefinition:

        try:
            return self._tools[name]
        except KeyError:
            raise UnknownTool(name, suggestion=self.suggest(name)) from None

    def suggest(self, name: str, *, min_score: int = 70) -> Optional[str]:
        """Closest registered tool name for a misspelt one, if any is close enough."""

        if not self._tools or not name:
            return None

        match = process.extractOne(name, list(self._tools), scorer=fuzz.WRatio, score_cutoff=min_score)

        return match[0] if match else None

    def names(self) -> List[str]:

        return list(self._tools)

    def snapshot(self) -> Tuple[ToolDefinition, ...]:

        return tuple(self._tools.values())

    def to_openai(self) -> List[Dict[str, Any]]:

        return [definition.to_openai() for definition in self._tools.values()]

    def __contains__(self, name: object) -> bool:

        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:

        return iter(self.snapshot())

    def __len__(self) -> int:

        return len(self._tools)
