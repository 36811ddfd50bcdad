"""
src/tools/demo.py — the demo tool set

Provides:
- say_hello(name): greet someone
- calculate_sum(a, b): sum of two numbers
- add_two_numbers(a, b): same arithmetic, a second name the model has to tell apart
- default_registry(): registry with all three, in that order

The tools are plain functions: they return a result mapping and never touch
the transcript or the call ledger.
"""


from __future__ import annotations
from typing import Any, Dict, Union

from tools.registry import ToolDefinition, ToolRegistry, define_tool


Number = Union[int, float]


def _tidy(n: float) -> Number:
    """Render 42.0 as 42, like a %g format would."""

    if isinstance(n, float) and n.is_integer():
        return int(n)

    return n


# --- Public API ----------------------------------------------------------------
def say_hello(*, name: str) -> Dict[str, Any]:

    return {"message": f"👋 Hello, {name.strip()}!🙂"}

def calculate_sum(*, a: Number, b: Number) -> Dict[str, Any]:

    return {"result": _tidy(a + b)}

def add_two_numbers(*, a: Number, b: Number) -> Dict[str, Any]:

    return {"result": _tidy(a + b)}


# --- Definitions ---------------------------------------------------------------
SAY_HELLO: ToolDefinition = define_tool(
    "say_hello",
    "Say hello to the given name",
    say_hello,
    properties={
        "name": {"type": "string", "description": "The name to greet"},
    },
    required=["name"],
)

CALCULATE_SUM: ToolDefinition = define_tool(
    "calculate_sum",
    "Calculate the sum of two numbers",
    calculate_sum,
    properties={
        "a": {"type": "number", "description": "The first number"},
        "b": {"type": "number", "description": "The second number"},
    },
    required=["a", "b"],
)

ADD_TWO_NUMBERS: ToolDefinition = define_tool(
    "add_two_numbers",
    "Add two numbers together",
    add_two_numbers,
    properties={
        "a": {"type": "number"},
        "b": {"type": "number"},
    },
    required=["a", "b"],
)


def default_registry() -> ToolRegistry:
    """A fresh registry per run; definitions themselves are immutable and shared."""

    return ToolRegistry([SAY_HELLO, CALCULATE_SUM, ADD_TWO_NUMBERS])
