"""
src/tools/errors.py

Tool-level exceptions.

UnknownTool, InvalidArguments and ToolFailed never escape the executor: they
are turned into error payloads and handed back to the model. DuplicateToolName
is a programming error and propagates to whoever builds the registry.
"""


class ToolError(Exception):
    """Base for every tool-related error."""

    kind = "tool_error"


class DuplicateToolName(ToolError):

    kind = "duplicate_tool_name"

    def __init__(self, name: str):

        self.name = name
        super().__init__(f"Tool already registered: {name}")


class UnknownTool(ToolError):

    kind = "unknown_tool"

    def __init__(self, name: str, suggestion: str = None):

        self.name = name
        self.suggestion = suggestion
        message = f"Unknown tool: {name}"
        if suggestion:
            message += f" (did you mean '{suggestion}'?)"
        super().__init__(message)


class InvalidArguments(ToolError):

    kind = "invalid_arguments"

    def __init__(self, name: str, detail: str):

        self.name = name
        self.detail = detail
        super().__init__(f"Invalid arguments for {name}: {detail}")


class ToolFailed(ToolError):
    """The tool's own function raised."""

    kind = "tool_failed"

    def __init__(self, name: str, cause: BaseException):

        self.name = name
        self.cause = cause
        super().__init__(f"{name} failed: {type(cause).__name__}: {cause}")
