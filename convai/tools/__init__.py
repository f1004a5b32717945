from .client_tools import (
    ClientTool,
    ClientToolResult,
    ClientToolRegistry,
    invoke_tool,
    coerce_tool_result,
)

__all__ = [
    "ClientTool",
    "ClientToolRegistry",
    "ClientToolResult",
    "coerce_tool_result",
    "invoke_tool",
]
