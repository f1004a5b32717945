"""Client-side tools the agent can invoke over the data channel."""

from __future__ import annotations

import inspect
from typing import Any
from dataclasses import dataclass
from collections.abc import Mapping, Callable, Awaitable

# A tool receives the call parameters and returns an optional result. Plain
# functions and coroutine functions are both accepted.
ClientTool = Callable[[dict[str, Any]], "Awaitable[Any] | Any"]
ClientToolRegistry = Mapping[str, ClientTool]


@dataclass(frozen=True, slots=True)
class ClientToolResult:
    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> ClientToolResult:
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> ClientToolResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        # data and error are mutually exclusive on the wire.
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error or "tool failed"}


def coerce_tool_result(value: Any) -> ClientToolResult | None:
    """Normalise whatever a tool returned; ``None`` means "no reply expected"."""
    if value is None:
        return None
    if isinstance(value, ClientToolResult):
        return value
    return ClientToolResult.ok(value)


async def invoke_tool(tool: ClientTool, parameters: dict[str, Any]) -> ClientToolResult | None:
    value = tool(parameters)
    if inspect.isawaitable(value):
        value = await value
    return coerce_tool_result(value)


__all__ = [
    "ClientTool",
    "ClientToolRegistry",
    "ClientToolResult",
    "coerce_tool_result",
    "invoke_tool",
]
