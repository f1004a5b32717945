"""Error types (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConvaiError(Exception):
    """Base class for every error surfaced by the session client."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class InvalidArgumentError(ConvaiError):
    """Raised when caller input is missing or malformed."""


@dataclass(frozen=True, slots=True)
class AlreadyActiveError(ConvaiError):
    """Raised when a session is started while another one is still active."""


@dataclass(frozen=True, slots=True)
class NotConnectedError(ConvaiError):
    """Raised when an action requires a connected session or transport."""


@dataclass(frozen=True, slots=True)
class TokenFetchError(ConvaiError):
    status_code: int | None = None
    body: str | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


@dataclass(frozen=True, slots=True)
class TransportError(ConvaiError):
    """Raised when connect/send/disconnect fails inside the transport."""


@dataclass(frozen=True, slots=True)
class ParseError(ConvaiError):
    raw: str | None = None


@dataclass(frozen=True, slots=True)
class ToolExecutionError(ConvaiError):
    tool_name: str | None = None


__all__ = [
    "AlreadyActiveError",
    "ConvaiError",
    "InvalidArgumentError",
    "NotConnectedError",
    "ParseError",
    "TokenFetchError",
    "ToolExecutionError",
    "TransportError",
]
