"""JSON wire codec for data-channel envelopes."""

from __future__ import annotations

from typing import Any

import orjson

from convai.errors import ParseError


def encode_envelope(envelope: dict[str, Any]) -> bytes:
    # orjson.JSONEncodeError (a TypeError) propagates for unserialisable payloads.
    return orjson.dumps(envelope)


def decode_payload(raw: bytes | str) -> Any:
    """Parse one inbound buffer; invalid UTF-8 or JSON raises ``ParseError``."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        preview = raw[:200].decode("utf-8", "replace") if isinstance(raw, bytes) else raw[:200]
        raise ParseError(f"invalid JSON: {exc}", raw=preview) from exc


__all__ = ["decode_payload", "encode_envelope"]
