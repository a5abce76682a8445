"""JSON-RPC 2.0 envelope codec.

Pure data: no I/O, no dispatch.  Server and client both import these
for envelope shape checks and serialisation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

JSONRPC_VERSION = "2.0"

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ── Client-side error codes ──────────────────────────────────────────
INVALID_RESPONSE = -1
DECODE_ERROR = -2


class _Missing:
    """Marker for a key that is absent from an envelope (not ``null``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

RpcId = Union[str, int, None]


# ── Models ───────────────────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


# Shared instances, never rebuilt per call.
PARSE_ERROR_OBJECT = JsonRpcError(PARSE_ERROR, "Parse error")
INVALID_REQUEST_OBJECT = JsonRpcError(INVALID_REQUEST, "Invalid request")
METHOD_NOT_FOUND_OBJECT = JsonRpcError(METHOD_NOT_FOUND, "Method not found")


@dataclass(slots=True)
class JsonRpcRequest:
    """Outbound JSON-RPC 2.0 request.

    ``id`` left as ``MISSING`` makes the request a notification.
    """

    method: str
    params: Any = None
    id: RpcId = MISSING
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_notification(self) -> bool:
        return self.id is MISSING

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
        }
        if not self.is_notification:
            d["id"] = self.id
        return d


@dataclass(slots=True)
class JsonRpcResponse:
    """JSON-RPC 2.0 response carrying exactly one of result or error."""

    id: RpcId
    result: Any = None
    error: JsonRpcError | None = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        return d

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: RpcId, result: Any) -> "JsonRpcResponse":
        return cls(id=req_id, result=result)

    @classmethod
    def fail(cls, req_id: RpcId, error: JsonRpcError) -> "JsonRpcResponse":
        return cls(id=req_id, error=error)


@dataclass(frozen=True, slots=True)
class Metadata:
    """Per-call request information handed to resolvers."""

    id: RpcId
    is_notification: bool


# ── Exceptions ───────────────────────────────────────────────────────
class RpcError(Exception):
    """A JSON-RPC failure with a numeric ``code`` and optional ``data``.

    Resolvers raise it to answer with a specific code; the client raises
    it (or returns it, for batch slots) when a call fails.
    """

    def __init__(
        self, message: str, code: int = INTERNAL_ERROR, data: Any = None
    ) -> None:
        self.message = message
        self.code = code
        self.data = data
        super().__init__(message)

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r})"

    def to_error(self) -> JsonRpcError:
        return JsonRpcError(self.code, self.message, self.data)


class ParseError(RpcError):
    """Raised by ``parse`` when the raw text is not valid JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, PARSE_ERROR)


# ── Codec helpers ────────────────────────────────────────────────────
def parse(text: str | bytes) -> Any:
    """Decode raw JSON text; raises ``ParseError`` on malformed input."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise ParseError(str(exc)) from exc


def dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), allow_nan=False)


def is_valid_id(value: Any, *, allow_absent: bool = True) -> bool:
    """Return True if *value* may be used as a correlation id.

    ``MISSING`` is only valid while reading an inbound envelope, where it
    marks a notification.
    """
    if value is MISSING:
        return allow_absent
    if value is None or isinstance(value, str):
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return False
