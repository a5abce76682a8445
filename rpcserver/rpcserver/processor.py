"""Single-envelope request processing.

``process_request`` validates one already-parsed message against the
method table, runs the matching resolver and returns the response
envelope as a plain dict, or ``None`` when nothing must be sent back
(notifications).

Checks run in a fixed order and stop at the first failure, so a
resolver never sees a malformed envelope or undecodable params.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from rpcwire import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST_OBJECT,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND_OBJECT,
    MISSING,
    DecodeError,
    JsonRpcError,
    JsonRpcResponse,
    Metadata,
    Method,
    RpcError,
    RpcId,
    is_valid_id,
)

from rpcserver.registry import ResolverFn

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServerOptions:
    """Toggle schema use on the server.

    ``decode=False`` hands raw params to resolvers; ``encode=False``
    returns resolver results untouched.
    """

    encode: bool = True
    decode: bool = True


# ── Helpers ──────────────────────────────────────────────────────────


def _success(result: Any, req_id: RpcId) -> dict[str, Any]:
    return JsonRpcResponse.success(req_id, result).to_dict()


def _failure(error: JsonRpcError, req_id: RpcId) -> dict[str, Any] | None:
    """Wrap *error* in a failure envelope; notifications get nothing."""
    if req_id is MISSING:
        return None
    return JsonRpcResponse.fail(req_id, error).to_dict()


def _normalize_params(params: Any, method: Method) -> dict[str, Any] | None:
    """Return params as a dict, or ``None`` if their shape is unusable.

    Positional params are matched to the request schema's declared keys
    by position; surplus values are dropped.
    """
    if isinstance(params, list):
        return dict(zip(method.request.keys, params))
    if params is MISSING or params is None:
        return {}
    if isinstance(params, dict):
        return params
    return None


def _error_from_exception(exc: Exception) -> JsonRpcError:
    if isinstance(exc, RpcError):
        return JsonRpcError(exc.code, exc.message or "Internal error", exc.data)
    return JsonRpcError(INTERNAL_ERROR, str(exc) or "Internal error")


# ── Processing ───────────────────────────────────────────────────────


async def process_request(
    methods: Mapping[str, Method],
    resolvers: Mapping[str, ResolverFn],
    message: Any,
    context: Any = None,
    options: ServerOptions = ServerOptions(),
) -> dict[str, Any] | None:
    """Validate *message*, invoke its resolver and build the response."""
    if not isinstance(message, dict):
        return _failure(INVALID_REQUEST_OBJECT, None)

    jsonrpc = message.get("jsonrpc", MISSING)
    name = message.get("method", MISSING)
    req_id = message.get("id", MISSING)
    params = message.get("params", MISSING)

    # An id we cannot trust is never echoed back.
    if not is_valid_id(req_id):
        return _failure(INVALID_REQUEST_OBJECT, None)

    if jsonrpc != JSONRPC_VERSION or not isinstance(name, str):
        return _failure(INVALID_REQUEST_OBJECT, None if req_id is MISSING else req_id)

    method = methods.get(name)
    if method is None:
        return _failure(METHOD_NOT_FOUND_OBJECT, req_id)

    data = _normalize_params(params, method)
    if data is None:
        return _failure(INVALID_REQUEST_OBJECT, req_id)

    if options.decode:
        try:
            data = method.request.decode(data)
        except DecodeError as exc:
            return _failure(JsonRpcError(INVALID_PARAMS, exc.report()), req_id)

    is_notification = req_id is MISSING
    meta = Metadata(id=None if is_notification else req_id, is_notification=is_notification)

    log.info("rpc ← %s(id=%s)", name, meta.id)

    try:
        result = resolvers[name](data, context, meta)
        if inspect.isawaitable(result):
            result = await result
        if is_notification:
            return None
        if options.encode:
            result = method.response.encode(result)
        return _success(result, req_id)
    except RpcError as exc:
        log.debug("resolver %s raised %r", name, exc)
        return _failure(_error_from_exception(exc), req_id)
    except Exception as exc:
        log.exception("resolver error for %s", name)
        return _failure(_error_from_exception(exc), req_id)
