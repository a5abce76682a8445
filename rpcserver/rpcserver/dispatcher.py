"""Server dispatcher for single envelopes and batches.

``Server`` holds the frozen method and resolver tables and answers any
parsed payload with a response dict, a list of them, or ``None``::

    server = create_server(methods, resolvers)
    reply = await server({"jsonrpc": "2.0", "id": 1, "method": "hello"})

Transports that only deal in raw text can use ``handle_json`` instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import anyio

from rpcwire import (
    INTERNAL_ERROR,
    INVALID_REQUEST_OBJECT,
    PARSE_ERROR_OBJECT,
    JsonRpcError,
    JsonRpcResponse,
    Method,
    ParseError,
    dumps,
    parse,
)

from rpcserver.processor import ServerOptions, process_request
from rpcserver.registry import ResolverFn

log = logging.getLogger(__name__)

Reply = dict[str, Any] | list[dict[str, Any]] | None


class Server:
    """Transport-agnostic JSON-RPC 2.0 request handler.

    Parameters
    ----------
    methods : Mapping[str, Method]
        Request/response schemas per method name.
    resolvers : Mapping[str, ResolverFn]
        Implementation per method name; must cover exactly ``methods``.
    options : ServerOptions, optional
        Schema encode/decode switches.
    """

    def __init__(
        self,
        methods: Mapping[str, Method],
        resolvers: Mapping[str, ResolverFn],
        options: ServerOptions | None = None,
    ) -> None:
        missing = set(methods) - set(resolvers)
        extra = set(resolvers) - set(methods)
        if missing or extra:
            raise ValueError(
                f"resolvers do not match methods "
                f"(missing: {sorted(missing)}, unknown: {sorted(extra)})"
            )
        self.methods: Mapping[str, Method] = MappingProxyType(dict(methods))
        self.resolvers: Mapping[str, ResolverFn] = MappingProxyType(dict(resolvers))
        self.options = options or ServerOptions()

    async def __call__(self, payload: Any, context: Any = None) -> Reply:
        if isinstance(payload, list):
            return await self._batch(payload, context)
        return await self._process(payload, context)

    async def handle_json(self, body: str | bytes, context: Any = None) -> str | None:
        """Answer raw JSON text; ``None`` means nothing should be sent back."""
        try:
            payload = parse(body)
        except ParseError as exc:
            log.debug("parse error: %s", exc.message)
            return dumps(JsonRpcResponse.fail(None, PARSE_ERROR_OBJECT).to_dict())

        reply = await self(payload, context)
        if reply is None:
            return None
        if isinstance(reply, list):
            return "[" + ",".join(_dump_envelope(r) for r in reply) + "]"
        return _dump_envelope(reply)

    # -- Internals -----------------------------------------------------

    async def _process(self, message: Any, context: Any) -> dict[str, Any] | None:
        return await process_request(
            self.methods, self.resolvers, message, context, self.options
        )

    async def _batch(self, payload: list[Any], context: Any) -> Reply:
        if not payload:
            return JsonRpcResponse.fail(None, INVALID_REQUEST_OBJECT).to_dict()

        log.debug("rpc ← batch of %d", len(payload))
        results: list[dict[str, Any] | None] = [None] * len(payload)

        errors: list[Exception] = []

        async def _run(index: int, message: Any) -> None:
            try:
                results[index] = await self._process(message, context)
            except Exception as exc:
                errors.append(exc)

        async with anyio.create_task_group() as tg:
            for index, message in enumerate(payload):
                tg.start_soon(_run, index, message)

        # Schema misuse surfaces as the original exception, not a group.
        if errors:
            raise errors[0]

        return [r for r in results if r is not None]


def _dump_envelope(envelope: dict[str, Any]) -> str:
    """Serialise one response; values JSON cannot carry become -32603."""
    try:
        return dumps(envelope)
    except (TypeError, ValueError) as exc:
        log.exception("cannot serialise reply for id=%s", envelope.get("id"))
        error = JsonRpcError(INTERNAL_ERROR, str(exc) or "Internal error")
        return dumps(JsonRpcResponse.fail(envelope.get("id"), error).to_dict())


# ── Factory ──────────────────────────────────────────────────────────


def create_server(
    methods: Mapping[str, Method],
    resolvers: Mapping[str, ResolverFn],
    options: ServerOptions | None = None,
) -> Server:
    return Server(methods, resolvers, options)
