"""JSON-RPC 2.0 client: request building and response correlation.

* ``await client(method, params)``  → decoded result, raises ``RpcError``
* ``await client.many(calls)``      → one slot per call, errors in place

The client owns no transport.  It is handed a ``send`` coroutine that
delivers an envelope (or a list of them) and returns whatever JSON value
came back::

    async def send(payload, options):
        resp = await http.post("/rpc", json=payload)
        return resp.json() if resp.content else None

    client = Client(methods, send)
    greeting = await client("hello", {})
"""

from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from rpcwire import (
    DECODE_ERROR,
    INVALID_RESPONSE,
    MISSING,
    DecodeError,
    JsonRpcRequest,
    Method,
    RpcError,
    RpcId,
    is_valid_id,
)

log = logging.getLogger(__name__)

# Transport hook: (envelope | [envelope, ...], options) -> raw reply body
SendFn = Callable[[Any, Any], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ClientOptions:
    """Toggle schema use on the client.

    ``encode=False`` sends params as given; ``decode=False`` returns the
    raw ``result`` value.
    """

    encode: bool = True
    decode: bool = True


@dataclass(slots=True)
class Call:
    """One typed call in a ``Client.many`` batch."""

    method: str
    params: Any = None
    notify: bool = False


@dataclass(slots=True)
class PreparedCall:
    """An encoded request plus the closure that interprets its reply."""

    method: str
    params: Any
    id: RpcId
    notify: bool
    process: Callable[[Any], Any] = field(repr=False)

    def to_request(self) -> JsonRpcRequest:
        return JsonRpcRequest(
            method=self.method,
            params=self.params,
            id=MISSING if self.notify else self.id,
        )


def _invalid_response() -> RpcError:
    return RpcError("Invalid response", INVALID_RESPONSE)


def _coerce_code(code: Any) -> int:
    """Numeric codes are truncated to ``int``; anything else becomes 0."""
    if isinstance(code, str):
        try:
            code = float(code)
        except ValueError:
            return 0
    if isinstance(code, (int, float)) and math.isfinite(code):
        return int(code)
    return 0


class Client:
    """Typed JSON-RPC 2.0 client over a caller-supplied transport.

    Parameters
    ----------
    methods : Mapping[str, Method]
        Request/response schemas per method name.
    send : SendFn
        Coroutine delivering envelopes and returning the raw reply.
    options : ClientOptions, optional
        Schema encode/decode switches.
    """

    def __init__(
        self,
        methods: Mapping[str, Method],
        send: SendFn,
        options: ClientOptions | None = None,
    ) -> None:
        self.methods = methods
        self.options = options or ClientOptions()
        self._send = send
        self._counter = itertools.count()

    # -- Request building ----------------------------------------------

    def prepare(self, call: Call) -> PreparedCall:
        """Encode *call* and assign it a correlation id."""
        schema = self.methods[call.method]
        params = {} if call.params is None else call.params
        if self.options.encode:
            params = schema.request.encode(params)

        req_id = None if call.notify else next(self._counter)
        return PreparedCall(
            method=call.method,
            params=params,
            id=req_id,
            notify=call.notify,
            process=self._processor(schema, call.notify),
        )

    def _processor(self, schema: Method, notify: bool) -> Callable[[Any], Any]:
        decode = self.options.decode

        def process(body: Any) -> Any:
            if body is None:
                if notify:
                    return None
                raise _invalid_response()

            if not isinstance(body, dict):
                raise _invalid_response()

            if "result" in body:
                if not decode:
                    return body["result"]
                try:
                    return schema.response.decode(body["result"])
                except DecodeError as exc:
                    raise RpcError(exc.report(), DECODE_ERROR, exc.errors) from exc

            if "error" in body:
                error = body["error"]
                if not isinstance(error, dict):
                    raise _invalid_response()
                raise RpcError(
                    str(error.get("message") or "Error"),
                    _coerce_code(error.get("code")),
                    error.get("data"),
                )

            raise _invalid_response()

        return process

    # -- Single call ---------------------------------------------------

    async def __call__(
        self,
        method: str,
        params: Any = None,
        *,
        notify: bool = False,
        options: Any = None,
    ) -> Any:
        """Send one request and return its decoded result.

        Raises ``RpcError`` if the server answers with an error or the
        reply is malformed.  Notifications return ``None``.
        """
        item = self.prepare(Call(method, params, notify))
        log.debug("rpc → %s(id=%s)", method, item.id)
        body = await self._send(item.to_request().to_dict(), options)
        return item.process(body)

    # -- Batch ---------------------------------------------------------

    async def many(self, calls: Sequence[Call], options: Any = None) -> list[Any]:
        """Send *calls* as one batch.

        Each slot holds the decoded result, ``None`` for notifications,
        or the ``RpcError`` for that call.  Replies are matched by id, so
        the transport may return them in any order.
        """
        items = [self.prepare(call) for call in calls]
        log.debug("rpc → batch of %d", len(items))
        body = await self._send([item.to_request().to_dict() for item in items], options)

        if not isinstance(body, list):
            raise _invalid_response()

        lookup: dict[RpcId, Any] = {}
        for reply in body:
            if isinstance(reply, dict):
                reply_id = reply.get("id", MISSING)
                if is_valid_id(reply_id, allow_absent=False):
                    lookup[reply_id] = reply

        results: list[Any] = []
        for item in items:
            if item.notify:
                results.append(None)
                continue
            try:
                results.append(item.process(lookup.get(item.id)))
            except RpcError as exc:
                results.append(exc)
        return results
