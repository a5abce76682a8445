"""Resolver registry.

Resolvers register themselves via the ``@resolvers.handler`` decorator.
The registry maps JSON-RPC method names to callables, nothing more.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, Awaitable, Callable, Union

from rpcwire import Metadata

log = logging.getLogger(__name__)

# Type alias for a resolver: (request, context, metadata) -> result
ResolverFn = Callable[[Any, Any, Metadata], Union[Any, Awaitable[Any]]]


class Resolvers(Mapping[str, ResolverFn]):
    """A simple method → resolver mapping.

    Usage::

        resolvers = Resolvers()

        @resolvers.handler("echo")
        async def echo(req, context, meta):
            return req.arg

        server = Server(methods, resolvers)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ResolverFn] = {}

    # -- Registration --------------------------------------------------
    def handler(self, method: str) -> Callable[[ResolverFn], ResolverFn]:
        """Decorator that registers *fn* under *method*."""

        def decorator(fn: ResolverFn) -> ResolverFn:
            if method in self._handlers:
                log.warning("overwriting resolver for %r", method)
            self._handlers[method] = fn
            log.debug(
                "registered resolver %r → %s",
                method,
                getattr(fn, "__qualname__", fn),
            )
            return fn

        return decorator

    # -- Mapping -------------------------------------------------------
    def __getitem__(self, method: str) -> ResolverFn:
        return self._handlers[method]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
