"""rpcserver: JSON-RPC 2.0 request validation and dispatch."""

from rpcserver.dispatcher import Server, create_server
from rpcserver.processor import ServerOptions, process_request
from rpcserver.registry import ResolverFn, Resolvers

__all__ = [
    "Server",
    "ServerOptions",
    "Resolvers",
    "ResolverFn",
    "create_server",
    "process_request",
]
