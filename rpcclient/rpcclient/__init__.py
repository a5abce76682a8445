"""rpcclient: JSON-RPC 2.0 request building and response correlation."""

from rpcclient.client import Call, Client, ClientOptions, PreparedCall, SendFn

__all__ = [
    "Client",
    "ClientOptions",
    "Call",
    "PreparedCall",
    "SendFn",
]
