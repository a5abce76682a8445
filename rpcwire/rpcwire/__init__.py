"""rpcwire: JSON-RPC 2.0 envelope codec and method schemas."""

from rpcwire.jsonrpc import (
    DECODE_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    INVALID_REQUEST_OBJECT,
    INVALID_RESPONSE,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    METHOD_NOT_FOUND_OBJECT,
    MISSING,
    PARSE_ERROR,
    PARSE_ERROR_OBJECT,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    Metadata,
    ParseError,
    RpcError,
    RpcId,
    dumps,
    is_valid_id,
    parse,
)
from rpcwire.schema import DecodeError, Method, PydanticSchema, Schema, method

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Metadata",
    "RpcError",
    "ParseError",
    "RpcId",
    "MISSING",
    "JSONRPC_VERSION",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "INVALID_RESPONSE",
    "DECODE_ERROR",
    "PARSE_ERROR_OBJECT",
    "INVALID_REQUEST_OBJECT",
    "METHOD_NOT_FOUND_OBJECT",
    "parse",
    "dumps",
    "is_valid_id",
    "Schema",
    "PydanticSchema",
    "DecodeError",
    "Method",
    "method",
]
