"""Newline-delimited JSON-RPC 2.0 substrate: codec, errors, registry, dispatcher"""

from payloadsdk.rpc.codec import FALLBACK_ID, Request, Response, decode, encode
from payloadsdk.rpc.dispatcher import Dispatcher, invoke, validate_request
from payloadsdk.rpc.errors import (
    ErrorCode,
    ErrorObject,
    RpcError,
    ParseError,
    InvalidRequestError,
    MethodNotFoundError,
    InvalidParamsError,
    InternalError,
    ServerError,
    classify_failure,
)
from payloadsdk.rpc.registry import (
    GET_METADATA,
    HEALTH_CHECK,
    BUILTIN_METHODS,
    MethodRegistry,
    RegistryError,
    DuplicateMethodError,
)

__all__ = [
    "FALLBACK_ID",
    "Request",
    "Response",
    "decode",
    "encode",
    "Dispatcher",
    "invoke",
    "validate_request",
    "ErrorCode",
    "ErrorObject",
    "RpcError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "ServerError",
    "classify_failure",
    "GET_METADATA",
    "HEALTH_CHECK",
    "BUILTIN_METHODS",
    "MethodRegistry",
    "RegistryError",
    "DuplicateMethodError",
]
