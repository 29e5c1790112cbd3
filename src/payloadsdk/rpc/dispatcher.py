"""Per-line dispatch

The Dispatcher turns exactly one input line into exactly one response:

1. Decode the line. Undecodable input is answered with a ParseError using
   the fallback identifier.
2. Validate the envelope (InvalidRequest / InvalidParams).
3. Resolve the method (MethodNotFound).
4. Await the handler and convert its outcome: a value becomes `result`, an
   exception is classified into `error`.

Nothing raised by a handler escapes `handle_line`.
"""

import inspect
from typing import Any, Optional, Union

from payloadsdk import diagnostics
from payloadsdk.protocol import JSONRPC_VERSION
from payloadsdk.rpc.codec import FALLBACK_ID, Request, Response, decode, encode, is_valid_id
from payloadsdk.rpc.errors import (
    ErrorCode,
    ErrorObject,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    claims_dispatcher_code,
    classify_failure,
)
from payloadsdk.rpc.registry import Handler, MethodRegistry


def validate_request(request: Request) -> None:
    """Check the envelope shape of a decoded request.

    Raises:
        InvalidRequestError: If the envelope is malformed
        InvalidParamsError: If params is present but not an object
    """
    request_id = request.id if request.has_valid_id() else None

    if not isinstance(request.raw, dict):
        raise InvalidRequestError("Invalid request: expected a JSON object")
    if request.jsonrpc != JSONRPC_VERSION:
        raise InvalidRequestError(
            f"Invalid request: jsonrpc must be \"{JSONRPC_VERSION}\"", request_id=request_id
        )
    if not isinstance(request.method, str) or not request.method:
        raise InvalidRequestError("Invalid request: missing method", request_id=request_id)
    if request_id is None:
        raise InvalidRequestError("Invalid request: id must be a number or a string")
    if not isinstance(request.params, dict):
        raise InvalidParamsError("Invalid params: params must be an object")


async def invoke(handler: Handler, params: Any) -> Any:
    """Call a handler, awaiting its result if it is awaitable"""
    result = handler(params)
    if inspect.isawaitable(result):
        result = await result
    return result


class Dispatcher:
    """Resolves and invokes one request per line against a MethodRegistry"""

    def __init__(self, registry: MethodRegistry):
        self.registry = registry

    async def dispatch_line(self, line: Union[str, bytes]) -> str:
        """Handle one line and return the encoded response line"""
        return encode(await self.handle_line(line))

    async def handle_line(self, line: Union[str, bytes]) -> Response:
        try:
            request = decode(line)
        except ParseError as e:
            return Response.failure(FALLBACK_ID, ErrorObject(int(ErrorCode.PARSE_ERROR), "Parse error", _detail(e)))
        return await self.handle_request(request)

    async def handle_request(self, request: Request) -> Response:
        try:
            validate_request(request)
        except InvalidRequestError as e:
            request_id = e.request_id if e.request_id is not None else FALLBACK_ID
            return Response.failure(request_id, e.to_error_object())
        except InvalidParamsError as e:
            return Response.failure(request.id, e.to_error_object())

        handler = self.registry.get(request.method)
        if handler is None:
            return Response.failure(request.id, MethodNotFoundError(request.method).to_error_object())

        try:
            result = await invoke(handler, request.params)
        except Exception as exc:
            error = classify_failure(exc)
            if claims_dispatcher_code(error):
                diagnostics.log(
                    f"Handler '{request.method}' failed with reserved code {error.code}; passing it through"
                )
            return Response.failure(request.id, error)

        return Response.success(request.id, result)


def _detail(error: ParseError) -> Optional[str]:
    # The wire message stays the fixed "Parse error"; the decoder's reason goes in data
    if error.message and error.message != "Parse error":
        return error.message
    return None
