"""Line codec for JSON-RPC envelopes

## Wire Format

```
{"jsonrpc":"2.0","method":"healthCheck","params":{},"id":1}\\n
{"jsonrpc":"2.0","id":1,"result":{"healthy":true,"uptime":3}}\\n
```

One JSON document per line, UTF-8, each line terminated by a single `\\n`.
The codec has no framing state beyond that: `decode` turns one line into a
`Request` without validating its fields, `encode` turns one `Response` into
one line and never raises.
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from payloadsdk.protocol import JSONRPC_VERSION
from payloadsdk.rpc.errors import ErrorCode, ErrorObject, ParseError


# Identifier used when no request identifier could be recovered
FALLBACK_ID = 0


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


@dataclass
class Request:
    """A decoded request envelope. Fields are exactly as received."""
    jsonrpc: Any = None
    method: Any = None
    params: Any = field(default_factory=dict)
    id: Any = None
    raw: Any = None

    @classmethod
    def from_message(cls, message: Any) -> "Request":
        if not isinstance(message, dict):
            return cls(params=None, raw=message)
        params = message.get("params")
        return cls(
            jsonrpc=message.get("jsonrpc"),
            method=message.get("method"),
            params={} if params is None else params,
            id=message.get("id"),
            raw=message,
        )

    def has_valid_id(self) -> bool:
        return is_valid_id(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }


class Response:
    """A response envelope carrying exactly one of `result` or `error`"""

    def __init__(self, id: Any, result: Any = None, error: Optional[ErrorObject] = None):
        """Internal constructor - use success() or failure() instead"""
        self.id = id
        self.result = result
        self.error = error

    @classmethod
    def success(cls, id: Any, result: Any) -> "Response":
        return cls(id, result=result)

    @classmethod
    def failure(cls, id: Any, error: ErrorObject) -> "Response":
        return cls(id, error=error)

    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        message: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.to_dict()
        else:
            message["result"] = self.result
        return message

    def __repr__(self) -> str:
        if self.error is not None:
            return f"Response(id={self.id!r}, error={self.error!r})"
        return f"Response(id={self.id!r}, result={self.result!r})"


def is_valid_id(value: Any) -> bool:
    """Identifiers are numbers or strings; booleans are not numbers"""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (int, str))


def loads(text: str) -> Any:
    """Strict JSON parse: rejects NaN and Infinity"""
    return json.loads(text, parse_constant=_reject_constant)


def dumps(message: Any) -> str:
    """Compact single-line JSON"""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def decode(line: Union[str, bytes]) -> Request:
    """Decode one input line into a Request.

    Raises:
        ParseError: If the line is not a complete, valid JSON document
    """
    if isinstance(line, (bytes, bytearray)):
        try:
            line = bytes(line).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Parse error: invalid UTF-8 ({e.reason})")

    text = line.rstrip("\r\n")
    try:
        message = loads(text)
    except ValueError as e:
        raise ParseError(f"Parse error: {e}")

    return Request.from_message(message)


def encode(response: Response) -> str:
    """Encode one response as one newline-terminated line.

    If the result (or error data) is not JSON-serializable, an InternalError
    response with the same identifier is encoded instead.
    """
    try:
        return dumps(response.to_dict()) + "\n"
    except (TypeError, ValueError, RecursionError) as e:
        fallback = Response.failure(
            response.id if is_valid_id(response.id) else FALLBACK_ID,
            ErrorObject(int(ErrorCode.INTERNAL_ERROR), f"Internal error: response not serializable: {e}"),
        )
        return dumps(fallback.to_dict()) + "\n"
