"""JSON-RPC error taxonomy

Every failure that reaches the wire is an `ErrorObject`: a numeric code, a
non-empty message and optional data. Handlers signal failures by raising;
`classify_failure` is the single place that maps an exception to a code.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class ErrorCode(IntEnum):
    """Fixed JSON-RPC error codes"""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000


DEFAULT_MESSAGES: Dict[int, str] = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
    ErrorCode.SERVER_ERROR: "Server error",
}

# Codes only the dispatcher itself should ever produce
DISPATCHER_CODES = frozenset({
    ErrorCode.PARSE_ERROR,
    ErrorCode.INVALID_REQUEST,
    ErrorCode.METHOD_NOT_FOUND,
})


def default_message(code: int) -> str:
    return DEFAULT_MESSAGES.get(code, "Unknown error")


@dataclass(frozen=True)
class ErrorObject:
    """The `error` member of a failure response"""
    code: int
    message: str
    data: Any = None

    def __post_init__(self):
        if not self.message:
            object.__setattr__(self, "message", default_message(self.code))

    def to_dict(self) -> Dict[str, Any]:
        result = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorObject":
        return cls(
            code=data["code"],
            message=data.get("message") or "",
            data=data.get("data"),
        )


class RpcError(Exception):
    """Failure carrying an explicit wire error code"""

    code: int = ErrorCode.SERVER_ERROR

    def __init__(self, message: str = "", code: Optional[int] = None, data: Any = None):
        if code is not None:
            self.code = code
        self.message = message or default_message(self.code)
        self.data = data
        super().__init__(self.message)

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(int(self.code), self.message, self.data)


class ParseError(RpcError):
    """Input line was not a complete, valid JSON document"""
    code = ErrorCode.PARSE_ERROR


class InvalidRequestError(RpcError):
    """Request envelope is structurally malformed"""
    code = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str = "", request_id: Any = None, data: Any = None):
        super().__init__(message, data=data)
        self.request_id = request_id


class MethodNotFoundError(RpcError):
    """Requested method is not in the registry"""
    code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, method: Any):
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParamsError(RpcError):
    """Handler rejected its parameters"""
    code = ErrorCode.INVALID_PARAMS


class InternalError(RpcError):
    """The substrate itself failed"""
    code = ErrorCode.INTERNAL_ERROR


class ServerError(RpcError):
    """Unclassified handler failure"""
    code = ErrorCode.SERVER_ERROR


def _explicit_code(exc: BaseException) -> Optional[int]:
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return int(code)
    return None


def classify_failure(exc: BaseException) -> ErrorObject:
    """Map a handler failure to a wire error.

    An `RpcError` keeps its code and data. Any other exception with an
    integer `code` attribute keeps that code verbatim. Everything else is a
    `ServerError`.
    """
    if isinstance(exc, RpcError):
        return exc.to_error_object()

    message = str(exc) or type(exc).__name__
    code = _explicit_code(exc)
    if code is None:
        code = int(ErrorCode.SERVER_ERROR)
    return ErrorObject(code, message)


def claims_dispatcher_code(error: ErrorObject) -> bool:
    """True when a handler failure reports a code only the dispatcher owns"""
    return error.code in DISPATCHER_CODES
