"""Tests for the error taxonomy and failure classification"""

from payloadsdk.rpc.errors import (
    ErrorCode,
    ErrorObject,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    RpcError,
    ServerError,
    claims_dispatcher_code,
    classify_failure,
)


class CodedError(Exception):
    def __init__(self, message, code):
        super().__init__(message)
        self.code = code


# TEST030: Test fixed numeric codes
def test_030_error_codes():
    assert ErrorCode.PARSE_ERROR == -32700
    assert ErrorCode.INVALID_REQUEST == -32600
    assert ErrorCode.METHOD_NOT_FOUND == -32601
    assert ErrorCode.INVALID_PARAMS == -32602
    assert ErrorCode.INTERNAL_ERROR == -32603
    assert ErrorCode.SERVER_ERROR == -32000


# TEST031: Test each RpcError subclass carries its own code
def test_031_subclass_codes():
    assert ParseError().code == ErrorCode.PARSE_ERROR
    assert InvalidRequestError().code == ErrorCode.INVALID_REQUEST
    assert MethodNotFoundError("x").code == ErrorCode.METHOD_NOT_FOUND
    assert InvalidParamsError().code == ErrorCode.INVALID_PARAMS
    assert InternalError().code == ErrorCode.INTERNAL_ERROR
    assert ServerError().code == ErrorCode.SERVER_ERROR


# TEST032: Test empty messages are replaced by the code's default message
def test_032_default_messages():
    assert ParseError().message == "Parse error"
    assert ErrorObject(-32602, "").message == "Invalid params"
    assert ErrorObject(12345, "").message == "Unknown error"


# TEST033: Test ErrorObject omits data when None and keeps it otherwise
def test_033_error_object_data():
    assert ErrorObject(-32000, "boom").to_dict() == {"code": -32000, "message": "boom"}
    assert ErrorObject(-32602, "bad", ["x"]).to_dict() == {"code": -32602, "message": "bad", "data": ["x"]}


# TEST034: Test plain exceptions classify as ServerError with their message
def test_034_classify_plain_exception():
    error = classify_failure(ValueError("sensor missing"))
    assert error.code == ErrorCode.SERVER_ERROR
    assert error.message == "sensor missing"


# TEST035: Test an exception with an integer code attribute keeps that code
def test_035_classify_explicit_code():
    error = classify_failure(CodedError("nope", 4001))
    assert error.code == 4001
    assert error.message == "nope"


# TEST036: Test non-integer and boolean code attributes are ignored
def test_036_classify_ignores_non_int_code():
    assert classify_failure(CodedError("a", "E42")).code == ErrorCode.SERVER_ERROR
    assert classify_failure(CodedError("b", True)).code == ErrorCode.SERVER_ERROR
    assert classify_failure(CodedError("c", None)).code == ErrorCode.SERVER_ERROR


# TEST037: Test RpcError keeps code and data through classification
def test_037_classify_rpc_error():
    error = classify_failure(InvalidParamsError("bad config", data={"field": "x"}))
    assert error.code == ErrorCode.INVALID_PARAMS
    assert error.data == {"field": "x"}


# TEST038: Test an exception with an empty message falls back to its class name
def test_038_classify_empty_message():
    assert classify_failure(KeyError()).message == "KeyError"


# TEST039: Test RpcError with explicit custom code
def test_039_rpc_error_custom_code():
    error = RpcError("custom", code=-32099)
    assert error.to_error_object().code == -32099


# TEST040: Test dispatcher-owned codes are recognised when a handler claims them
def test_040_claims_dispatcher_code():
    assert claims_dispatcher_code(ErrorObject(-32700, "x"))
    assert claims_dispatcher_code(ErrorObject(-32601, "x"))
    assert not claims_dispatcher_code(ErrorObject(-32602, "x"))
    assert not claims_dispatcher_code(ErrorObject(-32000, "x"))
