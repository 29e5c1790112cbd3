"""Payload SDK - JSON-RPC runtime for payload transform plugins

A payload plugin is a child process that exposes data-transform handlers to
a host over newline-delimited JSON-RPC 2.0 on stdin/stdout. This library
provides the plugin-side runtime (codec, method registry, dispatcher and
lifecycle), the descriptor types plugin authors fill in, sensor helpers, a
host-side client and a packer for distributing plugin directories.
"""

from payloadsdk.protocol import (
    PROTOCOL_VERSION,
    JSONRPC_VERSION,
    PLUGIN_ID_PATTERN,
    SENSOR_FIELDS,
    TRIGGERS,
    FIELD_TYPES,
    SensorField,
    Trigger,
    is_plugin_payload_name,
    default_sensor_field_keys,
)

from payloadsdk.rpc import (
    FALLBACK_ID,
    Request,
    Response,
    decode,
    encode,
    Dispatcher,
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
    GET_METADATA,
    HEALTH_CHECK,
    MethodRegistry,
    RegistryError,
    DuplicateMethodError,
)

from payloadsdk.manifest import (
    PayloadMetadata,
    MessageTypeDeclaration,
    ManifestError,
    InvalidPayloadNameError,
    validate_payload_name,
)

from payloadsdk.schema_validation import (
    SchemaValidator,
    SchemaValidationError,
    SchemaCompilationError,
    MetadataValidationError,
    validate_metadata,
    validate_manifest,
    validate_params,
)

from payloadsdk.plugin_runtime import (
    PayloadPlugin,
    PayloadPluginConfig,
    LifecycleState,
    PluginRuntimeError,
    PluginConfigError,
    MAX_LINE_BYTES,
)

from payloadsdk.helpers import (
    build_sensor_array,
    format_value,
    filter_sensors_by_tags,
)

__all__ = [
    # Protocol
    "PROTOCOL_VERSION",
    "JSONRPC_VERSION",
    "PLUGIN_ID_PATTERN",
    "SENSOR_FIELDS",
    "TRIGGERS",
    "FIELD_TYPES",
    "SensorField",
    "Trigger",
    "is_plugin_payload_name",
    "default_sensor_field_keys",
    # RPC
    "FALLBACK_ID",
    "Request",
    "Response",
    "decode",
    "encode",
    "Dispatcher",
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
    "MethodRegistry",
    "RegistryError",
    "DuplicateMethodError",
    # Descriptor
    "PayloadMetadata",
    "MessageTypeDeclaration",
    "ManifestError",
    "InvalidPayloadNameError",
    "validate_payload_name",
    # Schema validation
    "SchemaValidator",
    "SchemaValidationError",
    "SchemaCompilationError",
    "MetadataValidationError",
    "validate_metadata",
    "validate_manifest",
    "validate_params",
    # Runtime
    "PayloadPlugin",
    "PayloadPluginConfig",
    "LifecycleState",
    "PluginRuntimeError",
    "PluginConfigError",
    "MAX_LINE_BYTES",
    # Helpers
    "build_sensor_array",
    "format_value",
    "filter_sensors_by_tags",
]
