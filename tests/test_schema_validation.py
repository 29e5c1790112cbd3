"""Tests for JSON Schema validation of descriptors, manifests and params"""

import pytest

from payloadsdk.rpc.errors import ErrorCode, InvalidParamsError
from payloadsdk.schema_validation import (
    MetadataValidationError,
    SchemaCompilationError,
    SchemaValidator,
    validate_manifest,
    validate_metadata,
    validate_params,
)


def _descriptor(**extra):
    descriptor = {
        "payloadName": "acme.widget",
        "displayName": "Widget",
        "description": "Test widget",
        "category": "Data",
        "emoji": "W",
    }
    descriptor.update(extra)
    return descriptor


PARAMS_SCHEMA = {
    "type": "object",
    "required": ["sensors"],
    "properties": {"sensors": {"type": "object"}},
}


# TEST160: Test a minimal descriptor validates
def test_160_minimal_descriptor():
    validate_metadata(_descriptor())


# TEST161: Test missing required descriptor fields are reported
def test_161_missing_fields():
    descriptor = _descriptor()
    del descriptor["emoji"]
    with pytest.raises(MetadataValidationError) as exc_info:
        validate_metadata(descriptor)
    assert any("emoji" in e for e in exc_info.value.errors)
    assert str(exc_info.value).startswith("Invalid plugin metadata:")


# TEST162: Test the schema enforces the payloadName pattern
def test_162_name_pattern():
    with pytest.raises(MetadataValidationError) as exc_info:
        validate_metadata(_descriptor(payloadName="BadName"))
    assert any(e.startswith("payloadName:") for e in exc_info.value.errors)


# TEST163: Test message type triggers are checked against the trigger set
def test_163_message_type_triggers():
    validate_metadata(_descriptor(messageTypes={"sensor": {"trigger": "on-demand"}}))
    with pytest.raises(MetadataValidationError):
        validate_metadata(_descriptor(messageTypes={"sensor": {"trigger": "hourly"}}))


# TEST164: Test profile configs validate field definitions
def test_164_profile_configs():
    good = {
        "lvgl-grid": {
            "fieldGroups": [{
                "name": "Layout",
                "fields": [
                    {"key": "rows", "type": "number", "label": "Rows", "min": 1, "max": 8},
                    {"key": "theme", "type": "select", "label": "Theme",
                     "options": [{"value": "dark", "label": "Dark"}]},
                ],
            }],
        },
    }
    validate_metadata(_descriptor(profileConfigs=good))

    bad = {"lvgl-grid": {"fieldGroups": [{"name": "Layout", "fields": [{"key": "x", "type": "dial", "label": "X"}]}]}}
    with pytest.raises(MetadataValidationError):
        validate_metadata(_descriptor(profileConfigs=bad))


# TEST165: Test unknown descriptor keys are allowed
def test_165_extra_keys_allowed():
    validate_metadata(_descriptor(vendorExtension={"anything": 1}))


# TEST166: Test manifests require type, entry and the identity fields
def test_166_manifest():
    validate_manifest(_descriptor(type="payload", entry="plugin.py"))
    with pytest.raises(MetadataValidationError) as exc_info:
        validate_manifest(_descriptor(type="collector"))
    assert str(exc_info.value).startswith("Invalid plugin manifest:")
    assert any("entry" in e for e in exc_info.value.errors)


# TEST167: Test params validation raises InvalidParams with the violations as data
def test_167_validate_params():
    validate_params({"sensors": {}}, PARAMS_SCHEMA)
    with pytest.raises(InvalidParamsError) as exc_info:
        validate_params({"sensors": []}, PARAMS_SCHEMA)
    error = exc_info.value.to_error_object()
    assert error.code == ErrorCode.INVALID_PARAMS
    assert error.message.startswith("Invalid params:")
    assert error.data and error.data[0].startswith("sensors:")


# TEST168: Test errors() returns an empty list for valid values
def test_168_errors_empty():
    assert SchemaValidator().errors({"sensors": {}}, PARAMS_SCHEMA) == []


# TEST169: Test compiled schemas are cached
def test_169_cache():
    validator = SchemaValidator()
    validator.errors({}, PARAMS_SCHEMA)
    validator.errors({"sensors": {}}, PARAMS_SCHEMA)
    assert len(validator.schema_cache) == 1


# TEST170: Test an invalid schema raises SchemaCompilationError
def test_170_bad_schema():
    with pytest.raises(SchemaCompilationError):
        SchemaValidator().errors({}, {"type": 12})
