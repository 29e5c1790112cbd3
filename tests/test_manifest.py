"""Tests for the plugin descriptor"""

import json

import pytest

from payloadsdk.manifest import (
    InvalidPayloadNameError,
    ManifestError,
    MessageTypeDeclaration,
    PayloadMetadata,
    descriptor_dict,
    validate_payload_name,
)
from payloadsdk.protocol import Trigger
from payloadsdk.schema_validation import MetadataValidationError


def _metadata():
    return PayloadMetadata(
        "junctionrelay.raw-json",
        "Raw JSON",
        "Pass-through flat sensor dictionary as JSON",
        "Data",
        "📋",
    )


# TEST140: Test minimal descriptor serializes with camelCase identity keys only
def test_140_minimal_to_dict():
    assert _metadata().to_dict() == {
        "payloadName": "junctionrelay.raw-json",
        "displayName": "Raw JSON",
        "description": "Pass-through flat sensor dictionary as JSON",
        "category": "Data",
        "emoji": "📋",
    }


# TEST141: Test builders populate the optional descriptor keys
def test_141_builders():
    metadata = (
        _metadata()
        .with_configurable(["includeTimestamp"], {"includeTimestamp": True})
        .with_message_type("sensor", "periodic", "Readings")
        .with_output("application/json", "Flat JSON")
        .with_author("JunctionRelay")
        .with_profiles(["default"])
        .with_setup_instruction("Install", "Copy the plugin folder")
    )
    data = metadata.to_dict()
    assert data["fields"] == {"configurable": ["includeTimestamp"]}
    assert data["defaults"] == {"includeTimestamp": True}
    assert data["messageTypes"] == {"sensor": {"trigger": "periodic", "description": "Readings"}}
    assert data["outputContentType"] == "application/json"
    assert data["outputDescription"] == "Flat JSON"
    assert data["authorName"] == "JunctionRelay"
    assert data["profiles"] == ["default"]
    assert data["setupInstructions"] == [{"title": "Install", "body": "Copy the plugin folder"}]


# TEST142: Test descriptor JSON round trip keeps every key
def test_142_json_round_trip():
    metadata = _metadata().with_message_type("sensor", Trigger.ON_CHANGE).with_author("Someone")
    restored = PayloadMetadata.from_json(metadata.to_json())
    assert restored.to_dict() == metadata.to_dict()
    assert restored.message_types["sensor"].trigger == "on-change"


# TEST143: Test unknown triggers are rejected
def test_143_unknown_trigger():
    with pytest.raises(ValueError):
        MessageTypeDeclaration("hourly")


# TEST144: Test message type declarations omit absent descriptions
def test_144_message_type_dict():
    assert MessageTypeDeclaration("once").to_dict() == {"trigger": "once"}
    assert MessageTypeDeclaration.from_dict({"trigger": "connect", "description": "d"}).description == "d"


# TEST145: Test payload name validation
@pytest.mark.parametrize("name", [
    "junctionrelay.jr-protocol",
    "yourname.custom-format",
    "acme.widget-v2",
    "a1.b2",
])
def test_145_valid_payload_names(name):
    assert validate_payload_name(name) == name


@pytest.mark.parametrize("name", [
    "BadName",
    "nonamespace",
    "Acme.widget",
    "acme.-widget",
    "acme..widget",
    "acme.widget-",
    "1acme.widget",
    "acme.widget.extra",
    "acme.widget\n",
    42,
])
def test_146_invalid_payload_names(name):
    with pytest.raises(InvalidPayloadNameError) as exc_info:
        validate_payload_name(name)
    assert "namespaced dot-notation" in str(exc_info.value)


# TEST147: Test InvalidPayloadNameError is both a ManifestError and a ValueError
def test_147_error_hierarchy():
    assert issubclass(InvalidPayloadNameError, ManifestError)
    assert issubclass(InvalidPayloadNameError, ValueError)


# TEST148: Test validate() accepts a complete descriptor and rejects a bad name
def test_148_validate():
    _metadata().with_message_type("sensor", "periodic").validate()

    bad = PayloadMetadata("BadName", "Bad", "Bad", "Data", "B")
    with pytest.raises(InvalidPayloadNameError):
        bad.validate()


# TEST149: Test validate() reports schema violations in optional fields
def test_149_validate_schema():
    metadata = _metadata()
    metadata.profiles = "not-a-list"
    with pytest.raises(MetadataValidationError) as exc_info:
        metadata.validate()
    assert any("profiles" in e for e in exc_info.value.errors)


# TEST150: Test descriptor_dict returns a supplied dict as the same object
def test_150_descriptor_dict():
    raw = {"payloadName": "acme.raw", "extra": True}
    assert descriptor_dict(raw) is raw
    assert descriptor_dict(_metadata())["payloadName"] == "junctionrelay.raw-json"
    with pytest.raises(ManifestError):
        descriptor_dict(["not", "a", "descriptor"])


# TEST151: Test to_json keeps non-ASCII text readable
def test_151_to_json_utf8():
    assert "📋" in _metadata().to_json()
    assert json.loads(_metadata().to_json())["emoji"] == "📋"
