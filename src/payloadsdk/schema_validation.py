"""JSON Schema validation for plugin descriptors, manifests and handler params

Validates JSON data against JSON Schema Draft-07. The descriptor schema
describes the presentation metadata hosts read from `getMetadata`; the
manifest schema adds the packaging fields of `plugin.json`.
"""

import json
from typing import Any, Dict, List

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from payloadsdk.protocol import FIELD_TYPES, PLUGIN_ID_PATTERN, TRIGGERS
from payloadsdk.rpc.errors import InvalidParamsError


class SchemaValidationError(Exception):
    """Schema validation error"""
    pass


class SchemaCompilationError(SchemaValidationError):
    """Schema compilation failed"""
    def __init__(self, msg: str):
        super().__init__(f"Schema compilation failed: {msg}")


class MetadataValidationError(SchemaValidationError):
    """Descriptor or manifest does not match its schema"""
    def __init__(self, subject: str, errors: List[str]):
        details = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Invalid {subject}:\n{details}")
        self.subject = subject
        self.errors = errors


_FIELD_DEFINITION = {
    "type": "object",
    "required": ["key", "type", "label"],
    "properties": {
        "key": {"type": "string", "minLength": 1},
        "type": {"enum": list(FIELD_TYPES)},
        "label": {"type": "string"},
        "min": {"type": "number"},
        "max": {"type": "number"},
        "step": {"type": "number"},
        "options": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["value", "label"],
                "properties": {
                    "value": {"type": "string"},
                    "label": {"type": "string"},
                },
            },
        },
        "description": {"type": "string"},
    },
}

PAYLOAD_METADATA_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["payloadName", "displayName", "description", "category", "emoji"],
    "properties": {
        "payloadName": {"type": "string", "pattern": PLUGIN_ID_PATTERN.pattern},
        "displayName": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "category": {"type": "string"},
        "emoji": {"type": "string"},
        "fields": {
            "type": "object",
            "properties": {
                "configurable": {"type": "array", "items": {"type": "string"}},
            },
        },
        "defaults": {"type": "object"},
        "profiles": {"type": "array", "items": {"type": "string"}},
        "messageTypes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["trigger"],
                "properties": {
                    "trigger": {"enum": list(TRIGGERS)},
                    "description": {"type": "string"},
                },
            },
        },
        "outputContentType": {"type": "string"},
        "outputDescription": {"type": "string"},
        "setupInstructions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["title", "body"],
                "properties": {
                    "title": {"type": "string"},
                    "body": {"type": "string"},
                },
            },
        },
        "authorName": {"type": "string"},
        "profileConfigs": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["fieldGroups"],
                "properties": {
                    "fieldGroups": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["name", "fields"],
                            "properties": {
                                "name": {"type": "string"},
                                "description": {"type": "string"},
                                "fields": {"type": "array", "items": _FIELD_DEFINITION},
                            },
                        },
                    },
                },
            },
        },
    },
}

PLUGIN_MANIFEST_SCHEMA: Dict[str, Any] = {
    **PAYLOAD_METADATA_SCHEMA,
    "required": ["type", "payloadName", "entry", "displayName", "description", "category", "emoji"],
    "properties": {
        **PAYLOAD_METADATA_SCHEMA["properties"],
        "type": {"const": "payload"},
        "entry": {"type": "string", "minLength": 1},
    },
}


class SchemaValidator:
    """Schema validator with caching for performance"""

    def __init__(self):
        self.schema_cache: Dict[str, Draft7Validator] = {}

    def _validator(self, schema: Dict[str, Any]) -> Draft7Validator:
        # Cache compiled schemas by schema JSON
        schema_key = json.dumps(schema, sort_keys=True)
        if schema_key not in self.schema_cache:
            try:
                Draft7Validator.check_schema(schema)
            except SchemaError as e:
                raise SchemaCompilationError(e.message)
            self.schema_cache[schema_key] = Draft7Validator(schema)
        return self.schema_cache[schema_key]

    def errors(self, value: Any, schema: Dict[str, Any]) -> List[str]:
        """Return one message per violation, empty when the value is valid"""
        validator = self._validator(schema)
        messages = []
        for error in sorted(validator.iter_errors(value), key=lambda e: list(e.absolute_path)):
            location = "/".join(str(p) for p in error.absolute_path)
            messages.append(f"{location}: {error.message}" if location else error.message)
        return messages

    def validate_metadata(self, metadata: Any) -> None:
        errors = self.errors(metadata, PAYLOAD_METADATA_SCHEMA)
        if errors:
            raise MetadataValidationError("plugin metadata", errors)

    def validate_manifest(self, manifest: Any) -> None:
        errors = self.errors(manifest, PLUGIN_MANIFEST_SCHEMA)
        if errors:
            raise MetadataValidationError("plugin manifest", errors)

    def validate_params(self, params: Any, schema: Dict[str, Any]) -> None:
        errors = self.errors(params, schema)
        if errors:
            raise InvalidParamsError("Invalid params: " + "; ".join(errors), data=errors)


_default_validator = SchemaValidator()


def validate_metadata(metadata: Any) -> None:
    """Raise MetadataValidationError if a descriptor does not match the schema"""
    _default_validator.validate_metadata(metadata)


def validate_manifest(manifest: Any) -> None:
    """Raise MetadataValidationError if a plugin.json manifest does not match the schema"""
    _default_validator.validate_manifest(manifest)


def validate_params(params: Any, schema: Dict[str, Any]) -> None:
    """Validate handler params, raising InvalidParamsError (code -32602) on failure.

    Handlers call this themselves; the dispatcher never validates params.
    """
    _default_validator.validate_params(params, schema)
