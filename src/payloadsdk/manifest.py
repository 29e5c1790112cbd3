"""Plugin descriptor

The descriptor (`PayloadMetadata`) identifies a plugin instance and is
returned verbatim by the `getMetadata` built-in. Its only field the runtime
itself checks is `payloadName`, which must be a namespaced identifier.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from payloadsdk.protocol import PLUGIN_ID_PATTERN, Trigger, is_plugin_payload_name


class ManifestError(Exception):
    """Descriptor error"""
    pass


class InvalidPayloadNameError(ManifestError, ValueError):
    """payloadName is not a namespaced dot-notation identifier"""

    def __init__(self, name: Any):
        super().__init__(
            f"payloadName {name!r} must be namespaced dot-notation "
            f"matching {PLUGIN_ID_PATTERN.pattern} (e.g. 'junctionrelay.jr-protocol')"
        )
        self.name = name


def validate_payload_name(name: Any) -> str:
    """Return the name unchanged, or raise InvalidPayloadNameError"""
    if not is_plugin_payload_name(name):
        raise InvalidPayloadNameError(name)
    return name


@dataclass
class MessageTypeDeclaration:
    """When the host calls a handler, and what it does"""
    trigger: str
    description: Optional[str] = None

    def __post_init__(self):
        # Accept Trigger members, store the wire string
        self.trigger = Trigger(self.trigger).value

    def to_dict(self) -> Dict[str, Any]:
        result = {"trigger": self.trigger}
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageTypeDeclaration":
        return cls(trigger=data["trigger"], description=data.get("description"))


# Optional descriptor keys, in wire (camelCase) spelling -> attribute name
_OPTIONAL_FIELDS = {
    "fields": "fields",
    "defaults": "defaults",
    "profiles": "profiles",
    "outputContentType": "output_content_type",
    "outputDescription": "output_description",
    "setupInstructions": "setup_instructions",
    "authorName": "author_name",
    "profileConfigs": "profile_configs",
}


class PayloadMetadata:
    """Plugin descriptor

    A descriptor includes:
    - Identity (payloadName, displayName, description, category, emoji)
    - Declared message types, keyed by handler name
    - Optional configuration, output and setup metadata
    """

    def __init__(self, payload_name: str, display_name: str, description: str, category: str, emoji: str):
        self.payload_name = payload_name
        self.display_name = display_name
        self.description = description
        self.category = category
        self.emoji = emoji
        self.message_types: Dict[str, MessageTypeDeclaration] = {}
        self.fields: Optional[Dict[str, Any]] = None
        self.defaults: Optional[Dict[str, Any]] = None
        self.profiles: Optional[List[str]] = None
        self.output_content_type: Optional[str] = None
        self.output_description: Optional[str] = None
        self.setup_instructions: Optional[List[Dict[str, str]]] = None
        self.author_name: Optional[str] = None
        self.profile_configs: Optional[Dict[str, Any]] = None

    def with_message_type(self, handler: str, trigger: str, description: Optional[str] = None) -> "PayloadMetadata":
        """Declare that `handler` is called by the host on `trigger`"""
        self.message_types[handler] = MessageTypeDeclaration(trigger, description)
        return self

    def with_output(self, content_type: str, description: Optional[str] = None) -> "PayloadMetadata":
        self.output_content_type = content_type
        if description is not None:
            self.output_description = description
        return self

    def with_author(self, author_name: str) -> "PayloadMetadata":
        self.author_name = author_name
        return self

    def with_configurable(self, keys: List[str], defaults: Optional[Dict[str, Any]] = None) -> "PayloadMetadata":
        self.fields = {"configurable": list(keys)}
        if defaults is not None:
            self.defaults = dict(defaults)
        return self

    def with_profiles(self, profiles: List[str]) -> "PayloadMetadata":
        self.profiles = list(profiles)
        return self

    def with_setup_instruction(self, title: str, body: str) -> "PayloadMetadata":
        if self.setup_instructions is None:
            self.setup_instructions = []
        self.setup_instructions.append({"title": title, "body": body})
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict"""
        result: Dict[str, Any] = {
            "payloadName": self.payload_name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
            "emoji": self.emoji,
        }
        if self.message_types:
            result["messageTypes"] = {name: decl.to_dict() for name, decl in self.message_types.items()}

        for key, attr in _OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value

        return result

    def to_json(self) -> str:
        """Serialize to JSON string"""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PayloadMetadata":
        """Parse from dict"""
        metadata = cls(
            payload_name=data["payloadName"],
            display_name=data["displayName"],
            description=data["description"],
            category=data["category"],
            emoji=data["emoji"],
        )
        for name, decl in (data.get("messageTypes") or {}).items():
            metadata.message_types[name] = MessageTypeDeclaration.from_dict(decl)

        for key, attr in _OPTIONAL_FIELDS.items():
            if key in data:
                setattr(metadata, attr, data[key])

        return metadata

    @classmethod
    def from_json(cls, json_str: str) -> "PayloadMetadata":
        """Parse from JSON string"""
        return cls.from_dict(json.loads(json_str))

    def validate(self) -> None:
        """Validate the payload name and the full descriptor schema.

        Raises InvalidPayloadNameError or MetadataValidationError.
        """
        from payloadsdk.schema_validation import validate_metadata

        validate_payload_name(self.payload_name)
        validate_metadata(self.to_dict())


def descriptor_dict(metadata: Any) -> Dict[str, Any]:
    """Return the descriptor as the dict `getMetadata` answers with.

    A PayloadMetadata is converted once; a mapping is returned as supplied.
    """
    if isinstance(metadata, PayloadMetadata):
        return metadata.to_dict()
    if isinstance(metadata, dict):
        return metadata
    raise ManifestError(f"Plugin metadata must be a PayloadMetadata or a dict, got {type(metadata).__name__}")
