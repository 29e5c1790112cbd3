"""XSD Protocol - dictionarySensors/unmappedSensors payloads"""

from payloadsdk import PayloadMetadata, PayloadPluginConfig, SchemaValidator

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "unmappedSensors": {
            "type": "object",
            "additionalProperties": {"type": "object"},
        },
    },
}

_validator = SchemaValidator()

metadata = (
    PayloadMetadata(
        "junctionrelay.xsd-protocol",
        "XSD Protocol",
        "XSD dictionarySensors format for device communication",
        "Protocol",
        "📡",
    )
    .with_configurable(["unmappedSensors"])
    .with_message_type("sensor", "periodic", "dictionarySensors/unmappedSensors payload")
    .with_output("application/json", "XSD sensor payload with dictionarySensors/unmappedSensors structure")
    .with_author("JunctionRelay")
)


def _xsd_entry(tag, entry, with_display=True):
    result = {
        "value": entry.get("value"),
        "unit": entry.get("unit") or "",
    }
    if with_display:
        display = entry.get("displayValue")
        result["displayValue"] = display if display is not None else _js_string(entry.get("value"))
    result["pollerSource"] = entry.get("pollerSource") or "unknown"
    result["rawLabel"] = entry.get("rawLabel") or tag
    return result


def _js_string(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


async def sensor(params):
    sensors = params.get("sensors") or {}
    config = params.get("config") or {}
    context = params.get("context") or {}

    dictionary_sensors = {tag: _xsd_entry(tag, entry) for tag, entry in sensors.items()}
    unmapped = config.get("unmappedSensors") or {}
    unmapped_sensors = {key: _xsd_entry(key, entry, with_display=False) for key, entry in unmapped.items()}

    return {
        "payload": {
            "type": "xsd_sensor",
            "screenId": context.get("screenId"),
            "dictionarySensors": dictionary_sensors,
            "unmappedSensors": unmapped_sensors,
            "sensorSource": context.get("sensorSource"),
            "timestamp": context.get("timestamp"),
        },
        "contentType": "application/json",
    }


async def validate(params):
    errors = _validator.errors(params.get("config") or {}, CONFIG_SCHEMA)
    if errors:
        return {"valid": False, "errors": errors}
    return {"valid": True}


async def get_output_schema(params):
    return {
        "description": "XSD sensor payload with dictionarySensors/unmappedSensors structure",
        "example": {
            "type": "xsd_sensor",
            "screenId": "xsd",
            "dictionarySensors": {
                "cpu_usage_total": {
                    "value": 45.2,
                    "unit": "%",
                    "displayValue": "45.2",
                    "pollerSource": "psutil",
                    "rawLabel": "usage_total",
                },
            },
            "unmappedSensors": {
                "gpu_temp": {"value": 72, "unit": "°C", "pollerSource": "nvidia-smi", "rawLabel": "GPU Temperature"},
            },
            "sensorSource": "local",
            "timestamp": 1771257808745,
        },
    }


plugin = PayloadPluginConfig(
    metadata=metadata,
    handlers={
        "sensor": sensor,
        "validate": validate,
        "getOutputSchema": get_output_schema,
    },
)
