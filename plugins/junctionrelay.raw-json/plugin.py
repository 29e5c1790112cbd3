"""Raw JSON - pass-through flat sensor dictionary as JSON"""

from payloadsdk import PayloadMetadata, PayloadPluginConfig, validate_params

DEFAULTS = {"includeTimestamp": True, "includeMetadata": False}

PARAMS_SCHEMA = {
    "type": "object",
    "required": ["sensors"],
    "properties": {
        "sensors": {"type": "object"},
        "config": {"type": "object"},
        "context": {"type": "object"},
    },
}

metadata = (
    PayloadMetadata(
        "junctionrelay.raw-json",
        "Raw JSON",
        "Pass-through flat sensor dictionary as JSON",
        "Data",
        "📋",
    )
    .with_configurable(["includeTimestamp", "includeMetadata"], DEFAULTS)
    .with_message_type("sensor", "periodic", "Flat tag to value dictionary")
    .with_output("application/json", "Flat JSON object with sensor tags as keys")
    .with_author("JunctionRelay")
)


async def sensor(params):
    validate_params(params, PARAMS_SCHEMA)
    config = {**DEFAULTS, **(params.get("config") or {})}
    context = params.get("context") or {}

    result = {}
    if config["includeTimestamp"]:
        result["timestamp"] = context.get("timestamp")
    if config["includeMetadata"]:
        result["screenId"] = context.get("screenId")
        result["sensorSource"] = context.get("sensorSource")
    for tag, entry in params["sensors"].items():
        result[tag] = entry.get("value")

    return {"payload": result, "contentType": "application/json"}


async def get_output_schema(params):
    return {
        "description": "Flat JSON object with sensor tags as keys and raw values",
        "example": {"timestamp": 1771257808745, "cpu_usage_total": 45.2, "gpu_temp": 72},
    }


plugin = PayloadPluginConfig(
    metadata=metadata,
    handlers={
        "sensor": sensor,
        "getOutputSchema": get_output_schema,
    },
)
