"""JR Protocol - sensor and config payloads for LVGL, matrix and NeoPixel devices"""

from payloadsdk import PayloadMetadata, PayloadPluginConfig, build_sensor_array

PROFILES = ["lvgl-grid", "lvgl-radio", "lvgl-plotter", "quad", "matrix", "neopixel"]
DEFAULT_PROFILE = "lvgl-grid"

metadata = (
    PayloadMetadata(
        "junctionrelay.jr-protocol",
        "JR Protocol",
        "JunctionRelay Server protocol for device communication",
        "Protocol",
        "🔌",
    )
    .with_profiles(PROFILES)
    .with_message_type("config", "connect", "Device configuration for the selected profile")
    .with_message_type("sensor", "periodic", "Numbered sensor readings")
    .with_output("application/json", "JR sensor/config payload for LVGL, matrix, and NeoPixel devices")
    .with_author("JunctionRelay")
)


async def sensor(params):
    context = params.get("context") or {}
    numbered = {}
    for i, entry in enumerate(build_sensor_array(params.get("sensors") or {}), start=1):
        entry["sensorTag"] = entry.pop("tag")
        numbered[f"sensor_{i}"] = entry

    return {
        "payload": {
            "type": "sensor",
            "screenId": context.get("screenId"),
            "profile": params.get("profile") or DEFAULT_PROFILE,
            "sensors": numbered,
            "timestamp": context.get("timestamp"),
        },
        "contentType": "application/json",
    }


async def config(params):
    return {
        "payload": {
            "type": "config",
            "profile": params.get("profile") or DEFAULT_PROFILE,
            "config": params.get("config") or {},
        },
        "contentType": "application/json",
    }


async def get_output_schema(params):
    profile = params.get("profile") or DEFAULT_PROFILE
    return {
        "description": f"JR Protocol output for {profile} profile",
        "example": {"type": "sensor", "screenId": "default", "profile": profile, "sensors": {}, "timestamp": 0},
    }


plugin = PayloadPluginConfig(
    metadata=metadata,
    handlers={
        "sensor": sensor,
        "config": config,
        "getOutputSchema": get_output_schema,
    },
)
