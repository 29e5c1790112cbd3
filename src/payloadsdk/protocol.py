"""Payload protocol constants

Constants shared by plugins and hosts: protocol versions, the namespaced
plugin identifier grammar, message-type triggers, configuration field types
and the catalog of sensor fields a host can send to handlers.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


PROTOCOL_VERSION = "1.0.0"
JSONRPC_VERSION = "2.0"

# `<namespace>.<name>`, both segments lowercase kebab-case.
# Examples: `junctionrelay.jr-protocol`, `yourname.custom-format`
PLUGIN_ID_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*\.[a-z][a-z0-9]*(-[a-z0-9]+)*$")


def is_plugin_payload_name(name) -> bool:
    """Check whether a payload name is a valid namespaced plugin identifier"""
    return isinstance(name, str) and PLUGIN_ID_PATTERN.fullmatch(name) is not None


class Trigger(str, Enum):
    """When the host calls a declared message type handler"""
    CONNECT = "connect"
    PERIODIC = "periodic"
    DISCONNECT = "disconnect"
    ON_CHANGE = "on-change"
    ON_DEMAND = "on-demand"
    ONCE = "once"


TRIGGERS: Tuple[str, ...] = tuple(t.value for t in Trigger)

FIELD_TYPES: Tuple[str, ...] = (
    "text",
    "number",
    "boolean",
    "color",
    "select",
    "slider",
    "json",
    "checkboxGroup",
)


@dataclass(frozen=True)
class SensorField:
    """One field a sensor entry can carry, as offered in `fieldsToSend`"""
    key: str
    label: str
    description: str
    default: bool
    group: str

    def to_dict(self):
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "default": self.default,
            "group": self.group,
        }


def _custom_attributes():
    return tuple(
        SensorField(
            f"customAttribute{i}",
            f"Custom Attribute {i}",
            f"User-defined custom attribute slot {i}",
            False,
            "Custom",
        )
        for i in range(1, 11)
    )


SENSOR_FIELDS: Tuple[SensorField, ...] = (
    # Core reading
    SensorField("value", "Value", "The sensor reading (numeric formatted to decimal places, or string)", True, "Core"),
    SensorField("unit", "Unit", "Unit of measurement (°C, %, MB, etc.)", True, "Core"),
    SensorField("decimalPlaces", "Decimal Places", "Number of decimal places for numeric formatting", False, "Core"),
    SensorField("displayValue", "Display Value", "Pre-formatted value for direct display", False, "Core"),
    # Identity & metadata
    SensorField("id", "ID", "Database primary key", False, "Identity"),
    SensorField("originalId", "Original ID", "Reference to original sensor before cloning", False, "Identity"),
    SensorField("name", "Name", "Sensor display name", False, "Identity"),
    SensorField("externalId", "External ID", "Identifier from the external data source", False, "Identity"),
    SensorField("sensorType", "Sensor Type", "Type classification (temperature, utilization, clock, etc.)", False, "Identity"),
    SensorField("category", "Category", "Sensor category (cpu, memory, gpu, disk, etc.)", False, "Identity"),
    SensorField("componentName", "Component Name", "Hardware component name (CPU Package, GPU Core, etc.)", False, "Identity"),
    SensorField("deviceName", "Device Name", "Name of the device that owns this sensor", False, "Identity"),
    SensorField("formula", "Formula", "Optional calculation formula applied to the raw value", False, "Identity"),
    SensorField("lastUpdated", "Last Updated", "UTC timestamp of the most recent value update", False, "Identity"),
    # Relationship IDs
    SensorField("junctionId", "Junction ID", "Foreign key to the parent junction", False, "Relationships"),
    SensorField("junctionDeviceLinkId", "Junction Device Link ID", "Link to junction-device association", False, "Relationships"),
    SensorField("junctionCollectorLinkId", "Junction Collector Link ID", "Link to junction-collector association", False, "Relationships"),
    SensorField("deviceId", "Device ID", "Foreign key to the source device", False, "Relationships"),
    SensorField("serviceId", "Service ID", "Foreign key to the source service", False, "Relationships"),
    SensorField("collectorId", "Collector ID", "Foreign key to the source collector", False, "Relationships"),
    SensorField("sensorOrder", "Sensor Order", "Display/processing sort order", False, "Relationships"),
    # MQTT
    SensorField("mqttServiceId", "MQTT Service ID", "MQTT service this sensor publishes to", False, "MQTT"),
    SensorField("mqttTopic", "MQTT Topic", "MQTT topic path for this sensor", False, "MQTT"),
    SensorField("mqttQoS", "MQTT QoS", "MQTT Quality of Service level (0, 1, or 2)", False, "MQTT"),
    # Status flags
    SensorField("isMissing", "Is Missing", "Whether sensor data is currently unavailable", False, "Status"),
    SensorField("isStale", "Is Stale", "Whether the reading is older than the staleness threshold", False, "Status"),
    SensorField("isSelected", "Is Selected", "Whether the sensor is selected in the UI", False, "Status"),
    SensorField("isVisible", "Is Visible", "Whether the sensor is visible in layouts", False, "Status"),
) + _custom_attributes() + (
    # Source tracing
    SensorField("pollerSource", "Poller Source", "Which collector produced this reading (psutil, hwinfo, etc.)", False, "Source"),
    SensorField("rawLabel", "Raw Label", "Original sensor label before tag normalization", False, "Source"),
)


def default_sensor_field_keys() -> Tuple[str, ...]:
    """Keys of the sensor fields included when a plugin sets no `fieldsToSend`"""
    return tuple(f.key for f in SENSOR_FIELDS if f.default)
