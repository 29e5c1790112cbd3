"""Sensor helpers for plugin handlers"""

from typing import Any, Dict, Iterable, List, Optional, Union

SensorEntry = Dict[str, Any]


def build_sensor_array(sensors: Dict[str, SensorEntry]) -> List[SensorEntry]:
    """Convert a sensors record into a flat list with `tag` included.

    Useful for plugins that need to iterate sensors with their keys.
    """
    return [{**sensor, "tag": tag} for tag, sensor in sensors.items()]


def format_value(value: Union[str, int, float, bool], unit: Optional[str] = None) -> str:
    """Format a sensor value with its unit for display"""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    if not unit or unit == "N/A":
        return text
    return f"{text} {unit}"


def filter_sensors_by_tags(sensors: Dict[str, SensorEntry], tags: Iterable[str]) -> Dict[str, SensorEntry]:
    """Keep only the entries whose tag is in `tags`"""
    wanted = set(tags)
    return {tag: sensor for tag, sensor in sensors.items() if tag in wanted}
