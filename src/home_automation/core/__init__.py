"""
Core components of the home-automation controller.

This package contains:
- device: Device handles (lights, thermostats, security devices)
- registry: DeviceRegistry for the device collection
"""

from home_automation.core.device import (
    Device,
    EnergyMonitored,
    LightDevice,
    SecurityDevice,
    SecurityKind,
    ThermostatDevice,
)
from home_automation.core.registry import DeviceRegistry

__all__ = [
    "Device",
    "EnergyMonitored",
    "LightDevice",
    "SecurityDevice",
    "SecurityKind",
    "ThermostatDevice",
    "DeviceRegistry",
]
