"""
home-automation: A rule-driven home-automation controller.

This library provides:
- Device handles (lights, thermostats, security devices)
- Declarative automation rules with time, weekly and event triggers
- A background monitor loop that re-evaluates rules on a fixed tick
"""

from home_automation.core.device import Device, LightDevice, SecurityDevice, ThermostatDevice
from home_automation.core.registry import DeviceRegistry
from home_automation.automation.models import AutomationRule
from home_automation.config import MonitorConfig
from home_automation.controller import HomeController
from home_automation.errors import (
    AutomationError,
    InvalidScheduleError,
    ActionExecutionError,
    ConfigurationRaceError,
)

__version__ = "0.1.0"

__all__ = [
    "Device",
    "LightDevice",
    "SecurityDevice",
    "ThermostatDevice",
    "DeviceRegistry",
    "AutomationRule",
    "MonitorConfig",
    "HomeController",
    "AutomationError",
    "InvalidScheduleError",
    "ActionExecutionError",
    "ConfigurationRaceError",
]
