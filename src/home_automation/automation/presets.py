"""
Automation presets - rule templates.

Factories for the three trigger kinds, plus common device patterns
built on top of them.
"""

from typing import Iterable, Optional, Sequence

from home_automation.core.device import Device, SecurityDevice, ThermostatDevice

from .models import (
    ALL_DAYS,
    Action,
    AutomationRule,
    ProbabilisticEventTrigger,
    TimeOfDayTrigger,
    WeeklyTrigger,
)


def time_based_rule(name: str, at: str, action: Action) -> AutomationRule:
    """
    Create a rule that fires every day at a given time.

    Args:
        name: Rule name
        at: Time in HH:MM (24-hour) format
        action: Callable to run

    Raises:
        InvalidScheduleError: If `at` is not a valid time
    """
    return AutomationRule(name=name, trigger=TimeOfDayTrigger(at=at), action=action)


def scheduled_rule(
    name: str,
    at: str,
    action: Action,
    days: Optional[Iterable[str]] = None,
) -> AutomationRule:
    """
    Create a rule that fires at a given time on selected weekdays.

    Args:
        name: Rule name
        at: Time in HH:MM (24-hour) format
        action: Callable to run
        days: Day names ("mon".."sun"); defaults to every day

    Example:
        rule = scheduled_rule(
            "Weekday Heating",
            "06:30",
            heat_up,
            days={"mon", "tue", "wed", "thu", "fri"},
        )
    """
    trigger = WeeklyTrigger(at=at, days=frozenset(days) if days else ALL_DAYS)
    return AutomationRule(name=name, trigger=trigger, action=action)


def event_based_rule(
    name: str,
    label: str,
    action: Action,
    probability: float = 0.01,
) -> AutomationRule:
    """
    Create a rule that fires on a simulated sensor event.

    Args:
        name: Rule name
        label: Event label (e.g., "MOTION_DETECTED")
        action: Callable to run
        probability: Chance of firing per evaluation
    """
    trigger = ProbabilisticEventTrigger(label=label, probability=probability)
    return AutomationRule(name=name, trigger=trigger, action=action)


def turn_on_at(name: str, at: str, devices: Sequence[Device]) -> AutomationRule:
    """
    Turn devices on every day at a given time (e.g., morning lights).

    Example:
        rule = turn_on_at("Morning Lights", "07:00", [living_room_light])
    """
    targets = list(devices)

    def action() -> None:
        for device in targets:
            device.turn_on()

    return time_based_rule(name, at, action)


def turn_off_at(name: str, at: str, devices: Sequence[Device]) -> AutomationRule:
    """Turn devices off every day at a given time."""
    targets = list(devices)

    def action() -> None:
        for device in targets:
            device.turn_off()

    return time_based_rule(name, at, action)


def motion_activated(
    name: str,
    devices: Sequence[Device],
    *,
    label: str = "MOTION_DETECTED",
    probability: float = 0.01,
) -> AutomationRule:
    """
    Turn devices on when motion is detected.

    Security devices in the list are also checked for an alarm.
    """
    targets = list(devices)

    def action() -> None:
        for device in targets:
            device.turn_on()
            if isinstance(device, SecurityDevice):
                device.trigger_alarm()

    return event_based_rule(name, label, action, probability=probability)


def heat_on_schedule(
    name: str,
    at: str,
    thermostat: ThermostatDevice,
    temperature: float,
    *,
    days: Optional[Iterable[str]] = None,
) -> AutomationRule:
    """Switch a thermostat on and set its target on selected days."""

    def action() -> None:
        thermostat.set_temperature(temperature)
        thermostat.turn_on()

    return scheduled_rule(name, at, action, days=days)
