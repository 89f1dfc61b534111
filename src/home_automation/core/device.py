"""
Device handles controlled by the automation engine.

A Device is a simulated piece of home equipment: a light, a thermostat,
or a security device. The engine only reads `is_on`; rule actions call
the command methods.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Seconds per hour, for converting elapsed monotonic time to kWh
_SECONDS_PER_HOUR = 3600.0


class Device(ABC):
    """
    A controllable device.

    Attributes:
        id: Stable unique identifier (e.g., "L001")
        name: Human-readable name
        is_on: Current power state
    """

    def __init__(self, id: str, name: str) -> None:
        if not id:
            raise ValueError("Device id must not be empty")
        self.id = id
        self.name = name
        self._is_on = False
        self._lock = threading.RLock()

    @property
    def is_on(self) -> bool:
        return self._is_on

    @property
    @abstractmethod
    def device_type(self) -> str:
        """Short description of the device type."""
        pass

    def turn_on(self) -> None:
        with self._lock:
            self._is_on = True
        logger.info(f"{self.name} turned ON")

    def turn_off(self) -> None:
        with self._lock:
            self._is_on = False
        logger.info(f"{self.name} turned OFF")

    def __repr__(self) -> str:
        status = "ON" if self._is_on else "OFF"
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r}, status={status})"


class EnergyMonitored(ABC):
    """Interface for devices that report energy consumption."""

    @abstractmethod
    def energy_consumption(self) -> float:
        """Energy used since the last reset, in kWh."""
        pass

    @abstractmethod
    def reset_energy_stats(self) -> None:
        """Reset accumulated energy to zero."""
        pass


class _EnergyAccountingDevice(Device, EnergyMonitored):
    """
    Device that accumulates energy while switched on.

    Subclasses provide `_power_kw()`, the current simplified draw.
    The clock is injectable so tests can control elapsed time.
    """

    def __init__(
        self,
        id: str,
        name: str,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        super().__init__(id, name)
        self._clock = clock or time.monotonic
        self._energy_used = 0.0
        self._last_change = self._clock()

    @abstractmethod
    def _power_kw(self) -> float:
        pass

    def _update_energy_usage(self) -> None:
        now = self._clock()
        if self._is_on:
            hours = (now - self._last_change) / _SECONDS_PER_HOUR
            self._energy_used += self._power_kw() * hours
        self._last_change = now

    def turn_on(self) -> None:
        with self._lock:
            self._update_energy_usage()
            super().turn_on()

    def turn_off(self) -> None:
        with self._lock:
            self._update_energy_usage()
            super().turn_off()

    def energy_consumption(self) -> float:
        with self._lock:
            self._update_energy_usage()
            return self._energy_used

    def reset_energy_stats(self) -> None:
        with self._lock:
            self._energy_used = 0.0
            self._last_change = self._clock()


class LightDevice(_EnergyAccountingDevice):
    """Dimmable light. Draws 10 W at 100% brightness."""

    def __init__(
        self,
        id: str,
        name: str,
        brightness: int = 100,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        super().__init__(id, name, clock)
        self._brightness = _clamp_brightness(brightness)

    @property
    def device_type(self) -> str:
        return "Light"

    @property
    def brightness(self) -> int:
        return self._brightness

    def set_brightness(self, brightness: int) -> None:
        """Set brightness, clamped to 0-100."""
        with self._lock:
            self._update_energy_usage()
            self._brightness = _clamp_brightness(brightness)
        logger.info(f"{self.name} brightness set to {self._brightness}%")

    def _power_kw(self) -> float:
        return 0.01 * self._brightness / 100.0


class ThermostatDevice(_EnergyAccountingDevice):
    """Heating/cooling unit. Draw scales with the distance to target."""

    def __init__(
        self,
        id: str,
        name: str,
        default_temperature: float,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        super().__init__(id, name, clock)
        self._temperature = default_temperature
        self._target_temperature = default_temperature

    @property
    def device_type(self) -> str:
        return "Thermostat"

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def target_temperature(self) -> float:
        return self._target_temperature

    def set_temperature(self, temperature: float) -> None:
        """Set the target temperature."""
        with self._lock:
            self._update_energy_usage()
            self._target_temperature = temperature
        logger.info(f"{self.name} target temperature set to {temperature}°C")

    def update_current_temperature(self, temperature: float) -> None:
        """Record a new measured temperature (simulation input)."""
        with self._lock:
            self._update_energy_usage()
            self._temperature = temperature
        logger.debug(f"{self.name} current temperature updated to {temperature}°C")

    def _power_kw(self) -> float:
        return 0.5 * abs(self._temperature - self._target_temperature)


class SecurityKind(Enum):
    """Kinds of security device."""

    CAMERA = "camera"
    MOTION_SENSOR = "motion_sensor"
    ALARM = "alarm"


class SecurityDevice(Device):
    """Camera, motion sensor, or alarm that can be armed."""

    def __init__(self, id: str, name: str, kind: SecurityKind) -> None:
        super().__init__(id, name)
        self.kind = kind
        self._armed = False

    @property
    def device_type(self) -> str:
        return f"Security ({self.kind.value})"

    @property
    def is_armed(self) -> bool:
        return self._armed

    def arm(self) -> None:
        self._armed = True
        logger.info(f"{self.name} is now armed")

    def disarm(self) -> None:
        self._armed = False
        logger.info(f"{self.name} is now disarmed")

    def trigger_alarm(self) -> bool:
        """
        Raise an alert if the device is on and armed.

        Returns:
            True if the alert was raised
        """
        if self._is_on and self._armed:
            logger.warning(f"ALERT: {self.name} has been triggered!")
            return True
        return False


def _clamp_brightness(value: int) -> int:
    return max(0, min(100, int(value)))
