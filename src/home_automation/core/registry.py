"""
DeviceRegistry for the set of devices known to the controller.

The registry owns the device collection, not device behavior.
"""

import logging
import threading
from typing import Dict, List, Optional

from home_automation.core.device import Device

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """
    Thread-safe store of devices keyed by id.

    Responsibilities:
    - Register devices (insertion order preserved)
    - Look up devices by id
    - Hand out consistent snapshots for the monitor loop

    Safe to call from the configuration thread while the monitor
    is iterating a previous snapshot.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._lock = threading.Lock()
        self._devices: Dict[str, Device] = {}

    def add_device(self, device: Device) -> Device:
        """
        Register a device.

        Args:
            device: The device to add

        Returns:
            The registered device

        Raises:
            ValueError: If a device with the same id already exists
        """
        with self._lock:
            if device.id in self._devices:
                raise ValueError(f"Device with id '{device.id}' already exists")
            self._devices[device.id] = device

        logger.info(f"Device added: {device.name} ({device.id})")
        return device

    def get_device(self, device_id: str) -> Optional[Device]:
        """Get a device by id, or None if unknown."""
        with self._lock:
            return self._devices.get(device_id)

    def list_devices(self) -> List[Device]:
        """Snapshot of all devices, in registration order."""
        with self._lock:
            return list(self._devices.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._devices
