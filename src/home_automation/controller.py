"""
HomeController - wires devices, rules and the monitor loop together.

This is the surface the rest of an application talks to: register
devices and rules (safe while running), start and stop monitoring,
and read snapshots for display.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from home_automation.automation.adapter import Clock
from home_automation.automation.engine import AutomationEngine
from home_automation.automation.models import AutomationRule, RuleExecution
from home_automation.automation.monitor import MonitorLoop
from home_automation.config import MonitorConfig
from home_automation.core.device import Device
from home_automation.core.registry import DeviceRegistry

logger = logging.getLogger(__name__)


class HomeController:
    """
    Home-automation controller.

    Owns the device registry, the automation engine and the monitor loop.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            config: Monitor settings (defaults to MonitorConfig())
            clock: Time source (defaults to the system clock)
            rng: Random source for event triggers
        """
        self._config = config or MonitorConfig()
        self._devices = DeviceRegistry()
        self._engine = AutomationEngine(
            clock=clock,
            rng=rng,
            history_size=self._config.history_size,
            log_energy=self._config.log_energy,
        )
        self._monitor = MonitorLoop(
            self._engine,
            self._devices.list_devices,
            self._config,
        )
        logger.info("Home controller initialized")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs: Any) -> "HomeController":
        """Create a controller from a monitor config dict."""
        return cls(config=MonitorConfig.from_dict(data), **kwargs)

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def monitor(self) -> MonitorLoop:
        return self._monitor

    @property
    def is_running(self) -> bool:
        return self._monitor.is_running

    # =========================================================================
    # Registration
    # =========================================================================

    def register_device(self, *devices: Device) -> None:
        """
        Register one or more devices.

        Raises:
            ValueError: If a device id is already registered
        """
        for device in devices:
            self._devices.add_device(device)

    def register_rule(self, rule: AutomationRule) -> None:
        """Register an automation rule."""
        self._engine.add_rule(rule)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_device(self, device_id: str) -> Optional[Device]:
        """Get a device by id, or None if unknown."""
        return self._devices.get_device(device_id)

    def list_devices(self) -> List[Device]:
        """Snapshot of registered devices."""
        return self._devices.list_devices()

    def list_rules(self) -> List[AutomationRule]:
        """Snapshot of registered rules."""
        return self._engine.get_rules()

    def get_history(
        self,
        rule_name: Optional[str] = None,
        limit: int = 20,
    ) -> List[RuleExecution]:
        """Recent rule executions, newest first."""
        return self._engine.get_history(rule_name, limit)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start background monitoring."""
        self._monitor.start()
        logger.info(
            f"Home controller started with {len(self._devices)} device(s) "
            f"and {len(self.list_rules())} rule(s)"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop background monitoring."""
        self._monitor.stop(timeout)
        logger.info("Home controller stopped")
