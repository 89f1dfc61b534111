"""
Automation engine - core rule processing logic.

Runs evaluation passes: every device against every rule, executing the
actions of rules that fire.
"""

import logging
import random
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Iterable, List, Optional

from home_automation.core.device import Device, EnergyMonitored
from home_automation.errors import ActionExecutionError

from .adapter import Clock, SystemClock
from .models import AutomationRule, RuleExecution
from .ruleset import RuleSet

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    """Result of one evaluation pass."""

    devices_evaluated: int = 0
    rules_evaluated: int = 0
    rules_triggered: int = 0
    actions_failed: int = 0
    errors: List[str] = field(default_factory=list)


class AutomationEngine:
    """
    Core engine for automation rule processing.

    Responsibilities:
    - Hold the rule set
    - Evaluate every rule against every device once per pass
    - Execute actions, isolating failures per rule
    - Track execution history
    - Log energy telemetry for metered devices
    """

    HISTORY_SIZE = 100  # Number of executions to keep in history

    def __init__(
        self,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        history_size: int = HISTORY_SIZE,
        log_energy: bool = True,
    ) -> None:
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._rules = RuleSet()
        self._log_energy = log_energy

        # Execution history (ring buffer)
        self._history: Deque[RuleExecution] = deque(maxlen=history_size)

    @property
    def clock(self) -> Clock:
        return self._clock

    # =========================================================================
    # Configuration
    # =========================================================================

    def add_rule(self, rule: AutomationRule) -> None:
        """
        Register a rule.

        Safe while a pass is running; the rule is evaluated from the
        next pass at the latest.
        """
        self._rules.add(rule)
        logger.info(f"Automation rule added: {rule.name}")

    def get_rules(self) -> List[AutomationRule]:
        """Snapshot of registered rules, in registration order."""
        return list(self._rules.snapshot())

    # =========================================================================
    # Evaluation
    # =========================================================================

    def run_pass(
        self,
        devices: Iterable[Device],
        now: Optional[datetime] = None,
    ) -> EngineResult:
        """
        Evaluate every rule against every device.

        Args:
            devices: Devices to evaluate (snapshotted before the pass)
            now: Current time (for testing); one value is used for the
                whole pass so rules see a consistent clock

        Returns:
            Result with counts of rules evaluated/triggered/failed

        Raises:
            ConfigurationRaceError: If called from inside an action
        """
        if now is None:
            now = self._clock.now()

        devices = tuple(devices)
        result = EngineResult()

        with self._rules.evaluation_pass() as rules:
            for device in devices:
                result.devices_evaluated += 1

                for rule in rules:
                    result.rules_evaluated += 1

                    if not rule.enabled:
                        continue

                    if not rule.should_trigger(device, now, self._rng):
                        continue

                    result.rules_triggered += 1
                    error = self._execute_rule(rule, device, now)
                    if error is not None:
                        result.actions_failed += 1
                        result.errors.append(str(error))

                if self._log_energy:
                    self._report_energy(device)

        logger.debug(
            f"Pass at {now:%H:%M:%S}: {result.rules_triggered}/"
            f"{result.rules_evaluated} rule evaluations triggered"
        )
        return result

    def _execute_rule(
        self,
        rule: AutomationRule,
        device: Device,
        now: datetime,
    ) -> Optional[ActionExecutionError]:
        """
        Execute a rule's action.

        Returns:
            The wrapped error if the action raised, else None
        """
        logger.info(f"Executing rule: {rule.name}")
        start = time.monotonic()
        error: Optional[ActionExecutionError] = None

        try:
            rule.execute()
        except Exception as e:
            error = ActionExecutionError(rule.name, e)
            logger.warning(f"Error executing rule {rule.name}: {e}", exc_info=True)

        duration_ms = int((time.monotonic() - start) * 1000)
        self._history.append(
            RuleExecution(
                rule_name=rule.name,
                device_id=device.id,
                trigger_type=rule.trigger.trigger_type.value,
                success=error is None,
                error=str(error.cause) if error else None,
                timestamp=now,
                duration_ms=duration_ms,
            )
        )
        return error

    def _report_energy(self, device: Device) -> None:
        """Log energy consumption. Never affects triggering."""
        if not isinstance(device, EnergyMonitored):
            return
        try:
            consumption = device.energy_consumption()
        except Exception as e:
            logger.warning(f"Energy reading failed for {device.name}: {e}")
            return
        logger.debug(f"Energy consumption for {device.name}: {consumption:.4f} kWh")

    # =========================================================================
    # History
    # =========================================================================

    def get_history(
        self,
        rule_name: Optional[str] = None,
        limit: int = 20,
    ) -> List[RuleExecution]:
        """
        Get execution history.

        Args:
            rule_name: Filter by rule (optional)
            limit: Maximum entries to return

        Returns:
            List of RuleExecution records (newest first)
        """
        result = []
        for execution in reversed(list(self._history)):
            if rule_name and execution.rule_name != rule_name:
                continue
            result.append(execution)
            if len(result) >= limit:
                break
        return result
