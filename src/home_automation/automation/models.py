"""
Data models for the Automation engine.

Defines triggers and rules. Triggers are immutable configs; the mutable
debounce state lives on the rule that owns the trigger.
"""

import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Optional

from home_automation.errors import InvalidScheduleError

if TYPE_CHECKING:
    from home_automation.core.device import Device


DAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
ALL_DAYS: FrozenSet[str] = frozenset(DAY_NAMES)

Action = Callable[[], Any]


# =============================================================================
# Enums
# =============================================================================


class TriggerType(Enum):
    """Types of triggers that can activate a rule."""

    TIME_OF_DAY = "time_of_day"  # Daily at hh:mm
    WEEKLY = "weekly"  # At hh:mm on selected weekdays
    EVENT = "event"  # Simulated sensor event with probability p


# =============================================================================
# Trigger Configs
# =============================================================================


def parse_time(value: Any) -> time:
    """
    Parse an "HH:MM" (24-hour) time.

    Args:
        value: A time, or a string like "07:00"

    Returns:
        Time with seconds dropped

    Raises:
        InvalidScheduleError: If the value is not a valid time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise InvalidScheduleError(f"Invalid time: {value!r}")

    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidScheduleError(f"Invalid time '{value}', expected HH:MM")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidScheduleError(f"Time out of range: '{value}'")
    return time(hour, minute)


@dataclass(frozen=True)
class TimeOfDayTrigger:
    """Fire once a day when the clock reads hh:mm."""

    at: time

    def __post_init__(self) -> None:
        object.__setattr__(self, "at", parse_time(self.at))

    @property
    def trigger_type(self) -> TriggerType:
        return TriggerType.TIME_OF_DAY


@dataclass(frozen=True)
class WeeklyTrigger:
    """Fire at hh:mm on the active weekdays only."""

    at: time
    days: FrozenSet[str] = ALL_DAYS  # e.g., frozenset({"mon", "fri"})

    def __post_init__(self) -> None:
        object.__setattr__(self, "at", parse_time(self.at))

        try:
            days = frozenset(d.lower() for d in self.days)
        except (AttributeError, TypeError) as e:
            raise InvalidScheduleError(f"Day names must be strings, got {self.days!r}") from e

        unknown = days - ALL_DAYS
        if unknown:
            raise InvalidScheduleError(f"Unknown day names: {sorted(unknown)}")
        if not days:
            raise InvalidScheduleError("Weekly trigger needs at least one day")
        object.__setattr__(self, "days", days)

    @property
    def trigger_type(self) -> TriggerType:
        return TriggerType.WEEKLY


@dataclass(frozen=True)
class ProbabilisticEventTrigger:
    """
    Simulated sensor event (motion, fire alarm, ...).

    Fires with independent probability on every evaluation. There is no
    debounce: the trigger can fire on consecutive ticks.
    """

    label: str  # e.g., "MOTION_DETECTED"
    probability: float = 0.01

    def __post_init__(self) -> None:
        if not self.label or not isinstance(self.label, str):
            raise InvalidScheduleError("Event trigger needs a label")
        if isinstance(self.probability, bool) or not isinstance(self.probability, (int, float)):
            raise InvalidScheduleError(
                f"Probability must be a number, got {self.probability!r}"
            )
        if not 0.0 <= self.probability <= 1.0:
            raise InvalidScheduleError(
                f"Probability must be within [0, 1], got {self.probability}"
            )

    @property
    def trigger_type(self) -> TriggerType:
        return TriggerType.EVENT


TriggerConfig = TimeOfDayTrigger | WeeklyTrigger | ProbabilisticEventTrigger


def trigger_to_dict(trigger: TriggerConfig) -> Dict[str, Any]:
    """Serialize trigger config."""
    if isinstance(trigger, TimeOfDayTrigger):
        return {"type": "time_of_day", "at": trigger.at.strftime("%H:%M")}
    elif isinstance(trigger, WeeklyTrigger):
        return {
            "type": "weekly",
            "at": trigger.at.strftime("%H:%M"),
            "days": [d for d in DAY_NAMES if d in trigger.days],
        }
    elif isinstance(trigger, ProbabilisticEventTrigger):
        return {
            "type": "event",
            "label": trigger.label,
            "probability": trigger.probability,
        }
    return {}


def trigger_from_dict(data: Dict[str, Any]) -> TriggerConfig:
    """
    Parse trigger config from dict.

    Raises:
        InvalidScheduleError: If the type is unknown or a field is invalid
    """
    trigger_type = data.get("type", "time_of_day")

    try:
        if trigger_type == "time_of_day":
            return TimeOfDayTrigger(at=data["at"])
        elif trigger_type == "weekly":
            return WeeklyTrigger(
                at=data["at"],
                days=data.get("days", DAY_NAMES),
            )
        elif trigger_type == "event":
            return ProbabilisticEventTrigger(
                label=data["label"],
                probability=_parse_probability(data.get("probability", 0.01)),
            )
    except KeyError as e:
        raise InvalidScheduleError(f"Missing field {e} in {trigger_type} trigger") from e

    raise InvalidScheduleError(f"Unknown trigger type: {trigger_type}")


def _parse_probability(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidScheduleError(f"Invalid probability: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidScheduleError(f"Invalid probability: {value!r}") from e


# =============================================================================
# Trigger State
# =============================================================================


@dataclass
class TriggerState:
    """Debounce state for time-based triggers."""

    consumed: bool = False  # Already fired in the current matching minute
    last_fired: Optional[datetime] = None


# =============================================================================
# Automation Rule
# =============================================================================


@dataclass(eq=False)
class AutomationRule:
    """A complete automation rule.

    Consists of:
    - name: Display name (not required to be unique)
    - trigger: When the rule fires
    - action: Zero-argument callable run when the rule fires
    - enabled: Whether rule is active

    The action captures whatever devices it needs; the rule never knows
    which device's evaluation made it fire.
    """

    name: str
    trigger: TriggerConfig
    action: Action
    enabled: bool = True
    _state: TriggerState = field(
        default_factory=TriggerState, init=False, repr=False, compare=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Rule name must not be empty")
        if not callable(self.action):
            raise TypeError(f"Action for rule '{self.name}' is not callable")

    @property
    def last_fired(self) -> Optional[datetime]:
        return self._state.last_fired

    def should_trigger(
        self,
        device: Optional["Device"] = None,
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ) -> bool:
        """
        Check whether the rule fires for this evaluation.

        Args:
            device: Device being evaluated (used for event logging only)
            now: Current time (defaults to local wall-clock time)
            rng: Random source for event triggers

        Returns:
            True if the action should run now
        """
        from .evaluators import evaluate_trigger

        if now is None:
            now = datetime.now()

        with self._lock:
            return evaluate_trigger(self.trigger, self._state, device, now, rng)

    def execute(self) -> None:
        """Run the action. Failures propagate to the caller."""
        self.action()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for display. The action is opaque and not included."""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "trigger": trigger_to_dict(self.trigger),
            "last_fired": self._state.last_fired.isoformat()
            if self._state.last_fired
            else None,
        }


# =============================================================================
# Execution Records
# =============================================================================


@dataclass
class RuleExecution:
    """Record of a rule execution (for history/debugging)."""

    rule_name: str
    device_id: Optional[str]
    trigger_type: str
    success: bool
    error: Optional[str]
    timestamp: datetime
    duration_ms: int
