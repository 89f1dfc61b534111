"""
Trigger evaluators for the Automation engine.

`evaluate_trigger` is the single entry point; each trigger type has its
own check below.
"""

import logging
import random
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from .models import (
    DAY_NAMES,
    ProbabilisticEventTrigger,
    TimeOfDayTrigger,
    TriggerConfig,
    TriggerState,
    WeeklyTrigger,
)

if TYPE_CHECKING:
    from home_automation.core.device import Device

logger = logging.getLogger(__name__)

_default_rng = random.Random()


def evaluate_trigger(
    trigger: TriggerConfig,
    state: TriggerState,
    device: Optional["Device"],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> bool:
    """
    Decide whether a trigger fires for this evaluation.

    Never raises. Time-based triggers update `state` to enforce
    at-most-once-per-matching-minute.

    Args:
        trigger: The trigger config
        state: Debounce state owned by the rule
        device: Device being evaluated
        now: Current wall-clock time
        rng: Random source for event triggers

    Returns:
        True if the rule should fire
    """
    if isinstance(trigger, TimeOfDayTrigger):
        return _debounce(state, _time_matches(trigger, now), now)
    elif isinstance(trigger, WeeklyTrigger):
        return _debounce(state, _weekly_matches(trigger, now), now)
    elif isinstance(trigger, ProbabilisticEventTrigger):
        return _check_event(trigger, device, rng or _default_rng)
    else:
        logger.warning(f"Unknown trigger type: {type(trigger)}")
        return False


# =========================================================================
# Trigger Implementations
# =========================================================================


def _time_matches(trigger: TimeOfDayTrigger | WeeklyTrigger, now: datetime) -> bool:
    return now.hour == trigger.at.hour and now.minute == trigger.at.minute


def _weekly_matches(trigger: WeeklyTrigger, now: datetime) -> bool:
    return DAY_NAMES[now.weekday()] in trigger.days and _time_matches(trigger, now)


def _debounce(state: TriggerState, matches: bool, now: datetime) -> bool:
    """Fire on the first matching evaluation; re-arm once the window passes."""
    if not matches:
        state.consumed = False
        return False

    if state.consumed:
        return False

    state.consumed = True
    state.last_fired = now
    return True


def _check_event(
    trigger: ProbabilisticEventTrigger,
    device: Optional["Device"],
    rng: random.Random,
) -> bool:
    if rng.random() < trigger.probability:
        where = f" on {device.name}" if device is not None else ""
        logger.info(f"Event detected: {trigger.label}{where}")
        return True
    return False
