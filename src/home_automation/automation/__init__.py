"""
Automation engine for home-automation.

Provides rule-based automation: a trigger decides when a rule fires and
an action (any zero-argument callable) does the work.

Features:
- Time-of-day, weekly and simulated-event triggers
- At-most-once firing per matching minute for time triggers
- Per-rule failure isolation
- Thread-safe rule registration while the monitor is running
- Execution history for debugging

Architecture:
    ┌─────────────────────────────────────────────┐
    │  MonitorLoop (background thread, per tick)  │
    │                     │                       │
    │                     ▼                       │
    │          ┌─────────────────────┐            │
    │          │  AutomationEngine   │            │
    │          │  devices × RuleSet  │            │
    │          └─────────────────────┘            │
    └─────────────────────────────────────────────┘
"""

from .models import (
    # Enums
    TriggerType,
    # Triggers
    TimeOfDayTrigger,
    WeeklyTrigger,
    ProbabilisticEventTrigger,
    TriggerConfig,
    TriggerState,
    trigger_from_dict,
    trigger_to_dict,
    parse_time,
    ALL_DAYS,
    DAY_NAMES,
    # Rule
    AutomationRule,
    RuleExecution,
)
from .adapter import Clock, SystemClock, MockClock
from .evaluators import evaluate_trigger
from .ruleset import RuleSet
from .engine import AutomationEngine, EngineResult
from .monitor import MonitorLoop
from .presets import (
    time_based_rule,
    scheduled_rule,
    event_based_rule,
    turn_on_at,
    turn_off_at,
    motion_activated,
    heat_on_schedule,
)

__all__ = [
    # Engine
    "AutomationEngine",
    "EngineResult",
    "MonitorLoop",
    "RuleSet",
    # Clock
    "Clock",
    "SystemClock",
    "MockClock",
    # Evaluators
    "evaluate_trigger",
    # Enums
    "TriggerType",
    # Triggers
    "TimeOfDayTrigger",
    "WeeklyTrigger",
    "ProbabilisticEventTrigger",
    "TriggerConfig",
    "TriggerState",
    "trigger_from_dict",
    "trigger_to_dict",
    "parse_time",
    "ALL_DAYS",
    "DAY_NAMES",
    # Rule
    "AutomationRule",
    "RuleExecution",
    # Presets
    "time_based_rule",
    "scheduled_rule",
    "event_based_rule",
    "turn_on_at",
    "turn_off_at",
    "motion_activated",
    "heat_on_schedule",
]
