"""
Error types for the home-automation engine.

Nothing here is process-fatal: the monitor loop catches and logs
action failures and keeps running.
"""


class AutomationError(Exception):
    """Base error for automation engine failures."""


class InvalidScheduleError(AutomationError, ValueError):
    """A trigger was configured with an invalid time, day, or probability."""


class ActionExecutionError(AutomationError):
    """A rule's action raised while being executed."""

    def __init__(self, rule_name: str, cause: BaseException) -> None:
        super().__init__(f"Action for rule '{rule_name}' failed: {cause}")
        self.rule_name = rule_name
        self.cause = cause


class ConfigurationRaceError(AutomationError):
    """An evaluation pass was started from inside an in-progress pass."""
