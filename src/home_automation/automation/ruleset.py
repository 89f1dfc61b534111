"""
Ordered, thread-safe collection of automation rules.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from home_automation.errors import ConfigurationRaceError

from .models import AutomationRule

logger = logging.getLogger(__name__)


class RuleSet:
    """
    Rules in registration order.

    Evaluation passes iterate an immutable snapshot taken when the pass
    starts. Rules added from another thread during a pass are visible to
    the next pass. Rules added from inside an action (the pass's own
    thread) are queued and applied when the pass ends.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._rules: List[AutomationRule] = []
        self._pending: List[AutomationRule] = []
        self._pass_thread: Optional[int] = None

    def add(self, rule: AutomationRule) -> None:
        """Register a rule. Safe to call at any time, from any thread."""
        with self._lock:
            if self._pass_thread == threading.get_ident():
                self._pending.append(rule)
                logger.debug(f"Queued rule '{rule.name}' until the current pass ends")
                return
            self._rules.append(rule)

    def snapshot(self) -> Tuple[AutomationRule, ...]:
        """Read-only view of the registered rules."""
        with self._lock:
            return tuple(self._rules)

    @contextmanager
    def evaluation_pass(self) -> Iterator[Tuple[AutomationRule, ...]]:
        """
        Hold the rule set for one evaluation pass.

        Yields:
            Snapshot of rules to evaluate

        Raises:
            ConfigurationRaceError: If called from inside a running pass
        """
        if self._pass_thread == threading.get_ident():
            raise ConfigurationRaceError(
                "Cannot start an evaluation pass from inside an in-progress pass"
            )

        with self._pass_lock:
            with self._lock:
                self._pass_thread = threading.get_ident()
                rules = tuple(self._rules)
            try:
                yield rules
            finally:
                with self._lock:
                    self._pass_thread = None
                    if self._pending:
                        self._rules.extend(self._pending)
                        logger.debug(f"Applied {len(self._pending)} queued rule(s)")
                        self._pending.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules) + len(self._pending)

    def __iter__(self) -> Iterator[AutomationRule]:
        return iter(self.snapshot())
