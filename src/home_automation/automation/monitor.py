"""
MonitorLoop - periodic background evaluation of automation rules.

One daemon thread runs an engine pass, then sleeps on a stop event for
the tick period. stop() wakes the sleep immediately; a pass already in
progress is allowed to finish.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Sequence

from home_automation.config import MonitorConfig
from home_automation.core.device import Device

from .engine import AutomationEngine, EngineResult

logger = logging.getLogger(__name__)

DeviceProvider = Callable[[], Sequence[Device]]


class MonitorLoop:
    """
    Scheduler that re-evaluates rules on a fixed period.

    State machine: stopped -> running -> stopped. The loop may be
    restarted after it has stopped.
    """

    THREAD_NAME = "home-automation-monitor"

    def __init__(
        self,
        engine: AutomationEngine,
        list_devices: DeviceProvider,
        config: Optional[MonitorConfig] = None,
    ) -> None:
        """
        Initialize the monitor.

        Args:
            engine: Engine that performs each evaluation pass
            list_devices: Returns the devices to evaluate; called once per tick
            config: Monitor settings (defaults to MonitorConfig())
        """
        self._engine = engine
        self._list_devices = list_devices
        self._config = config or MonitorConfig()

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._tick_count = 0

    @property
    def tick_seconds(self) -> float:
        return self._config.tick_seconds

    @property
    def tick_count(self) -> int:
        """Number of passes completed since construction."""
        return self._tick_count

    @property
    def is_running(self) -> bool:
        with self._lock:
            thread = self._thread
            stop_event = self._stop_event
        return thread is not None and thread.is_alive() and not stop_event.is_set()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """
        Start the background thread. No-op if already running.

        Each run gets its own stop event, so a previous thread that is still
        finishing its last pass exits on its own and never sees the new run.
        """
        with self._lock:
            if (
                self._thread is not None
                and self._thread.is_alive()
                and not self._stop_event.is_set()
            ):
                logger.warning("Monitor loop already running")
                return

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self.THREAD_NAME,
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Monitor loop started (tick={self._config.tick_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop the loop and wait for the thread to exit.

        Args:
            timeout: Maximum seconds to wait for the in-flight pass
        """
        with self._lock:
            thread = self._thread
            self._stop_event.set()

        if thread is None:
            return

        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Monitor loop did not exit within timeout")
                return

        logger.info("Monitor loop stopped")

    # =========================================================================
    # Evaluation
    # =========================================================================

    def run_once(self, now: Optional[datetime] = None) -> EngineResult:
        """
        Run a single evaluation pass synchronously.

        Args:
            now: Current time (for testing)

        Returns:
            Result of the pass
        """
        devices = self._list_devices()
        result = self._engine.run_pass(devices, now)
        with self._lock:
            self._tick_count += 1

        if result.actions_failed:
            logger.debug(
                f"{result.actions_failed} rule action(s) failed this tick: "
                f"{'; '.join(result.errors)}"
            )
        return result

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Monitor pass failed: {e}", exc_info=True)

            stop_event.wait(self._config.tick_seconds)
