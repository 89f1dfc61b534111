"""Tests for the automation engine and rule set."""

import logging
import random
import threading
from datetime import datetime

import pytest

from home_automation.automation import (
    AutomationEngine,
    AutomationRule,
    MockClock,
    ProbabilisticEventTrigger,
    RuleSet,
    TimeOfDayTrigger,
    WeeklyTrigger,
)
from home_automation.core.device import LightDevice, SecurityDevice, SecurityKind, ThermostatDevice
from home_automation.errors import ConfigurationRaceError

SEVEN_AM = datetime(2025, 1, 13, 7, 0, 0)  # Monday


@pytest.fixture
def clock():
    """Create a mock clock set to Monday 07:00."""
    return MockClock(SEVEN_AM)


@pytest.fixture
def engine(clock):
    """Create an engine with mock clock and seeded RNG."""
    return AutomationEngine(clock=clock, rng=random.Random(42))


@pytest.fixture
def light():
    return LightDevice("L001", "Living Room Light")


def always(name: str, action) -> AutomationRule:
    """Rule that fires on every evaluation."""
    return AutomationRule(
        name=name,
        trigger=ProbabilisticEventTrigger(label="ALWAYS", probability=1.0),
        action=action,
    )


class TestRunPass:
    """Tests for evaluation passes."""

    def test_no_rules(self, engine, light):
        result = engine.run_pass([light])

        assert result.devices_evaluated == 1
        assert result.rules_evaluated == 0
        assert result.rules_triggered == 0

    def test_no_devices(self, engine):
        engine.add_rule(always("r", lambda: None))
        result = engine.run_pass([])

        assert result.rules_evaluated == 0

    def test_time_rule_turns_device_on(self, engine, light):
        engine.add_rule(
            AutomationRule(
                name="Morning Lights",
                trigger=TimeOfDayTrigger(at="07:00"),
                action=light.turn_on,
            )
        )

        result = engine.run_pass([light])

        assert result.rules_triggered == 1
        assert light.is_on is True

    def test_time_rule_fires_once_across_ticks(self, engine, clock, light):
        """Ticks every 5 seconds during 07:00 fire the rule exactly once."""
        calls = []
        engine.add_rule(
            AutomationRule(
                name="Morning Lights",
                trigger=TimeOfDayTrigger(at="07:00"),
                action=lambda: calls.append(clock.now()),
            )
        )

        for _ in range(12):
            engine.run_pass([light])
            clock.advance(seconds=5)

        assert calls == [SEVEN_AM]

    def test_rule_evaluated_per_device(self, engine):
        """Each device gets its own evaluation of every rule."""
        calls = []
        engine.add_rule(always("r", lambda: calls.append(1)))
        devices = [LightDevice(f"L{i}", f"Light {i}") for i in range(3)]

        result = engine.run_pass(devices)

        assert result.rules_evaluated == 3
        assert len(calls) == 3

    def test_weekly_rule_respects_day(self, engine, clock, light):
        engine.add_rule(
            AutomationRule(
                name="Friday Only",
                trigger=WeeklyTrigger(at="07:00", days=frozenset({"fri"})),
                action=light.turn_on,
            )
        )

        result = engine.run_pass([light])  # Monday

        assert result.rules_triggered == 0
        assert light.is_on is False

    def test_disabled_rule_skipped(self, engine, light):
        calls = []
        rule = always("r", lambda: calls.append(1))
        rule.enabled = False
        engine.add_rule(rule)

        result = engine.run_pass([light])

        assert result.rules_evaluated == 1
        assert result.rules_triggered == 0
        assert calls == []

    def test_explicit_now_overrides_clock(self, engine, light):
        engine.add_rule(
            AutomationRule(name="Evening", trigger=TimeOfDayTrigger(at="19:30"), action=light.turn_on)
        )

        engine.run_pass([light], now=datetime(2025, 1, 13, 19, 30, 20))

        assert light.is_on is True


class TestFailureIsolation:
    """A failing action never stops other rules."""

    def test_middle_rule_failure_isolated(self, engine, light, caplog):
        calls = []

        def broken() -> None:
            raise RuntimeError("relay stuck")

        engine.add_rule(always("first", lambda: calls.append("first")))
        engine.add_rule(always("second", broken))
        engine.add_rule(always("third", lambda: calls.append("third")))

        with caplog.at_level(logging.WARNING, logger="home_automation.automation.engine"):
            result = engine.run_pass([light])

        assert calls == ["first", "third"]
        assert result.rules_triggered == 3
        assert result.actions_failed == 1

        failures = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(failures) == 1
        assert "second" in failures[0].getMessage()
        assert "relay stuck" in failures[0].getMessage()

    def test_failure_recorded_in_result_and_history(self, engine, light):
        def broken() -> None:
            raise ValueError("bad value")

        engine.add_rule(always("Broken", broken))
        result = engine.run_pass([light])

        assert result.errors == ["Action for rule 'Broken' failed: bad value"]

        history = engine.get_history(rule_name="Broken")
        assert len(history) == 1
        assert history[0].success is False
        assert history[0].error == "bad value"
        assert history[0].device_id == "L001"


class TestHistory:
    """Tests for execution history."""

    def test_newest_first_and_limit(self, engine, light):
        engine.add_rule(always("a", lambda: None))
        engine.add_rule(always("b", lambda: None))
        engine.run_pass([light])

        history = engine.get_history()
        assert [h.rule_name for h in history] == ["b", "a"]
        assert len(engine.get_history(limit=1)) == 1
        assert history[0].trigger_type == "event"
        assert history[0].success is True

    def test_ring_buffer_bounded(self, clock, light):
        engine = AutomationEngine(clock=clock, history_size=5)
        engine.add_rule(always("a", lambda: None))

        for _ in range(10):
            engine.run_pass([light])

        assert len(engine.get_history(limit=100)) == 5


class TestEnergyTelemetry:
    """Energy logging is observational only."""

    def test_energy_logged_for_metered_devices(self, engine, caplog):
        devices = [
            LightDevice("L001", "Lamp"),
            ThermostatDevice("T001", "AC", 24.0),
            SecurityDevice("S001", "Camera", SecurityKind.CAMERA),
        ]

        with caplog.at_level(logging.DEBUG, logger="home_automation.automation.engine"):
            engine.run_pass(devices)

        energy = [r.getMessage() for r in caplog.records if "Energy consumption" in r.getMessage()]
        assert len(energy) == 2
        assert any("Lamp" in m for m in energy)
        assert any("AC" in m for m in energy)

    def test_failing_energy_reading_does_not_block_rules(self, engine):
        class FlakyLight(LightDevice):
            def energy_consumption(self) -> float:
                raise OSError("meter offline")

        calls = []
        engine.add_rule(always("r", lambda: calls.append(1)))

        result = engine.run_pass([FlakyLight("L9", "Flaky")])

        assert calls == [1]
        assert result.actions_failed == 0


class TestConcurrentRegistration:
    """Rules can be added while a pass is running."""

    def test_rule_added_from_action_applies_after_pass(self, engine, light):
        """A rule registered mid-pass is not seen until the next pass."""
        late_calls = []
        late = always("late", lambda: late_calls.append(1))
        registered = []

        def register() -> None:
            if not registered:
                engine.add_rule(late)
                registered.append(True)

        engine.add_rule(always("registrar", register))

        first = engine.run_pass([light])
        assert first.rules_evaluated == 1
        assert late_calls == []
        assert len(engine.get_rules()) == 2

        engine.run_pass([light])
        assert late_calls == [1]

    def test_rule_added_from_other_thread_mid_pass(self, engine, light):
        """Registration from another thread during a pass is safe."""
        in_action = threading.Event()
        release = threading.Event()

        def slow() -> None:
            in_action.set()
            release.wait(5)

        engine.add_rule(always("slow", slow))
        late_calls = []

        worker = threading.Thread(target=engine.run_pass, args=([light],))
        worker.start()
        assert in_action.wait(5)

        engine.add_rule(always("late", lambda: late_calls.append(1)))
        release.set()
        worker.join(5)

        assert late_calls == []
        assert [r.name for r in engine.get_rules()] == ["slow", "late"]

        release.set()
        engine.run_pass([light])
        assert late_calls == [1]

    def test_many_threads_registering(self, engine, light):
        def register(n: int) -> None:
            for i in range(50):
                engine.add_rule(always(f"t{n}-{i}", lambda: None))

        threads = [threading.Thread(target=register, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for _ in range(20):
            engine.run_pass([light])
        for t in threads:
            t.join(5)

        assert len(engine.get_rules()) == 200

    def test_nested_pass_from_action_rejected(self, engine, light):
        errors = []

        def nested() -> None:
            try:
                engine.run_pass([light])
            except ConfigurationRaceError as e:
                errors.append(e)

        engine.add_rule(always("nested", nested))
        engine.run_pass([light])

        assert len(errors) == 1


class TestRuleSet:
    """Tests for RuleSet directly."""

    def test_insertion_order(self):
        rules = RuleSet()
        for name in ("a", "b", "c"):
            rules.add(always(name, lambda: None))

        assert [r.name for r in rules] == ["a", "b", "c"]
        assert len(rules) == 3

    def test_snapshot_is_immutable(self):
        rules = RuleSet()
        rules.add(always("a", lambda: None))

        snapshot = rules.snapshot()
        assert isinstance(snapshot, tuple)
        rules.add(always("b", lambda: None))
        assert len(snapshot) == 1

    def test_pending_counted_during_pass(self):
        rules = RuleSet()
        with rules.evaluation_pass() as snapshot:
            rules.add(always("a", lambda: None))
            assert snapshot == ()
            assert len(rules) == 1
        assert [r.name for r in rules.snapshot()] == ["a"]

    def test_pending_applied_when_pass_raises(self):
        rules = RuleSet()
        with pytest.raises(RuntimeError):
            with rules.evaluation_pass():
                rules.add(always("a", lambda: None))
                raise RuntimeError("pass aborted")
        assert len(rules.snapshot()) == 1
