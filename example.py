#!/usr/bin/env python3
"""
Quick example demonstrating home-automation basic usage.

Run with: PYTHONPATH=src python3 example.py
"""

import logging
import time

from home_automation import HomeController, LightDevice, MonitorConfig, SecurityDevice, ThermostatDevice
from home_automation.automation import heat_on_schedule, motion_activated, turn_on_at
from home_automation.core import SecurityKind

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

print("=" * 60)
print("home-automation Example")
print("=" * 60)

# 1. Controller
print("\n1. Creating controller...")
controller = HomeController(config=MonitorConfig(tick_seconds=1.0))
print("   ✓ HomeController created (tick=1s)")

# 2. Devices
print("\n2. Registering devices...")
controller.register_device(
    LightDevice("L001", "Living Room Light"),
    ThermostatDevice("T001", "Living Room AC", 24.0),
    SecurityDevice("S001", "Front Door Camera", SecurityKind.CAMERA),
)
for device in controller.list_devices():
    print(f"   ✓ {device.id}: {device.name} ({device.device_type})")

# 3. Rules
print("\n3. Registering rules...")
light = controller.get_device("L001")
ac = controller.get_device("T001")
camera = controller.get_device("S001")

controller.register_rule(turn_on_at("Morning Lights", "07:00", [light]))
controller.register_rule(
    heat_on_schedule("Weekday Heating", "06:30", ac, 21.0, days={"mon", "tue", "wed", "thu", "fri"})
)
controller.register_rule(motion_activated("Motion Detection", [light, camera], probability=0.05))
for rule in controller.list_rules():
    print(f"   ✓ {rule.name}: {rule.to_dict()['trigger']}")

# 4. Run the monitor for a few ticks
print("\n4. Monitoring for 5 seconds...")
controller.start()
time.sleep(5)
controller.stop()

# 5. Report
print("\n5. Results...")
for device in controller.list_devices():
    print(f"   {device.id}: {device.name} - {'ON' if device.is_on else 'OFF'}")
for execution in controller.get_history(limit=5):
    print(f"   {execution.timestamp:%H:%M:%S} {execution.rule_name} (ok={execution.success})")

print("\n" + "=" * 60)
print("Example complete!")
print("=" * 60)
