"""
Configuration for the monitor loop.
"""

from dataclasses import dataclass
from typing import Any, Dict

CURRENT_CONFIG_VERSION = 1


@dataclass
class MonitorConfig:
    """Settings for the background monitor.

    Attributes:
        version: Config schema version
        tick_seconds: Pause between evaluation passes. Must stay below 60
            so a one-minute trigger window cannot be skipped.
        history_size: Number of rule executions kept for inspection
        log_energy: Log energy telemetry for metered devices each pass
    """

    version: int = CURRENT_CONFIG_VERSION
    tick_seconds: float = 5.0
    history_size: int = 100
    log_energy: bool = True

    def __post_init__(self) -> None:
        if not 0 < self.tick_seconds < 60:
            raise ValueError(
                f"tick_seconds must be > 0 and < 60, got {self.tick_seconds}"
            )
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")
        if not isinstance(self.log_energy, bool):
            raise ValueError(f"log_energy must be a bool, got {self.log_energy!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "version": self.version,
            "tick_seconds": self.tick_seconds,
            "history_size": self.history_size,
            "log_energy": self.log_energy,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitorConfig":
        """Deserialize from dict, filling in defaults."""
        version = data.get("version", CURRENT_CONFIG_VERSION)
        if version != CURRENT_CONFIG_VERSION:
            raise ValueError(f"Unsupported config version: {version}")

        return cls(
            version=version,
            tick_seconds=float(data.get("tick_seconds", 5.0)),
            history_size=int(data.get("history_size", 100)),
            log_energy=data.get("log_energy", True),
        )


def default_config() -> Dict[str, Any]:
    """Get default monitor configuration."""
    return MonitorConfig().to_dict()
