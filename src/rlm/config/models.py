from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

COMMAND_SAMPLE_RATE_MS = 10
CONNECT_SAMPLE_RATE_MS = 100

MIN_INTERVAL_SEC = 1
MAX_INTERVAL_SEC = 3600
MIN_TIMEOUT_SEC = 1
MAX_TIMEOUT_SEC = 300

# Extra buffer slots for ticks that land just before a boundary fires.
BUFFER_SLACK = 2


class ConfigError(ValueError):
    pass


class ProbeMode(str, Enum):
    COMMAND = "command"
    CONNECT = "connect"


class TimestampStyle(str, Enum):
    HUMAN = "human"
    UNIX = "unix"


@dataclass(frozen=True, slots=True)
class TargetConfig:
    host: str = "127.0.0.1"
    port: int = 6379
    password: str | None = None
    timeout_sec: float = 3.0

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigError("Host can't be empty")
        if not 0 < self.port < 65536:
            msg = f"Port {self.port} is out of range (1-65535)"
            raise ConfigError(msg)
        if not MIN_TIMEOUT_SEC <= self.timeout_sec <= MAX_TIMEOUT_SEC:
            msg = f"Timeout {self.timeout_sec} is out of range ({MIN_TIMEOUT_SEC}-{MAX_TIMEOUT_SEC})"
            raise ConfigError(msg)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True, slots=True)
class OutputConfig:
    csv_path: Path | None = None
    timestamp_style: TimestampStyle = TimestampStyle.HUMAN
    color: bool = True

    @property
    def interactive(self) -> bool:
        return self.csv_path is None


@dataclass(frozen=True, slots=True)
class MonitorConfig:
    target: TargetConfig = field(default_factory=TargetConfig)
    interval_sec: int = 60
    probe_mode: ProbeMode = ProbeMode.COMMAND
    output: OutputConfig = field(default_factory=OutputConfig)
    error_log: Path | None = None

    def __post_init__(self) -> None:
        if not MIN_INTERVAL_SEC <= self.interval_sec <= MAX_INTERVAL_SEC:
            msg = f"Interval {self.interval_sec} is out of range ({MIN_INTERVAL_SEC}-{MAX_INTERVAL_SEC})"
            raise ConfigError(msg)

    @property
    def sample_rate_ms(self) -> int:
        if self.probe_mode is ProbeMode.CONNECT:
            return CONNECT_SAMPLE_RATE_MS
        return COMMAND_SAMPLE_RATE_MS

    def buffer_capacity(self) -> int:
        return (self.interval_sec * 1000) // self.sample_rate_ms + BUFFER_SLACK

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "interval_sec": self.interval_sec,
            "probe_mode": self.probe_mode.value,
            "sample_rate_ms": self.sample_rate_ms,
            "error_log": str(self.error_log) if self.error_log else "",
            "target": {
                "host": self.target.host,
                "port": self.target.port,
                "auth": "***" if self.target.password else "",
                "timeout_sec": self.target.timeout_sec,
            },
            "output": {
                "csv_path": str(self.output.csv_path) if self.output.csv_path else "",
                "timestamp_style": self.output.timestamp_style.value,
                "color": self.output.color,
            },
        }
