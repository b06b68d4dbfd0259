from __future__ import annotations

from rlm.config.models import (
    COMMAND_SAMPLE_RATE_MS,
    CONNECT_SAMPLE_RATE_MS,
    ConfigError,
    MonitorConfig,
    OutputConfig,
    ProbeMode,
    TargetConfig,
    TimestampStyle,
)

__all__ = [
    "COMMAND_SAMPLE_RATE_MS",
    "CONNECT_SAMPLE_RATE_MS",
    "ConfigError",
    "MonitorConfig",
    "OutputConfig",
    "ProbeMode",
    "TargetConfig",
    "TimestampStyle",
]
