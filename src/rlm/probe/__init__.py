from __future__ import annotations

from rlm.probe.base import FailureReporter, Prober
from rlm.probe.connection import ConnectionManager
from rlm.probe.factory import probe_for
from rlm.probe.probes import PING_COMMAND, CommandProbe, ConnectProbe

__all__ = [
    "PING_COMMAND",
    "CommandProbe",
    "ConnectProbe",
    "ConnectionManager",
    "FailureReporter",
    "Prober",
    "probe_for",
]
