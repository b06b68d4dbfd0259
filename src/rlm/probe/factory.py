from __future__ import annotations

from rlm.config import MonitorConfig, ProbeMode
from rlm.probe.base import Prober
from rlm.probe.connection import ConnectionManager
from rlm.probe.probes import CommandProbe, ConnectProbe


def probe_for(config: MonitorConfig, connection: ConnectionManager) -> Prober:
    if config.probe_mode is ProbeMode.COMMAND:
        return CommandProbe(connection)
    if config.probe_mode is ProbeMode.CONNECT:
        return ConnectProbe(connection)
    msg = f"Unsupported probe mode: {config.probe_mode}"
    raise ValueError(msg)
