from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

COLUMNS = ["timestamp", "samples", "errors", "min_ms", "max_ms", "mean_ms", "stddev_ms", "p95_ms", "p99_ms"]
HUMAN_TIME_FORMAT = "%Y/%m/%d %H:%M:%S.%f"


@dataclass(frozen=True, slots=True)
class SignalWindow:
    start: pd.Timestamp
    end: pd.Timestamp
    intervals: int
    label: str


@dataclass(frozen=True, slots=True)
class LogSummary:
    intervals: int
    samples: int
    errors: int
    error_rate: float
    mean_ms: float
    worst_max_ms: float
    median_p99_ms: float
    worst_p99_ms: float


def load_log(path: Path) -> pd.DataFrame:
    """Read a CSV log written by the monitor, in either timestamp style."""
    try:
        # Every line ends with ";", which yields one empty trailing field.
        df = pd.read_csv(
            path,
            sep=";",
            header=None,
            names=[*COLUMNS, "_trailing"],
            dtype={"timestamp": str},
        )[COLUMNS].copy()
    except pd.errors.EmptyDataError:
        df = pd.DataFrame({name: pd.Series(dtype="object" if name == "timestamp" else "float64") for name in COLUMNS})
    if df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        return df
    raw = df["timestamp"].str.strip()
    if raw.str.fullmatch(r"\d+").all():
        df["timestamp"] = pd.to_datetime(raw.astype("int64"), unit="s")
    else:
        df["timestamp"] = pd.to_datetime(raw, format=HUMAN_TIME_FORMAT)
    return df.sort_values("timestamp").reset_index(drop=True)


def summarize(df: pd.DataFrame) -> LogSummary:
    if df.empty:
        return LogSummary(0, 0, 0, 0.0, 0.0, 0.0, 0.0, 0.0)
    samples = int(df["samples"].sum())
    errors = int(df["errors"].sum())
    attempts = samples + errors
    mean_ms = float((df["mean_ms"] * df["samples"]).sum() / samples) if samples else 0.0
    measured = df[df["samples"] > 0]
    return LogSummary(
        intervals=len(df),
        samples=samples,
        errors=errors,
        error_rate=errors / attempts if attempts else 0.0,
        mean_ms=mean_ms,
        worst_max_ms=float(df["max_ms"].max()),
        median_p99_ms=float(measured["p99_ms"].median()) if not measured.empty else 0.0,
        worst_p99_ms=float(df["p99_ms"].max()),
    )


def latency_breaches(df: pd.DataFrame, threshold_ms: float) -> list[SignalWindow]:
    return _windows(df, df["p99_ms"] > threshold_ms, "p99 breach")


def error_windows(df: pd.DataFrame) -> list[SignalWindow]:
    return _windows(df, df["errors"] > 0, "errors")


def _windows(df: pd.DataFrame, mask: pd.Series, label: str) -> list[SignalWindow]:
    windows: list[SignalWindow] = []
    if df.empty:
        return windows
    # Consecutive flagged rows share a run id.
    runs = (mask != mask.shift()).cumsum()
    for _, group in df[mask].groupby(runs[mask]):
        windows.append(
            SignalWindow(
                start=group["timestamp"].iloc[0],
                end=group["timestamp"].iloc[-1],
                intervals=len(group),
                label=label,
            )
        )
    return windows
