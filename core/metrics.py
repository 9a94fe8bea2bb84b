"""
Optional performance metrics, appended to a plain-text log file.

Metrics are disabled by default. When enabled, every call appends one line of
the form `[<elapsed>s] <metric>: <value>` to the metrics file; sessions are
framed by a header and a footer. Failing to write metrics never fails the run.
"""

from datetime import datetime, timezone
from importlib import metadata
import os
from pathlib import Path
import threading
import time

import structlog

from constants import DEFAULT_METRICS_FILE
from core.config import PerformanceConfig

log = structlog.get_logger("slocount.metrics")


class MetricsLogger:
    """
    Appends timing and throughput metrics to a file.

    Safe to call from several counting workers at once.

    Attributes:
        enabled: True if metrics are written at all.
        file_path: Destination of the metrics log.
    """

    def __init__(self, enabled: bool = False, file_path: str = DEFAULT_METRICS_FILE):
        self.enabled = enabled
        self.file_path = file_path
        self._start = time.perf_counter()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, performance: PerformanceConfig) -> "MetricsLogger":
        return cls(performance.enable_metrics, performance.metrics_file)

    def elapsed(self) -> float:
        """Seconds since this logger was created."""
        return time.perf_counter() - self._start

    def init_session(self, operation: str, args_summary: str) -> None:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        self.log_raw_message(
            f"\n=== SLOC Metrics Session Started ===\n"
            f"Operation: {operation}\nTimestamp: {timestamp}\nArgs: {args_summary}\n"
        )

    def log_system_info(self) -> None:
        cpu_count = os.cpu_count() or 1
        available = (
            len(os.sched_getaffinity(0))
            if hasattr(os, "sched_getaffinity")
            else cpu_count
        )
        self.log_metric("system_cpu_count", cpu_count)
        self.log_metric("system_available_parallelism", available)
        try:
            version = metadata.version("slocount")
        except metadata.PackageNotFoundError:
            # Running from a source checkout
            return
        self.log_raw_message(f"Tool version: {version}\n")

    def log_metric(self, name: str, value: float) -> None:
        self.log_raw_message(f"[{self.elapsed():.3f}s] {name}: {float(value):.3f}\n")

    def log_completion(self, files_processed: int, total_lines: int) -> None:
        elapsed = self.elapsed()
        self.log_metric("total_files", files_processed)
        self.log_metric("total_lines", total_lines)
        self.log_metric("elapsed_seconds", elapsed)
        self.log_metric("lines_per_second", total_lines / elapsed if elapsed > 0 else 0.0)
        self.log_raw_message("=== Session Completed ===\n\n")

    def log_raw_message(self, message: str) -> None:
        if not self.enabled:
            return
        try:
            with self._lock, Path(self.file_path).open("a", encoding="utf-8") as f:
                f.write(message)
        except OSError as e:
            log.warning("metrics.write_failed", path=self.file_path, error=str(e))
