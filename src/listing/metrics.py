"""Scan list recompute metrics — latency, window size, filter coverage.

Counters accumulate while the list runs and feed the status bar / periodic
stats log. Guarded by a lock because the stats reporter may read them from
another thread.
"""

import time
from threading import Lock


class ListMetrics:
    """Accumulator for pipeline and window recomputes."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._start_time: float = time.monotonic()

        self._pipeline_runs = 0
        self._pipeline_latency_ms = 0.0
        self._window_runs = 0
        self._window_latency_ms = 0.0
        self._max_window_latency_ms = 0.0
        self._last_window_latency_ms = 0.0

        self._last_window_rows = 0
        self._total_count = 0
        self._filtered_count = 0
        self._snapshot_version = 0

    def record_pipeline(self, latency_ms: float, *, total: int, shown: int, version: int) -> None:
        with self._lock:
            self._pipeline_runs += 1
            self._pipeline_latency_ms += latency_ms
            self._total_count = total
            self._filtered_count = shown
            self._snapshot_version = version

    def record_window(self, latency_ms: float, rows: int) -> None:
        with self._lock:
            self._window_runs += 1
            self._window_latency_ms += latency_ms
            self._last_window_latency_ms = latency_ms
            if latency_ms > self._max_window_latency_ms:
                self._max_window_latency_ms = latency_ms
            self._last_window_rows = rows

    def get_summary(self) -> dict:
        """Return a snapshot of all counters."""
        with self._lock:
            uptime = time.monotonic() - self._start_time
            return {
                "uptime_sec": round(uptime),
                "snapshot_version": self._snapshot_version,
                "total_tokens": self._total_count,
                "shown_tokens": self._filtered_count,
                "pipeline_runs": self._pipeline_runs,
                "avg_pipeline_ms": round(
                    self._pipeline_latency_ms / self._pipeline_runs, 3
                ) if self._pipeline_runs else 0.0,
                "window_runs": self._window_runs,
                "avg_window_ms": round(
                    self._window_latency_ms / self._window_runs, 3
                ) if self._window_runs else 0.0,
                "last_window_ms": round(self._last_window_latency_ms, 3),
                "max_window_ms": round(self._max_window_latency_ms, 3),
                "last_window_rows": self._last_window_rows,
            }

    def format_status(self) -> str:
        """One-line status bar text."""
        s = self.get_summary()
        return (
            f"v{s['snapshot_version']} | {s['shown_tokens']}/{s['total_tokens']} tokens | "
            f"rows={s['last_window_rows']} | render {s['last_window_ms']:.1f}ms "
            f"(max {s['max_window_ms']:.1f}ms)"
        )
