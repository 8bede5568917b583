"""
In-process metrics for IMDb lookups.

Counters and duration histograms keyed by name plus optional labels,
readable as a plain dict (served by the /metrics endpoint).
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Histogram:
    """Running count/total/min/max of observed values."""
    count: int = 0
    total: float = 0.0
    min: float = float('inf')
    max: float = 0.0

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = min(self.min, value)
        self.max = max(self.max, value)

    def stats(self) -> Dict[str, float]:
        if not self.count:
            return {"count": 0, "avg": 0.0, "min": 0.0, "max": 0.0}
        return {
            "count": self.count,
            "avg": round(self.total / self.count, 2),
            "min": round(self.min, 2),
            "max": round(self.max, 2),
        }


class Metrics:
    """
    Thread-safe metrics collector singleton.

    Usage:
        metrics.inc("imdb_fetches", labels={"status": "ok"})

        with metrics.timer("imdb_fetch_duration_ms"):
            page = fetch()

        stats = metrics.get_stats()
    """

    _instance: Optional["Metrics"] = None
    _instance_lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._lock = threading.Lock()
                    instance._counters = defaultdict(int)
                    instance._histograms = defaultdict(Histogram)
                    cls._instance = instance
        return cls._instance

    @staticmethod
    def _make_key(name: str, labels: Optional[Dict[str, str]] = None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def inc(self, name: str, amount: int = 1, labels: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter."""
        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] += amount

    def observe(self, name: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        """Record a histogram observation."""
        key = self._make_key(name, labels)
        with self._lock:
            self._histograms[key].observe(value)

    @contextmanager
    def timer(self, name: str, labels: Optional[Dict[str, str]] = None):
        """Time the enclosed block in milliseconds, even if it raises."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.observe(name, (time.monotonic() - start) * 1000, labels)

    def get_counter(self, name: str, labels: Optional[Dict[str, str]] = None) -> int:
        """Get current value of a counter."""
        key = self._make_key(name, labels)
        with self._lock:
            return self._counters.get(key, 0)

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot of all counters and histograms."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "histograms": {k: h.stats() for k, h in self._histograms.items()},
            }

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


# Global instance
metrics = Metrics()
