"""Run statistics shared by producers and dispatch workers."""

import logging
import threading
from typing import Dict

COUNTERS = ("lines_read", "parse_errors", "sampled_out", "sent", "send_failures")


class PipelineStats:
    """Thread-safe counters for one pipeline run."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts = dict.fromkeys(COUNTERS, 0)

    def incr(self, name: str, n: int = 1) -> None:
        with self._lock:
            self._counts[name] += n

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def summary(self) -> str:
        counts = self.snapshot()
        return ", ".join(f"{name}={counts[name]}" for name in COUNTERS)


class StatusReporter(threading.Thread):
    """Logs a summary of the run statistics at a fixed interval."""

    def __init__(
        self, stats: PipelineStats, interval: float, stop_event: threading.Event
    ):
        super().__init__(name="StatusReporter", daemon=True)
        self.stats = stats
        self.interval = interval
        self.stop_event = stop_event
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self) -> None:
        if self.interval <= 0:
            return
        while not self.stop_event.wait(self.interval):
            self.logger.info(f"Summary: {self.stats.summary()}")
