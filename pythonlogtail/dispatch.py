"""Bounded worker pool handing finished events to the event sink."""

import logging
import queue
import threading
from typing import List, Optional

from .clients import EventSink
from .models import LogEvent
from .stats import PipelineStats

DEFAULT_POOL_SIZE = 10
QUEUE_SIZE_PER_WORKER = 10

# Tells a worker to exit
_STOP = object()


class DispatchPool:
    """Fixed set of sender threads reading from one bounded queue.

    Producers block in submit() while the queue is full, so a slow sink
    delays reading instead of losing events. Events are sent in queue order
    by whichever worker is free; a failed send is logged and counted and
    never retried here.
    """

    def __init__(
        self,
        sink: EventSink,
        pool_size: int = DEFAULT_POOL_SIZE,
        queue_size: Optional[int] = None,
        stats: Optional[PipelineStats] = None,
    ):
        self.sink = sink
        self.pool_size = pool_size
        self.queue = queue.Queue(
            maxsize=queue_size or pool_size * QUEUE_SIZE_PER_WORKER
        )
        self.stats = stats or PipelineStats()
        self.workers: List[threading.Thread] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    def start(self) -> None:
        """Start all workers in separate threads."""
        for i in range(self.pool_size):
            worker = threading.Thread(
                target=self._work, name=f"DispatchWorker-{i}", daemon=True
            )
            worker.start()
            self.workers.append(worker)
        self.logger.debug(f"Started {self.pool_size} dispatch workers")

    def submit(self, event: LogEvent) -> None:
        """Queue an event for sending, blocking while the queue is full."""
        self.queue.put(event)

    def _send(self, event: LogEvent) -> None:
        try:
            sent = self.sink.send(event)
        except Exception as e:
            self.logger.error(f"Error sending event from {event.source}: {e}")
            sent = False

        self.stats.incr("sent" if sent else "send_failures")

    def _work(self) -> None:
        while True:
            item = self.queue.get()
            try:
                if item is _STOP:
                    return
                self._send(item)
            finally:
                self.queue.task_done()

    def close(self, timeout: Optional[float] = None) -> None:
        """Let the workers drain the queue, then wait for them to exit."""
        for _ in self.workers:
            self.queue.put(_STOP)
        for worker in self.workers:
            worker.join(timeout=timeout)
        self.workers = []
