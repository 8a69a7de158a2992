"""Tests for the dispatch pool and run statistics."""

import threading
import time

from pythonlogtail.clients import EventSink
from pythonlogtail.dispatch import DispatchPool
from pythonlogtail.models import LogEvent
from pythonlogtail.stats import PipelineStats, StatusReporter

from conftest import FAKE_NOW, RecordingSink


def make_event(i: int) -> LogEvent:
    return LogEvent(fields={"i": float(i)}, timestamp=FAKE_NOW, source="test.log")


class BlockingSink(EventSink):
    """Sink that holds every send until released."""

    def __init__(self):
        self.release = threading.Event()
        self.count = 0
        self._lock = threading.Lock()

    def send(self, event) -> bool:
        self.release.wait(5)
        with self._lock:
            self.count += 1
        return True


class FlakySink(EventSink):
    """Sink that fails on odd events, sometimes by raising."""

    def send(self, event) -> bool:
        i = int(event.fields["i"])
        if i % 4 == 1:
            raise ConnectionError("boom")
        return i % 2 == 0


class TestDispatchPool:
    def test_sends_every_event(self):
        sink = RecordingSink()
        stats = PipelineStats()
        pool = DispatchPool(sink, pool_size=4, stats=stats)
        pool.start()
        for i in range(100):
            pool.submit(make_event(i))
        pool.close()

        assert sorted(int(e.fields["i"]) for e in sink.events) == list(range(100))
        assert stats.snapshot()["sent"] == 100
        assert pool.workers == []

    def test_single_worker_keeps_order(self):
        sink = RecordingSink()
        pool = DispatchPool(sink, pool_size=1)
        pool.start()
        for i in range(20):
            pool.submit(make_event(i))
        pool.close()
        assert [int(e.fields["i"]) for e in sink.events] == list(range(20))

    def test_failures_are_counted_and_do_not_stop_workers(self):
        stats = PipelineStats()
        pool = DispatchPool(FlakySink(), pool_size=2, stats=stats)
        pool.start()
        for i in range(8):
            pool.submit(make_event(i))
        pool.close()

        counts = stats.snapshot()
        assert counts["sent"] == 4
        assert counts["send_failures"] == 4

    def test_full_queue_blocks_producer(self):
        sink = BlockingSink()
        pool = DispatchPool(sink, pool_size=1, queue_size=2)
        pool.start()

        submitted = []

        def produce():
            for i in range(5):
                pool.submit(make_event(i))
                submitted.append(i)

        producer = threading.Thread(target=produce, daemon=True)
        producer.start()
        time.sleep(0.2)
        # one event held by the worker, two waiting in the queue
        assert len(submitted) == 3
        assert producer.is_alive()

        sink.release.set()
        producer.join(timeout=5)
        pool.close()
        assert sink.count == 5

    def test_default_queue_size(self):
        pool = DispatchPool(RecordingSink(), pool_size=3)
        assert pool.queue.maxsize == 30


class TestStats:
    def test_counters(self):
        stats = PipelineStats()
        stats.incr("lines_read", 3)
        stats.incr("parse_errors")
        assert stats.snapshot() == {
            "lines_read": 3,
            "parse_errors": 1,
            "sampled_out": 0,
            "sent": 0,
            "send_failures": 0,
        }
        assert stats.summary().startswith("lines_read=3, parse_errors=1")

    def test_concurrent_increments(self):
        stats = PipelineStats()

        def bump():
            for _ in range(1000):
                stats.incr("sent")

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert stats.snapshot()["sent"] == 8000

    def test_reporter_logs_summary(self, caplog):
        caplog.set_level("INFO")
        stats = PipelineStats()
        stats.incr("sent", 2)
        stop = threading.Event()
        reporter = StatusReporter(stats, 0.05, stop)
        reporter.start()
        time.sleep(0.2)
        stop.set()
        reporter.join(timeout=5)
        assert "Summary: " in caplog.text
        assert "sent=2" in caplog.text

    def test_reporter_disabled(self):
        reporter = StatusReporter(PipelineStats(), 0, threading.Event())
        reporter.start()
        reporter.join(timeout=1)
        assert not reporter.is_alive()
