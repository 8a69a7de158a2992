"""Shared pytest fixtures for the pythonlogtail test suite."""

import datetime
import threading

import pytest

from pythonlogtail.clients import EventSink
from pythonlogtail.config import Options, TailOptions

FAKE_NOW = datetime.datetime(2010, 6, 21, 15, 4, 5, tzinfo=datetime.timezone.utc)


class FixedClock:
    """Clock that always returns the same instant."""

    def __init__(self, now: datetime.datetime = FAKE_NOW):
        self.value = now

    def now(self) -> datetime.datetime:
        return self.value


class RecordingSink(EventSink):
    """Sink that keeps every event it is given."""

    def __init__(self, result: bool = True):
        self.result = result
        self.events = []
        self.closed = False
        self._lock = threading.Lock()

    def send(self, event) -> bool:
        with self._lock:
            self.events.append(event)
        return self.result

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def options() -> Options:
    """Options for a batch run of the json parser, log files left to the test."""
    return Options(
        parser_name="json",
        write_key="abcabc123123",
        dataset="pika",
        sample_rate=1,
        pool_size=1,
        status_interval=0,
        tail=TailOptions(read_from="start", stop=True, poll_interval=0.05),
    )
