"""Standard input tailer implementation."""

import sys
import threading
from typing import IO, Iterator, Optional

from ..models import LogSource, RawLine, STDIN_MARKER
from .base import Tailer


class StdinTailer(Tailer):
    """Reads lines from standard input until it is closed."""

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        super().__init__(LogSource(STDIN_MARKER), stop_event)
        self.stream = stream or sys.stdin

    def lines(self) -> Iterator[RawLine]:
        for line in self.stream:
            if self.stopped:
                break

            text = line.rstrip("\r\n")
            if text.strip():
                yield RawLine(text, self.source.name)
