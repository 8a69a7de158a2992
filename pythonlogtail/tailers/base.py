"""Base abstract class for all log tailers."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..models import LogSource, RawLine


class SourceError(Exception):
    """Raised when a log source can not be opened at startup."""

    pass


class Tailer(ABC):
    """Base abstract class for all log tailers."""

    def __init__(
        self, source: LogSource, stop_event: Optional[threading.Event] = None
    ):
        self.source = source
        self.stop_event = stop_event or threading.Event()
        self.logger = logging.getLogger(f"{self.__class__.__name__}.{source.name}")

    @abstractmethod
    def lines(self) -> Iterator[RawLine]:
        """Yield lines from the source (implemented by subclasses)."""
        pass

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def stop(self) -> None:
        """Stop tailing after the current line."""
        self.stop_event.set()
