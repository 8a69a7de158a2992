"""Tailer implementations for different log sources."""

import threading
from typing import IO, Optional

from ..models import LogSource
from ..utils import StateStore
from .base import SourceError, Tailer
from .file import FileTailer, resolve_sources
from .stdin import StdinTailer


def create_tailer(
    source: LogSource,
    read_from: str,
    stop_at_eof: bool = False,
    state_store: Optional[StateStore] = None,
    stop_event: Optional[threading.Event] = None,
    stdin: Optional[IO[str]] = None,
    **file_options,
) -> Tailer:
    """Create the tailer suited to a log source."""
    if source.is_stdin:
        return StdinTailer(stream=stdin, stop_event=stop_event)
    return FileTailer(
        source,
        read_from=read_from,
        stop_at_eof=stop_at_eof,
        state_store=state_store,
        stop_event=stop_event,
        **file_options,
    )


__all__ = [
    "Tailer",
    "FileTailer",
    "StdinTailer",
    "SourceError",
    "create_tailer",
    "resolve_sources",
]
