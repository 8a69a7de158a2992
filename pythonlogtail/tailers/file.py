"""File-based log tailer implementation."""

import os
import glob
import threading
from typing import Iterator, List, Optional

from pygtail import Pygtail

from ..models import (
    LogSource,
    RawLine,
    TailState,
    READ_FROM_END,
    READ_FROM_START,
    READ_FROM_STATE,
    STDIN_MARKER,
)
from ..utils import StateStore, StateStoreError
from .base import SourceError, Tailer

# Configuration Constants
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_EVERY_N = 1000
MAX_BACKOFF = 30.0


class ReplacingPygtail(Pygtail):
    """Pygtail that reads invalid UTF-8 bytes as U+FFFD instead of failing."""

    def _filehandle(self):
        if not self.fh or self._is_closed():
            self._counter += 1
            filename = self.rotated_logfile or self.filename
            self.fh = open(filename, "r", 1, encoding=self.encoding, errors="replace")
            self.fh.seek(self.offset)
        return self.fh


def resolve_sources(patterns: List[str]) -> List[LogSource]:
    """
    Expand configured log file names and globs into sources.

    Args:
        patterns: File names, glob patterns, or "-" for standard input

    Returns:
        List[LogSource]: One source per distinct file

    Raises:
        SourceError: If a name matches no readable file
    """
    sources = []
    seen = set()
    for pattern in patterns:
        if pattern == STDIN_MARKER:
            if pattern not in seen:
                seen.add(pattern)
                sources.append(LogSource(STDIN_MARKER))
            continue

        paths = sorted(glob.glob(pattern))
        if not paths:
            raise SourceError(f"Log file not found: {pattern}")

        for path in paths:
            if path in seen:
                continue
            if not os.path.isfile(path) or not os.access(path, os.R_OK):
                raise SourceError(f"Log file is not a readable file: {path}")
            seen.add(path)
            sources.append(LogSource(path, inode=os.stat(path).st_ino))
    return sources


class FileTailer(Tailer):
    """Reads a log file, following it across rotation and truncation.

    The position is kept as a TailState of inode and byte offset. When a
    StateStore is given the state is written every `every_n` lines, whenever
    the end of the file is reached, and when tailing ends.
    """

    def __init__(
        self,
        source: LogSource,
        read_from: str = READ_FROM_START,
        stop_at_eof: bool = False,
        state_store: Optional[StateStore] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        every_n: int = DEFAULT_EVERY_N,
        stop_event: Optional[threading.Event] = None,
    ):
        super().__init__(source, stop_event)
        self.read_from = read_from
        self.stop_at_eof = stop_at_eof
        self.state_store = state_store
        self.poll_interval = poll_interval
        self.every_n = every_n
        self.state = TailState(inode=source.inode or 0)
        self._saved_state = None
        self._since_checkpoint = 0

    def _initial_offset(self, stat: os.stat_result) -> int:
        if self.read_from == READ_FROM_END:
            return stat.st_size
        if self.read_from != READ_FROM_STATE or not self.state_store:
            return 0

        saved = self.state_store.read()
        if saved is None:
            self.logger.info("No saved state, reading from the start")
        elif not saved.matches(stat.st_ino):
            self.logger.info(
                f"Saved state is for inode {saved.inode} but the file is inode "
                f"{stat.st_ino}, reading from the start"
            )
        elif saved.offset > stat.st_size:
            self.logger.info(
                f"File is shorter than the saved offset {saved.offset}, "
                "reading from the start"
            )
        else:
            self.logger.debug(f"Resuming at offset {saved.offset}")
            return saved.offset
        return 0

    def _open(self, stat: os.stat_result, offset: int) -> Iterator:
        """Return a pygtail line iterator positioned at offset."""
        # pygtail's own offset file is disabled, self.state is persisted instead
        tail = ReplacingPygtail(
            self.source.path,
            offset_file=os.devnull,
            copytruncate=False,
            save_on_end=False,
            full_lines=not self.stop_at_eof,
            encoding="utf-8",
        )
        tail.offset = offset
        self.state = TailState(inode=stat.st_ino, offset=offset)
        return tail.with_offsets()

    def _wait_for_file(self) -> Optional[os.stat_result]:
        """Wait until the log file exists, backing off between attempts."""
        delay = self.poll_interval
        while True:
            try:
                return os.stat(self.source.path)
            except OSError as e:
                if self.stop_at_eof:
                    raise SourceError(f"Unable to open log file: {e}")
                self.logger.warning(
                    f"Log file unavailable, retrying in {delay:.1f}s: {e}"
                )
            if self.stop_event.wait(delay):
                return None
            delay = min(delay * 2, MAX_BACKOFF)

    def _wait_for_data(self) -> Optional[os.stat_result]:
        """Sleep one poll interval and check whether the file was replaced.

        Returns:
            The new file's stat result if it was rotated or truncated, else None
        """
        if self.stop_event.wait(self.poll_interval):
            return None

        try:
            stat = os.stat(self.source.path)
        except OSError:
            stat = self._wait_for_file()
            if stat is not None:
                self.logger.info("Log file reappeared, reading it from the start")
            return stat

        if not self.state.matches(stat.st_ino):
            self.logger.info("Log file was rotated, reading the new file")
            return stat
        if stat.st_size < self.state.offset:
            self.logger.info("Log file was truncated, reading from the start")
            return stat
        return None

    def checkpoint(self) -> None:
        """Persist the current position if it changed since the last write."""
        self._since_checkpoint = 0
        if not self.state_store or self.state == self._saved_state:
            return

        state = TailState(self.state.inode, self.state.offset)
        try:
            self.state_store.write(state)
            self._saved_state = state
        except StateStoreError as e:
            self.logger.error(str(e))

    def lines(self) -> Iterator[RawLine]:
        stat = self._wait_for_file()
        if stat is None:
            return

        reader = self._open(stat, self._initial_offset(stat))
        try:
            while not self.stopped:
                try:
                    line, position = next(reader)
                except (StopIteration, FileNotFoundError):
                    self.checkpoint()
                    if self.stop_at_eof:
                        return
                    rotated = self._wait_for_data()
                    if rotated is not None:
                        reader = self._open(rotated, 0)
                    continue

                self.state = TailState(inode=position.inode, offset=position.offset)
                self._since_checkpoint += 1
                if self.every_n and self._since_checkpoint >= self.every_n:
                    self.checkpoint()

                text = line.rstrip("\r\n")
                if text.strip():
                    yield RawLine(text, self.source.name)
        finally:
            self.checkpoint()
