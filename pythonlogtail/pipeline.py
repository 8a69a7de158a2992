"""Coordinates tailing, parsing, transformation and dispatch for a run."""

import logging
import random
import threading
from typing import IO, List, Optional

from .clients import EventSink
from .config import Options, parse_add_fields
from .dispatch import DispatchPool
from .models import LogSource, READ_FROM_START, READ_FROM_STATE
from .parsers import LineParser, ParseError, create_parser
from .stats import PipelineStats, StatusReporter
from .tailers import Tailer, create_tailer, resolve_sources
from .transform import Transformer
from .utils import StateStore, default_state_path

SHUTDOWN_GRACE = 2.0
JOIN_INTERVAL = 0.5


class Pipeline:
    """Runs one tail -> parse -> transform -> send pipeline per log source."""

    def __init__(
        self,
        options: Options,
        sink: EventSink,
        nower=None,
        rng: Optional[random.Random] = None,
        stdin: Optional[IO[str]] = None,
    ):
        self.options = options
        self.sink = sink
        self.nower = nower
        self.rng = rng
        self.stdin = stdin
        self.stats = PipelineStats()
        self.stop_event = threading.Event()
        self.tailers: List[Tailer] = []
        self.threads: List[threading.Thread] = []
        self.pool: Optional[DispatchPool] = None
        self.reporter: Optional[StatusReporter] = None
        self._reporter_stop = threading.Event()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _state_store(self, sources: List[LogSource]) -> Optional[StateStore]:
        tail = self.options.tail
        file_sources = [s for s in sources if not s.is_stdin]
        if len(sources) != 1 or len(file_sources) != 1:
            if self.options.read_from == READ_FROM_STATE:
                self.logger.warning(
                    "Resuming is only supported for a single log file, "
                    "reading every source from the start"
                )
            return None

        if tail.state_file:
            return StateStore(tail.state_file)
        if self.options.read_from == READ_FROM_STATE:
            return StateStore(default_state_path(file_sources[0].path))
        return None

    def _create_tailers(self, sources: List[LogSource]) -> List[Tailer]:
        state_store = self._state_store(sources)
        read_from = self.options.read_from
        if state_store is None and read_from == READ_FROM_STATE:
            read_from = READ_FROM_START

        return [
            create_tailer(
                source,
                read_from=read_from,
                stop_at_eof=self.options.tail.stop,
                state_store=state_store,
                stop_event=self.stop_event,
                stdin=self.stdin,
                poll_interval=self.options.tail.poll_interval,
                every_n=self.options.tail.every_n,
            )
            for source in sources
        ]

    def _produce(
        self, tailer: Tailer, parser: LineParser, transformer: Transformer
    ) -> None:
        """Feed every line of one source through to the dispatch pool."""
        try:
            for raw in tailer.lines():
                self.stats.incr("lines_read")
                try:
                    event = parser.parse(raw)
                except ParseError as e:
                    self.stats.incr("parse_errors")
                    self.logger.debug(
                        f"Skipping unparsable line from {raw.source}: {e}"
                    )
                    continue

                if transformer.process(event) is None:
                    self.stats.incr("sampled_out")
                    continue
                self.pool.submit(event)
        except Exception as e:
            self.logger.error(
                f"Error tailing {tailer.source.name}: {e}", exc_info=True
            )
        else:
            self.logger.info(f"Finished reading {tailer.source.name}")

    def start(self) -> None:
        """Validate the options and start every component.

        Raises:
            ConfigurationError: If the options are invalid
            SourceError: If a named log file can not be read
        """
        self.options.validate()
        sources = resolve_sources(self.options.log_files)

        parser = create_parser(
            self.options.parser_name, self.options.parser_options, self.nower
        )
        transformer = Transformer(
            drop_fields=self.options.drop_fields,
            scrub_fields=self.options.scrub_fields,
            add_fields=parse_add_fields(self.options.add_fields),
            sample_rate=self.options.sample_rate,
            rng=self.rng,
        )
        self.tailers = self._create_tailers(sources)

        self.pool = DispatchPool(
            self.sink, pool_size=self.options.pool_size, stats=self.stats
        )
        self.pool.start()

        self.reporter = StatusReporter(
            self.stats, self.options.status_interval, self._reporter_stop
        )
        self.reporter.start()

        for tailer in self.tailers:
            thread = threading.Thread(
                target=self._produce,
                args=(tailer, parser, transformer),
                name=f"Producer-{tailer.source.name}",
                daemon=True,
            )
            thread.start()
            self.threads.append(thread)
        self.logger.info(
            f"Started {len(self.tailers)} source(s) with parser "
            f"'{self.options.parser_name}' and {self.options.pool_size} sender(s)"
        )

    def wait(self) -> None:
        """Block until every source is consumed or the pipeline is stopped."""
        for thread in self.threads:
            while thread.is_alive():
                thread.join(timeout=JOIN_INTERVAL)
                if self.stop_event.is_set():
                    # A producer blocked on standard input can not be interrupted
                    thread.join(timeout=SHUTDOWN_GRACE)
                    break

    def stop(self) -> None:
        """Stop reading; events already read are still sent."""
        self.stop_event.set()

    def close(self) -> PipelineStats:
        """Drain queued events, stop the status reporter and log a summary."""
        if self.pool:
            self.pool.close()
        self._reporter_stop.set()
        if self.reporter:
            self.reporter.join()
        self.logger.info(f"Final summary: {self.stats.summary()}")
        return self.stats

    def run(self) -> PipelineStats:
        """Run until all sources are consumed, then drain and return the stats."""
        self.start()
        try:
            self.wait()
        finally:
            self.close()
        return self.stats
